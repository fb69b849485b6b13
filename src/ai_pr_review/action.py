"""One-shot entry point for CI: review the pull request of the current event."""
import asyncio
import json
import logging
import sys
from pathlib import Path

from ai_pr_review.config import Settings
from ai_pr_review.errors import ConfigurationError, EmptyGenerationError
from ai_pr_review.runner import run_review


logger = logging.getLogger(__name__)


def load_pull_request(event_path: str | None) -> tuple[int, str | None] | None:
    """Read (number, head ref) from the event payload, None if not a PR event."""
    if not event_path or not Path(event_path).exists():
        return None
    payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    pull_request = payload.get("pull_request")
    if not pull_request:
        return None
    head_ref = (pull_request.get("head") or {}).get("sha")
    return int(pull_request["number"]), head_ref


def fail(message: str) -> int:
    # Workflow command understood by the Actions runner
    print(f"::error::{message}")
    logger.error(message)
    return 1


async def run(settings: Settings) -> int:
    """Run the review and map the outcome to a process exit code."""
    try:
        settings.require_github()
        settings.require_generation()
    except ConfigurationError as e:
        return fail(str(e))

    pull_request = load_pull_request(settings.github_event_path)
    if pull_request is None:
        logger.info("Not a pull_request event; skipping.")
        return 0
    if not settings.github_repository:
        return fail("GITHUB_REPOSITORY is required")

    pr_number, head_ref = pull_request
    try:
        outcome = await run_review(settings, settings.github_repository, pr_number, head_ref=head_ref)
    except EmptyGenerationError as e:
        return fail(str(e))
    except Exception as e:
        status = getattr(e, "status", 0)
        logger.exception(f"Review failed for PR #{pr_number}")
        return fail(f"{e}{f' (HTTP {status})' if status else ''}")

    if not outcome.has_output:
        return fail(f"No review output: all {outcome.files_total} files failed")
    if outcome.policy_flagged:
        return fail("Critical issues detected by AI review (fail_on_issues=true).")

    logger.info("AI review posted successfully.")
    return 0


def cli() -> None:
    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper())
    sys.exit(asyncio.run(run(settings)))


if __name__ == "__main__":
    cli()
