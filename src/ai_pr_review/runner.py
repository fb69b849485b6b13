import logging

from ai_pr_review.config import Settings
from ai_pr_review.http import RetryEvent
from ai_pr_review.platforms.github import GitHubClient
from ai_pr_review.providers.base import LLMProvider
from ai_pr_review.providers.chat_completions import ChatCompletionsProvider
from ai_pr_review.review.engine import ReviewEngine, ReviewOutcome


logger = logging.getLogger(__name__)


def log_retry_event(event: RetryEvent) -> None:
    logger.warning(
        f"Generation request failed ({event.reason}, status {event.status}) on attempt {event.attempt}, "
        f"retrying in {event.delay_ms}ms"
    )


def get_provider(settings: Settings) -> LLMProvider:
    """Build the generation client; raises ConfigurationError when incomplete."""
    settings.require_generation()
    return ChatCompletionsProvider(
        base_url=settings.base_url,
        api_key=settings.api_key,
        model=settings.model,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
        timeout_ms=settings.timeout_ms,
        max_retries=settings.max_retries,
        base_delay_ms=settings.retry_base_delay_ms,
        observer=log_retry_event,
    )


def get_platform(settings: Settings, repository: str) -> GitHubClient:
    settings.require_github()
    return GitHubClient(
        token=settings.github_token,
        repository=repository,
        api_url=settings.github_api_url,
    )


async def run_review(
    settings: Settings,
    repository: str,
    pr_number: int,
    head_ref: str | None = None,
) -> ReviewOutcome:
    platform = get_platform(settings, repository)
    engine = ReviewEngine(
        platform=platform,
        provider=get_provider(settings),
        options=settings.review_options(),
    )
    if head_ref is None:
        # manual triggers and /review comments don't carry the head commit
        pull_request = await platform.get_pull_request(pr_number)
        head_ref = pull_request["head"]["sha"]
    return await engine.review_pull_request(pr_number, head_ref=head_ref)
