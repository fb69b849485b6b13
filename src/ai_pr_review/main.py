import hashlib
import hmac
import json
import re
import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from fastapi import FastAPI, Header, HTTPException, BackgroundTasks, Request
from pydantic import BaseModel, model_validator

from ai_pr_review.config import Settings
from ai_pr_review.models.github import IssueCommentEvent, PullRequestEvent
from ai_pr_review.runner import run_review


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

REVIEW_ACTIONS = ("opened", "synchronize", "reopened")


@lru_cache
def get_settings() -> Settings:
    return Settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("AI PR Review starting...")
    yield
    logger.info("AI PR Review shutting down...")


app = FastAPI(title="AI PR Review", lifespan=lifespan)


class WebhookResponse(BaseModel):
    status: str
    message: str | None = None


class ReviewRequest(BaseModel):
    url: str | None = None
    repository: str | None = None
    pr_number: int | None = None

    @model_validator(mode="after")
    def check_params(self):
        if not self.url and not (self.repository and self.pr_number):
            raise ValueError("Either url or repository+pr_number required")
        return self


class ReviewResponse(BaseModel):
    status: str
    repository: str | None = None
    pr_number: int | None = None
    mode: str | None = None
    files_reviewed: int | None = None
    files_skipped: int | None = None
    comments_posted: int | None = None
    policy_matches: list[str] | None = None
    error: str | None = None


def parse_github_pr_url(url: str) -> tuple[str, int]:
    """Parse GitHub PR URL -> (owner/repo, pr_number)."""
    match = re.match(r"https?://[^/]+/([^/]+/[^/]+)/pull/(\d+)", url)
    if not match:
        raise ValueError(f"Invalid GitHub pull request URL: {url}")
    return match.group(1), int(match.group(2))


def verify_signature(secret: str, body: bytes, signature: str | None) -> bool:
    if not signature or not signature.startswith("sha256="):
        return False
    expected = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"sha256={expected}", signature)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}


@app.post("/webhook/github", response_model=WebhookResponse)
async def github_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_github_event: str = Header(...),
    x_hub_signature_256: str | None = Header(None),
):
    settings = get_settings()
    raw_body = await request.body()

    if not settings.github_webhook_secret or not verify_signature(
        settings.github_webhook_secret, raw_body, x_hub_signature_256
    ):
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    body = json.loads(raw_body)

    if x_github_event == "pull_request":
        event = PullRequestEvent(**body)
        if event.action in REVIEW_ACTIONS:
            head = event.pull_request.head
            background_tasks.add_task(
                review_in_background,
                repository=event.repository.full_name,
                pr_number=event.number,
                head_ref=head.sha if head else None,
            )
            return WebhookResponse(status="accepted", message="Review scheduled")

    elif x_github_event == "issue_comment":
        event = IssueCommentEvent(**body)
        if (
            event.action == "created"
            and event.issue.pull_request is not None
            and "/review" in event.comment.body
        ):
            background_tasks.add_task(
                review_in_background,
                repository=event.repository.full_name,
                pr_number=event.issue.number,
            )
            return WebhookResponse(status="accepted", message="Review scheduled")

    return WebhookResponse(status="ignored", message="Event not relevant")


@app.post("/api/review", response_model=ReviewResponse)
async def trigger_review(request: ReviewRequest):
    """Manually trigger a review for a pull request."""
    settings = get_settings()

    try:
        if request.url:
            repository, pr_number = parse_github_pr_url(request.url)
        else:
            repository = request.repository
            pr_number = request.pr_number

        outcome = await run_review(settings, repository, pr_number)

        return ReviewResponse(
            status="completed",
            repository=repository,
            pr_number=pr_number,
            mode=outcome.mode.value,
            files_reviewed=outcome.files_reviewed,
            files_skipped=outcome.files_skipped,
            comments_posted=outcome.comments_posted,
            policy_matches=outcome.policy_matches,
        )

    except ValueError as e:
        return ReviewResponse(status="error", error=str(e))
    except Exception as e:
        logger.exception(f"Review failed: {e}")
        return ReviewResponse(status="error", error=str(e))


async def review_in_background(repository: str, pr_number: int, head_ref: str | None = None):
    """Background task to run the review."""
    settings = get_settings()
    try:
        outcome = await run_review(settings, repository, pr_number, head_ref=head_ref)
        logger.info(
            f"Review completed for {repository}#{pr_number}: "
            f"{outcome.files_reviewed} files, {outcome.comments_posted} comments"
        )
    except Exception as e:
        logger.exception(f"Review failed for {repository}#{pr_number}: {e}")
