import fnmatch
import logging
from dataclasses import dataclass, field, replace

import yaml

from ai_pr_review.errors import EmptyGenerationError, PublishError
from ai_pr_review.models.config import RepoConfig, ReviewMode
from ai_pr_review.models.github import ChangedFile
from ai_pr_review.models.review import InlineComment
from ai_pr_review.platforms.base import GitPlatform
from ai_pr_review.providers.base import LLMProvider
from .prompts import SYSTEM_PROMPT, build_file_prompt, build_summary_prompt
from .utils import (
    POLICY_KEYWORDS,
    TRUNCATION_MARKER,
    chunk_string,
    estimate_tokens,
    find_policy_matches,
    get_first_hunk_position,
    is_empty_review,
    trim_diff,
)


logger = logging.getLogger(__name__)

LARGE_PROMPT_TOKENS = 30_000
DEFAULT_COMMENT_MARKER = "<!-- AI_PR_REVIEW_ACTION -->"


@dataclass(frozen=True)
class ReviewOptions:
    """Everything the engine needs to know about one run."""
    review_mode: ReviewMode = ReviewMode.SUMMARY
    language: str = "English"
    max_files: int = 25
    max_chars: int = 120_000
    max_file_chars: int = 20_000
    chunk_size: int = 12_000
    fail_on_issues: bool = False
    extra_instructions: str = ""
    comment_marker: str = DEFAULT_COMMENT_MARKER
    reviewer_name: str = "AI PR Review"
    exclude: tuple[str, ...] = ()
    policy_keywords: tuple[str, ...] = POLICY_KEYWORDS


@dataclass
class ReviewOutcome:
    """Result of running review on a pull request."""
    mode: ReviewMode
    files_total: int = 0
    files_reviewed: int = 0
    files_skipped: int = 0
    comments_posted: int = 0
    comments_failed: int = 0
    body: str = ""
    policy_matches: list[str] = field(default_factory=list)

    @property
    def policy_flagged(self) -> bool:
        return bool(self.policy_matches)

    @property
    def has_output(self) -> bool:
        """False when there were files to review but none produced a result."""
        return self.files_total == 0 or self.files_reviewed > 0


def select_reviewable_files(
    files: list[ChangedFile],
    max_files: int,
    exclude: tuple[str, ...] = (),
) -> list[ChangedFile]:
    """Drop files without a patch or matching exclude, then apply max_files.

    Filtering happens before slicing so the limit counts only files that will
    actually be sent to the model.
    """
    reviewable = [
        f for f in files
        if f.reviewable and not any(fnmatch.fnmatch(f.filename, p) for p in exclude)
    ]
    return reviewable[:max_files]


def build_files_summary(files: list[ChangedFile]) -> str:
    return "\n".join(f"- {f.filename} (+{f.additions}/-{f.deletions})" for f in files)


def build_combined_diff(files: list[ChangedFile], max_file_chars: int, max_chars: int) -> str:
    """Concatenate per-file diffs without going over max_chars.

    Each patch is trimmed to max_file_chars first. Once the next file would not
    fit, the remaining files are replaced by a single "N more files" line. A
    first file that alone exceeds the budget is trimmed to fit instead.
    """
    parts: list[str] = []
    total = 0
    for index, f in enumerate(files):
        header = f"--- a/{f.filename}\n+++ b/{f.filename}\n"
        part = f"{header}{trim_diff(f.patch, max_file_chars)}\n"
        # +1 for the newline that joins parts
        if total + len(part) + 1 > max_chars:
            remaining = len(files) - index - (0 if parts else 1)
            trailer = f"\n...[{remaining} more files truncated]\n" if remaining else ""
            if not parts:
                # header, truncation marker, newline after the patch, joined trailer
                overhead = len(header) + len(TRUNCATION_MARKER) + 1 + (len(trailer) + 1 if trailer else 0)
                parts.append(f"{header}{trim_diff(f.patch, max(max_chars - overhead, 0))}\n")
            if trailer:
                parts.append(trailer)
            break
        parts.append(part)
        total += len(part) + 1
    return "\n".join(parts)


def join_chunk_reviews(reviews: list[str]) -> str | None:
    if not reviews:
        return None
    if len(reviews) == 1:
        return reviews[0]
    return "\n\n".join(f"**Part {i}:**\n{text}" for i, text in enumerate(reviews, start=1))


class ReviewEngine:
    def __init__(self, platform: GitPlatform, provider: LLMProvider, options: ReviewOptions | None = None):
        self.platform = platform
        self.provider = provider
        self.options = options or ReviewOptions()

    async def review_pull_request(self, pr_number: int, head_ref: str | None = None) -> ReviewOutcome:
        """Review a pull request and publish the result."""
        options = await self._load_options(head_ref)

        files = await self.platform.list_changed_files(pr_number)
        reviewable = select_reviewable_files(files, options.max_files, options.exclude)
        logger.info(
            f"PR #{pr_number}: {len(reviewable)} of {len(files)} files selected ({options.review_mode.value} mode)"
        )

        if not reviewable:
            logger.info("No reviewable files (binary, oversized or excluded); nothing to do")
            return ReviewOutcome(mode=options.review_mode)

        if options.review_mode == ReviewMode.INLINE:
            return await self._review_inline(pr_number, reviewable, options)
        return await self._review_summary(pr_number, reviewable, options)

    async def _load_options(self, ref: str | None) -> ReviewOptions:
        """Merge .ai-review.yaml from the PR head into the run options."""
        if not ref:
            return self.options
        yaml_content = await self.platform.get_repo_config(ref)
        if yaml_content is None:
            return self.options

        try:
            data = yaml.safe_load(yaml_content) or {}
            repo_config = RepoConfig(**data)
        except Exception as e:
            logger.warning(f"Invalid .ai-review.yaml: {e}")
            return self.options

        overrides = {}
        if repo_config.language:
            overrides["language"] = repo_config.language
        if repo_config.review_mode:
            overrides["review_mode"] = repo_config.review_mode
        if repo_config.extra_instructions:
            overrides["extra_instructions"] = repo_config.extra_instructions
        if repo_config.exclude:
            overrides["exclude"] = tuple(repo_config.exclude)
        return replace(self.options, **overrides)

    async def _review_summary(
        self,
        pr_number: int,
        files: list[ChangedFile],
        options: ReviewOptions,
    ) -> ReviewOutcome:
        prompt = build_summary_prompt(
            language=options.language,
            files_summary=build_files_summary(files),
            diff_text=build_combined_diff(files, options.max_file_chars, options.max_chars),
            extra_instructions=options.extra_instructions,
        )
        self._warn_if_large(prompt, f"PR #{pr_number}")

        content = await self.provider.generate(SYSTEM_PROMPT, prompt)
        if not content.strip():
            raise EmptyGenerationError("Model returned empty response")

        body = self._summary_header(options) + content
        await self.platform.publish_sticky_comment(pr_number, body, options.comment_marker)
        logger.info(f"Summary review posted on PR #{pr_number}")

        policy_matches = []
        if options.fail_on_issues:
            policy_matches = find_policy_matches(content, options.policy_keywords)
            if policy_matches:
                logger.warning(f"Review mentions policy keywords: {', '.join(policy_matches)}")

        return ReviewOutcome(
            mode=ReviewMode.SUMMARY,
            files_total=len(files),
            files_reviewed=len(files),
            comments_posted=1,
            body=body,
            policy_matches=policy_matches,
        )

    async def _review_inline(
        self,
        pr_number: int,
        files: list[ChangedFile],
        options: ReviewOptions,
    ) -> ReviewOutcome:
        outcome = ReviewOutcome(mode=ReviewMode.INLINE, files_total=len(files))
        comments: list[InlineComment] = []

        for changed in files:
            try:
                review = await self._review_file(changed, options)
            except Exception as e:
                logger.error(f"Review failed for {changed.filename}: {e}")
                outcome.files_skipped += 1
                continue

            outcome.files_reviewed += 1
            if review is None:
                logger.info(f"{changed.filename}: nothing to report")
                continue

            comments.append(InlineComment(
                path=changed.filename,
                position=get_first_hunk_position(changed.patch),
                body=f"{self._banner(options)}\n\n{review}",
            ))

        posted, failed = await self._publish_inline(pr_number, comments)
        outcome.comments_posted = posted
        outcome.comments_failed = failed
        outcome.files_skipped += failed
        logger.info(
            f"Inline review on PR #{pr_number}: {outcome.files_reviewed} reviewed, "
            f"{outcome.files_skipped} skipped, {posted} comments posted"
        )
        return outcome

    async def _review_file(self, changed: ChangedFile, options: ReviewOptions) -> str | None:
        """Review one file chunk by chunk, None when no chunk had findings."""
        diff = trim_diff(changed.patch, options.max_file_chars)
        chunks = chunk_string(diff, options.chunk_size)
        reviews: list[str] = []

        for i, chunk in enumerate(chunks, start=1):
            chunk_info = f"part {i}/{len(chunks)}" if len(chunks) > 1 else None
            prompt = build_file_prompt(
                language=options.language,
                filename=changed.filename,
                diff_chunk=chunk or "",
                chunk_info=chunk_info,
                extra_instructions=options.extra_instructions,
            )
            self._warn_if_large(prompt, changed.filename)

            content = await self.provider.generate(SYSTEM_PROMPT, prompt)
            if is_empty_review(content):
                logger.debug(f"{changed.filename} {chunk_info or ''}: empty review dropped")
                continue
            reviews.append(content.strip())

        return join_chunk_reviews(reviews)

    async def _publish_inline(self, pr_number: int, comments: list[InlineComment]) -> tuple[int, int]:
        """Submit all comments as one review, falling back to one review per comment."""
        if not comments:
            return 0, 0
        try:
            await self.platform.submit_review(pr_number, comments)
            return len(comments), 0
        except PublishError as e:
            # only a rejected review is known not to have been posted
            if not 400 <= e.status < 500:
                raise
            logger.warning(f"Batch review submission failed, posting comments one by one: {e}")

        posted = failed = 0
        for comment in comments:
            try:
                await self.platform.submit_review(pr_number, [comment])
                posted += 1
            except PublishError as e:
                logger.error(f"Failed to post comment on {comment.path}: {e}")
                failed += 1
        return posted, failed

    def _warn_if_large(self, prompt: str, label: str) -> None:
        tokens = estimate_tokens(prompt)
        if tokens > LARGE_PROMPT_TOKENS:
            logger.warning(f"{label}: prompt is ~{tokens} tokens, the model may truncate it")

    def _summary_header(self, options: ReviewOptions) -> str:
        return f"## 🤖 {options.reviewer_name}\n- Model: `{self.provider.model}`\n\n"

    def _banner(self, options: ReviewOptions) -> str:
        return f"🤖 **{options.reviewer_name}** (`{self.provider.model}`)"
