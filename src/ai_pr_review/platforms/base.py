import logging
from abc import ABC, abstractmethod
from typing import Any

from ai_pr_review.models.github import ChangedFile
from ai_pr_review.models.review import InlineComment


logger = logging.getLogger(__name__)


class GitPlatform(ABC):
    @abstractmethod
    async def list_changed_files(self, pr_number: int, per_page: int = 100) -> list[ChangedFile]:
        pass

    @abstractmethod
    async def list_comments(self, issue_number: int) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    async def create_comment(self, issue_number: int, body: str) -> None:
        pass

    @abstractmethod
    async def update_comment(self, comment_id: int, body: str) -> None:
        pass

    @abstractmethod
    async def submit_review(
        self,
        pr_number: int,
        comments: list[InlineComment],
        body: str = "",
    ) -> None:
        pass

    async def get_repo_config(self, ref: str) -> str | None:
        """Raw ``.ai-review.yaml`` at ref, None when the platform has none."""
        return None

    async def publish_sticky_comment(self, issue_number: int, body: str, marker: str) -> None:
        """Update the comment carrying marker, or create it on first run."""
        final_body = f"{marker}\n{body}"
        comments = await self.list_comments(issue_number)
        existing = next((c for c in comments if marker in (c.get("body") or "")), None)
        if existing:
            logger.info(f"Updating review comment {existing['id']} on #{issue_number}")
            await self.update_comment(existing["id"], final_body)
        else:
            logger.info(f"Creating review comment on #{issue_number}")
            await self.create_comment(issue_number, final_body)
