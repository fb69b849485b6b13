import logging
from typing import Any
from urllib.parse import quote
import httpx

from ai_pr_review.errors import PublishError
from ai_pr_review.models.github import ChangedFile
from ai_pr_review.models.review import InlineComment
from .base import GitPlatform


logger = logging.getLogger(__name__)

REPO_CONFIG_PATH = ".ai-review.yaml"


class GitHubClient(GitPlatform):
    def __init__(self, token: str, repository: str, api_url: str = "https://api.github.com"):
        self.token = token
        self.repository = repository
        self.api_url = api_url.rstrip("/")
        self.repo_url = f"{self.api_url}/repos/{repository}"

    def _headers(self, accept: str = "application/vnd.github+json") -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": accept,
            "X-GitHub-Api-Version": "2022-11-28",
        }

    async def list_changed_files(self, pr_number: int, per_page: int = 100) -> list[ChangedFile]:
        files: list[ChangedFile] = []
        page = 1
        async with httpx.AsyncClient() as client:
            while True:
                response = await client.get(
                    f"{self.repo_url}/pulls/{pr_number}/files",
                    params={"per_page": per_page, "page": page},
                    headers=self._headers(),
                    timeout=30.0,
                )
                response.raise_for_status()
                data = response.json()
                files.extend(ChangedFile(**item) for item in data)
                if len(data) < per_page:
                    break
                page += 1
        logger.info(f"PR #{pr_number}: {len(files)} changed files")
        return files

    async def list_comments(self, issue_number: int) -> list[dict[str, Any]]:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                f"{self.repo_url}/issues/{issue_number}/comments",
                params={"per_page": 100},
                headers=self._headers(),
                timeout=30.0,
            )
            response.raise_for_status()
            return response.json()

    async def create_comment(self, issue_number: int, body: str) -> None:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{self.repo_url}/issues/{issue_number}/comments",
                headers=self._headers(),
                json={"body": body},
                timeout=30.0,
            )
            _raise_publish_error(response)

    async def update_comment(self, comment_id: int, body: str) -> None:
        async with httpx.AsyncClient() as client:
            response = await client.patch(
                f"{self.repo_url}/issues/comments/{comment_id}",
                headers=self._headers(),
                json={"body": body},
                timeout=30.0,
            )
            _raise_publish_error(response)

    async def submit_review(
        self,
        pr_number: int,
        comments: list[InlineComment],
        body: str = "",
    ) -> None:
        payload: dict[str, Any] = {
            "event": "COMMENT",
            "comments": [c.model_dump() for c in comments],
        }
        if body:
            payload["body"] = body
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{self.repo_url}/pulls/{pr_number}/reviews",
                headers=self._headers(),
                json=payload,
                timeout=30.0,
            )
            _raise_publish_error(response)

    async def get_pull_request(self, pr_number: int) -> dict[str, Any]:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                f"{self.repo_url}/pulls/{pr_number}",
                headers=self._headers(),
                timeout=30.0,
            )
            response.raise_for_status()
            return response.json()

    async def get_file_content(self, file_path: str, ref: str) -> str:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                f"{self.repo_url}/contents/{quote(file_path)}",
                params={"ref": ref},
                headers=self._headers(accept="application/vnd.github.raw+json"),
                timeout=30.0,
            )
            response.raise_for_status()
            return response.text

    async def get_repo_config(self, ref: str) -> str | None:
        """Get .ai-review.yaml content, returns None if not found."""
        try:
            return await self.get_file_content(REPO_CONFIG_PATH, ref)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise


def _raise_publish_error(response: httpx.Response) -> None:
    if response.is_success:
        return
    raise PublishError(
        f"{response.request.method} {response.request.url.path} failed: HTTP {response.status_code} {response.text[:200]}",
        status=response.status_code,
    )
