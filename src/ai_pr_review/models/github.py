from pydantic import BaseModel


class ChangedFile(BaseModel):
    """One file of a pull request as listed by the platform.

    ``patch`` is missing for binary or oversized files.
    """
    filename: str
    status: str | None = None
    additions: int = 0
    deletions: int = 0
    patch: str | None = None

    @property
    def reviewable(self) -> bool:
        return bool(self.patch)


class GitHubUser(BaseModel):
    login: str


class GitHubRepository(BaseModel):
    full_name: str


class GitHubRef(BaseModel):
    ref: str
    sha: str | None = None


class GitHubPullRequest(BaseModel):
    number: int
    title: str | None = None
    state: str | None = None
    head: GitHubRef | None = None
    base: GitHubRef | None = None


class PullRequestEvent(BaseModel):
    action: str
    number: int
    pull_request: GitHubPullRequest
    repository: GitHubRepository
    sender: GitHubUser | None = None


class IssueRef(BaseModel):
    number: int
    # present only when the issue is a pull request
    pull_request: dict | None = None


class IssueComment(BaseModel):
    body: str


class IssueCommentEvent(BaseModel):
    action: str
    issue: IssueRef
    comment: IssueComment
    repository: GitHubRepository
    sender: GitHubUser | None = None
