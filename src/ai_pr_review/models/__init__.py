from .config import RepoConfig, ReviewMode
from .github import ChangedFile, IssueCommentEvent, PullRequestEvent
from .review import InlineComment

__all__ = [
    "RepoConfig",
    "ReviewMode",
    "ChangedFile",
    "IssueCommentEvent",
    "PullRequestEvent",
    "InlineComment",
]
