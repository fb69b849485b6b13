import pytest
import yaml
from pydantic import ValidationError
from ai_pr_review.models.config import RepoConfig, ReviewMode
from ai_pr_review.models.github import ChangedFile, PullRequestEvent
from ai_pr_review.models.review import InlineComment


def test_repo_config_defaults():
    config = RepoConfig()
    assert config.language is None
    assert config.review_mode is None
    assert config.exclude == []


def test_repo_config_from_yaml():
    yaml_content = """
language: Turkish
review_mode: INLINE
extra_instructions: Focus on SQL queries
exclude:
  - "*.generated.ts"
"""
    config = RepoConfig(**yaml.safe_load(yaml_content))

    assert config.language == "Turkish"
    assert config.review_mode == ReviewMode.INLINE
    assert config.extra_instructions == "Focus on SQL queries"
    assert config.exclude == ["*.generated.ts"]


def test_repo_config_ignores_unknown_mode():
    assert RepoConfig(review_mode="fancy").review_mode is None


def test_changed_file_from_api_payload():
    changed = ChangedFile(**{
        "sha": "abc",
        "filename": "src/app.py",
        "status": "modified",
        "additions": 3,
        "deletions": 1,
        "patch": "@@ -1 +1 @@\n-a\n+b",
    })
    assert changed.reviewable is True
    assert ChangedFile(filename="logo.png", additions=0, deletions=0).reviewable is False


def test_pull_request_event():
    event = PullRequestEvent(**{
        "action": "opened",
        "number": 5,
        "pull_request": {"number": 5, "title": "Add cache", "head": {"ref": "feature", "sha": "deadbeef"}},
        "repository": {"full_name": "octo/repo"},
    })
    assert event.pull_request.head.sha == "deadbeef"


def test_inline_comment_position_must_be_positive():
    with pytest.raises(ValidationError):
        InlineComment(path="a.py", position=0, body="x")
