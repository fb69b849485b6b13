import json
import pytest
from unittest.mock import AsyncMock, patch
from ai_pr_review.action import load_pull_request, run
from ai_pr_review.config import Settings
from ai_pr_review.errors import EmptyGenerationError
from ai_pr_review.http import HttpError
from ai_pr_review.models.config import ReviewMode
from ai_pr_review.review.engine import ReviewOutcome


@pytest.fixture
def event_file(tmp_path):
    path = tmp_path / "event.json"
    path.write_text(json.dumps({
        "action": "synchronize",
        "pull_request": {"number": 12, "head": {"ref": "feature", "sha": "cafe"}},
    }))
    return str(path)


@pytest.fixture
def settings(event_file):
    return Settings(
        github_token="gh-token",
        github_repository="octo/repo",
        github_event_path=event_file,
        base_url="http://localhost:1234/v1",
        api_key="key",
        model="local-model",
    )


def _outcome(**kwargs) -> ReviewOutcome:
    return ReviewOutcome(mode=ReviewMode.SUMMARY, files_total=1, files_reviewed=1, **kwargs)


@pytest.mark.unit
def test_load_pull_request(event_file, tmp_path):
    assert load_pull_request(event_file) == (12, "cafe")
    assert load_pull_request(None) is None

    push_event = tmp_path / "push.json"
    push_event.write_text(json.dumps({"ref": "refs/heads/main"}))
    assert load_pull_request(str(push_event)) is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_run_success(settings):
    with patch("ai_pr_review.action.run_review", new=AsyncMock(return_value=_outcome())) as mock_run:
        assert await run(settings) == 0

    mock_run.assert_awaited_once_with(settings, "octo/repo", 12, head_ref="cafe")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_run_missing_configuration(settings, capsys):
    settings.model = None

    assert await run(settings) == 1
    assert "::error::Missing required configuration: model" in capsys.readouterr().out


@pytest.mark.unit
@pytest.mark.asyncio
async def test_run_skips_non_pull_request_events(settings):
    settings.github_event_path = None

    with patch("ai_pr_review.action.run_review", new=AsyncMock()) as mock_run:
        assert await run(settings) == 0

    mock_run.assert_not_awaited()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_run_fails_on_policy_match(settings):
    outcome = _outcome(policy_matches=["security"])
    with patch("ai_pr_review.action.run_review", new=AsyncMock(return_value=outcome)):
        assert await run(settings) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_run_fails_on_empty_generation(settings):
    with patch("ai_pr_review.action.run_review", new=AsyncMock(side_effect=EmptyGenerationError("Model returned empty response"))):
        assert await run(settings) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_run_reports_http_status(settings, capsys):
    error = HttpError("invalid api key", status=401)
    with patch("ai_pr_review.action.run_review", new=AsyncMock(side_effect=error)):
        assert await run(settings) == 1

    assert "::error::invalid api key (HTTP 401)" in capsys.readouterr().out


@pytest.mark.unit
@pytest.mark.asyncio
async def test_run_fails_when_no_file_produced_output(settings):
    outcome = ReviewOutcome(mode=ReviewMode.INLINE, files_total=2, files_skipped=2)
    with patch("ai_pr_review.action.run_review", new=AsyncMock(return_value=outcome)):
        assert await run(settings) == 1
