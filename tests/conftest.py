"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock

import pytest
import structlog

from linear_to_pr.config.settings import PipelineSettings
from linear_to_pr.models.domain import Branch, Issue, PullRequest
from linear_to_pr.providers.base import GitProvider, IssueTracker, PlanProvider

ENV_VARS = (
    "LINEAR_API_KEY",
    "LINEAR_ISSUE_ID",
    "LINEAR_API_URL",
    "LINEAR_ISSUE_URL",
    "GITHUB_TOKEN",
    "GITHUB_API_URL",
    "GITHUB_REPOSITORY",
    "GITHUB_OUTPUT",
    "GITHUB_ACTIONS",
    "REPO_OWNER",
    "REPO_NAME",
    "PLAN_MODE",
    "CLAUDE_API_KEY",
    "ANTHROPIC_API_KEY",
    "MODEL",
    "CLAUDE_MODEL",
    "MAX_TOKENS",
    "CLAUDE_MAX_TOKENS",
    "ON_EXISTING",
    "DRY_RUN",
    "SAMPLE_ISSUE",
    "CLI__TOOL",
    "CLI__CHAIN",
    "CLI__DIRECTIVE",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Isolate every test from the runner's environment and any .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def settings() -> PipelineSettings:
    """Complete settings for a real (non dry-run) API-mode run."""
    return PipelineSettings(
        linear_api_key="lin_api_test",
        linear_issue_id="ABC-123",
        github_token="ghp_test_token",
        github_repository="test-owner/test-repo",
        claude_api_key="sk-ant-test",
    )


@pytest.fixture
def sample_issue() -> Issue:
    """Issue used by the end-to-end scenarios."""
    return Issue(
        identifier="ABC-123",
        title="Add user authentication feature",
        description="We need to implement user authentication using OAuth2.",
        url="https://linear.app/test/issue/ABC-123",
    )


@pytest.fixture
def mock_tracker(sample_issue: Issue) -> AsyncMock:
    """Tracker returning the sample issue."""
    tracker = AsyncMock(spec=IssueTracker)
    tracker.get_issue.return_value = sample_issue
    return tracker


@pytest.fixture
def mock_planner() -> AsyncMock:
    """Plan provider returning a fixed plan."""
    planner = AsyncMock(spec=PlanProvider)
    planner.agent_type = "test"
    planner.produce_plan.return_value = "## Summary\nDo the thing.\n\n## Files\n- auth.py"
    return planner


@pytest.fixture
def mock_git() -> AsyncMock:
    """Source host with default branch "main" at sha "deadbeef"."""
    git = AsyncMock(spec=GitProvider)
    git.get_default_branch.return_value = "main"
    git.get_branch.return_value = None
    git.find_pull_request.return_value = None

    async def create_branch(branch_name: str, from_branch: str) -> Branch:
        return Branch(name=branch_name, sha="deadbeef")

    async def create_pull_request(title: str, body: str, head: str, base: str) -> PullRequest:
        return PullRequest(
            number=7,
            title=title,
            url="https://github.com/test-owner/test-repo/pull/7",
            head=head,
            base=base,
        )

    git.create_branch.side_effect = create_branch
    git.create_pull_request.side_effect = create_pull_request
    return git
