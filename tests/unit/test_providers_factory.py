"""Tests for linear_to_pr.providers.factory."""

import pytest

from linear_to_pr.enums import CommandForm, PlanMode, PromptStyle
from linear_to_pr.exceptions import ConfigurationError
from linear_to_pr.providers.anthropic_api import ClaudeApiPlanProvider
from linear_to_pr.providers.claude_cli import ClaudeCliPlanProvider
from linear_to_pr.providers.factory import create_git_provider, create_issue_tracker, create_plan_provider
from linear_to_pr.providers.github_rest import GitHubRestProvider
from linear_to_pr.providers.linear import LinearProvider
from linear_to_pr.providers.mock import SampleIssueTracker


class TestCreateIssueTracker:
    def test_linear(self, settings):
        tracker = create_issue_tracker(settings)

        assert isinstance(tracker, LinearProvider)
        assert tracker.client.headers["Authorization"] == "lin_api_test"

    def test_sample(self, settings):
        settings.sample_issue = True
        settings.dry_run = True

        assert isinstance(create_issue_tracker(settings), SampleIssueTracker)

    def test_missing_key(self, settings):
        settings.linear_api_key = None

        with pytest.raises(ConfigurationError):
            create_issue_tracker(settings)


class TestCreateGitProvider:
    def test_github(self, settings):
        git = create_git_provider(settings)

        assert isinstance(git, GitHubRestProvider)
        assert (git.owner, git.repo) == ("test-owner", "test-repo")
        assert git.token == "ghp_test_token"

    def test_missing_repository(self, settings):
        settings.github_repository = None

        with pytest.raises(ConfigurationError):
            create_git_provider(settings)


class TestCreatePlanProvider:
    def test_api_mode(self, settings):
        planner = create_plan_provider(settings)

        assert isinstance(planner, ClaudeApiPlanProvider)
        assert planner.model == "claude-3-opus-20240229"
        assert planner.max_tokens == 2000
        assert planner.prompt_style == PromptStyle.BASIC

    def test_api_mode_without_key(self, settings):
        settings.claude_api_key = None

        with pytest.raises(ConfigurationError, match="claude_api_key"):
            create_plan_provider(settings)

    def test_cli_mode(self, settings):
        settings.plan_mode = PlanMode.CLI
        settings.cli.tool = "claude-beta"
        settings.cli.chain = [CommandForm.PROJECT_COMMAND]

        planner = create_plan_provider(settings)

        assert isinstance(planner, ClaudeCliPlanProvider)
        assert planner.tool == "claude-beta"
        assert planner.chain == [CommandForm.PROJECT_COMMAND]
        assert planner.allow_mock is False

    def test_mock_plan_only_for_dry_runs(self, settings):
        settings.plan_mode = PlanMode.CLI
        settings.dry_run = True

        assert create_plan_provider(settings).allow_mock is True
