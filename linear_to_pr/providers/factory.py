"""Factory for creating provider instances based on configuration."""

import structlog

from linear_to_pr.config.settings import PipelineSettings
from linear_to_pr.enums import PlanMode, PromptStyle
from linear_to_pr.exceptions import ConfigurationError
from linear_to_pr.providers.anthropic_api import ClaudeApiPlanProvider
from linear_to_pr.providers.base import GitProvider, IssueTracker, PlanProvider
from linear_to_pr.providers.claude_cli import ClaudeCliPlanProvider
from linear_to_pr.providers.github_rest import GitHubRestProvider
from linear_to_pr.providers.linear import LinearProvider
from linear_to_pr.providers.mock import SampleIssueTracker

log = structlog.get_logger(__name__)


def create_issue_tracker(settings: PipelineSettings) -> IssueTracker:
    """Create the issue tracker client.

    Dry runs with ``sample_issue`` get a tracker serving the built-in example.
    """
    if settings.sample_issue:
        return SampleIssueTracker()

    if settings.linear_api_key is None:
        raise ConfigurationError("Missing required configuration: linear_api_key", field="linear_api_key")

    log.info("creating_linear_provider", api_url=settings.linear_api_url)
    return LinearProvider(
        api_key=settings.linear_api_key.get_secret_value(),
        api_url=settings.linear_api_url,
    )


def create_git_provider(settings: PipelineSettings) -> GitProvider:
    """Create the GitHub provider for the configured repository.

    Raises:
        ConfigurationError: If the token or repository is missing
    """
    repository = settings.repository
    if settings.github_token is None or repository is None:
        raise ConfigurationError("GitHub token and repository are required", field="github_token")

    owner, name = repository
    log.info("creating_github_provider", base_url=settings.github_api_url, owner=owner, repo=name)
    return GitHubRestProvider(
        token=settings.github_token.get_secret_value(),
        owner=owner,
        repo=name,
        base_url=settings.github_api_url,
    )


def create_plan_provider(settings: PipelineSettings) -> PlanProvider:
    """Create the assistant for the configured plan mode.

    The mock plan is only ever enabled for dry runs.
    """
    if settings.plan_mode == PlanMode.API:
        if settings.claude_api_key is None:
            raise ConfigurationError("Missing required configuration: claude_api_key", field="claude_api_key")
        log.info("creating_claude_api_provider", model=settings.claude_model, max_tokens=settings.claude_max_tokens)
        return ClaudeApiPlanProvider(
            api_key=settings.claude_api_key.get_secret_value(),
            model=settings.claude_model,
            max_tokens=settings.claude_max_tokens,
            prompt_style=PromptStyle.BASIC,
        )

    log.info("creating_claude_cli_provider", tool=settings.cli.tool, dry_run=settings.dry_run)
    return ClaudeCliPlanProvider(
        tool=settings.cli.tool,
        directive=settings.cli.directive,
        chain=settings.cli.chain,
        prompt_style=settings.cli.prompt_style,
        max_output_bytes=settings.cli.max_output_bytes,
        project_command=settings.cli.project_command,
        allow_mock=settings.dry_run,
    )
