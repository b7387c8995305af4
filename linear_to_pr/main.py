"""CLI entry point for linear-to-pr."""

import asyncio
import os
import sys
from pathlib import Path

import click
import structlog

from linear_to_pr.config.settings import PipelineSettings
from linear_to_pr.engine.branching import branch_name_for
from linear_to_pr.engine.pipeline import IssuePlanPipeline
from linear_to_pr.enums import ExistingPolicy, PlanMode
from linear_to_pr.exceptions import ConfigurationError, LinearToPrError
from linear_to_pr.models.domain import PipelineResult
from linear_to_pr.providers.claude_cli import ClaudeCliPlanProvider
from linear_to_pr.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)


@click.group()
@click.option("--config", default=None, help="Optional YAML configuration file")
@click.option("--log-level", default="INFO", help="Logging level")
@click.option("--json-logs/--console-logs", default=True, help="Log format (JSON lines by default)")
@click.pass_context
def cli(ctx: click.Context, config: str | None, log_level: str, json_logs: bool) -> None:
    """linear-to-pr: Turn a Linear issue into a pull request carrying a Claude plan."""
    configure_logging(log_level, json_logs=json_logs)
    ctx.obj = {"config": config}


@cli.command()
@click.option("--issue-id", default=None, help="Linear issue identifier (overrides LINEAR_ISSUE_ID)")
@click.option(
    "--mode",
    type=click.Choice([m.value for m in PlanMode]),
    default=None,
    help="Plan acquisition mode (overrides PLAN_MODE)",
)
@click.option("--dry-run", is_flag=True, help="Produce the plan; create no branch or pull request")
@click.option("--sample-issue", is_flag=True, help="Use the built-in example issue (dry runs only)")
@click.option(
    "--on-existing",
    type=click.Choice([p.value for p in ExistingPolicy]),
    default=None,
    help="What to do when the branch or pull request already exists",
)
@click.pass_context
def run(
    ctx: click.Context,
    issue_id: str | None,
    mode: str | None,
    dry_run: bool,
    sample_issue: bool,
    on_existing: str | None,
) -> None:
    """Fetch the issue, produce a plan, open the branch and pull request."""
    try:
        settings = PipelineSettings.load(
            ctx.obj["config"],
            linear_issue_id=issue_id,
            plan_mode=mode,
            dry_run=dry_run or None,
            sample_issue=sample_issue or None,
            on_existing=on_existing,
        )
        pipeline = IssuePlanPipeline.from_settings(settings)
        result = asyncio.run(pipeline.run())
    except LinearToPrError as e:
        _report_failure(e.message)
        log.debug("run_error", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)
    except Exception as e:
        _report_failure(f"Unexpected error: {e}")
        log.error("run_unexpected", exc_info=True)
        sys.exit(1)

    _report_result(result)


@cli.command("branch-name")
@click.argument("issue_id")
def branch_name(issue_id: str) -> None:
    """Print the branch name derived from ISSUE_ID."""
    click.echo(branch_name_for(issue_id))


@cli.command("check-cli")
@click.pass_context
def check_cli(ctx: click.Context) -> None:
    """Check that the local Claude CLI is installed and the project command exists."""
    try:
        settings = PipelineSettings.load(ctx.obj["config"])
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    provider = ClaudeCliPlanProvider(tool=settings.cli.tool)
    ok = True

    if asyncio.run(provider.is_available()):
        click.echo(f"✓ {settings.cli.tool} is installed")
    else:
        click.echo(f"✗ {settings.cli.tool} is not installed or not on PATH", err=True)
        ok = False

    command_file = Path(".claude") / "commands" / f"{settings.cli.project_command}.md"
    if command_file.is_file():
        click.echo(f"✓ Custom command found: {command_file}")
    else:
        click.echo(f"✗ Custom command not found: {command_file}", err=True)
        ok = False

    if not ok:
        sys.exit(1)


def _report_result(result: PipelineResult) -> None:
    outputs = result.outputs()
    for key, value in outputs.items():
        click.echo(f"{key}={value}")

    output_file = os.environ.get("GITHUB_OUTPUT")
    if output_file:
        with open(output_file, "a", encoding="utf-8") as f:
            for key, value in outputs.items():
                f.write(f"{key}={value}\n")

    if result.dry_run and result.pull_request is not None:
        click.echo("")
        click.echo(f"Title: {result.pull_request.title}")
        click.echo(f"Head: {result.pull_request.head} -> Base: {result.pull_request.base}")
        click.echo("")
        click.echo(result.pull_request.body)
    elif result.reused:
        click.echo("Pull request already exists; nothing created", err=True)


def _report_failure(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    if os.environ.get("GITHUB_ACTIONS") == "true":
        click.echo(f"::error::{message}")


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
