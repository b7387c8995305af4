"""Local plan provider that drives the Claude Code CLI through a fallback chain.

The prompt is written once to ``prompt.md`` inside a fresh temporary
directory. The configured command forms are then tried in order; each failed
attempt (non-zero exit, missing binary, oversized output) is logged and the
next form is tried with the same prompt file. The first success wins. The
temporary directory is removed afterwards whatever happened.
"""

import subprocess
from pathlib import Path

import structlog

from linear_to_pr.config.settings import DEFAULT_DIRECTIVE, DEFAULT_MAX_OUTPUT_BYTES
from linear_to_pr.enums import DEFAULT_CHAIN, CommandForm, PromptStyle
from linear_to_pr.exceptions import AgentUnavailableError
from linear_to_pr.providers.base import PlanProvider
from linear_to_pr.providers.mock import MockPlanProvider
from linear_to_pr.rendering import TemplateEngine, render_prompt
from linear_to_pr.utils.async_subprocess import OutputLimitExceededError, run_command
from linear_to_pr.utils.fallback import Attempt, FallbackExhaustedError, first_success
from linear_to_pr.utils.workspace import prompt_workspace

log = structlog.get_logger(__name__)

PROMPT_FILENAME = "prompt.md"


class CommandFailedError(RuntimeError):
    """A command form exited with a non-zero status."""

    def __init__(self, error: subprocess.CalledProcessError) -> None:
        self.returncode = error.returncode
        self.stderr = (error.stderr or "").strip()
        message = f"{error.cmd[0]} exited with status {error.returncode}"
        if self.stderr:
            message = f"{message}: {self.stderr[-500:]}"
        super().__init__(message)


class ClaudeCliPlanProvider(PlanProvider):
    """Plan provider running the local assistant CLI."""

    agent_type = "claude-cli"

    def __init__(
        self,
        tool: str = "claude",
        directive: str = DEFAULT_DIRECTIVE,
        chain: list[CommandForm] | tuple[CommandForm, ...] = DEFAULT_CHAIN,
        prompt_style: PromptStyle = PromptStyle.DETAILED,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
        project_command: str = "analyze-issue",
        working_dir: str | None = None,
        allow_mock: bool = False,
        engine: TemplateEngine | None = None,
    ):
        """Initialize local CLI provider.

        Args:
            tool: Executable name of the assistant
            directive: Text passed with ``-p`` by the directive forms
            chain: Command forms to try, in order
            prompt_style: Prompt template to render
            max_output_bytes: Output cap per attempt
            project_command: Slash command used by the project-command form
            working_dir: Directory the tool runs in (defaults to the current one)
            allow_mock: Dry runs only. Return the fixed example plan when the
                tool fails its ``--version`` probe.
            engine: Template engine (defaults to the package templates)
        """
        self.tool = tool
        self.directive = directive
        self.chain = list(chain)
        self.prompt_style = prompt_style
        self.max_output_bytes = max_output_bytes
        self.project_command = project_command
        self.working_dir = working_dir
        self.allow_mock = allow_mock
        self.engine = engine or TemplateEngine()

    async def produce_plan(self, issue_title: str, issue_description: str) -> str:
        if self.allow_mock and not await self.is_available():
            return await MockPlanProvider().produce_plan(issue_title, issue_description)

        prompt = render_prompt(self.engine, self.prompt_style, issue_title, issue_description)

        with prompt_workspace() as workspace:
            prompt_file = workspace / PROMPT_FILENAME
            prompt_file.write_text(prompt, encoding="utf-8")
            log.info(
                "running_claude_cli",
                tool=self.tool,
                chain=[str(form) for form in self.chain],
                prompt_length=len(prompt),
            )

            attempts = [
                self._attempt(form, prompt_file, issue_title, issue_description) for form in self.chain
            ]
            try:
                plan = await first_success(attempts)
            except FallbackExhaustedError as e:
                log.error("claude_cli_unavailable", attempts=e.attempts, error=str(e.last_error))
                raise AgentUnavailableError(e.attempts, e.last_error, agent_type=self.agent_type) from e

        log.info("plan_received", agent=self.agent_type, plan_length=len(plan))
        return plan

    async def is_available(self) -> bool:
        """Probe the tool with ``--version``."""
        try:
            stdout, _, _ = await run_command(self.tool, "--version", max_output_bytes=self.max_output_bytes)
        except (OSError, subprocess.CalledProcessError, OutputLimitExceededError) as e:
            log.warning("agent_cli_not_available", tool=self.tool, error=str(e))
            return False
        log.info("agent_cli_available", tool=self.tool, version=stdout.strip())
        return True

    def build_command(
        self,
        form: CommandForm,
        prompt_file: Path,
        issue_title: str = "",
        issue_description: str = "",
    ) -> tuple[str, ...]:
        """Argument vector for a command form."""
        if form == CommandForm.FILE_ARG:
            return (self.tool, str(prompt_file))
        if form == CommandForm.ALT_BINARY:
            return (f"{self.tool}-cli", str(prompt_file))
        if form == CommandForm.DIRECTIVE_FILE:
            return (self.tool, "-p", self.directive, str(prompt_file))
        if form == CommandForm.DIRECTIVE_STDIN:
            return (self.tool, "-p", self.directive)
        if form == CommandForm.BARE:
            return (self.tool,)
        if form == CommandForm.PROJECT_COMMAND:
            details = f"Title: {issue_title}, Description: {issue_description}"
            return (self.tool, "-p", f"/project:{self.project_command} '{details}'")
        raise ValueError(f"Unknown command form: {form}")

    def _attempt(
        self,
        form: CommandForm,
        prompt_file: Path,
        issue_title: str,
        issue_description: str,
    ) -> Attempt[str]:
        args = self.build_command(form, prompt_file, issue_title, issue_description)

        async def run() -> str:
            stdin = prompt_file.read_bytes() if form.uses_stdin else None
            log.debug("claude_cli_attempt", form=str(form), command=args[0], argc=len(args))
            try:
                stdout, _, _ = await run_command(
                    *args,
                    cwd=self.working_dir,
                    input=stdin,
                    max_output_bytes=self.max_output_bytes,
                )
            except subprocess.CalledProcessError as e:
                raise CommandFailedError(e) from e
            return stdout

        return Attempt(name=str(form), run=run)
