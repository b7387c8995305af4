"""Enumerations for linear-to-pr modes and command forms."""

from enum import Enum


class PlanMode(str, Enum):
    """How the implementation plan is obtained.

    - api: one call to the hosted Anthropic Messages API
    - cli: the local Claude Code CLI through the fallback chain
    """

    API = "api"
    CLI = "cli"

    def __str__(self) -> str:
        return self.value


class CommandForm(str, Enum):
    """Ways of invoking the local assistant tool.

    The default chain tries them in declaration order, minus PROJECT_COMMAND
    which must be enabled explicitly.
    """

    FILE_ARG = "file-arg"
    """``<tool> <prompt_file>``"""

    ALT_BINARY = "alt-binary"
    """``<tool>-cli <prompt_file>``"""

    DIRECTIVE_FILE = "directive-file"
    """``<tool> -p "<directive>" <prompt_file>``"""

    DIRECTIVE_STDIN = "directive-stdin"
    """``<tool> -p "<directive>"`` with the prompt on stdin"""

    BARE = "bare"
    """``<tool>`` with the prompt on stdin"""

    PROJECT_COMMAND = "project-command"
    """``<tool> -p "/project:<command> '<issue details>'"``"""

    def __str__(self) -> str:
        return self.value

    @property
    def uses_stdin(self) -> bool:
        """Check if this form delivers the prompt on standard input."""
        return self in (CommandForm.DIRECTIVE_STDIN, CommandForm.BARE)


DEFAULT_CHAIN: tuple[CommandForm, ...] = (
    CommandForm.FILE_ARG,
    CommandForm.ALT_BINARY,
    CommandForm.DIRECTIVE_FILE,
    CommandForm.DIRECTIVE_STDIN,
    CommandForm.BARE,
)


class PromptStyle(str, Enum):
    """Prompt template used to ask for the plan."""

    BASIC = "basic"
    DETAILED = "detailed"

    def __str__(self) -> str:
        return self.value

    @property
    def template_path(self) -> str:
        """Template path relative to the package templates directory."""
        return f"prompts/{self.value}.md.j2"


class ExistingPolicy(str, Enum):
    """What to do when the branch or pull request for an issue already exists.

    - error: fail the run (the source host rejects the duplicate)
    - reuse: treat the existing branch/PR as already done
    """

    ERROR = "error"
    REUSE = "reuse"

    def __str__(self) -> str:
        return self.value
