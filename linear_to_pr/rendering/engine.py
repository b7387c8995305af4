"""Sandboxed Jinja2 template rendering.

Prompts and the pull-request title/body are rendered from the package's
``templates/`` directory. Issue text and plan text are untrusted input, so the
environment is sandboxed and values are inserted verbatim: autoescaping is
off (the output is Markdown, not HTML) and undefined variables fail fast.

Example:
    >>> engine = TemplateEngine()
    >>> engine.render("pull_request/title.txt.j2", {"issue_id": "ABC-1", "issue_title": "Fix"})
    '[Linear ABC-1] Fix'
"""

from pathlib import Path
from typing import Any

from jinja2 import FileSystemLoader, StrictUndefined, TemplateError as JinjaTemplateError, TemplateNotFound
from jinja2.sandbox import SandboxedEnvironment

from linear_to_pr.exceptions import TemplateError

DEFAULT_TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class TemplateEngine:
    """Sandboxed Jinja2 environment rooted at a template directory.

    Attributes:
        template_dir: Resolved path to the template directory.
        env: The SandboxedEnvironment instance.
    """

    def __init__(self, template_dir: Path | None = None) -> None:
        """Initialize template engine.

        Args:
            template_dir: Root directory for templates. Defaults to the
                package's built-in templates.

        Raises:
            ValueError: If template_dir doesn't exist or isn't a directory.
        """
        self.template_dir = (template_dir or DEFAULT_TEMPLATE_DIR).resolve()

        if not self.template_dir.exists():
            raise ValueError(f"Template directory does not exist: {self.template_dir}")
        if not self.template_dir.is_dir():
            raise ValueError(f"Template path is not a directory: {self.template_dir}")

        self.env = SandboxedEnvironment(
            loader=FileSystemLoader(str(self.template_dir)),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=False,
        )

    def validate_template_path(self, template_path: str) -> Path:
        """Resolve a template path, refusing anything outside template_dir.

        Raises:
            ValueError: If path escapes the template directory.
            TemplateNotFound: If the template file doesn't exist.
        """
        requested_path = (self.template_dir / template_path).resolve()

        try:
            requested_path.relative_to(self.template_dir)
        except ValueError as e:
            raise ValueError(f"Template path escapes template directory: {template_path}") from e

        if not requested_path.exists():
            raise TemplateNotFound(template_path)

        return requested_path

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a template with the given context.

        Args:
            template_path: Path relative to template_dir, e.g. "prompts/basic.md.j2"
            context: Template variables

        Returns:
            Rendered text

        Raises:
            TemplateError: If the template is missing, invalid, or references
                an undefined variable
        """
        try:
            self.validate_template_path(template_path)
            template = self.env.get_template(template_path)
            return str(template.render(**context))
        except (JinjaTemplateError, ValueError) as e:
            raise TemplateError(f"Failed to render template {template_path}: {e}") from e
