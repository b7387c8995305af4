"""Template rendering for prompts and pull-request text.

Example:
    >>> from linear_to_pr.rendering import TemplateEngine, render_prompt
    >>> prompt = render_prompt(TemplateEngine(), PromptStyle.BASIC, "Title", "Description")
"""

from linear_to_pr.enums import PromptStyle
from linear_to_pr.rendering.engine import TemplateEngine

__all__ = ["TemplateEngine", "render_prompt"]


def render_prompt(
    engine: TemplateEngine,
    style: PromptStyle,
    issue_title: str,
    issue_description: str,
) -> str:
    """Render the plan request for an issue, embedding title and description verbatim."""
    return engine.render(
        style.template_path,
        {"issue_title": issue_title, "issue_description": issue_description},
    )
