"""Hosted plan provider calling the Anthropic Messages API once per run."""

import anthropic
import structlog

from linear_to_pr.enums import PromptStyle
from linear_to_pr.exceptions import AgentError
from linear_to_pr.providers.base import PlanProvider
from linear_to_pr.rendering import TemplateEngine, render_prompt

log = structlog.get_logger(__name__)


class ClaudeApiPlanProvider(PlanProvider):
    """Plan provider backed by the hosted Claude API.

    Exactly one request is made; transient failures are not retried and are
    fatal for the run.
    """

    agent_type = "claude-api"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-opus-20240229",
        max_tokens: int = 2000,
        prompt_style: PromptStyle = PromptStyle.BASIC,
        engine: TemplateEngine | None = None,
        client: anthropic.AsyncAnthropic | None = None,
    ):
        """Initialize hosted provider.

        Args:
            api_key: Anthropic API key
            model: Model identifier
            max_tokens: Maximum output tokens
            prompt_style: Prompt template to render
            engine: Template engine (defaults to the package templates)
            client: Pre-built SDK client, mainly for tests
        """
        self.model = model
        self.max_tokens = max_tokens
        self.prompt_style = prompt_style
        self.engine = engine or TemplateEngine()
        self.client = client or anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)

    async def disconnect(self) -> None:
        await self.client.close()

    async def produce_plan(self, issue_title: str, issue_description: str) -> str:
        prompt = render_prompt(self.engine, self.prompt_style, issue_title, issue_description)
        log.info("requesting_plan", agent=self.agent_type, model=self.model, prompt_length=len(prompt))

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            log.error("claude_api_request_failed", model=self.model, error=str(e))
            raise AgentError(f"Claude API request failed: {e}", agent_type=self.agent_type) from e

        if not response.content:
            raise AgentError("Claude API returned an empty response", agent_type=self.agent_type)

        first_block = response.content[0]
        plan = getattr(first_block, "text", None)
        if not isinstance(plan, str):
            raise AgentError(
                f"Claude API returned a {getattr(first_block, 'type', 'non-text')} block instead of text",
                agent_type=self.agent_type,
            )

        log.info("plan_received", agent=self.agent_type, plan_length=len(plan))
        return plan
