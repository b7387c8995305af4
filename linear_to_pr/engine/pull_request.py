"""Pull request composition and submission."""

import structlog

from linear_to_pr.enums import ExistingPolicy
from linear_to_pr.models.domain import PullRequest, PullRequestSpec
from linear_to_pr.providers.base import GitProvider
from linear_to_pr.rendering import TemplateEngine

log = structlog.get_logger(__name__)

TITLE_TEMPLATE = "pull_request/title.txt.j2"
BODY_TEMPLATE = "pull_request/body.md.j2"


class PullRequestComposer:
    """Renders the pull request for an issue and submits it once."""

    def __init__(
        self,
        issue_url_base: str = "https://linear.app/issue",
        engine: TemplateEngine | None = None,
    ):
        """Initialize composer.

        Args:
            issue_url_base: Prefix of tracker issue links; the id is appended
            engine: Template engine (defaults to the package templates)
        """
        self.issue_url_base = issue_url_base.rstrip("/")
        self.engine = engine or TemplateEngine()

    def issue_url(self, issue_id: str) -> str:
        return f"{self.issue_url_base}/{issue_id}"

    def compose(
        self,
        issue_id: str,
        issue_title: str,
        plan: str,
        branch_name: str,
        base: str,
    ) -> PullRequestSpec:
        """Render title and body. The plan is embedded verbatim."""
        context = {
            "issue_id": issue_id,
            "issue_title": issue_title,
            "issue_url": self.issue_url(issue_id),
            "plan": plan,
        }
        return PullRequestSpec(
            title=self.engine.render(TITLE_TEMPLATE, context),
            body=self.engine.render(BODY_TEMPLATE, context),
            head=branch_name,
            base=base,
        )

    async def compose_and_submit(
        self,
        git: GitProvider,
        issue_id: str,
        issue_title: str,
        plan: str,
        branch_name: str,
        base: str,
        on_existing: ExistingPolicy = ExistingPolicy.ERROR,
    ) -> PullRequest:
        """Render the pull request and open it.

        With ExistingPolicy.REUSE an open pull request for the same head/base
        is returned instead of creating a new one. Otherwise a duplicate fails
        at the source host.

        Raises:
            GitOperationError: If creation fails
        """
        if on_existing == ExistingPolicy.REUSE:
            existing = await git.find_pull_request(head=branch_name, base=base)
            if existing is not None:
                log.info("reusing_existing_pull_request", number=existing.number, url=existing.url)
                return existing

        spec = self.compose(issue_id, issue_title, plan, branch_name, base)
        return await self.submit(git, spec)

    async def submit(self, git: GitProvider, spec: PullRequestSpec) -> PullRequest:
        """Open the pull request described by ``spec``. Not retried."""
        log.info("submitting_pull_request", head=spec.head, base=spec.base, body_length=len(spec.body))
        return await git.create_pull_request(
            title=spec.title,
            body=spec.body,
            head=spec.head,
            base=spec.base,
        )
