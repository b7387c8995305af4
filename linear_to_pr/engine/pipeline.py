"""The issue-to-pull-request pipeline.

One run, strictly sequential:

    validate config -> fetch issue -> resolve default branch
    -> (reuse check) -> produce plan -> create branch -> open pull request

The plan is produced before the branch is created so that a failed plan
never leaves a branch behind. A branch created before a failed pull request
is not rolled back.
"""

from __future__ import annotations

import structlog

from linear_to_pr.config.settings import PipelineSettings, is_set
from linear_to_pr.engine.branching import branch_name_for, create_branch_for
from linear_to_pr.engine.pull_request import PullRequestComposer
from linear_to_pr.enums import ExistingPolicy
from linear_to_pr.exceptions import ConfigurationError, IssueNotFoundError
from linear_to_pr.models.domain import Issue, PipelineResult
from linear_to_pr.providers.base import GitProvider, IssueTracker, PlanProvider
from linear_to_pr.providers.factory import create_git_provider, create_issue_tracker, create_plan_provider
from linear_to_pr.providers.mock import SAMPLE_ISSUE

log = structlog.get_logger(__name__)

DRY_RUN_FALLBACK_BASE = "main"


class IssuePlanPipeline:
    """Sequences tracker, assistant and source host for one issue."""

    def __init__(
        self,
        settings: PipelineSettings,
        tracker: IssueTracker,
        planner: PlanProvider,
        git: GitProvider | None = None,
        composer: PullRequestComposer | None = None,
    ):
        """Initialize pipeline.

        Args:
            settings: Settings for this run
            tracker: Issue tracker client
            planner: Assistant producing the plan
            git: Source host; optional only for dry runs
            composer: Pull request composer
        """
        self.settings = settings
        self.tracker = tracker
        self.planner = planner
        self.git = git
        self.composer = composer or PullRequestComposer(settings.linear_issue_url)

    @classmethod
    def from_settings(cls, settings: PipelineSettings) -> IssuePlanPipeline:
        """Build the pipeline and its providers from settings.

        Validates the configuration first, so nothing is constructed for an
        incomplete configuration. No network call is made here.
        """
        settings.validate_required()

        git: GitProvider | None = None
        if not settings.dry_run or (is_set(settings.github_token) and settings.repository is not None):
            git = create_git_provider(settings)

        return cls(
            settings=settings,
            tracker=create_issue_tracker(settings),
            planner=create_plan_provider(settings),
            git=git,
        )

    @property
    def issue_id(self) -> str:
        if self.settings.sample_issue:
            return SAMPLE_ISSUE.identifier
        return self.settings.linear_issue_id or ""

    async def run(self) -> PipelineResult:
        """Execute the pipeline.

        Returns:
            The run's result; ``outputs()`` gives the CI step outputs

        Raises:
            ConfigurationError: Missing input, before any external call
            IssueNotFoundError: The tracker has no such issue, before any VCS call
            ExternalServiceError: Tracker failure
            AgentError: Plan could not be produced
            GitOperationError: Source host failure
        """
        self.settings.validate_required()
        issue_id = self.issue_id
        structlog.contextvars.bind_contextvars(issue_id=issue_id)
        log.info("pipeline_started", plan_mode=str(self.settings.plan_mode), dry_run=self.settings.dry_run)

        try:
            issue = await self._fetch_issue(issue_id)
            if self.settings.dry_run:
                return await self._dry_run(issue_id, issue)
            return await self._run(issue_id, issue)
        finally:
            await self._disconnect()
            structlog.contextvars.unbind_contextvars("issue_id")

    async def _fetch_issue(self, issue_id: str) -> Issue:
        await self.tracker.connect()
        issue = await self.tracker.get_issue(issue_id)
        if issue is None:
            log.error("issue_not_found", issue_id=issue_id)
            raise IssueNotFoundError(issue_id)
        log.info("found_issue", title=issue.title)
        return issue

    async def _run(self, issue_id: str, issue: Issue) -> PipelineResult:
        git = self.git
        if git is None:
            raise ConfigurationError("A source host is required outside dry runs", field="github_token")

        branch_name = branch_name_for(issue_id)
        await git.connect()
        base = await git.get_default_branch()

        if self.settings.on_existing == ExistingPolicy.REUSE:
            existing = await git.find_pull_request(head=branch_name, base=base)
            if existing is not None:
                log.info("pull_request_already_exists", url=existing.url, branch=branch_name)
                return PipelineResult(
                    branch_name=branch_name,
                    plan="",
                    pull_request_url=existing.url,
                    reused=True,
                )

        plan = await self.planner.produce_plan(issue.title, issue.description)

        branch = await create_branch_for(git, issue_id, base=base, on_existing=self.settings.on_existing)
        spec = self.composer.compose(issue_id, issue.title, plan, branch.name, base)
        pull_request = await self.composer.submit(git, spec)

        log.info("pipeline_completed", pull_request_url=pull_request.url, branch=branch.name)
        return PipelineResult(
            branch_name=branch.name,
            plan=plan,
            pull_request_url=pull_request.url,
            pull_request=spec,
        )

    async def _dry_run(self, issue_id: str, issue: Issue) -> PipelineResult:
        """Produce and render everything, create nothing."""
        branch_name = branch_name_for(issue_id)
        base = DRY_RUN_FALLBACK_BASE
        if self.git is not None:
            await self.git.connect()
            base = await self.git.get_default_branch()

        plan = await self.planner.produce_plan(issue.title, issue.description)
        spec = self.composer.compose(issue_id, issue.title, plan, branch_name, base)

        log.info("dry_run_completed", branch=branch_name, base=base, title=spec.title)
        return PipelineResult(
            branch_name=branch_name,
            plan=plan,
            pull_request=spec,
            dry_run=True,
        )

    async def _disconnect(self) -> None:
        for provider in (self.tracker, self.planner, self.git):
            if provider is None:
                continue
            try:
                await provider.disconnect()
            except Exception as e:
                log.warning("provider_disconnect_failed", provider=type(provider).__name__, error=str(e))
