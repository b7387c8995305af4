"""GitHub source host implementation using PyGithub and the REST API."""

import asyncio
from collections.abc import Callable
from typing import TypeVar

import structlog
from github import Github, GithubException  # type: ignore[import-not-found]
from github.PullRequest import PullRequest as GHPullRequest  # type: ignore[import-not-found]
from github.Repository import Repository as GHRepository  # type: ignore[import-not-found]

from linear_to_pr.exceptions import GitOperationError
from linear_to_pr.models.domain import Branch, PullRequest
from linear_to_pr.providers.base import GitProvider

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def _run_sync(func: Callable[[], T]) -> T:
    """Run a synchronous function in a thread pool.

    This prevents blocking the event loop when calling synchronous
    PyGithub methods.
    """
    return await asyncio.to_thread(func)


class GitHubRestProvider(GitProvider):
    """GitHub implementation using PyGithub library."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        base_url: str = "https://api.github.com",
    ):
        """Initialize GitHub provider.

        Args:
            token: GitHub personal access token or Actions token
            owner: Repository owner (user or organization)
            repo: Repository name
            base_url: GitHub API base URL (for GitHub Enterprise)
        """
        self.token = token.strip() if token else token
        self.owner = owner
        self.repo = repo
        self.base_url = base_url.rstrip("/")
        self._client: Github | None = None
        self._repo: GHRepository | None = None

    @property
    def repository(self) -> GHRepository:
        if self._repo is None:
            raise GitOperationError("GitHub provider is not connected", operation="connect")
        return self._repo

    async def connect(self) -> None:
        """Initialize GitHub client and resolve the repository."""
        if self._repo is not None:
            return

        def _connect() -> tuple[Github, GHRepository]:
            client = Github(self.token, base_url=self.base_url)
            repo = client.get_repo(f"{self.owner}/{self.repo}")
            return client, repo

        try:
            self._client, self._repo = await _run_sync(_connect)
        except GithubException as e:
            log.error("github_connect_failed", owner=self.owner, repo=self.repo, error=str(e))
            raise self._wrap(e, "connect", f"Cannot access repository {self.owner}/{self.repo}") from e

        log.info("github_connected", base_url=self.base_url, owner=self.owner, repo=self.repo)

    async def disconnect(self) -> None:
        """Close GitHub client."""
        if self._client:
            await _run_sync(self._client.close)
            self._client = None
            self._repo = None

    async def get_default_branch(self) -> str:
        """Return the repository's default branch."""
        repo = self.repository
        try:
            default_branch = await _run_sync(lambda: repo.default_branch)
        except GithubException as e:
            log.error("github_default_branch_failed", error=str(e))
            raise self._wrap(e, "get_default_branch", "Failed to look up the default branch") from e

        if not default_branch:
            raise GitOperationError(
                f"Repository {self.owner}/{self.repo} has no default branch",
                operation="get_default_branch",
            )
        log.info("default_branch_resolved", branch=default_branch)
        return default_branch

    async def get_branch(self, branch_name: str) -> Branch | None:
        """Get branch information."""
        log.info("get_branch", branch=branch_name)
        repo = self.repository

        try:
            gh_ref = await _run_sync(lambda: repo.get_git_ref(f"heads/{branch_name}"))
        except GithubException as e:
            if e.status == 404:
                log.debug("github_branch_not_found", branch=branch_name)
                return None
            log.error("github_get_branch_failed", branch=branch_name, error=str(e))
            raise self._wrap(e, "get_branch", f"Failed to look up branch {branch_name}") from e

        return Branch(name=branch_name, sha=gh_ref.object.sha)

    async def create_branch(self, branch_name: str, from_branch: str) -> Branch:
        """Create a new branch at the tip of ``from_branch``."""
        log.info("create_branch", branch=branch_name, from_branch=from_branch)
        repo = self.repository

        try:
            source_ref = await _run_sync(lambda: repo.get_git_ref(f"heads/{from_branch}"))
            source_sha = source_ref.object.sha
        except GithubException as e:
            log.error("github_resolve_ref_failed", from_branch=from_branch, error=str(e))
            raise self._wrap(e, "get_ref", f"Failed to resolve heads/{from_branch}") from e

        try:
            await _run_sync(
                lambda: repo.create_git_ref(
                    ref=f"refs/heads/{branch_name}",
                    sha=source_sha,
                )
            )
        except GithubException as e:
            log.error(
                "github_create_branch_failed",
                branch=branch_name,
                from_branch=from_branch,
                error=str(e),
            )
            raise self._wrap(e, "create_branch", f"Failed to create branch {branch_name}") from e

        log.info("branch_created", branch=branch_name, sha=source_sha)
        return Branch(name=branch_name, sha=source_sha)

    async def find_pull_request(self, head: str, base: str) -> PullRequest | None:
        """Return the open pull request from ``head`` into ``base``, if any."""
        log.info("find_pull_request", head=head, base=base)
        repo = self.repository

        try:
            gh_pulls = await _run_sync(
                lambda: list(repo.get_pulls(state="open", head=f"{self.owner}:{head}", base=base))
            )
        except GithubException as e:
            log.error("github_list_prs_failed", head=head, base=base, error=str(e))
            raise self._wrap(e, "find_pull_request", "Failed to list pull requests") from e

        if not gh_pulls:
            return None
        return self._convert_pull_request(gh_pulls[0])

    async def create_pull_request(
        self,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> PullRequest:
        """Create a pull request."""
        log.info("create_pull_request", title=title, head=head, base=base)
        repo = self.repository

        try:
            gh_pr = await _run_sync(
                lambda: repo.create_pull(
                    title=title,
                    body=body,
                    head=head,
                    base=base,
                )
            )
        except GithubException as e:
            log.error("github_create_pr_failed", head=head, base=base, error=str(e))
            raise self._wrap(e, "create_pull_request", "Failed to create pull request") from e

        pull_request = self._convert_pull_request(gh_pr)
        log.info("pull_request_created", number=pull_request.number, url=pull_request.url)
        return pull_request

    @staticmethod
    def _wrap(error: GithubException, operation: str, message: str) -> GitOperationError:
        """Convert a PyGithub error into our error, keeping GitHub's own message."""
        detail = error.data.get("message") if isinstance(error.data, dict) else None
        if isinstance(error.data, dict) and error.data.get("errors"):
            extra = "; ".join(
                str(item.get("message", item)) if isinstance(item, dict) else str(item)
                for item in error.data["errors"]
            )
            detail = f"{detail}: {extra}" if detail else extra
        full_message = f"{message}: {detail}" if detail else f"{message}: {error}"
        return GitOperationError(full_message, operation=operation, status_code=error.status)

    def _convert_pull_request(self, gh_pr: GHPullRequest) -> PullRequest:
        """Convert GitHub PullRequest to our PullRequest model."""
        return PullRequest(
            number=gh_pr.number,
            title=gh_pr.title,
            url=gh_pr.html_url,
            head=gh_pr.head.ref,
            base=gh_pr.base.ref,
        )
