"""
Abstract base classes for providers.

Three collaborators are consumed by the pipeline: an issue tracker, a source
host, and a plan provider (the assistant). Each is pluggable so tests and
dry runs can substitute their own implementations.
"""

from abc import ABC, abstractmethod

from linear_to_pr.models.domain import Branch, Issue, PullRequest


class IssueTracker(ABC):
    """Abstract base class for issue trackers (Linear)."""

    async def connect(self) -> None:
        """Prepare the client. No network call is required."""
        pass

    async def disconnect(self) -> None:
        """Release client resources."""
        pass

    @abstractmethod
    async def get_issue(self, issue_id: str) -> Issue | None:
        """Fetch an issue by its identifier.

        Args:
            issue_id: Tracker identifier, e.g. "ABC-123"

        Returns:
            The issue, or None when the tracker has no such issue.

        Raises:
            ExternalServiceError: If the tracker request itself fails.
        """
        pass


class GitProvider(ABC):
    """Abstract base class for source host implementations.

    Implementations raise GitOperationError for every failed call, including
    "already exists" conflicts.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the client and resolve the repository."""
        pass

    async def disconnect(self) -> None:
        """Release client resources."""
        pass

    @abstractmethod
    async def get_default_branch(self) -> str:
        """Return the repository's configured default branch name."""
        pass

    @abstractmethod
    async def get_branch(self, branch_name: str) -> Branch | None:
        """Get a branch, or None when it does not exist."""
        pass

    @abstractmethod
    async def create_branch(self, branch_name: str, from_branch: str) -> Branch:
        """Create ``branch_name`` at the commit ``from_branch`` points to.

        Resolves ``heads/<from_branch>`` to a sha and creates the
        ``refs/heads/<branch_name>`` reference there.
        """
        pass

    @abstractmethod
    async def find_pull_request(self, head: str, base: str) -> PullRequest | None:
        """Return the open pull request for head/base, if any."""
        pass

    @abstractmethod
    async def create_pull_request(
        self,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> PullRequest:
        """Open a pull request. Fails if one already exists for head/base."""
        pass


class PlanProvider(ABC):
    """Abstract base class for assistants that turn issue text into a plan."""

    agent_type: str = "unknown"

    async def connect(self) -> None:
        """Prepare the assistant. Optional."""
        pass

    async def disconnect(self) -> None:
        """Release assistant resources."""
        pass

    @abstractmethod
    async def produce_plan(self, issue_title: str, issue_description: str) -> str:
        """Produce a natural-language implementation plan.

        Args:
            issue_title: Issue title, embedded verbatim in the prompt
            issue_description: Issue description, embedded verbatim in the prompt

        Returns:
            Plan text, free-form Markdown

        Raises:
            AgentError: If every acquisition strategy failed
        """
        pass
