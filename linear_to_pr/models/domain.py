"""
Domain models for linear-to-pr.

These dataclasses are the normalized internal representation of everything a
run touches. Provider-specific payloads (Linear GraphQL nodes, PyGithub
objects) are converted into them at the provider boundary.

All models are transient: they are created during a single run and never
persisted.

Example:
    Building the pull request for an issue::

        issue = Issue(identifier="ABC-123", title="Add user authentication feature")
        spec = PullRequestSpec(
            title="[Linear ABC-123] Add user authentication feature",
            body="...",
            head="linear-abc-123",
            base="main",
        )
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Issue:
    """An issue fetched from the tracker.

    Example:
        Converting from a Linear GraphQL node::

            issue = Issue(
                identifier=node["identifier"],
                title=node["title"],
                description=node.get("description") or "",
                url=node.get("url"),
            )
    """

    identifier: str
    """Human-readable tracker identifier (e.g. ``ABC-123``)."""

    title: str

    description: str = ""
    """Issue body in Markdown. Missing descriptions are normalized to ``""``."""

    url: str | None = None


@dataclass(frozen=True)
class Branch:
    """A branch on the source host."""

    name: str
    sha: str
    """Commit the branch points at."""


@dataclass(frozen=True)
class PullRequest:
    """A pull request on the source host."""

    number: int
    title: str
    url: str
    """Browser URL (``html_url``) of the pull request."""

    head: str
    base: str


@dataclass(frozen=True)
class PullRequestSpec:
    """Everything needed to open a pull request. Submitted exactly once."""

    title: str
    body: str
    head: str
    base: str


@dataclass
class PipelineResult:
    """Outcome of one run of the pipeline."""

    branch_name: str
    plan: str
    pull_request_url: str | None = None
    """``None`` for dry runs."""

    pull_request: PullRequestSpec | None = None
    """The pull request that was (or in a dry run would have been) submitted."""

    dry_run: bool = False
    reused: bool = False
    """True when an existing pull request was returned instead of a new one."""

    def outputs(self) -> dict[str, str]:
        """Step outputs in the form expected by CI."""
        return {
            "pull_request_url": self.pull_request_url or "",
            "branch_name": self.branch_name,
        }
