"""Branch naming and creation for tracker issues."""

import re

import structlog

from linear_to_pr.enums import ExistingPolicy
from linear_to_pr.exceptions import GitOperationError
from linear_to_pr.models.domain import Branch
from linear_to_pr.providers.base import GitProvider

log = structlog.get_logger(__name__)

BRANCH_PREFIX = "linear-"

_UNSAFE_CHARS = re.compile(r"[^a-z0-9]")


def branch_name_for(issue_id: str) -> str:
    """Derive the branch name for an issue.

    Lowercases the identifier and replaces every character outside
    ``[a-z0-9]`` with ``-``, one for one.

    Example:
        >>> branch_name_for("ABC-123")
        'linear-abc-123'
    """
    return BRANCH_PREFIX + _UNSAFE_CHARS.sub("-", issue_id.lower())


async def create_branch_for(
    git: GitProvider,
    issue_id: str,
    *,
    base: str | None = None,
    on_existing: ExistingPolicy = ExistingPolicy.ERROR,
) -> Branch:
    """Create the issue's branch at the tip of the default branch.

    Args:
        git: Connected source host
        issue_id: Tracker identifier
        base: Default branch if already known; looked up otherwise
        on_existing: ERROR lets the source host reject a duplicate branch;
            REUSE returns the existing branch untouched

    Returns:
        The created (or reused) branch

    Raises:
        GitOperationError: If lookup, ref resolution or creation fails
    """
    branch_name = branch_name_for(issue_id)
    base = base or await git.get_default_branch()

    if on_existing == ExistingPolicy.REUSE:
        existing = await git.get_branch(branch_name)
        if existing is not None:
            log.info("reusing_existing_branch", branch=branch_name, sha=existing.sha)
            return existing

    try:
        return await git.create_branch(branch_name, from_branch=base)
    except GitOperationError as e:
        if e.operation == "create_branch" and e.status_code == 422:
            raise GitOperationError(
                f"Branch {branch_name} already exists: {e.message}",
                operation=e.operation,
                status_code=e.status_code,
            ) from e
        raise
