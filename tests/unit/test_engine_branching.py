"""Tests for linear_to_pr.engine.branching."""

import pytest

from linear_to_pr.engine.branching import BRANCH_PREFIX, branch_name_for, create_branch_for
from linear_to_pr.enums import ExistingPolicy
from linear_to_pr.exceptions import GitOperationError
from linear_to_pr.models.domain import Branch


class TestBranchNameFor:
    """Tests for the branch naming transform."""

    @pytest.mark.parametrize(
        "issue_id,expected",
        [
            ("ABC-123", "linear-abc-123"),
            ("abc-123", "linear-abc-123"),
            ("ENG_42", "linear-eng-42"),
            ("Team 7/Bug#1", "linear-team-7-bug-1"),
            ("x..y", "linear-x--y"),
            ("", "linear-"),
        ],
    )
    def test_transform(self, issue_id, expected):
        """Should lowercase and replace each non [a-z0-9] char with a dash."""
        assert branch_name_for(issue_id) == expected

    def test_non_ascii_characters_replaced_one_for_one(self):
        """Each non-ASCII character should become exactly one dash."""
        assert branch_name_for("ÄBC-1") == "linear--bc-1"

    def test_is_idempotent(self):
        """Same input should give the same output on every call."""
        assert branch_name_for("ABC-123") == branch_name_for("ABC-123")

    def test_always_prefixed(self):
        """Result should always start with the prefix."""
        assert branch_name_for("FOO-9").startswith(BRANCH_PREFIX)


class TestCreateBranchFor:
    """Tests for create_branch_for."""

    @pytest.mark.asyncio
    async def test_creates_branch_from_default_branch(self, mock_git):
        """Should look up the default branch and branch from its tip."""
        branch = await create_branch_for(mock_git, "ABC-123")

        assert branch == Branch(name="linear-abc-123", sha="deadbeef")
        mock_git.get_default_branch.assert_awaited_once()
        mock_git.create_branch.assert_awaited_once_with("linear-abc-123", from_branch="main")

    @pytest.mark.asyncio
    async def test_uses_known_base(self, mock_git):
        """Should not look up the default branch when it is given."""
        await create_branch_for(mock_git, "ABC-123", base="develop")

        mock_git.get_default_branch.assert_not_awaited()
        mock_git.create_branch.assert_awaited_once_with("linear-abc-123", from_branch="develop")

    @pytest.mark.asyncio
    async def test_existing_branch_is_error_by_default(self, mock_git):
        """A 422 from branch creation should surface as an already-exists error."""
        mock_git.create_branch.side_effect = GitOperationError(
            "Failed to create branch linear-abc-123: Reference already exists",
            operation="create_branch",
            status_code=422,
        )

        with pytest.raises(GitOperationError, match="Branch linear-abc-123 already exists") as exc_info:
            await create_branch_for(mock_git, "ABC-123")

        assert exc_info.value.status_code == 422
        mock_git.get_branch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ref_resolution_failure_propagates(self, mock_git):
        """Errors from other operations should propagate unchanged."""
        error = GitOperationError("Failed to resolve heads/main: Not Found", operation="get_ref", status_code=404)
        mock_git.create_branch.side_effect = error

        with pytest.raises(GitOperationError) as exc_info:
            await create_branch_for(mock_git, "ABC-123")

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_default_branch_failure_propagates(self, mock_git):
        """A failed default-branch lookup should stop before any creation."""
        mock_git.get_default_branch.side_effect = GitOperationError("boom", operation="get_default_branch")

        with pytest.raises(GitOperationError):
            await create_branch_for(mock_git, "ABC-123")

        mock_git.create_branch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reuse_returns_existing_branch(self, mock_git):
        """With reuse, an existing branch should be returned untouched."""
        mock_git.get_branch.return_value = Branch(name="linear-abc-123", sha="cafebabe")

        branch = await create_branch_for(mock_git, "ABC-123", on_existing=ExistingPolicy.REUSE)

        assert branch.sha == "cafebabe"
        mock_git.create_branch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reuse_creates_missing_branch(self, mock_git):
        """With reuse and no existing branch, the branch should be created."""
        branch = await create_branch_for(mock_git, "ABC-123", on_existing=ExistingPolicy.REUSE)

        assert branch.sha == "deadbeef"
        mock_git.get_branch.assert_awaited_once_with("linear-abc-123")
