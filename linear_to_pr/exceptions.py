"""Custom exception hierarchy for linear-to-pr.

Every fatal condition of a run is raised as one of these exceptions and
surfaces as the single failure message of the CI step. The pipeline itself
never catches them; only the CLI entry point does.

Exception Hierarchy:
    LinearToPrError (base)
    ├── ConfigurationError
    ├── IssueNotFoundError
    ├── ExternalServiceError
    ├── GitOperationError
    ├── TemplateError
    └── AgentError
        └── AgentUnavailableError

Example Usage:
    >>> from linear_to_pr.exceptions import ConfigurationError
    >>> if not settings.github_token:
    ...     raise ConfigurationError("Missing required configuration: github_token")
"""


class LinearToPrError(Exception):
    """Base exception for all linear-to-pr errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(LinearToPrError):
    """A required input is missing or a configuration value is invalid.

    Raised before any external service is contacted.

    Attributes:
        field: Name of the offending settings field, when known
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class IssueNotFoundError(LinearToPrError):
    """The tracker returned no issue for the requested identifier."""

    def __init__(self, issue_id: str) -> None:
        self.issue_id = issue_id
        super().__init__(f"Issue {issue_id} not found")


class ExternalServiceError(LinearToPrError):
    """Communication with the issue tracker failed.

    Attributes:
        status_code: HTTP status code (if applicable)
        response_text: Response body text (if applicable)
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_text: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response_text: Response body text (if applicable)
        """
        self.status_code = status_code
        self.response_text = response_text

        full_message = message
        if status_code:
            full_message = f"{message} (HTTP {status_code})"

        super().__init__(full_message)
        self.message = full_message


class GitOperationError(LinearToPrError):
    """A source host operation failed.

    Covers default-branch lookup, ref resolution, branch creation and
    pull-request creation, including "already exists" conflicts.

    Attributes:
        operation: Short name of the failed operation (e.g. "create_branch")
        status_code: HTTP status reported by the source host, if any
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        super().__init__(message)


class TemplateError(LinearToPrError):
    """Rendering a prompt or pull-request template failed."""

    pass


class AgentError(LinearToPrError):
    """The assistant could not produce a plan.

    Attributes:
        message: Human-readable error description
        agent_type: Which assistant failed (e.g. "claude-api", "claude-cli")
    """

    def __init__(self, message: str, agent_type: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            agent_type: Type of assistant that failed
        """
        self.agent_type = agent_type

        full_message = message
        if agent_type:
            full_message = f"{message} (agent: {agent_type})"

        super().__init__(full_message)
        # Preserve original message
        self.message = message


class AgentUnavailableError(AgentError):
    """Every entry of the local tool fallback chain failed.

    Attributes:
        attempts: Names of the command forms that were tried, in order
        last_error: The failure raised by the final attempt
    """

    def __init__(
        self,
        attempts: list[str],
        last_error: BaseException | None,
        agent_type: str | None = "claude-cli",
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error

        if last_error is None:
            message = "No local assistant command forms were configured"
        else:
            message = (
                f"Local assistant unavailable after {len(attempts)} attempt(s) "
                f"({', '.join(attempts)}); last error: {last_error}"
            )
        super().__init__(message, agent_type=agent_type)
