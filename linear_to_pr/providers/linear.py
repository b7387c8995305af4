"""Linear issue tracker using the GraphQL API over httpx."""

from typing import Any

import httpx
import structlog

from linear_to_pr.exceptions import ExternalServiceError
from linear_to_pr.models.domain import Issue
from linear_to_pr.providers.base import IssueTracker

log = structlog.get_logger(__name__)

ISSUE_QUERY = """
query IssueForPlan($id: String!) {
  issue(id: $id) {
    id
    identifier
    title
    description
    url
  }
}
"""


class LinearProvider(IssueTracker):
    """Fetches issues from Linear."""

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.linear.app/graphql",
        timeout: float = 30.0,
    ):
        """Initialize Linear provider.

        Args:
            api_key: Linear personal API key (sent as-is in Authorization)
            api_url: GraphQL endpoint
            timeout: Request timeout in seconds
        """
        self.api_url = api_url
        self.timeout = timeout
        self.client = httpx.AsyncClient(
            timeout=timeout,
            headers={
                "Authorization": api_key.strip(),
                "Content-Type": "application/json",
            },
        )

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def get_issue(self, issue_id: str) -> Issue | None:
        """Fetch an issue by identifier (e.g. "ABC-123") or UUID."""
        log.info("fetching_issue", issue_id=issue_id)

        try:
            response = await self.client.post(
                self.api_url,
                json={"query": ISSUE_QUERY, "variables": {"id": issue_id}},
            )
        except httpx.HTTPError as e:
            log.error("linear_request_failed", issue_id=issue_id, error=str(e))
            raise ExternalServiceError(f"Linear request failed: {e}") from e

        payload = self._parse_payload(response)
        errors = payload.get("errors") or []

        if errors:
            if any(self._is_not_found(error) for error in errors):
                log.info("issue_not_found", issue_id=issue_id)
                return None
            messages = "; ".join(str(error.get("message", error)) for error in errors)
            log.error("linear_graphql_error", issue_id=issue_id, errors=messages)
            raise ExternalServiceError(
                f"Linear API error: {messages}",
                status_code=response.status_code if response.is_error else None,
                response_text=response.text,
            )

        if response.is_error:
            log.error("linear_http_error", issue_id=issue_id, status=response.status_code)
            raise ExternalServiceError(
                "Linear API request failed",
                status_code=response.status_code,
                response_text=response.text,
            )

        node = (payload.get("data") or {}).get("issue")
        if node is None:
            log.info("issue_not_found", issue_id=issue_id)
            return None

        issue = self._parse_issue(node, issue_id)
        log.info("issue_found", issue_id=issue.identifier, title=issue.title)
        return issue

    @staticmethod
    def _parse_payload(response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            if response.is_error:
                raise ExternalServiceError(
                    "Linear API request failed",
                    status_code=response.status_code,
                    response_text=response.text,
                ) from None
            raise ExternalServiceError("Linear API returned a non-JSON response") from None
        if not isinstance(payload, dict):
            raise ExternalServiceError("Linear API returned an unexpected payload")
        return payload

    @staticmethod
    def _is_not_found(error: dict[str, Any]) -> bool:
        message = str(error.get("message", "")).lower()
        extensions = error.get("extensions") or {}
        presentable = str(extensions.get("userPresentableMessage", "")).lower()
        return "not found" in message or "could not find" in presentable

    @staticmethod
    def _parse_issue(node: dict[str, Any], requested_id: str) -> Issue:
        """Convert a Linear issue node to our Issue model."""
        return Issue(
            identifier=node.get("identifier") or requested_id,
            title=node.get("title") or "",
            description=node.get("description") or "",
            url=node.get("url"),
        )
