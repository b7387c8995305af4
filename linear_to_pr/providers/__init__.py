"""Provider implementations for the tracker, source host and assistant.

Key Components:
    - IssueTracker / GitProvider / PlanProvider: Abstract bases
    - LinearProvider: Linear GraphQL API (httpx)
    - GitHubRestProvider: GitHub REST API (PyGithub)
    - ClaudeApiPlanProvider: Hosted Anthropic Messages API (Mode A)
    - ClaudeCliPlanProvider: Local Claude Code CLI fallback chain (Mode B)
    - SampleIssueTracker / MockPlanProvider: Dry-run stand-ins

Example:
    >>> from linear_to_pr.providers.factory import create_plan_provider
    >>> planner = create_plan_provider(settings)
    >>> plan = await planner.produce_plan(issue.title, issue.description)
"""

from linear_to_pr.providers.base import GitProvider, IssueTracker, PlanProvider

__all__ = [
    "GitProvider",
    "IssueTracker",
    "PlanProvider",
]
