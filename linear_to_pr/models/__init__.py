"""Core domain models for linear-to-pr.

Key Models:
    - Issue: Tracker issue (identifier, title, description)
    - Branch: Source host branch
    - PullRequest: Source host pull request
    - PullRequestSpec: Pull request about to be submitted
    - PipelineResult: Outputs of a run

Example:
    >>> from linear_to_pr.models.domain import Issue
    >>> issue = Issue(identifier="ABC-123", title="Add feature X")
"""
