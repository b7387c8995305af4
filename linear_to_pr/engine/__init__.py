"""Pipeline engine.

Key Components:
    - branch_name_for / create_branch_for: Deterministic branch naming and creation
    - PullRequestComposer: Renders and submits the pull request
    - IssuePlanPipeline: Sequences the whole run
"""
