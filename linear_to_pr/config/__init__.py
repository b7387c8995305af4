"""Configuration for linear-to-pr.

Key Components:
    - PipelineSettings: All inputs of a run, read once at the entry point
    - CliToolConfig: Local assistant tool options (Mode B)

Example:
    >>> from linear_to_pr.config.settings import PipelineSettings
    >>> settings = PipelineSettings.load()
    >>> settings.validate_required()
"""
