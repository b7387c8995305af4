"""
Configuration system using Pydantic for type-safe settings management.

All configuration is read once at the entry point into a single
``PipelineSettings`` instance which is then passed explicitly to every
component. Nothing below the CLI reads the process environment.

Values come from, in order of precedence: explicit keyword overrides (CLI
flags), an optional YAML file, environment variables, a ``.env`` file.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from linear_to_pr.enums import DEFAULT_CHAIN, CommandForm, ExistingPolicy, PlanMode, PromptStyle
from linear_to_pr.exceptions import ConfigurationError

DEFAULT_MODEL = "claude-3-opus-20240229"
DEFAULT_MAX_TOKENS = 2000
DEFAULT_DIRECTIVE = "think deeply about this implementation"
DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024


class CliToolConfig(BaseModel):
    """Local assistant tool configuration (Mode B)."""

    tool: str = Field(default="claude", min_length=1, description="Executable name of the assistant CLI")
    directive: str = Field(default=DEFAULT_DIRECTIVE, description="Natural-language directive passed with -p")
    chain: list[CommandForm] = Field(
        default_factory=lambda: list(DEFAULT_CHAIN),
        description="Command forms to try, most likely to succeed first",
    )
    prompt_style: PromptStyle = Field(default=PromptStyle.DETAILED, description="Prompt template")
    max_output_bytes: int = Field(
        default=DEFAULT_MAX_OUTPUT_BYTES,
        ge=1,
        description="Captured stdout above this size fails the attempt",
    )
    project_command: str = Field(
        default="analyze-issue",
        description="Custom slash command used by the project-command form",
    )

    @field_validator("chain", mode="before")
    @classmethod
    def split_chain(cls, value: Any) -> Any:
        """Accept ``"file-arg, bare"`` as well as a list."""
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value


class PipelineSettings(BaseSettings):
    """Settings for one run of the pipeline.

    Environment variable names are the upper-cased field names (or the listed
    aliases). Nested ``cli`` values use a double underscore, e.g. ``CLI__TOOL``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Tracker
    linear_api_key: SecretStr | None = Field(default=None, description="Linear API key")
    linear_issue_id: str | None = Field(default=None, description="Linear issue identifier, e.g. ABC-123")
    linear_api_url: str = Field(default="https://api.linear.app/graphql")
    linear_issue_url: str = Field(default="https://linear.app/issue", description="Prefix for issue links")

    # Source host
    github_token: SecretStr | None = Field(default=None, description="GitHub access token")
    github_api_url: str = Field(default="https://api.github.com")
    github_repository: str | None = Field(default=None, description="owner/name, as set by GitHub Actions")
    repo_owner: str | None = Field(default=None, description="Overrides the owner part of github_repository")
    repo_name: str | None = Field(default=None, description="Overrides the name part of github_repository")

    # Assistant
    plan_mode: PlanMode = Field(default=PlanMode.API)
    claude_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("claude_api_key", "anthropic_api_key"),
        description="Anthropic API key (Mode A only)",
    )
    claude_model: str = Field(default=DEFAULT_MODEL, description="Model used in Mode A")
    claude_max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=1, description="Output token budget in Mode A")
    cli: CliToolConfig = Field(default_factory=CliToolConfig)

    # Behaviour
    on_existing: ExistingPolicy = Field(default=ExistingPolicy.ERROR)
    dry_run: bool = Field(default=False, description="Produce the plan but create no branch or pull request")
    sample_issue: bool = Field(default=False, description="Dry runs only: use the built-in example issue")

    @property
    def repository(self) -> tuple[str, str] | None:
        """Resolve (owner, name) from the explicit fields or github_repository."""
        owner = self.repo_owner
        name = self.repo_name
        if self.github_repository and "/" in self.github_repository:
            default_owner, default_name = self.github_repository.split("/", 1)
            owner = owner or default_owner
            name = name or default_name
        if owner and name:
            return owner, name
        return None

    def validate_required(self) -> None:
        """Check that every input needed for this run is present and non-empty.

        Checks run in a fixed order and the first missing value is reported.

        Raises:
            ConfigurationError: Naming the first missing field
        """
        if self.sample_issue and not self.dry_run:
            raise ConfigurationError("sample_issue can only be used together with dry_run", field="sample_issue")

        checks: list[tuple[str, str, bool]] = []
        if not self.sample_issue:
            checks.append(("linear_api_key", "LINEAR_API_KEY", is_set(self.linear_api_key)))
            checks.append(("linear_issue_id", "LINEAR_ISSUE_ID", is_set(self.linear_issue_id)))
        if not self.dry_run:
            checks.append(("github_token", "GITHUB_TOKEN", is_set(self.github_token)))
            checks.append(("repository", "GITHUB_REPOSITORY", self.repository is not None))
        if self.plan_mode == PlanMode.API:
            checks.append(("claude_api_key", "CLAUDE_API_KEY", is_set(self.claude_api_key)))

        for field, env_var, present in checks:
            if not present:
                raise ConfigurationError(
                    f"Missing required configuration: {field} (set {env_var})",
                    field=field,
                )

    @classmethod
    def load(cls, config_path: str | None = None, **overrides: Any) -> PipelineSettings:
        """Build settings from the environment, an optional YAML file, and overrides.

        Args:
            config_path: Optional YAML configuration file
            **overrides: Field values that take precedence (``None`` values are ignored)

        Raises:
            ConfigurationError: If the file or any value is invalid
        """
        overrides = {key: value for key, value in overrides.items() if value is not None}
        if config_path:
            return cls.from_yaml(config_path, **overrides)
        try:
            return cls(**overrides)
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @classmethod
    def from_yaml(cls, config_path: str, **overrides: Any) -> PipelineSettings:
        """Load settings from YAML file with environment variable interpolation.

        Supports ${VAR_NAME} syntax for environment variable substitution.

        Args:
            config_path: Path to YAML configuration file
            **overrides: Field values that take precedence over the file

        Returns:
            PipelineSettings instance

        Raises:
            ConfigurationError: If config file is invalid or contains invalid fields
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file) as f:
                yaml_content = f.read()
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**{**config_dict, **overrides})
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Interpolate ${VAR_NAME} placeholders with environment variables.

        Supports ``${VAR_NAME}`` (required) and ``${VAR_NAME:-default}``.
        YAML comment lines are left unchanged.

        Raises:
            ValueError: If a required environment variable is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            elif default_value is not None:
                return default_value
            else:
                raise ValueError(f"Environment variable {var_name} is not set")

        def process_line(line: str) -> str:
            if line.lstrip().startswith("#"):
                return line
            return pattern.sub(replace_var, line)

        return "\n".join(process_line(line) for line in content.split("\n"))


def is_set(value: SecretStr | str | None) -> bool:
    if value is None:
        return False
    if isinstance(value, SecretStr):
        value = value.get_secret_value()
    return bool(value.strip())
