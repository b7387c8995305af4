"""Tests for linear_to_pr.config.settings."""

import pytest

from linear_to_pr.config.settings import (
    DEFAULT_MAX_OUTPUT_BYTES,
    DEFAULT_MODEL,
    CliToolConfig,
    PipelineSettings,
)
from linear_to_pr.enums import DEFAULT_CHAIN, CommandForm, ExistingPolicy, PlanMode, PromptStyle
from linear_to_pr.exceptions import ConfigurationError


class TestDefaults:
    """Tests for default values."""

    def test_pipeline_defaults(self):
        settings = PipelineSettings()

        assert settings.plan_mode == PlanMode.API
        assert settings.claude_model == DEFAULT_MODEL
        assert settings.claude_max_tokens == 2000
        assert settings.on_existing == ExistingPolicy.ERROR
        assert settings.dry_run is False
        assert settings.linear_api_url == "https://api.linear.app/graphql"

    def test_cli_defaults(self):
        cli = CliToolConfig()

        assert cli.tool == "claude"
        assert cli.directive == "think deeply about this implementation"
        assert tuple(cli.chain) == DEFAULT_CHAIN
        assert cli.prompt_style == PromptStyle.DETAILED
        assert cli.max_output_bytes == DEFAULT_MAX_OUTPUT_BYTES == 10 * 1024 * 1024

    def test_chain_from_comma_string(self):
        cli = CliToolConfig(chain="bare, file-arg")

        assert cli.chain == [CommandForm.BARE, CommandForm.FILE_ARG]

    def test_invalid_chain_entry(self):
        with pytest.raises(ValueError):
            CliToolConfig(chain=["file-arg", "telepathy"])


class TestEnvironment:
    """Tests for reading the process environment."""

    def test_reads_action_variables(self, monkeypatch):
        monkeypatch.setenv("LINEAR_API_KEY", "lin_api_env")
        monkeypatch.setenv("LINEAR_ISSUE_ID", "ENG-9")
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")
        monkeypatch.setenv("GITHUB_REPOSITORY", "acme/widgets")
        monkeypatch.setenv("CLAUDE_API_KEY", "sk-ant-env")

        settings = PipelineSettings()

        assert settings.linear_api_key.get_secret_value() == "lin_api_env"
        assert settings.linear_issue_id == "ENG-9"
        assert settings.github_token.get_secret_value() == "ghp_env"
        assert settings.repository == ("acme", "widgets")
        assert settings.claude_api_key.get_secret_value() == "sk-ant-env"
        settings.validate_required()

    def test_anthropic_api_key_alias(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-alias")

        assert PipelineSettings().claude_api_key.get_secret_value() == "sk-ant-alias"

    def test_model_settings_use_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("MODEL", "gpt-4")
        monkeypatch.setenv("MAX_TOKENS", "5")

        settings = PipelineSettings()
        assert settings.claude_model == DEFAULT_MODEL
        assert settings.claude_max_tokens == 2000

        monkeypatch.setenv("CLAUDE_MODEL", "claude-3-5-sonnet-20241022")
        monkeypatch.setenv("CLAUDE_MAX_TOKENS", "4096")

        settings = PipelineSettings()
        assert settings.claude_model == "claude-3-5-sonnet-20241022"
        assert settings.claude_max_tokens == 4096

    def test_nested_cli_settings(self, monkeypatch):
        monkeypatch.setenv("PLAN_MODE", "cli")
        monkeypatch.setenv("CLI__TOOL", "claude-nightly")
        monkeypatch.setenv("CLI__CHAIN", '["directive-stdin", "bare"]')

        settings = PipelineSettings()

        assert settings.plan_mode == PlanMode.CLI
        assert settings.cli.tool == "claude-nightly"
        assert settings.cli.chain == [CommandForm.DIRECTIVE_STDIN, CommandForm.BARE]

    def test_secrets_hidden_in_repr(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_very_secret")

        assert "ghp_very_secret" not in repr(PipelineSettings())

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("LINEAR_ISSUE_ID", "ENG-1")

        settings = PipelineSettings.load(linear_issue_id="ENG-2", plan_mode=None)

        assert settings.linear_issue_id == "ENG-2"
        assert settings.plan_mode == PlanMode.API


class TestRepository:
    """Tests for owner/name resolution."""

    def test_from_github_repository(self):
        assert PipelineSettings(github_repository="acme/widgets").repository == ("acme", "widgets")

    def test_explicit_fields_override(self):
        settings = PipelineSettings(github_repository="acme/widgets", repo_name="gadgets")

        assert settings.repository == ("acme", "gadgets")

    def test_missing(self):
        assert PipelineSettings(github_repository="no-slash").repository is None


class TestValidateRequired:
    """Tests for required-value validation."""

    def test_complete(self, settings):
        settings.validate_required()

    @pytest.mark.parametrize(
        "field,value",
        [
            ("linear_api_key", None),
            ("linear_issue_id", None),
            ("linear_issue_id", "   "),
            ("github_token", None),
            ("github_token", ""),
            ("claude_api_key", None),
        ],
    )
    def test_missing_field_named(self, settings, field, value):
        setattr(settings, field, value)

        with pytest.raises(ConfigurationError) as exc_info:
            settings.validate_required()

        assert exc_info.value.field == field
        assert field in exc_info.value.message

    def test_first_missing_reported(self, settings):
        """Checks run in a fixed order and only the first gap is named."""
        settings.github_token = None
        settings.linear_api_key = None

        with pytest.raises(ConfigurationError) as exc_info:
            settings.validate_required()

        assert exc_info.value.field == "linear_api_key"

    def test_missing_repository(self, settings):
        settings.github_repository = None

        with pytest.raises(ConfigurationError, match="GITHUB_REPOSITORY"):
            settings.validate_required()

    def test_cli_mode_needs_no_api_key(self, settings):
        settings.plan_mode = PlanMode.CLI
        settings.claude_api_key = None

        settings.validate_required()

    def test_dry_run_needs_no_github(self, settings):
        settings.dry_run = True
        settings.github_token = None

        settings.validate_required()

    def test_sample_issue_needs_dry_run(self):
        with pytest.raises(ConfigurationError) as exc_info:
            PipelineSettings(sample_issue=True).validate_required()

        assert exc_info.value.field == "sample_issue"

    def test_sample_issue_dry_run_needs_no_linear(self):
        PipelineSettings(sample_issue=True, dry_run=True, plan_mode=PlanMode.CLI).validate_required()


class TestFromYaml:
    """Tests for YAML loading."""

    def test_load_with_interpolation(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MY_LINEAR_KEY", "lin_api_yaml")
        config = tmp_path / "config.yaml"
        config.write_text(
            "# ${NOT_INTERPOLATED}\n"
            "linear_api_key: ${MY_LINEAR_KEY}\n"
            "linear_issue_id: ${ISSUE:-ABC-1}\n"
            "plan_mode: cli\n"
            "on_existing: reuse\n"
            "cli:\n"
            "  tool: claude\n"
            "  chain: file-arg, project-command\n"
            "  project_command: plan-issue\n"
        )

        settings = PipelineSettings.from_yaml(str(config))

        assert settings.linear_api_key.get_secret_value() == "lin_api_yaml"
        assert settings.linear_issue_id == "ABC-1"
        assert settings.on_existing == ExistingPolicy.REUSE
        assert settings.cli.chain == [CommandForm.FILE_ARG, CommandForm.PROJECT_COMMAND]
        assert settings.cli.project_command == "plan-issue"

    def test_overrides_beat_file(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("linear_issue_id: ABC-1\n")

        settings = PipelineSettings.load(str(config), linear_issue_id="ABC-2")

        assert settings.linear_issue_id == "ABC-2"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            PipelineSettings.from_yaml(str(tmp_path / "nope.yaml"))

    def test_unset_variable(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("linear_api_key: ${DEFINITELY_NOT_SET_VAR}\n")

        with pytest.raises(ConfigurationError, match="DEFINITELY_NOT_SET_VAR"):
            PipelineSettings.from_yaml(str(config))

    def test_invalid_yaml(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("linear_api_key: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            PipelineSettings.from_yaml(str(config))

    def test_not_a_mapping(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError, match="YAML object"):
            PipelineSettings.from_yaml(str(config))

    def test_invalid_value(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("plan_mode: telepathy\n")

        with pytest.raises(ConfigurationError, match="Failed to validate"):
            PipelineSettings.from_yaml(str(config))
