"""
Settings Tests
--------------
Tests cover:
- Defaults
- YAML loading
- Environment overrides
- Validation of bad values
"""

import pytest
from pydantic import ValidationError

from infra.config import DuplicatePolicy, FunctionSettings, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in FunctionSettings.model_fields:
        monkeypatch.delenv(f"SIDEKICK_{name.upper()}", raising=False)


class TestLoadSettings:
    """Tests for load_settings()."""

    def test_defaults(self):
        settings = load_settings()

        assert settings.use_functions is True
        assert settings.authorization_timeout_seconds is None
        assert settings.duplicate_policy == DuplicatePolicy.REJECT

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "functions.yaml"
        path.write_text(
            "assistant_name: Helper\n"
            "authorization_timeout_seconds: 30\n"
            "duplicate_policy: replace\n"
        )
        settings = load_settings(path)

        assert settings.assistant_name == "Helper"
        assert settings.authorization_timeout_seconds == 30.0
        assert settings.duplicate_policy == DuplicatePolicy.REPLACE

    def test_empty_yaml_file(self, tmp_path):
        path = tmp_path / "functions.yaml"
        path.write_text("")

        assert load_settings(path) == FunctionSettings()

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_settings(tmp_path / "absent.yaml") == FunctionSettings()

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "functions.yaml"
        path.write_text("use_functions: true\nassistant_name: Helper\n")
        monkeypatch.setenv("SIDEKICK_USE_FUNCTIONS", "false")
        monkeypatch.setenv("SIDEKICK_AUTHORIZATION_TIMEOUT_SECONDS", "2.5")

        settings = load_settings(path)

        assert settings.use_functions is False
        assert settings.assistant_name == "Helper"
        assert settings.authorization_timeout_seconds == 2.5

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ValidationError):
            FunctionSettings(authorization_timeout_seconds=0)

    def test_unknown_policy_rejected(self, tmp_path):
        path = tmp_path / "functions.yaml"
        path.write_text("duplicate_policy: merge\n")

        with pytest.raises(ValidationError):
            load_settings(path)
