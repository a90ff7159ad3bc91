"""Tests for propcare.config"""

import pytest

from propcare.config import PropCareConfig, _load_config, load_config

MINIMAL = {"llm": {"provider": "openai", "model": "gpt-4o-mini"}}


class TestLoadConfigFile:

    def test_env_substitution(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TEST_LLM_KEY", "sk-secret")
        path = tmp_path / "config.yaml"
        path.write_text("llm:\n  provider: openai\n  model: gpt-4o-mini\n  api_key: ${TEST_LLM_KEY}\n")

        data = _load_config(str(path))

        assert data["llm"]["api_key"] == "sk-secret"

    def test_missing_variable(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TEST_UNSET_VAR", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("database: ${TEST_UNSET_VAR}\n")

        with pytest.raises(ValueError, match="TEST_UNSET_VAR"):
            _load_config(str(path))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert _load_config(str(path)) == {}

    def test_load_config_from_env_path(self, tmp_path, monkeypatch):
        path = tmp_path / "propcare.yaml"
        path.write_text("llm:\n  provider: anthropic\n  model: claude-sonnet-4-5\n")
        monkeypatch.setenv("PROPCARE_CONFIG", str(path))

        config = load_config()

        assert config.llm.provider == "anthropic"
        assert config.database is None


class TestFromDict:

    def test_requires_llm_fields(self):
        with pytest.raises(ValueError, match="llm.provider"):
            PropCareConfig.from_dict({"llm": {"provider": "openai"}})

    def test_defaults(self):
        config = PropCareConfig.from_dict(MINIMAL)
        assert config.llm.timeout == 60.0
        assert config.notifications.provider == ""
        assert config.notifications.admin_phone is None
        assert config.orchestrator.country_code == "44"
        assert config.orchestrator.max_handoff_depth == 3

    def test_notification_options(self):
        config = PropCareConfig.from_dict({
            **MINIMAL,
            "notifications": {
                "provider": "twilio",
                "account_sid": "AC1",
                "auth_token": "tok",
                "admin_phone": 447700900999,
            },
        })
        assert config.notifications.provider == "twilio"
        assert config.notifications.admin_phone == "447700900999"
        assert config.notifications.options == {"account_sid": "AC1", "auth_token": "tok"}

    def test_orchestrator_values_coerced(self):
        config = PropCareConfig.from_dict({
            **MINIMAL,
            "orchestrator": {"country_code": 1, "history_limit": "10", "max_tool_iterations": 2},
        })
        assert config.orchestrator.country_code == "1"
        assert config.orchestrator.history_limit == 10
        assert config.orchestrator.max_tool_iterations == 2

    def test_blank_database_means_memory(self):
        assert PropCareConfig.from_dict({**MINIMAL, "database": ""}).database is None
