"""
Tests for configuration loading.
"""

import json
import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from domorest.config import (
    DEFAULT_API_HOST,
    ClientConfig,
    DomoScope,
    load_env_file,
    resolve_env_reference,
)


class TestClientConfig:
    """Tests for ClientConfig defaults."""

    def test_defaults(self):
        config = ClientConfig()

        assert config.api_host == DEFAULT_API_HOST
        assert config.token_url == "https://api.domo.com/oauth/token"
        assert config.scope.names() == ["data"]
        assert config.timeout == 30.0
        assert config.check_token_expiry is True
        assert config.has_credentials is False

    def test_trailing_slash_removed(self):
        assert ClientConfig(api_host="http://localhost:8080/").api_host == "http://localhost:8080"

    def test_secret_not_in_repr(self):
        config = ClientConfig(client_id="id", client_secret="super-secret")

        assert "super-secret" not in repr(config)


class TestFromEnv:
    """Tests for ClientConfig.from_env."""

    def test_domo_prefixed_variables(self):
        config = ClientConfig.from_env(
            {"DOMO_CLIENT_ID": "id", "DOMO_CLIENT_SECRET": "secret", "CLIENT_ID": "other"}
        )

        assert config.client_id == "id"
        assert config.client_secret == "secret"
        assert config.has_credentials is True

    def test_fallback_variables(self):
        config = ClientConfig.from_env({"CLIENT_ID": "id", "CLIENT_SECRET": "secret"})

        assert config.client_id == "id"
        assert config.client_secret == "secret"

    def test_default_scope(self):
        assert ClientConfig.from_env({}).scope == DomoScope(data=True)

    def test_scope_flags(self):
        config = ClientConfig.from_env({"USER_SCOPE": "1", "AUDIT_SCOPE": ""})

        assert config.scope.names() == ["user", "audit"]

    def test_api_host(self):
        config = ClientConfig.from_env({"DOMO_API_HOST": "https://api.example.test/"})

        assert config.api_host == "https://api.example.test"

    def test_env_file_overrides(self, temp_dir: Path):
        env_file = temp_dir / ".env"
        env_file.write_text("DOMO_CLIENT_ID=from-file\nDASHBOARD_SCOPE=1\n")

        config = ClientConfig.from_env({"DOMO_CLIENT_ID": "from-env"}, env_file=env_file)

        assert config.client_id == "from-file"
        assert config.scope.names() == ["dashboard"]

    def test_missing_env_file(self, temp_dir: Path):
        config = ClientConfig.from_env({"CLIENT_ID": "id"}, env_file=temp_dir / "nope.env")

        assert config.client_id == "id"


class TestFromFile:
    """Tests for ClientConfig.from_file."""

    def test_load(self, temp_dir: Path):
        config_file = temp_dir / "domo.json"
        config_file.write_text(
            json.dumps(
                {
                    "client_id": "${DOMO_ID}",
                    "client_secret": "${DOMO_SECRET:-fallback}",
                    "scope": ["data", "user"],
                    "timeout": 60,
                    "check_token_expiry": False,
                }
            )
        )

        config = ClientConfig.from_file(config_file, environ={"DOMO_ID": "file-id"})

        assert config.client_id == "file-id"
        assert config.client_secret == "fallback"
        assert config.scope.names() == ["data", "user"]
        assert config.timeout == 60
        assert config.check_token_expiry is False

    def test_scope_string(self, temp_dir: Path):
        config_file = temp_dir / "domo.json"
        config_file.write_text(json.dumps({"scope": "data audit"}))

        assert ClientConfig.from_file(config_file, environ={}).scope.names() == ["data", "audit"]

    def test_unknown_key_warns(self, temp_dir: Path, caplog):
        config_file = temp_dir / "domo.json"
        config_file.write_text(json.dumps({"client_id": "id", "colour": "blue"}))

        with caplog.at_level(logging.WARNING, logger="domorest.config"):
            config = ClientConfig.from_file(config_file, environ={})

        assert config.client_id == "id"
        assert "colour" in caplog.text

    def test_missing_file(self, temp_dir: Path):
        with pytest.raises(FileNotFoundError):
            ClientConfig.from_file(temp_dir / "missing.json")


class TestEnvHelpers:
    """Tests for .env parsing and reference resolution."""

    def test_load_env_file(self, temp_dir: Path):
        env_file = temp_dir / ".env"
        env_file.write_text(
            "# credentials\n"
            "\n"
            "CLIENT_ID='quoted-id'\n"
            'CLIENT_SECRET="a=b"\n'
            "export DATA_SCOPE=1\n"
            "not a pair\n"
        )

        assert load_env_file(env_file) == {
            "CLIENT_ID": "quoted-id",
            "CLIENT_SECRET": "a=b",
            "DATA_SCOPE": "1",
        }

    def test_load_env_file_directory(self, temp_dir: Path):
        assert load_env_file(temp_dir) == {}

    def test_resolve_reference(self):
        env = {"HOST": "api.domo.com"}

        assert resolve_env_reference("https://${HOST}/v1", env) == "https://api.domo.com/v1"
        assert resolve_env_reference("${MISSING:-x}-${HOST}", env) == "x-api.domo.com"
        assert resolve_env_reference("${MISSING}", env) == ""
        assert resolve_env_reference("plain", env) == "plain"
