"""Tests for configuration module."""

import os
from unittest import mock

import pytest

from onshape_mcp.config import DEFAULT_API_URL, ServerConfig, get_config


class TestServerConfig:
    """Tests for ServerConfig class."""

    def test_default_values(self):
        """Default configuration should use sensible defaults."""
        with mock.patch.dict(os.environ, {}, clear=True):
            config = ServerConfig(_env_file=None)

        assert config.api_url == DEFAULT_API_URL
        assert config.access_key is None
        assert config.secret_key is None
        assert config.timeout_ms == 30000
        assert config.document_list_limit == 20
        assert config.log_level == "INFO"
        assert config.require_credentials is False
        assert config.has_credentials is False

    def test_credentials_from_env(self):
        """Configuration should read both API keys from the environment."""
        env = {"ONSHAPE_ACCESS_KEY": "access", "ONSHAPE_SECRET_KEY": "secret"}
        with mock.patch.dict(os.environ, env, clear=True):
            config = ServerConfig(_env_file=None)

        assert config.access_key == "access"
        assert config.secret_key == "secret"
        assert config.has_credentials is True

    def test_one_key_is_not_enough(self):
        """A lone access key should not count as credentials."""
        with mock.patch.dict(os.environ, {"ONSHAPE_ACCESS_KEY": "access"}, clear=True):
            config = ServerConfig(_env_file=None)

        assert config.has_credentials is False

    def test_api_url_from_env(self):
        """Configuration should read the API base URL from the environment."""
        env = {"ONSHAPE_API_URL": "https://company.onshape.com/api/v6"}
        with mock.patch.dict(os.environ, env, clear=True):
            config = ServerConfig(_env_file=None)

        assert config.api_url == "https://company.onshape.com/api/v6"

    def test_require_credentials_from_env(self):
        """Configuration should read the startup credential policy."""
        with mock.patch.dict(os.environ, {"ONSHAPE_REQUIRE_CREDENTIALS": "true"}, clear=True):
            config = ServerConfig(_env_file=None)

        assert config.require_credentials is True

    def test_invalid_timeout_raises_error(self):
        """Out-of-range timeout should raise validation error."""
        with mock.patch.dict(os.environ, {"ONSHAPE_TIMEOUT_MS": "10"}, clear=True):
            with pytest.raises(Exception):  # Pydantic validation error
                ServerConfig(_env_file=None)

    def test_invalid_document_limit_raises_error(self):
        """Document list limit above the API maximum should be rejected."""
        with mock.patch.dict(os.environ, {"ONSHAPE_DOCUMENT_LIST_LIMIT": "500"}, clear=True):
            with pytest.raises(Exception):  # Pydantic validation error
                ServerConfig(_env_file=None)

    def test_get_config_returns_instance(self):
        """get_config should return a ServerConfig instance."""
        config = get_config()

        assert isinstance(config, ServerConfig)
