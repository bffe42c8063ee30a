"""Tests for configuration module."""

import json
import os
import pytest
from unittest.mock import patch

from hostforge.infrastructure.config import (
    HostforgeConfig,
    ReadinessConfig,
    StoreConfig,
    load_config,
)


class TestDefaultConfig:
    def test_defaults(self):
        config = load_config(path="/nonexistent/hostforge.json")
        assert config.log_level == "WARNING"
        assert config.log_json is False
        assert config.store.root == "~/.hostforge/machines"
        assert config.readiness.interval_seconds == 5
        assert config.readiness.timeout_seconds == 0

    def test_all_sections_present(self):
        config = load_config(path="/nonexistent/hostforge.json")
        assert isinstance(config, HostforgeConfig)
        assert isinstance(config.store, StoreConfig)
        assert isinstance(config.readiness, ReadinessConfig)

    def test_unbounded_readiness_by_default(self):
        assert ReadinessConfig().timeout is None
        assert ReadinessConfig(timeout_seconds=90).timeout == 90.0


class TestFileConfig:
    def test_load_from_file(self, tmp_path):
        config_file = tmp_path / "hostforge.json"
        config_file.write_text(json.dumps({
            "log_level": "DEBUG",
            "log_json": True,
            "store": {"root": "/srv/machines"},
            "readiness": {"interval_seconds": 2, "timeout_seconds": 300},
        }))

        config = load_config(path=str(config_file))
        assert config.log_level == "DEBUG"
        assert config.log_json is True
        assert config.store.root == "/srv/machines"
        assert config.readiness.interval_seconds == 2
        assert config.readiness.timeout == 300.0

    def test_partial_config(self, tmp_path):
        config_file = tmp_path / "hostforge.json"
        config_file.write_text(json.dumps({"readiness": {"timeout_seconds": 60}}))

        config = load_config(path=str(config_file))
        assert config.readiness.timeout_seconds == 60
        assert config.readiness.interval_seconds == 5
        assert config.store.root == "~/.hostforge/machines"

    def test_unknown_keys_ignored(self, tmp_path):
        config_file = tmp_path / "hostforge.json"
        config_file.write_text(json.dumps({"store": {"root": "/m", "colour": "blue"}}))

        config = load_config(path=str(config_file))
        assert config.store.root == "/m"

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
    def test_invalid_file_falls_back_to_defaults(self, tmp_path, content):
        config_file = tmp_path / "hostforge.json"
        config_file.write_text(content)

        config = load_config(path=str(config_file))
        assert config == HostforgeConfig()


class TestEnvOverride:
    def test_env_overrides_file(self, tmp_path):
        config_file = tmp_path / "hostforge.json"
        config_file.write_text(json.dumps({"store": {"root": "/from/file"}}))

        with patch.dict(os.environ, {"HOSTFORGE_STORE_ROOT": "/from/env"}):
            config = load_config(path=str(config_file))
        assert config.store.root == "/from/env"

    def test_env_coerces_types(self):
        env = {
            "HOSTFORGE_READINESS_TIMEOUT_SECONDS": "120",
            "HOSTFORGE_READINESS_INTERVAL_SECONDS": "1",
            "HOSTFORGE_LOG_JSON": "true",
            "HOSTFORGE_LOG_LEVEL": "INFO",
        }
        with patch.dict(os.environ, env):
            config = load_config(path="/nonexistent/hostforge.json")
        assert config.readiness.timeout_seconds == 120
        assert config.readiness.interval_seconds == 1
        assert config.log_json is True
        assert config.log_level == "INFO"

    def test_custom_prefix(self):
        with patch.dict(os.environ, {"FORGE_STORE_ROOT": "/custom"}):
            config = load_config(path="/nonexistent/hostforge.json", env_prefix="FORGE")
        assert config.store.root == "/custom"

    def test_config_is_frozen(self):
        config = load_config(path="/nonexistent/hostforge.json")
        with pytest.raises(AttributeError):
            config.log_level = "DEBUG"
