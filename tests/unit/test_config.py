"""
Unit tests for CLI configuration management.
"""

import json
import os

import pytest
import yaml

import cli.config as config_module
from cli.config import ConfigurationError, ConfigurationManager, load_config


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Ignore config files and environment variables of the host."""
    monkeypatch.setattr(config_module, "CONFIG_SEARCH_PATHS", [])
    for key in list(os.environ):
        if key.startswith(config_module.ENV_PREFIX):
            monkeypatch.delenv(key)


class TestLoading:
    """Test hierarchical loading."""

    def test_defaults(self):
        """Test defaults are used when nothing else is configured."""
        manager = ConfigurationManager()
        config = manager.load()

        assert config["collection"]["max_supply"] == 100
        assert config["cli"]["output_format"] == "table"
        assert manager.get_sources() == ["defaults"]

    def test_defaults_not_shared(self):
        """Test changes to a loaded config do not leak into the defaults."""
        manager = ConfigurationManager()
        manager.set("collection.name", "Changed")

        assert load_config()["collection"]["name"] == "TestNFT"

    def test_profile(self):
        """Test profile values override defaults."""
        manager = ConfigurationManager(profile="production")

        assert manager.get("replay.stop_on_error") is True
        assert manager.get("collection.symbol") == "TNFT"
        assert "profile:production" in manager.get_sources()

    def test_unknown_profile(self):
        with pytest.raises(ConfigurationError, match="Unknown configuration profile"):
            ConfigurationManager(profile="staging").load()

    def test_yaml_file(self, tmp_path):
        """Test loading an explicit YAML file."""
        path = tmp_path / "config.yml"
        path.write_text(yaml.safe_dump({"collection": {"max_supply": 5, "admin": "alice"}}))

        manager = ConfigurationManager(str(path))

        assert manager.get("collection.max_supply") == 5
        assert manager.get("collection.admin") == "alice"
        assert manager.get("collection.name") == "TestNFT"

    def test_json_file(self, tmp_path):
        """Test loading an explicit JSON file."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"cli": {"output_format": "json"}}))

        assert ConfigurationManager(str(path)).get("cli.output_format") == "json"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("")

        assert ConfigurationManager(str(path)).get("collection.max_supply") == 100

    def test_missing_file(self, tmp_path):
        """Test an explicit file that does not exist."""
        with pytest.raises(ConfigurationError, match="Config file not found"):
            ConfigurationManager(str(tmp_path / "missing.yml")).load()

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("- one\n- two\n")

        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            ConfigurationManager(str(path)).load()

    def test_search_paths(self, tmp_path, monkeypatch):
        """Test the first existing search path is used."""
        first = tmp_path / "first.yml"
        second = tmp_path / "second.yml"
        second.write_text(yaml.safe_dump({"collection": {"symbol": "SEC"}}))
        monkeypatch.setattr(config_module, "CONFIG_SEARCH_PATHS", [first, second])

        manager = ConfigurationManager()

        assert manager.get("collection.symbol") == "SEC"
        assert manager.get_sources() == ["defaults", f"file:{second}"]


class TestEnvironment:
    """Test environment variable mapping."""

    def test_environment_overrides(self, tmp_path, monkeypatch):
        """Test environment variables override files."""
        path = tmp_path / "config.yml"
        path.write_text(yaml.safe_dump({"collection": {"max_supply": 5}}))
        monkeypatch.setenv("NFTREG_COLLECTION_MAX_SUPPLY", "250")
        monkeypatch.setenv("NFTREG_REPLAY_LOG_EVENTS", "yes")
        monkeypatch.setenv("NFTREG_COLLECTION_BASE_URI", "ipfs://cid")

        manager = ConfigurationManager(str(path))

        assert manager.get("collection.max_supply") == 250
        assert manager.get("replay.log_events") is True
        assert manager.get("collection.base_uri") == "ipfs://cid"
        assert manager.get_sources()[-1] == "environment"

    def test_string_options_kept_verbatim(self, monkeypatch):
        """Test numeric-looking names and accounts stay strings."""
        monkeypatch.setenv("NFTREG_COLLECTION_ADMIN", "1234")
        monkeypatch.setenv("NFTREG_COLLECTION_SYMBOL", "true")
        monkeypatch.setenv("NFTREG_COLLECTION_MAX_SUPPLY", "5")

        manager = ConfigurationManager()

        assert manager.get("collection.admin") == "1234"
        assert manager.get("collection.symbol") == "true"
        assert manager.get("collection.max_supply") == 5
        assert manager.validate() == []

    def test_variable_without_option_ignored(self, monkeypatch):
        monkeypatch.setenv("NFTREG_COLLECTION", "x")

        assert ConfigurationManager().get_sources() == ["defaults"]

    @pytest.mark.parametrize("raw,expected", [
        ("42", 42),
        ("1.5", 1.5),
        ("true", True),
        ("no", False),
        ('{"a": 1}', {"a": 1}),
        ("hello", "hello"),
    ])
    def test_parse_env_value(self, raw, expected):
        """Test environment value typing."""
        assert ConfigurationManager()._parse_env_value(raw) == expected


class TestAccessors:
    """Test get, set, save and validate."""

    def test_get_default(self):
        manager = ConfigurationManager()

        assert manager.get("collection.missing", "fallback") == "fallback"
        assert manager.get("nothing.here") is None

    def test_set_and_get(self):
        """Test setting nested values."""
        manager = ConfigurationManager()
        manager.set("replay.extra.depth", 3)

        assert manager.get("replay.extra.depth") == 3

    def test_save_roundtrip(self, tmp_path):
        """Test a saved configuration can be loaded again."""
        manager = ConfigurationManager()
        manager.set("collection.max_supply", 7)

        path = manager.save(str(tmp_path / "out" / "config.yml"))

        assert path.exists()
        assert ConfigurationManager(str(path)).get("collection.max_supply") == 7

    def test_validate_defaults(self):
        assert ConfigurationManager().validate() == []

    def test_validate_errors(self):
        """Test invalid values are reported."""
        manager = ConfigurationManager()
        manager.set("collection.max_supply", 0)
        manager.set("collection.admin", "")
        manager.set("cli.output_format", "xml")

        errors = manager.validate()

        assert len(errors) == 3
        assert any("max_supply" in error for error in errors)
        assert any("collection.admin" in error for error in errors)
        assert any("output format" in error for error in errors)

    def test_reset(self, monkeypatch):
        """Test reset forces a reload."""
        manager = ConfigurationManager()
        manager.load()
        monkeypatch.setenv("NFTREG_CLI_VERBOSE", "1")

        assert manager.get("cli.verbose") == 0
        manager.reset()
        assert manager.get("cli.verbose") == 1
