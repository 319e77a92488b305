"""Tests for generator configuration loading and merging."""

import json

import pytest

from apigen.codegen.core.config import (
    ConfigError,
    ConfigManager,
    GeneratorConfig,
    load_config,
)


class TestDefaults:

    def test_typescript_defaults(self):
        config = load_config("ts")
        assert config.indent_size == 4
        assert config.indent == "    "
        assert config.add_comments is True
        assert config.transport_import == "./bin"
        assert config.client_interface == "IClient"
        assert config.emit_constructors is True

    def test_docs_defaults(self):
        config = load_config("docs")
        assert config.add_comments is False
        assert config.emit_constructors is False
        assert config.custom["index_file"] == "modules.md"

    def test_unknown_backend_gets_base_config(self):
        assert load_config("other") == GeneratorConfig()


class TestOverrides:

    def test_custom_dict(self):
        config = load_config("ts", {"indent_size": 2, "add_comments": False})
        assert config.indent == "  "
        assert config.add_comments is False

    def test_unknown_keys_land_in_custom(self):
        config = load_config("ts", {"banner": "generated"})
        assert config.custom == {"banner": "generated"}

    def test_custom_is_merged(self):
        config = load_config("docs", {"custom": {"template_dir": "tpl"}})
        assert config.custom == {"index_file": "modules.md", "template_dir": "tpl"}

    def test_defaults_are_not_mutated(self):
        load_config("docs", {"custom": {"index_file": "README.md"}})
        assert load_config("docs").custom["index_file"] == "modules.md"

    def test_dict_overrides_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"indent_size": 2, "transport_import": "@lib/core"}))
        config = load_config("ts", {"indent_size": 3}, path)
        assert config.indent_size == 3
        assert config.transport_import == "@lib/core"


class TestConfigFiles:

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config("ts", config_file=tmp_path / "nope.json")

    def test_not_json_suffix(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("indent_size: 2")
        with pytest.raises(ConfigError, match="must be JSON"):
            load_config("ts", config_file=path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{broken")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config("ts", config_file=path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError, match="JSON object"):
            load_config("ts", config_file=path)


class TestValidateConfig:

    def test_valid(self):
        manager = ConfigManager()
        assert manager.validate_config(load_config("ts"), "ts") == []

    def test_invalid_values(self):
        manager = ConfigManager()
        config = GeneratorConfig(indent_size=0, client_interface="I Client", transport_import="")
        warnings = manager.validate_config(config, "ts")
        assert "Invalid indent_size: 0" in warnings
        assert "Invalid client_interface name: I Client" in warnings
        assert "transport_import must not be empty" in warnings
