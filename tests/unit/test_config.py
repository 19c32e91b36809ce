"""Tests for core/config.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from compass.core.config import (
    DEFAULT_CONFIG,
    deep_merge,
    get_effective_config,
    get_plugin_configs,
    load_config_file,
)
from compass.errors import ConfigurationError


class TestDeepMerge:
    def test_simple_merge(self):
        base = {"a": 1, "b": 2}
        override = {"b": 3, "c": 4}
        result = deep_merge(base, override)
        assert result == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self):
        base = {"logging": {"level": "INFO", "json": False}}
        override = {"logging": {"level": "DEBUG"}}
        result = deep_merge(base, override)
        assert result["logging"]["level"] == "DEBUG"
        assert result["logging"]["json"] is False

    def test_arrays_replaced(self):
        base = {"catalogs": ["a.yaml", "b.yaml"]}
        override = {"catalogs": ["c.yaml"]}
        result = deep_merge(base, override)
        assert result["catalogs"] == ["c.yaml"]

    def test_base_not_mutated(self):
        base = {"a": {"b": 1}}
        override = {"a": {"b": 2}}
        deep_merge(base, override)
        assert base["a"]["b"] == 1


class TestLoadConfigFile:
    def test_loads_yaml(self, config_dir: Path):
        config = load_config_file(config_dir / "compass.yaml")
        assert config["catalogs"] == [str(config_dir / "catalogs/cat-1.yaml")]
        assert config["plugins"][0]["evaluations-dir"] == str(config_dir / "plans/opa")
        assert config["logging"]["level"] == "WARNING"

    def test_catalog_shorthand_combined_with_list(self, tmp_path: Path):
        path = tmp_path / "compass.yaml"
        path.write_text("catalog: a.yaml\ncatalogs:\n  - b.yaml\n", encoding="utf-8")
        config = load_config_file(path)
        assert config["catalogs"] == [str(tmp_path / "a.yaml"), str(tmp_path / "b.yaml")]
        assert "catalog" not in config

    def test_absolute_paths_kept(self, tmp_path: Path):
        path = tmp_path / "compass.yaml"
        path.write_text("catalogs:\n  - /etc/compass/cat.yaml\n", encoding="utf-8")
        assert load_config_file(path)["catalogs"] == ["/etc/compass/cat.yaml"]

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config_file(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path: Path):
        path = tmp_path / "compass.yaml"
        path.write_text("plugins: [\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Unable to read"):
            load_config_file(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "compass.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_config_file(path)

    def test_catalogs_as_single_path(self, tmp_path: Path):
        path = tmp_path / "compass.yaml"
        path.write_text("catalogs: catalogs/cat-1.yaml\n", encoding="utf-8")
        assert load_config_file(path)["catalogs"] == [str(tmp_path / "catalogs/cat-1.yaml")]

    def test_catalog_shorthand_with_single_path(self, tmp_path: Path):
        path = tmp_path / "compass.yaml"
        path.write_text("catalog: a.yaml\ncatalogs: b.yaml\n", encoding="utf-8")
        assert load_config_file(path)["catalogs"] == [str(tmp_path / "a.yaml"), str(tmp_path / "b.yaml")]

    def test_catalogs_wrong_type(self, tmp_path: Path):
        path = tmp_path / "compass.yaml"
        path.write_text("catalogs:\n  cat-1: catalogs/cat-1.yaml\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="'catalogs' must be a path or a list"):
            load_config_file(path)

    def test_catalog_path_not_a_string(self, tmp_path: Path):
        path = tmp_path / "compass.yaml"
        path.write_text("catalogs:\n  - 2024\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Catalog path must be a path"):
            load_config_file(path)

    def test_evaluations_dir_not_a_string(self, tmp_path: Path):
        path = tmp_path / "compass.yaml"
        path.write_text("plugins:\n  - id: opa\n    evaluations-dir: 2024\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="evaluations-dir must be a path"):
            load_config_file(path)

    def test_plugins_wrong_type(self, tmp_path: Path):
        path = tmp_path / "compass.yaml"
        path.write_text("plugins: opa\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="'plugins' must be a list"):
            load_config_file(path)

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "compass.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config_file(path) == {"catalogs": [], "plugins": []}


class TestGetPluginConfigs:
    def test_normalizes_entries(self):
        plugins = get_plugin_configs({"plugins": [{"id": "opa", "evaluations-dir": "/plans"}, {"id": "kyverno"}]})
        assert plugins == [
            {"id": "opa", "type": None, "evaluations-dir": "/plans"},
            {"id": "kyverno", "type": None, "evaluations-dir": ""},
        ]

    def test_missing_id(self):
        with pytest.raises(ConfigurationError, match="has no 'id'"):
            get_plugin_configs({"plugins": [{"evaluations-dir": "/plans"}]})

    def test_duplicate_id(self):
        with pytest.raises(ConfigurationError, match="more than once"):
            get_plugin_configs({"plugins": [{"id": "opa"}, {"id": "opa"}]})

    def test_plugins_must_be_list(self):
        with pytest.raises(ConfigurationError, match="must be a list"):
            get_plugin_configs({"plugins": {"id": "opa"}})


class TestGetEffectiveConfig:
    def test_defaults_without_file(self):
        config = get_effective_config()
        assert config["catalogs"] == []
        assert config["plugins"] == []
        assert config["logging"] == DEFAULT_CONFIG["logging"]

    def test_defaults_not_mutated(self, config_dir: Path):
        get_effective_config(config_dir / "compass.yaml", cli_overrides={"logging": {"level": "DEBUG"}})
        assert DEFAULT_CONFIG["logging"]["level"] == "INFO"

    def test_file_then_cli_overrides(self, config_dir: Path):
        config = get_effective_config(
            config_dir / "compass.yaml",
            cli_overrides={"logging": {"json": True}},
        )
        assert config["logging"]["level"] == "WARNING"
        assert config["logging"]["json"] is True
        assert config["_config_path"] == str(config_dir / "compass.yaml")
