"""Tests for configuration loading."""

import pytest
import yaml

from sql2nosql.utils.config import Config, get_config, load_config, set_config


def test_defaults():
    """Default config carries every section."""
    config = Config()

    assert config.get("migration.batch_size") == 1000
    assert config.get("migration.skip_on_error") is True
    assert config.get("destination.database") == "sql2nosql"
    assert config.get("agent.provider") == "openai"
    assert config.get("missing.key", "fallback") == "fallback"


def test_from_yaml_merges_with_defaults(tmp_path):
    """Values from YAML override defaults without dropping siblings."""
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump({"migration": {"batch_size": 50}}))

    config = Config.from_yaml(path)

    assert config.get("migration.batch_size") == 50
    assert config.get("migration.progress_interval") == 1000


def test_missing_yaml_file(tmp_path):
    """A missing config file is reported."""
    with pytest.raises(FileNotFoundError):
        Config.from_yaml(tmp_path / "nope.yml")


def test_set_and_save(tmp_path):
    """Dot-notation set creates nested keys; save writes YAML."""
    config = Config()
    config.set("source.tables", ["artist"])
    config.set("new.section.value", 3)
    path = tmp_path / "out" / "config.yml"
    config.save(path)

    saved = yaml.safe_load(path.read_text())
    assert saved["source"]["tables"] == ["artist"]
    assert saved["new"]["section"]["value"] == 3


def test_global_config_from_env(tmp_path, monkeypatch):
    """SQL2NOSQL_CONFIG points the global config at a file."""
    path = tmp_path / "custom.yml"
    path.write_text(yaml.safe_dump({"destination": {"database": "music"}}))
    monkeypatch.setenv("SQL2NOSQL_CONFIG", str(path))
    set_config(None)

    assert get_config().get("destination.database") == "music"


def test_load_config_sets_global(tmp_path):
    """load_config replaces the global instance."""
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump({"output": {"dir": "reports"}}))

    config = load_config(path)

    assert get_config() is config
    assert get_config().get("output.dir") == "reports"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
