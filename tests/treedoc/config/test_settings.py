"""Tests for run configuration loading."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from treedoc.config.defaults import DEFAULT_MODEL_IDS, INVOKER_MAX_CONCURRENT_CALLS
from treedoc.config.settings import RunConfig, load_run_config, save_run_config
from treedoc.errors import ConfigError


class TestRunConfig:
    """Tests for the RunConfig dataclass."""

    def test_defaults(self, tmp_path):
        config = RunConfig(root=tmp_path)

        assert config.llms == DEFAULT_MODEL_IDS
        assert config.max_concurrent_calls == INVOKER_MAX_CONCURRENT_CALLS
        assert config.output_tokens_per_file == 1000
        assert config.name == tmp_path.resolve().name

    def test_paths_are_coerced(self):
        config = RunConfig(name="x", root="src", output="docs")

        assert config.root == Path("src")
        assert config.output == Path("docs")

    def test_defaults_not_shared(self):
        a = RunConfig(name="a")
        b = RunConfig(name="b")
        a.llms.append("gpt-3.5-turbo")

        assert b.llms == DEFAULT_MODEL_IDS

    def test_rejects_zero_concurrency(self):
        with pytest.raises(ConfigError, match="max_concurrent_calls"):
            RunConfig(name="x", max_concurrent_calls=0)

    def test_rejects_empty_model_list(self):
        with pytest.raises(ConfigError, match="model"):
            RunConfig(name="x", llms=[])

    def test_from_dict_ignores_unknown_keys(self):
        config = RunConfig.from_dict({"name": "demo", "colour": "blue"})

        assert config.name == "demo"

    def test_to_dict_round_trips_through_from_dict(self):
        config = RunConfig(name="demo", root="src", llms=["gpt-4"], ignore=["*.lock"])

        assert RunConfig.from_dict(config.to_dict()) == config

    @patch.dict(os.environ, {
        "TREEDOC_NAME": "envproj",
        "TREEDOC_LLMS": "gpt-3.5-turbo, gpt-4",
        "TREEDOC_MAX_CONCURRENT_CALLS": "3",
    }, clear=True)
    def test_from_env(self):
        config = RunConfig.from_env()

        assert config.name == "envproj"
        assert config.llms == ["gpt-3.5-turbo", "gpt-4"]
        assert config.max_concurrent_calls == 3


class TestLoadRunConfig:
    """Tests for load_run_config resolution order."""

    @patch.dict(os.environ, {}, clear=True)
    def test_no_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = load_run_config(name="demo")

        assert config.name == "demo"
        assert config.llms == DEFAULT_MODEL_IDS

    @patch.dict(os.environ, {}, clear=True)
    def test_reads_default_file_in_cwd(self, tmp_path, monkeypatch):
        (tmp_path / "treedoc.yaml").write_text(
            "name: fromfile\nllms: [gpt-4-32k]\nmax_concurrent_calls: 5\n"
        )
        monkeypatch.chdir(tmp_path)

        config = load_run_config()

        assert config.name == "fromfile"
        assert config.llms == ["gpt-4-32k"]
        assert config.max_concurrent_calls == 5

    def test_env_overrides_file_and_flags_override_env(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("name: fromfile\nrepository_url: https://example.com/a\n")

        with patch.dict(os.environ, {
            "TREEDOC_NAME": "fromenv",
            "TREEDOC_REPOSITORY_URL": "https://example.com/b",
        }, clear=True):
            config = load_run_config(path, name="fromflag", llms=None)

        assert config.name == "fromflag"
        assert config.repository_url == "https://example.com/b"
        assert config.llms == DEFAULT_MODEL_IDS

    def test_explicit_missing_file_is_an_error(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_run_config(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("name: [unclosed\n")

        with pytest.raises(ConfigError, match="Malformed"):
            load_run_config(path)

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_run_config(path)

    @patch.dict(os.environ, {"TREEDOC_MAX_CONCURRENT_CALLS": "many"}, clear=True)
    def test_bad_integer_env(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ConfigError, match="TREEDOC_MAX_CONCURRENT_CALLS"):
            load_run_config()

    @patch.dict(os.environ, {}, clear=True)
    def test_invalid_value_becomes_config_error(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ConfigError):
            load_run_config(max_concurrent_calls=0)


class TestSaveRunConfig:
    """Tests for save_run_config."""

    def test_writes_yaml(self, tmp_path):
        config = RunConfig(name="demo", root="src", llms=["gpt-4"])

        path = save_run_config(config, tmp_path / "conf" / "treedoc.yaml")

        data = yaml.safe_load(path.read_text())
        assert data["name"] == "demo"
        assert data["root"] == "src"
        assert data["llms"] == ["gpt-4"]

    @patch.dict(os.environ, {}, clear=True)
    def test_saved_file_loads_back(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = RunConfig(name="demo", llms=["gpt-3.5-turbo", "gpt-4"], max_concurrent_calls=7)

        save_run_config(config)

        assert load_run_config() == config
