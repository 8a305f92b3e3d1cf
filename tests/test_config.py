"""Tests for dropbox_content_hash.config — YAML loading, validation, env overrides."""

import os

import pytest

from dropbox_content_hash import config as config_mod
from dropbox_content_hash.config import (
    ENV_LOG_LEVEL,
    ENV_WORKERS,
    HashConfig,
    _DEFAULT_CONFIG,
    config_path,
    create_default,
    load_config,
    parse_log_level,
    parse_workers,
)
from dropbox_content_hash.errors import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    monkeypatch.delenv(ENV_WORKERS, raising=False)
    monkeypatch.delenv(ENV_LOG_LEVEL, raising=False)
    monkeypatch.setattr(config_mod, "home_dir", lambda: tmp_path / "home")


class TestCreateDefault:
    def test_creates_file(self, tmp_path):
        p = create_default(tmp_path / "cfg")
        assert p.exists()
        assert "workers:" in p.read_text()

    def test_does_not_overwrite(self, tmp_path):
        d = tmp_path / "cfg"
        d.mkdir()
        existing = d / "config.yaml"
        existing.write_text("workers: 3\n")
        create_default(d)
        assert existing.read_text() == "workers: 3\n"

    def test_creates_parent_dirs(self, tmp_path):
        p = create_default(tmp_path / "deep" / "nested")
        assert p.exists()

    def test_default_config_loads_to_defaults(self, tmp_path):
        p = create_default(tmp_path / "cfg")
        assert load_config(p) == HashConfig()
        assert _DEFAULT_CONFIG.strip()


class TestLoadConfig:
    def test_missing_default_file_gives_defaults(self):
        assert load_config() == HashConfig()

    def test_default_location_is_read(self, tmp_path):
        d = tmp_path / "home"
        d.mkdir()
        config_path(d).write_text("workers: 4\n")
        assert load_config().workers == 4

    def test_explicit_missing_path_raises(self, tmp_path):
        with pytest.raises(ConfigError, match="does not exist"):
            load_config(tmp_path / "nope.yaml")

    def test_full_file(self, tmp_path):
        p = tmp_path / "c.yaml"
        p.write_text("workers: 2\nprogress: false\nlog_level: debug\n")
        cfg = load_config(p)
        assert cfg == HashConfig(workers=2, progress=False, log_level="DEBUG")

    def test_empty_file(self, tmp_path):
        p = tmp_path / "c.yaml"
        p.write_text("")
        assert load_config(p) == HashConfig()

    def test_invalid_yaml(self, tmp_path):
        p = tmp_path / "c.yaml"
        p.write_text("workers: [1, 2\n")
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_config(p)

    def test_not_a_mapping(self, tmp_path):
        p = tmp_path / "c.yaml"
        p.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(p)

    def test_bad_progress(self, tmp_path):
        p = tmp_path / "c.yaml"
        p.write_text("progress: sometimes\n")
        with pytest.raises(ConfigError, match="progress"):
            load_config(p)

    def test_unknown_keys_warn(self, tmp_path, caplog):
        p = tmp_path / "c.yaml"
        p.write_text("workers: 1\ncolour: blue\n")
        with caplog.at_level("WARNING", logger="dropbox_content_hash.config"):
            load_config(p)
        assert "colour" in caplog.text

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        p = tmp_path / "c.yaml"
        p.write_text("workers: 2\nlog_level: ERROR\n")
        monkeypatch.setenv(ENV_WORKERS, "6")
        monkeypatch.setenv(ENV_LOG_LEVEL, "info")
        cfg = load_config(p)
        assert cfg.workers == 6
        assert cfg.log_level == "INFO"

    def test_env_without_file(self, monkeypatch):
        monkeypatch.setenv(ENV_WORKERS, "3")
        assert load_config().workers == 3

    def test_bad_env_raises(self, monkeypatch):
        monkeypatch.setenv(ENV_WORKERS, "many")
        with pytest.raises(ConfigError, match="workers"):
            load_config()


class TestParseWorkers:
    def test_int(self):
        assert parse_workers(4) == 4

    def test_numeric_string(self):
        assert parse_workers(" 2 ") == 2

    @pytest.mark.parametrize("value", ["auto", "AUTO", 0, "0"])
    def test_auto(self, value):
        assert parse_workers(value) == (os.cpu_count() or 1)

    @pytest.mark.parametrize("value", [-1, "-3", True, 2.5, None, "lots"])
    def test_invalid(self, value):
        with pytest.raises(ConfigError):
            parse_workers(value)


class TestParseLogLevel:
    def test_valid(self):
        assert parse_log_level("warning") == "WARNING"

    @pytest.mark.parametrize("value", ["LOUD", 10, None])
    def test_invalid(self, value):
        with pytest.raises(ConfigError, match="log_level"):
            parse_log_level(value)
