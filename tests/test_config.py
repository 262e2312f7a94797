"""Tests for config.py - defaults, validation and source merging."""

import pytest

from ripplescope.config import AnalysisConfig, load_config
from ripplescope.exceptions import InvalidConfigError


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Keep user and project config files out of the way."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    for key in ("RIPPLESCOPE_WORKERS", "RIPPLESCOPE_ENABLE_RENAME_HINTS", "RIPPLESCOPE_MAX_FILES"):
        monkeypatch.delenv(key, raising=False)


class TestAnalysisConfig:
    def test_defaults(self):
        config = AnalysisConfig()
        assert config.workers is None
        assert config.worker_count >= 1
        assert config.max_file_size_bytes == 2 * 1024 * 1024
        assert ".ts" in config.source_extensions
        assert "node_modules" in config.skip_dirs
        assert config.enable_rename_hints

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"workers": 0},
            {"scan_budget_seconds": 0},
            {"max_file_size_mb": -1},
            {"max_files": 0},
            {"source_extensions": []},
            {"source_extensions": ["ts"]},
            {"rename_similarity": 1.5},
            {"verbosity": "loud"},
        ],
    )
    def test_validation(self, kwargs):
        with pytest.raises(ValueError):
            AnalysisConfig(**kwargs)


class TestLoadConfig:
    def test_defaults_without_sources(self):
        assert load_config() == AnalysisConfig()

    def test_project_file(self, tmp_path):
        (tmp_path / "ripplescope.toml").write_text("workers = 2\nmax_files = 50\n")
        config = load_config()
        assert (config.workers, config.max_files) == (2, 50)

    def test_explicit_file_beats_project_file(self, tmp_path):
        (tmp_path / "ripplescope.toml").write_text("workers = 2\n")
        explicit = tmp_path / "custom.toml"
        explicit.write_text("workers = 5\n")
        assert load_config(explicit).workers == 5

    def test_env_beats_files(self, tmp_path, monkeypatch):
        (tmp_path / "ripplescope.toml").write_text("workers = 2\n")
        monkeypatch.setenv("RIPPLESCOPE_WORKERS", "7")
        monkeypatch.setenv("RIPPLESCOPE_ENABLE_RENAME_HINTS", "off")
        config = load_config()
        assert config.workers == 7
        assert not config.enable_rename_hints

    def test_overrides_beat_env(self, monkeypatch):
        monkeypatch.setenv("RIPPLESCOPE_WORKERS", "7")
        assert load_config(workers=3).workers == 3

    def test_none_overrides_are_ignored(self):
        assert load_config(workers=None).workers is None

    def test_verbose_flag(self):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"

    def test_unknown_key(self, tmp_path):
        (tmp_path / "ripplescope.toml").write_text("colour = 'blue'\n")
        with pytest.raises(InvalidConfigError) as exc:
            load_config()
        assert exc.value.key == "colour"

    def test_invalid_value(self):
        with pytest.raises(InvalidConfigError):
            load_config(max_files=0)

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv("RIPPLESCOPE_MAX_FILES", "many")
        with pytest.raises(InvalidConfigError):
            load_config()

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(InvalidConfigError):
            load_config(tmp_path / "nope.toml")

    def test_malformed_toml(self, tmp_path):
        bad = tmp_path / "bad.toml"
        bad.write_text("workers = = 3\n")
        with pytest.raises(InvalidConfigError):
            load_config(bad)
