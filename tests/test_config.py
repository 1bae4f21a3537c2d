"""Tests for configuration loading and saving."""

import stat
from pathlib import Path

import pytest

from moola.config import DEFAULT_CONFIG, create_default_config, get_config_path, get_setting, load_config, save_config


class TestConfig:
    """Tests for the TOML config layer."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(tmp_path / "config.toml") == DEFAULT_CONFIG

    def test_defaults_are_copied(self, tmp_path: Path) -> None:
        """Should not let callers mutate the module defaults."""
        config = load_config(tmp_path / "config.toml")
        config["security"]["store_timeout"] = 99

        assert DEFAULT_CONFIG["security"]["store_timeout"] == 2.0

    def test_partial_file_is_merged(self, tmp_path: Path) -> None:
        """Should keep defaults for keys the file does not set."""
        path = tmp_path / "config.toml"
        path.write_text('log_level = "DEBUG"\n[security]\nstore_timeout = 0.5\n')

        config = load_config(path)

        assert config["log_level"] == "DEBUG"
        assert config["security"]["store_timeout"] == 0.5
        assert config["storage"]["data_dir"] == ""

    def test_save_is_private(self, tmp_path: Path) -> None:
        """Should create parent directories and restrict the file to the owner."""
        path = tmp_path / "nested" / "config.toml"

        create_default_config(path)

        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        assert load_config(path) == DEFAULT_CONFIG

    def test_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        config = {**DEFAULT_CONFIG, "log_level": "INFO"}

        save_config(config, path)

        assert load_config(path)["log_level"] == "INFO"

    def test_xdg_config_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_path() == tmp_path / "moola" / "config.toml"

    def test_get_setting(self) -> None:
        assert get_setting(DEFAULT_CONFIG, "security.store_timeout") == 2.0
        assert get_setting(DEFAULT_CONFIG, "security.missing", "x") == "x"
        assert get_setting(DEFAULT_CONFIG, "log_level.deeper", 1) == 1
