"""Tests for path resolution and the settings loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from claudectx.config import (
    Config,
    ConfigError,
    LauncherConfig,
    Locations,
    home_directory,
    load_config,
)


class TestHomeDirectory:

    def test_override_used_verbatim(self, tmp_path):
        assert home_directory({"CLAUDECTX_HOME": str(tmp_path / "x")}) == tmp_path / "x"

    def test_unset_override_falls_back(self, monkeypatch, tmp_path):
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert home_directory({}) == tmp_path

    def test_empty_override_is_still_verbatim(self, monkeypatch, tmp_path):
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert home_directory({"CLAUDECTX_HOME": ""}) == Path("")

    def test_reads_process_environment(self, home):
        assert home_directory() == home

    def test_unresolvable_home(self, monkeypatch):
        def _fail(cls):
            raise RuntimeError("Could not determine home directory.")

        monkeypatch.setattr(Path, "home", classmethod(_fail))
        with pytest.raises(ConfigError, match="home directory"):
            home_directory({})


def test_locations_layout(tmp_path):
    locations = Locations.resolve({"CLAUDECTX_HOME": str(tmp_path)})
    assert locations.live_config == tmp_path / ".claude.json"
    assert locations.backup_config == tmp_path / ".claude.json.bak"
    assert locations.profile_dir == tmp_path / ".claudectx"
    assert locations.settings_file == tmp_path / ".claudectx" / "config.toml"


class TestLoadConfig:

    def test_defaults_when_missing(self, tmp_path):
        assert load_config(None) == Config()
        config = load_config(tmp_path / "absent.toml")
        assert config.launcher == LauncherConfig()
        assert config.launcher.command == "claude"
        assert config.launcher.login_args == ["/login"]
        assert config.launcher.default_args == []
        assert config.logging.level == "WARNING"

    def test_full_file(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            '[launcher]\n'
            'command = "/opt/claude/bin/claude"\n'
            'login_args = ["/login", "--fresh"]\n'
            'default_args = ["--model", "opus"]\n'
            '\n'
            '[logging]\n'
            'level = "debug"\n'
        )
        config = load_config(path)
        assert config.launcher.command == "/opt/claude/bin/claude"
        assert config.launcher.login_args == ["/login", "--fresh"]
        assert config.launcher.default_args == ["--model", "opus"]
        assert config.logging.level == "DEBUG"

    def test_single_string_becomes_list(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[launcher]\ndefault_args = "--verbose"\n')
        assert load_config(path).launcher.default_args == ["--verbose"]

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[logging]\nlevel = "info"\n')
        config = load_config(path)
        assert config.launcher == LauncherConfig()
        assert config.logging.level == "INFO"

    @pytest.mark.parametrize(
        ("content", "message"),
        [
            ("[launcher\n", "Invalid TOML"),
            ('launcher = "claude"\n', r"\[launcher\] section"),
            ('logging = 3\n', r"\[logging\] section"),
            ('[launcher]\ncommand = "  "\n', "cannot be empty"),
            ('[launcher]\nlogin_args = 5\n', "launcher.login_args"),
        ],
    )
    def test_invalid_files(self, tmp_path, content, message):
        path = tmp_path / "config.toml"
        path.write_text(content)
        with pytest.raises(ConfigError, match=message):
            load_config(path)
