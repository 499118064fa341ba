"""Tests for storm.core.config.loader - application root and env-file cascade."""

from __future__ import annotations

from pathlib import Path

import pytest

from storm.core.config.loader import (
    discover_env_files,
    env_file_names,
    find_project_root,
    is_application_root,
)
from storm.core.config.settings import get_settings


class TestFindProjectRoot:
    def test_finds_pyproject_toml(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").touch()
        sub = tmp_path / "a" / "b"
        sub.mkdir(parents=True)
        assert find_project_root(sub) == tmp_path.resolve()

    def test_finds_git_dir(self, tmp_path: Path):
        (tmp_path / ".git").mkdir()
        assert find_project_root(tmp_path) == tmp_path.resolve()

    def test_finds_installation_layout(self, tmp_path: Path):
        (tmp_path / "plugins").mkdir()
        (tmp_path / "storage").mkdir()
        sub = tmp_path / "themes" / "demo"
        sub.mkdir(parents=True)
        assert find_project_root(sub) == tmp_path.resolve()

    def test_plugins_alone_is_not_a_root(self, tmp_path: Path):
        (tmp_path / "plugins").mkdir()
        assert is_application_root(tmp_path) is False


class TestEnvFileNames:
    def test_with_environment(self):
        assert env_file_names("staging") == [".env.base", ".env.staging", ".env.local", ".env"]

    def test_without_environment(self):
        assert env_file_names() == [".env.base", ".env.local", ".env"]


class TestDiscoverEnvFiles:
    def test_empty_directory(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("STORM_ENVIRONMENT", raising=False)
        assert discover_env_files(tmp_path) == []

    def test_only_existing_files(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("STORM_ENVIRONMENT", raising=False)
        (tmp_path / ".env.base").write_text("X=1")
        assert discover_env_files(tmp_path) == [tmp_path.resolve() / ".env.base"]

    def test_full_cascade(self, tmp_path: Path):
        for name in [".env", ".env.local", ".env.staging", ".env.base"]:
            (tmp_path / name).write_text(f"FROM={name}")
        names = [f.name for f in discover_env_files(tmp_path, "staging")]
        assert names == [".env.base", ".env.staging", ".env.local", ".env"]

    def test_environment_from_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        (tmp_path / ".env.testing").write_text("X=1")
        monkeypatch.setenv("STORM_ENVIRONMENT", "testing")
        assert [f.name for f in discover_env_files(tmp_path)] == [".env.testing"]


class TestCascadePrecedence:
    def test_later_files_win(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("STORM_LOCALE", raising=False)
        monkeypatch.delenv("STORM_APP_NAME", raising=False)
        (tmp_path / ".env.base").write_text("STORM_LOCALE=en\nSTORM_APP_NAME=Base\n")
        (tmp_path / ".env.local").write_text("STORM_LOCALE=fr\n")

        settings = get_settings(project_root=tmp_path)

        assert settings.locale == "fr"
        assert settings.app_name == "Base"

    def test_real_env_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        (tmp_path / ".env").write_text("STORM_LOCALE=fr\n")
        monkeypatch.setenv("STORM_LOCALE", "de")
        assert get_settings(project_root=tmp_path).locale == "de"
