"""
Environment-file cascade for :class:`~storm.core.config.settings.StormSettings`.

An installation keeps its settings files in the application root::

    <root>/.env.base            shared defaults, committed
    <root>/.env.{environment}   production, staging, testing, ...
    <root>/.env.local           machine-specific values, not committed
    <root>/.env                 deployment secrets

:func:`discover_env_files` returns the files of that cascade that exist, in
order. pydantic-settings reads them, later files overriding earlier ones and
real ``STORM_*`` environment variables overriding every file.

Tags:
    storm-core, configuration, env-files, cascading, loader

Doc-Types:
    api-reference
"""

from __future__ import annotations

import os
from pathlib import Path

ENV_FILE_CASCADE: tuple[str, ...] = (".env.base", ".env.{environment}", ".env.local", ".env")

# A directory holding both of these is a Storm installation even without VCS metadata.
INSTALLATION_DIRECTORIES: tuple[str, ...] = ("plugins", "storage")
ROOT_MARKERS: tuple[str, ...] = ("pyproject.toml", ".git")


def is_application_root(directory: Path) -> bool:
    if all((directory / name).is_dir() for name in INSTALLATION_DIRECTORIES):
        return True
    return any((directory / marker).exists() for marker in ROOT_MARKERS)


def find_project_root(start: Path | None = None) -> Path:
    """Closest directory at or above *start* (default: cwd) that is an application root.

    Falls back to *start* itself.
    """
    current = (start or Path.cwd()).resolve()
    return next(
        (directory for directory in (current, *current.parents) if is_application_root(directory)),
        current,
    )


def env_file_names(environment: str | None = None) -> list[str]:
    """Cascade file names for *environment*; the per-environment file is skipped without one."""
    return [
        pattern.format(environment=environment)
        for pattern in ENV_FILE_CASCADE
        if environment or "{environment}" not in pattern
    ]


def discover_env_files(
    project_root: Path | None = None,
    environment: str | None = None,
) -> list[Path]:
    """Existing cascade files under *project_root*, lowest precedence first.

    *environment* defaults to ``STORM_ENVIRONMENT``.
    """
    root = (project_root or find_project_root()).resolve()
    environment = environment or os.environ.get("STORM_ENVIRONMENT")
    return [root / name for name in env_file_names(environment) if (root / name).is_file()]
