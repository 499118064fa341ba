"""
Filesystem helpers for kernel cache files.

Cache files (compiled providers, discovered packages, ...) are plain JSON
documents. Writes go through a process-unique temp file followed by
``os.replace`` so a concurrent reader sees either the old file or the new
one, never a partial write.

Tags:
    storm-core, filesystem, cache-files, atomic-write
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from storm.core.errors import ProviderCacheError, StorageError


class Filesystem:
    """Thin wrapper over :mod:`pathlib` used by the kernel's cache layer."""

    def exists(self, path: str | Path) -> bool:
        return Path(path).exists()

    def is_file(self, path: str | Path) -> bool:
        return Path(path).is_file()

    def delete(self, paths: str | Path | Iterable[str | Path]) -> bool:
        """Delete one or more files. Returns False if any existing file could not be removed.

        Missing files are not an error.
        """
        targets = [paths] if isinstance(paths, (str, Path)) else list(paths)
        success = True
        for target in targets:
            try:
                Path(target).unlink(missing_ok=True)
            except OSError:
                success = False
        return success

    def ensure_directory(self, path: str | Path, mode: int = 0o755) -> Path:
        directory = Path(path)
        directory.mkdir(mode=mode, parents=True, exist_ok=True)
        return directory

    def get_json(self, path: str | Path) -> Any:
        """Read a JSON cache file.

        Raises:
            ProviderCacheError: The file exists but is not valid JSON.
        """
        target = Path(path)
        try:
            return json.loads(target.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ProviderCacheError(str(target), "malformed JSON", cause=exc) from exc

    def put_json(self, path: str | Path, data: Any) -> Path:
        """Atomically write ``data`` as JSON, creating the parent directory."""
        target = Path(path)
        self.ensure_directory(target.parent)
        tmp = target.with_name(f"{target.name}.{os.getpid()}.tmp")
        try:
            tmp.write_text(json.dumps(data, indent=2, sort_keys=False), encoding="utf-8")
            os.replace(tmp, target)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise StorageError(f"Unable to write cache file {target}", cause=exc).with_context(
                path=str(target)
            ) from exc
        return target
