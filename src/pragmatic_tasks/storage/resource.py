# src/pragmatic_tasks/storage/resource.py

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FileResource:
    """
    Filesystem-backed resource.

    The modification stamp is (st_mtime_ns, st_size) so that a rewrite within
    the filesystem's timestamp granularity is still noticed when the size
    changes. Writes go through a temp file + os.replace, so readers never see
    a half-written log.
    """

    path: Path
    resource_key: str = ""

    @property
    def key(self) -> str:
        return self.resource_key or str(self.path)

    def exists(self) -> bool:
        return self.path.exists()

    def last_modified(self) -> tuple[int, int] | None:
        try:
            st = self.path.stat()
        except FileNotFoundError:
            return None
        return (st.st_mtime_ns, st.st_size)

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def write_bytes(self, data: bytes) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, self.path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp)
            raise
        logger.debug("Wrote %d bytes to %s", len(data), self.path)

    def __str__(self) -> str:
        return self.key


class ResourceStore:
    """
    Maps path-like keys ("projects/backup.tasklog.xml") to FileResources under
    a root directory. Keys may not escape the root.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def resource(self, key: str) -> FileResource:
        clean = (key or "").strip().replace("\\", "/")
        if not clean:
            raise ValueError("resource key is required")
        parts = PurePosixPath(clean.lstrip("/")).parts
        if any(p == ".." for p in parts) or not parts:
            raise ValueError(f"resource key escapes the store root: {key!r}")
        normalized = "/".join(parts)
        return FileResource(path=self._root.joinpath(*parts), resource_key=normalized)
