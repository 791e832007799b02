from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePath, PurePosixPath

from tarprint.errors import SourceIOError


def canonicalize_root(source_dir: str | Path) -> Path:
    try:
        return Path(source_dir).resolve(strict=True)
    except OSError as exc:
        raise SourceIOError("canonicalize path", source_dir, exc) from exc


def destination_for(destination_dir: str | PurePath, rel: str | PurePath) -> str:
    """Archive member name for ``rel`` under ``destination_dir``.

    Tar members must be relative, so leading ``/`` separators are removed; a
    destination of ``/foo``, ``//foo`` or ``foo`` produces the same names.
    """

    joined = (PurePosixPath(destination_dir) / PurePosixPath(rel)).as_posix()
    return joined.lstrip("/")


@dataclass(frozen=True, slots=True)
class PathResolver:
    root: Path
    destination_dir: PurePosixPath

    @classmethod
    def create(cls, source_dir: str | Path, destination_dir: str | PurePath) -> "PathResolver":
        return cls(
            root=canonicalize_root(source_dir),
            destination_dir=PurePosixPath(destination_dir),
        )

    def source(self, rel: str | PurePath) -> Path:
        return self.root / rel

    def destination(self, rel: str | PurePath) -> str:
        return destination_for(self.destination_dir, rel)


def lossy_text(path: str | PurePath) -> str:
    """Path as text with undecodable bytes replaced by U+FFFD.

    Filenames need not be valid UTF-8; this is the form that gets hashed and
    written to manifests.
    """

    return os.fsencode(PurePosixPath(path).as_posix()).decode("utf-8", "replace")
