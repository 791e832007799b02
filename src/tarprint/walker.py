from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path, PurePosixPath

from tarprint.cancel import CancellationToken
from tarprint.errors import PathRelativizeError, SourceIOError

logger = logging.getLogger(__name__)


def _scan(directory: Path) -> list[os.DirEntry]:
    # Materialize the listing so the directory handle is closed before any
    # file below it is opened for ingestion.
    with os.scandir(directory) as it:
        return list(it)


def relativize(path: Path, root: Path) -> PurePosixPath:
    """Canonicalize ``path`` and express it relative to the canonical ``root``."""

    try:
        canonical = path.resolve(strict=True)
    except OSError as exc:
        raise SourceIOError("canonicalize path", path, exc) from exc
    try:
        return PurePosixPath(canonical.relative_to(root).as_posix())
    except ValueError as exc:
        raise PathRelativizeError(path, root, exc) from exc


def walk_files(directory: Path, root: Path, token: CancellationToken) -> Iterator[PurePosixPath]:
    """Yield every regular file below ``directory`` relative to ``root``.

    Symbolic links are never followed, so links to files or directories are
    skipped and link cycles cannot occur. Yield order is whatever the
    filesystem returns.
    """

    pending = [directory]
    while pending:
        current = pending.pop()
        token.check()

        try:
            entries = _scan(current)
        except OSError as exc:
            raise SourceIOError("traverse directory", current, exc) from exc

        for entry in entries:
            token.check()
            try:
                if entry.is_dir(follow_symlinks=False):
                    pending.append(Path(entry.path))
                    continue
                is_file = entry.is_file(follow_symlinks=False)
            except OSError as exc:
                raise SourceIOError("fetch filesystem metadata for", entry.path, exc) from exc

            if not is_file:
                logger.debug("Skipping non-regular entry %s", entry.path)
                continue

            yield relativize(Path(entry.path), root)
