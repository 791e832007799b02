from __future__ import annotations

import os
import stat
import tarfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from tarprint.archive import ArchiveWriter, build_header
from tarprint.errors import SourceIOError
from tarprint.hashing import HashingReader, extend, hash_str
from tarprint.paths import lossy_text

EXECUTABLE_MARKER = "+x"
NON_EXECUTABLE_MARKER = "-x"


def is_executable(mode: int) -> bool:
    return bool(mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))


def per_file_digest(rel_path: str, content_digest: str, executable: bool) -> str:
    return extend(
        extend(hash_str(rel_path), content_digest),
        EXECUTABLE_MARKER if executable else NON_EXECUTABLE_MARKER,
    )


@dataclass(frozen=True, slots=True)
class FileEntry:
    source: Path
    rel_path: PurePosixPath
    destination: str
    size: int
    executable: bool


@dataclass(frozen=True, slots=True)
class IngestedFile:
    destination: str
    size: int
    executable: bool
    digest: str


def stat_entry(source: Path, rel_path: PurePosixPath, destination: str) -> FileEntry:
    try:
        st = os.stat(source)
    except OSError as exc:
        raise SourceIOError("fetch filesystem metadata for", source, exc) from exc
    return FileEntry(
        source=source,
        rel_path=rel_path,
        destination=destination,
        size=st.st_size,
        executable=is_executable(st.st_mode),
    )


def ingest_file(entry: FileEntry, writer: ArchiveWriter) -> IngestedFile:
    """Append one file to the archive and return its per-file digest.

    The file is read exactly once: the archive writer pulls bytes through a
    hashing reader, then whatever it did not consume is hashed as well.
    """

    header = build_header(entry.destination, entry.size, entry.executable)

    try:
        f = open(entry.source, "rb")
    except OSError as exc:
        raise SourceIOError("open file", entry.source, exc) from exc

    with f:
        reader = HashingReader(f)
        try:
            writer.append(header, reader)
            reader.drain()
        except (OSError, tarfile.TarError) as exc:
            raise SourceIOError("read file", entry.source, exc) from exc

    return IngestedFile(
        destination=entry.destination,
        size=entry.size,
        executable=entry.executable,
        digest=per_file_digest(lossy_text(entry.rel_path), reader.hexdigest(), entry.executable),
    )
