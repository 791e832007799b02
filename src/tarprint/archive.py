from __future__ import annotations

import tarfile
from typing import BinaryIO

from tarprint.errors import ArchiveFinalizeError

MODE_EXECUTABLE = 0o777
MODE_REGULAR = 0o666


def build_header(destination: str, size: int, executable: bool) -> tarfile.TarInfo:
    """Tar header carrying only name, size and the collapsed permission mode.

    Timestamps and ownership are pinned so identical inputs give identical bytes.
    """

    info = tarfile.TarInfo(name=destination)
    info.type = tarfile.REGTYPE
    info.size = size
    info.mode = MODE_EXECUTABLE if executable else MODE_REGULAR
    info.mtime = 0
    info.uid = 0
    info.gid = 0
    info.uname = ""
    info.gname = ""
    return info


class ArchiveWriter:
    """Sequential GNU tar sink over a caller-supplied binary stream."""

    def __init__(self, sink: BinaryIO) -> None:
        self._sink = sink
        self._tar = tarfile.open(
            fileobj=sink,
            mode="w",
            format=tarfile.GNU_FORMAT,
            dereference=False,
        )
        self._closed = False

    def append(self, info: tarfile.TarInfo, reader) -> None:
        self._tar.addfile(info, reader)

    def finalize(self) -> BinaryIO:
        try:
            self._tar.close()
            self._sink.flush()
        except (OSError, tarfile.TarError) as exc:
            raise ArchiveFinalizeError(exc) from exc
        finally:
            self._closed = True
        return self._sink

    def abort(self) -> None:
        # TarFile.close() is deliberately never called here: it would append
        # end-of-archive blocks to a partial archive. The sink is the caller's,
        # so the TarFile holds nothing else that needs releasing.
        self._closed = True

    def __enter__(self) -> "ArchiveWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.abort()
