from __future__ import annotations

import io
import logging
import os
import stat
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePath, PurePosixPath
from typing import BinaryIO

from tarprint.archive import ArchiveWriter
from tarprint.cancel import CancellationToken
from tarprint.errors import Interrupted, SourceIOError, TarprintError
from tarprint.fingerprint import FingerprintAggregator
from tarprint.ingest import IngestedFile, ingest_file, stat_entry
from tarprint.paths import PathResolver, lossy_text
from tarprint.walker import walk_files

logger = logging.getLogger(__name__)


class BuildState(str, Enum):
    INIT = "init"
    RESOLVING = "resolving"
    INGESTING = "ingesting"
    AGGREGATING = "aggregating"
    DONE = "done"
    FAILED = "failed"
    INTERRUPTED = "interrupted"


@dataclass(frozen=True, slots=True)
class BuildResult:
    archive: BinaryIO
    fingerprint: str
    entries: tuple[IngestedFile, ...]


class _Build:
    def __init__(self, resolver: PathResolver, writer: ArchiveWriter, token: CancellationToken) -> None:
        self.resolver = resolver
        self.writer = writer
        self.token = token
        self.aggregator = FingerprintAggregator()
        self.entries: list[IngestedFile] = []

    def add_file(self, rel: PurePosixPath) -> None:
        entry = stat_entry(self.resolver.source(rel), rel, self.resolver.destination(rel))
        ingested = ingest_file(entry, self.writer)
        logger.debug("Added %s (%d bytes, %s)", lossy_text(ingested.destination), ingested.size, ingested.digest)
        self.aggregator.add(ingested.digest)
        self.entries.append(ingested)

    def add_input(self, spec: PurePath) -> None:
        source = self.resolver.source(spec)
        try:
            mode = os.stat(source).st_mode
        except OSError as exc:
            raise SourceIOError("fetch filesystem metadata for", source, exc) from exc

        if stat.S_ISDIR(mode):
            for rel in walk_files(source, self.resolver.root, self.token):
                self.add_file(rel)
        else:
            self.add_file(PurePosixPath(spec.as_posix()))


def _set_state(state: BuildState) -> BuildState:
    logger.debug("Archive build state: %s", state.value)
    return state


def create(
    paths: Sequence[str | PurePath],
    source_dir: str | Path,
    destination_dir: str | PurePath,
    token: CancellationToken,
    sink: BinaryIO | None = None,
) -> BuildResult:
    """Archive ``paths`` (relative to ``source_dir``) and fingerprint them.

    Returns the finished archive stream together with the fingerprint, or
    raises exactly one ``TarprintError``. ``Interrupted`` is raised as soon as
    ``token`` is observed set; no partial archive is ever returned.
    """

    state = _set_state(BuildState.INIT)
    if sink is None:
        sink = io.BytesIO()

    try:
        state = _set_state(BuildState.RESOLVING)
        token.check()
        resolver = PathResolver.create(source_dir, destination_dir)

        state = _set_state(BuildState.INGESTING)
        with ArchiveWriter(sink) as writer:
            build = _Build(resolver, writer, token)
            for spec in paths:
                token.check()
                build.add_input(PurePath(spec))

            state = _set_state(BuildState.AGGREGATING)
            fingerprint = build.aggregator.fingerprint()
            archive = writer.finalize()
    except Interrupted:
        _set_state(BuildState.INTERRUPTED)
        logger.info("Archive build interrupted while %s", state.value)
        raise
    except TarprintError as exc:
        _set_state(BuildState.FAILED)
        logger.debug("Archive build failed while %s: %s", state.value, exc)
        raise

    _set_state(BuildState.DONE)
    logger.info(
        "Archived %d file(s) from %s; fingerprint %s",
        len(build.entries),
        resolver.root,
        fingerprint,
    )
    return BuildResult(archive=archive, fingerprint=fingerprint, entries=tuple(build.entries))


def fingerprint_paths(
    paths: Sequence[str | PurePath],
    source_dir: str | Path,
    destination_dir: str | PurePath,
    token: CancellationToken,
) -> str:
    """Fingerprint without keeping the archive bytes around."""

    with open(os.devnull, "wb") as sink:
        return create(paths, source_dir, destination_dir, token, sink=sink).fingerprint
