from __future__ import annotations

from pathlib import Path


class TarprintError(Exception):
    """Base class for every failure surfaced by an archive build."""


class SourceIOError(TarprintError):
    """Open, read, metadata or canonicalization failure on a source path."""

    def __init__(self, action: str, path: str | Path, cause: BaseException) -> None:
        self.action = action
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Unable to {action} {str(self.path)!r}. Details: {cause}")


class PathRelativizeError(TarprintError):
    def __init__(self, entry_path: str | Path, root: str | Path, cause: BaseException) -> None:
        self.entry_path = Path(entry_path)
        self.root = Path(root)
        self.cause = cause
        super().__init__(
            f"Unable to relativize path {str(self.entry_path)!r} "
            f"with respect to {str(self.root)!r}. Details: {cause}"
        )


class Interrupted(TarprintError):
    def __init__(self) -> None:
        super().__init__("Interrupted.")


class ArchiveFinalizeError(TarprintError):
    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Error writing tar archive. Details: {cause}")


class ConfigError(TarprintError):
    pass


class StoreError(TarprintError):
    def __init__(self, action: str, cause: BaseException) -> None:
        self.action = action
        self.cause = cause
        super().__init__(f"Unable to {action}. Details: {cause}")
