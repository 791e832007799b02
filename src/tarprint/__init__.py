"""Deterministic tar archives with order-independent content fingerprints.

``create`` archives a set of paths and returns the archive together with a
fingerprint that depends only on relative paths, contents and executable bits.
"""

from tarprint.builder import BuildResult, create, fingerprint_paths
from tarprint.cancel import CancellationToken
from tarprint.errors import (
    ArchiveFinalizeError,
    ConfigError,
    Interrupted,
    PathRelativizeError,
    SourceIOError,
    StoreError,
    TarprintError,
)

__all__: list[str] = [
    "ArchiveFinalizeError",
    "BuildResult",
    "CancellationToken",
    "ConfigError",
    "Interrupted",
    "PathRelativizeError",
    "SourceIOError",
    "StoreError",
    "TarprintError",
    "create",
    "fingerprint_paths",
]
