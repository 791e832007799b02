"""Deterministic JSON manifest and sha256 sidecar for a built archive.

Written with the same conventions as any other evidence file: UTF-8, LF
newlines, sorted keys, two-space indent, trailing newline.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

from tarprint.builder import BuildResult
from tarprint.paths import lossy_text

MANIFEST_SCHEMA_VERSION = "1.0.0"


def build_manifest(result: BuildResult) -> dict[str, Any]:
    entries = sorted(result.entries, key=lambda e: lossy_text(e.destination))
    return {
        "schema_version": MANIFEST_SCHEMA_VERSION,
        "fingerprint": result.fingerprint,
        "file_count": len(entries),
        "total_bytes": sum(e.size for e in entries),
        "entries": [
            {
                "path": lossy_text(e.destination),
                "size": e.size,
                "executable": e.executable,
                "digest": e.digest,
            }
            for e in entries
        ],
    }


def to_deterministic_json_bytes(data: Any) -> bytes:
    return (json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n").encode("utf-8")


def write_manifest(path: str | Path, result: BuildResult) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(to_deterministic_json_bytes(build_manifest(result)))
    return p


def sha256_file(path: str | Path) -> str:
    digest = hashlib.sha256()
    with Path(path).open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def write_sha256_sidecar(*, file_path: Path, out: Path) -> None:
    # sha256sum format: <sha256>  <filename>
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(f"{sha256_file(file_path)}  {file_path.name}\n", encoding="utf-8", newline="\n")
