from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import duckdb

_SCHEMA = """
CREATE TABLE IF NOT EXISTS archive (
    fingerprint VARCHAR PRIMARY KEY,
    object_key VARCHAR NOT NULL,
    file_count INTEGER NOT NULL,
    total_bytes BIGINT NOT NULL,
    archive_sha256 VARCHAR NOT NULL,
    recorded_at TIMESTAMP DEFAULT current_timestamp
)
"""


@dataclass(frozen=True, slots=True)
class CatalogRecord:
    fingerprint: str
    object_key: str
    file_count: int
    total_bytes: int
    archive_sha256: str


class ArchiveCatalog:
    """
    DuckDB index of archives held in a cache store, keyed by fingerprint.
    """

    def __init__(self, duckdb_path: Path):
        self.duckdb_path = duckdb_path
        self.duckdb_path.parent.mkdir(parents=True, exist_ok=True)
        con = duckdb.connect(str(self.duckdb_path))
        try:
            con.execute(_SCHEMA)
        finally:
            con.close()

    def record(self, record: CatalogRecord) -> None:
        con = duckdb.connect(str(self.duckdb_path))
        try:
            con.execute(
                "INSERT OR REPLACE INTO archive "
                "(fingerprint, object_key, file_count, total_bytes, archive_sha256) "
                "VALUES (?, ?, ?, ?, ?)",
                [
                    record.fingerprint,
                    record.object_key,
                    record.file_count,
                    record.total_bytes,
                    record.archive_sha256,
                ],
            )
        finally:
            con.close()

    def lookup(self, fingerprint: str) -> Optional[CatalogRecord]:
        con = duckdb.connect(str(self.duckdb_path), read_only=True)
        try:
            row = con.execute(
                "SELECT fingerprint, object_key, file_count, total_bytes, archive_sha256 "
                "FROM archive WHERE fingerprint = ?",
                [fingerprint],
            ).fetchone()
        finally:
            con.close()

        if row is None:
            return None
        return CatalogRecord(*row)

    def list_records(self) -> List[Dict[str, Any]]:
        """All catalog rows, ordered by fingerprint."""
        con = duckdb.connect(str(self.duckdb_path), read_only=True)
        try:
            cursor = con.execute(
                "SELECT fingerprint, object_key, file_count, total_bytes, archive_sha256 "
                "FROM archive ORDER BY fingerprint"
            )
            columns = [desc[0] for desc in cursor.description]
            return [dict(zip(columns, row)) for row in cursor.fetchall()]
        finally:
            con.close()
