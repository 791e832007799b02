from __future__ import annotations

import io
import logging
import shutil
from pathlib import Path

import duckdb

from tarprint.builder import BuildResult
from tarprint.catalog import ArchiveCatalog, CatalogRecord
from tarprint.config import MinioConfig, load_minio_config_from_env
from tarprint.errors import StoreError
from tarprint.manifest import build_manifest, sha256_file, to_deterministic_json_bytes

logger = logging.getLogger(__name__)

CATALOG_FILENAME = "catalog.duckdb"


def object_keys_for_fingerprint(fingerprint: str) -> dict[str, str]:
    """Deterministic object key naming for a fingerprint."""

    fingerprint = str(fingerprint)
    prefix = fingerprint[:2]
    return {
        "archive": f"{prefix}/{fingerprint}.tar",
        "manifest": f"{prefix}/{fingerprint}.json",
    }


class LocalStore:
    """Directory-backed cache of archives, indexed by a DuckDB catalog."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        try:
            self.catalog = ArchiveCatalog(self.root / CATALOG_FILENAME)
        except (OSError, duckdb.Error) as exc:
            raise StoreError(f"open local store {str(self.root)!r}", exc) from exc

    def archive_path(self, fingerprint: str) -> Path:
        return self.root / object_keys_for_fingerprint(fingerprint)["archive"]

    def has(self, fingerprint: str) -> bool:
        try:
            record = self.catalog.lookup(fingerprint)
        except duckdb.Error as exc:
            raise StoreError(f"look up {fingerprint} in local store", exc) from exc
        return record is not None and (self.root / record.object_key).is_file()

    def put(self, result: BuildResult, archive_file: Path) -> CatalogRecord:
        try:
            record = self._put(result, archive_file)
        except (OSError, duckdb.Error) as exc:
            raise StoreError(f"store archive {result.fingerprint} in {str(self.root)!r}", exc) from exc
        logger.info("Stored archive %s in %s", result.fingerprint, self.root)
        return record

    def _put(self, result: BuildResult, archive_file: Path) -> CatalogRecord:
        keys = object_keys_for_fingerprint(result.fingerprint)
        archive_dest = self.root / keys["archive"]
        manifest_dest = self.root / keys["manifest"]
        archive_dest.parent.mkdir(parents=True, exist_ok=True)

        # Objects only ever appear under their final key once complete.
        tmp = archive_dest.with_suffix(".tar.partial")
        shutil.copyfile(archive_file, tmp)
        tmp.replace(archive_dest)
        manifest_dest.write_bytes(to_deterministic_json_bytes(build_manifest(result)))

        record = CatalogRecord(
            fingerprint=result.fingerprint,
            object_key=keys["archive"],
            file_count=len(result.entries),
            total_bytes=sum(e.size for e in result.entries),
            archive_sha256=sha256_file(archive_dest),
        )
        self.catalog.record(record)
        return record


def _get_minio_client(config: MinioConfig):
    try:
        from minio import Minio  # type: ignore[import-not-found]
    except Exception as exc:  # pragma: no cover
        raise StoreError("load the minio library (pip install minio)", exc) from exc

    try:
        return Minio(
            endpoint=config.endpoint,
            access_key=config.access_key,
            secret_key=config.secret_key,
            secure=config.secure,
        )
    except ValueError as exc:
        raise StoreError(f"create MinIO client for {config.endpoint!r}", exc) from exc


def upload_archive(result: BuildResult, archive_file: Path, config: MinioConfig | None = None) -> dict[str, str]:
    """Upload an archive and its manifest to MinIO under fingerprint keys.

    Uploads:
      - {fp[:2]}/{fp}.tar
      - {fp[:2]}/{fp}.json

    Returns the uploaded object keys. Credentials come from the environment.
    """

    if config is None:
        config = load_minio_config_from_env()
    client = _get_minio_client(config)

    try:
        uploaded = _put_objects(client, config.bucket, result, archive_file)
    except Exception as exc:
        # minio raises S3Error, but connection failures arrive as raw urllib3 errors.
        raise StoreError(f"upload archive {result.fingerprint} to bucket {config.bucket!r}", exc) from exc

    logger.info("Uploaded archive %s to bucket %s", result.fingerprint, config.bucket)
    return uploaded


def _put_objects(client, bucket: str, result: BuildResult, archive_file: Path) -> dict[str, str]:
    keys = object_keys_for_fingerprint(result.fingerprint)

    if not client.bucket_exists(bucket_name=bucket):
        client.make_bucket(bucket_name=bucket)

    uploaded: dict[str, str] = {}

    client.fput_object(
        bucket_name=bucket,
        object_name=keys["archive"],
        file_path=str(archive_file),
        content_type="application/x-tar",
    )
    uploaded["archive"] = keys["archive"]

    manifest_bytes = to_deterministic_json_bytes(build_manifest(result))
    client.put_object(
        bucket_name=bucket,
        object_name=keys["manifest"],
        data=io.BytesIO(manifest_bytes),
        length=len(manifest_bytes),
        content_type="application/json",
    )
    uploaded["manifest"] = keys["manifest"]
    return uploaded
