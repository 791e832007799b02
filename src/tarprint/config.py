from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from tarprint.errors import ConfigError

_TRUE_VALUES = {"1", "true", "t", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "f", "no", "n", "off"}

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _env_bool(name: str, default: bool = False) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    raw_norm = raw.strip().lower()
    if raw_norm in _TRUE_VALUES:
        return True
    if raw_norm in _FALSE_VALUES:
        return False
    return default


@dataclass(frozen=True, slots=True)
class TarprintConfig:
    destination_dir: str
    store_dir: Path | None
    log_level: str


@dataclass(frozen=True, slots=True)
class MinioConfig:
    endpoint: str
    access_key: str
    secret_key: str
    secure: bool
    bucket: str


def load_config_from_env() -> TarprintConfig:
    store_dir = _env("TARPRINT_STORE_DIR")
    log_level = (_env("TARPRINT_LOG_LEVEL", default="INFO") or "INFO").strip().upper()
    if log_level not in _LOG_LEVELS:
        raise ConfigError(f"TARPRINT_LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}, got {log_level!r}")

    return TarprintConfig(
        destination_dir=_env("TARPRINT_DESTINATION_DIR", default="") or "",
        store_dir=Path(store_dir) if store_dir else None,
        log_level=log_level,
    )


def _maybe_load_minio_env_from_file(path: str) -> None:
    """Fill in unset MINIO_* variables from a KEY=VALUE / KEY: VALUE file.

    Variables already present in the environment are left alone.
    """

    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return

    wanted = {
        "MINIO_ENDPOINT",
        "MINIO_ACCESS_KEY",
        "MINIO_SECRET_KEY",
        "MINIO_SECURE",
        "TARPRINT_BUCKET",
    }

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        m = re.match(r"^(?:export\s+)?([A-Z0-9_]+)\s*[=:]\s*(.*)$", line)
        if not m:
            continue
        key, value = m.group(1), m.group(2).strip()
        if key not in wanted or os.getenv(key):
            continue

        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1].strip()
        if value:
            os.environ[key] = value


def load_minio_config_from_env(*, credentials_file: str | None = None) -> MinioConfig:
    if credentials_file:
        _maybe_load_minio_env_from_file(credentials_file)

    env_file = os.getenv("TARPRINT_MINIO_CREDENTIALS_FILE")
    if env_file:
        _maybe_load_minio_env_from_file(env_file)

    endpoint = _env("MINIO_ENDPOINT")
    access_key = _env("MINIO_ACCESS_KEY")
    secret_key = _env("MINIO_SECRET_KEY")

    missing = [
        name
        for name, value in (
            ("MINIO_ENDPOINT", endpoint),
            ("MINIO_ACCESS_KEY", access_key),
            ("MINIO_SECRET_KEY", secret_key),
        )
        if not value
    ]
    if missing:
        raise ConfigError("Missing required MinIO environment variables: " + ", ".join(missing))

    return MinioConfig(
        endpoint=str(endpoint),
        access_key=str(access_key),
        secret_key=str(secret_key),
        secure=_env_bool("MINIO_SECURE", default=False),
        bucket=str(_env("TARPRINT_BUCKET", default="tarprint-cache")),
    )
