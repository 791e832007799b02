from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path

from tarprint.builder import create, fingerprint_paths
from tarprint.cancel import CancellationToken, install_sigint_handler
from tarprint.config import load_config_from_env
from tarprint.errors import Interrupted, TarprintError
from tarprint.manifest import write_manifest, write_sha256_sidecar
from tarprint.store import LocalStore, upload_archive

logger = logging.getLogger("tarprint")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def _setup_logging(level: str) -> None:
    """Console logging to stderr; stdout is reserved for the fingerprint."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"))
    logger.handlers[:] = [handler]
    logger.setLevel(getattr(logging, level))
    logger.propagate = False


def _add_common_args(ap: argparse.ArgumentParser, default_destination: str) -> None:
    ap.add_argument("--source-dir", type=Path, required=True, help="Root the PATH arguments are relative to")
    ap.add_argument(
        "--destination-dir",
        default=default_destination,
        help="Prefix for every archive member (a leading '/' is dropped)",
    )
    ap.add_argument("paths", nargs="+", help="Files or directories relative to --source-dir")


def _build_parser(default_destination: str, default_log_level: str) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="tarprint",
        description="Build a deterministic tar archive and a content fingerprint for a set of paths",
    )
    ap.add_argument("--log-level", default=default_log_level, choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = ap.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Write the archive and print its fingerprint")
    _add_common_args(build, default_destination)
    build.add_argument("--out", type=Path, required=True, help="Path to write the .tar archive")
    build.add_argument("--manifest-out", type=Path, default=None, help="Optional JSON manifest path")
    build.add_argument(
        "--sha256-out",
        type=Path,
        default=None,
        help="Optional path to write a sha256 sidecar file for the archive",
    )
    build.add_argument("--store-dir", type=Path, default=None, help="Also store the archive in this local cache")
    build.add_argument("--upload", action="store_true", help="Also upload the archive to MinIO")

    fp = sub.add_parser("fingerprint", help="Print the fingerprint without keeping an archive")
    _add_common_args(fp, default_destination)
    return ap


def _run_build(args: argparse.Namespace, token: CancellationToken, store_dir: Path | None) -> str:
    out: Path = args.out
    out.parent.mkdir(parents=True, exist_ok=True)
    try:
        with out.open("wb") as sink:
            result = create(args.paths, args.source_dir, args.destination_dir, token, sink=sink)
    except BaseException:
        out.unlink(missing_ok=True)
        raise

    if args.manifest_out is not None:
        write_manifest(args.manifest_out, result)
    if args.sha256_out is not None:
        write_sha256_sidecar(file_path=out, out=args.sha256_out)

    if store_dir is not None:
        LocalStore(store_dir).put(result, out)
    if args.upload:
        upload_archive(result, out)
    return result.fingerprint


def main(argv: list[str] | None = None) -> int:
    try:
        config = load_config_from_env()
    except TarprintError as exc:
        print(f"tarprint: {exc}", file=sys.stderr)
        return EXIT_ERROR

    args = _build_parser(config.destination_dir, config.log_level).parse_args(argv)
    _setup_logging(args.log_level)

    token = CancellationToken()
    previous = install_sigint_handler(token)
    try:
        if args.command == "build":
            store_dir = args.store_dir if args.store_dir is not None else config.store_dir
            fingerprint = _run_build(args, token, store_dir)
        else:
            fingerprint = fingerprint_paths(args.paths, args.source_dir, args.destination_dir, token)
    except Interrupted as exc:
        logger.error("%s", exc)
        return EXIT_INTERRUPTED
    except TarprintError as exc:
        logger.error("%s", exc)
        return EXIT_ERROR
    except OSError as exc:
        # Writing --out, --manifest-out or --sha256-out.
        logger.error("Unable to write output. Details: %s", exc)
        return EXIT_ERROR
    finally:
        signal.signal(signal.SIGINT, previous)

    print(fingerprint)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
