from __future__ import annotations

import tarfile
from pathlib import Path

import pytest

from tarprint import cli
from tarprint.builder import create
from tarprint.cancel import CancellationToken
from tarprint.store import LocalStore
from tests.fixtures import SAMPLE_TREE, make_tree


@pytest.fixture(autouse=True)
def _no_tarprint_env(monkeypatch):
    for name in ("TARPRINT_STORE_DIR", "TARPRINT_LOG_LEVEL", "TARPRINT_DESTINATION_DIR"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_help_works() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--help"])
    assert excinfo.value.code == 0


def test_build_writes_archive_and_prints_fingerprint(capsys, tmp_path: Path) -> None:
    root = make_tree(tmp_path / "src", SAMPLE_TREE)
    out = tmp_path / "out" / "bundle.tar"
    manifest = tmp_path / "out" / "bundle.json"
    sidecar = tmp_path / "out" / "bundle.tar.sha256"
    store_dir = tmp_path / "cache"

    rc = cli.main(
        [
            "build",
            "--source-dir",
            str(root),
            "--destination-dir",
            "/app",
            "--out",
            str(out),
            "--manifest-out",
            str(manifest),
            "--sha256-out",
            str(sidecar),
            "--store-dir",
            str(store_dir),
            "a",
        ]
    )
    assert rc == 0

    expected = create(["a"], root, "/app", CancellationToken())
    assert capsys.readouterr().out.strip() == expected.fingerprint
    assert out.read_bytes() == expected.archive.getvalue()

    with tarfile.open(out) as tar:
        assert sorted(tar.getnames()) == ["app/a/b.txt", "app/a/c.sh"]

    assert manifest.exists()
    assert sidecar.read_text(encoding="utf-8").endswith("  bundle.tar\n")
    assert LocalStore(store_dir).has(expected.fingerprint)


def test_fingerprint_command(capsys, tmp_path: Path) -> None:
    root = make_tree(tmp_path / "src", SAMPLE_TREE)

    rc = cli.main(["fingerprint", "--source-dir", str(root), "a/c.sh", "a/b.txt"])

    assert rc == 0
    expected = create(["a"], root, "", CancellationToken()).fingerprint
    assert capsys.readouterr().out.strip() == expected


def test_build_failure_removes_partial_output(capsys, tmp_path: Path) -> None:
    root = make_tree(tmp_path / "src", SAMPLE_TREE)
    out = tmp_path / "bundle.tar"

    rc = cli.main(["build", "--source-dir", str(root), "--out", str(out), "a", "missing.txt"])

    assert rc == cli.EXIT_ERROR
    assert not out.exists()
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "missing.txt" in captured.err


def test_interrupted_build_exit_code(monkeypatch, tmp_path: Path) -> None:
    root = make_tree(tmp_path / "src", SAMPLE_TREE)
    out = tmp_path / "bundle.tar"

    real_check = CancellationToken.check

    def cancelled_check(self) -> None:
        self.cancel()
        real_check(self)

    monkeypatch.setattr(CancellationToken, "check", cancelled_check)

    rc = cli.main(["build", "--source-dir", str(root), "--out", str(out), "a"])

    assert rc == cli.EXIT_INTERRUPTED
    assert not out.exists()


def test_upload_failure_exits_with_error(capsys, monkeypatch, tmp_path: Path) -> None:
    from tarprint import store

    class _UnreachableClient:
        def bucket_exists(self, bucket_name: str) -> bool:
            raise ConnectionError("connection refused")

    monkeypatch.delenv("TARPRINT_MINIO_CREDENTIALS_FILE", raising=False)
    monkeypatch.setenv("MINIO_ENDPOINT", "127.0.0.1:1")
    monkeypatch.setenv("MINIO_ACCESS_KEY", "access")
    monkeypatch.setenv("MINIO_SECRET_KEY", "secret")
    monkeypatch.setattr(store, "_get_minio_client", lambda config: _UnreachableClient())

    root = make_tree(tmp_path / "src", SAMPLE_TREE)
    out = tmp_path / "bundle.tar"

    rc = cli.main(["build", "--source-dir", str(root), "--out", str(out), "--upload", "a"])

    assert rc == cli.EXIT_ERROR
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "connection refused" in captured.err
    assert "Traceback" not in captured.err


def test_unusable_store_dir_exits_with_error(capsys, tmp_path: Path) -> None:
    root = make_tree(tmp_path / "src", SAMPLE_TREE)
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way", encoding="utf-8")

    rc = cli.main(
        ["build", "--source-dir", str(root), "--out", str(tmp_path / "b.tar"), "--store-dir", str(blocker), "a"]
    )

    assert rc == cli.EXIT_ERROR
    assert "Unable to open local store" in capsys.readouterr().err
