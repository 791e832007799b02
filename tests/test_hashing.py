from __future__ import annotations

import hashlib
import io

from tarprint.hashing import DIGEST_LENGTH, HashingReader, extend, hash_read, hash_str


def test_hash_str_is_hex_sha256() -> None:
    assert hash_str("") == hashlib.sha256(b"").hexdigest()
    assert len(hash_str("a/b.txt")) == DIGEST_LENGTH


def test_hash_read_matches_hash_of_bytes() -> None:
    data = b"x" * (3 * 1024 * 1024 + 7)
    assert hash_read(io.BytesIO(data)) == hashlib.sha256(data).hexdigest()


def test_extend_is_order_sensitive() -> None:
    a = hash_str("a")
    b = hash_str("b")
    assert extend(a, b) != extend(b, a)
    assert extend(a, "+x") == hash_str(a + "+x")


def test_hashing_reader_hashes_partial_reads_and_drain() -> None:
    data = b"0123456789" * 1000
    reader = HashingReader(io.BytesIO(data))

    assert reader.read(10) == b"0123456789"
    reader.drain()

    assert reader.hexdigest() == hash_read(io.BytesIO(data))
