from __future__ import annotations

import hashlib
from typing import BinaryIO

# Digests are lowercase hex SHA-256 strings. String ordering on them matches
# the byte-lexicographic ordering of the raw digests.
DIGEST_LENGTH = 64

_CHUNK_SIZE = 1024 * 1024


def hash_str(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def hash_read(reader: BinaryIO) -> str:
    digest = hashlib.sha256()
    for chunk in iter(lambda: reader.read(_CHUNK_SIZE), b""):
        digest.update(chunk)
    return digest.hexdigest()


def extend(digest: str, value: str) -> str:
    """Combine a digest with another digest or a plain string.

    Order-sensitive: ``extend(a, b) != extend(b, a)`` in general. Every
    fingerprint ever produced depends on this exact definition.
    """

    return hash_str(digest + value)


class HashingReader:
    """Read-through wrapper that hashes every byte handed to the caller.

    Lets a single read of a file feed both the archive and the content digest.
    """

    def __init__(self, raw: BinaryIO) -> None:
        self._raw = raw
        self._digest = hashlib.sha256()

    def read(self, size: int = -1) -> bytes:
        data = self._raw.read(size)
        if data:
            self._digest.update(data)
        return data

    def drain(self) -> None:
        # Anything past what the consumer asked for still belongs to the file.
        for _ in iter(lambda: self.read(_CHUNK_SIZE), b""):
            pass

    def hexdigest(self) -> str:
        return self._digest.hexdigest()
