from __future__ import annotations

from collections.abc import Iterable
from functools import reduce

from tarprint.hashing import extend, hash_str


def fold_digests(digests: Iterable[str]) -> str:
    """Sort per-file digests and fold them, seeded with the empty-string hash."""

    return reduce(extend, sorted(digests), hash_str(""))


class FingerprintAggregator:
    def __init__(self) -> None:
        self._digests: list[str] = []

    def add(self, digest: str) -> None:
        self._digests.append(digest)

    def __len__(self) -> int:
        return len(self._digests)

    def fingerprint(self) -> str:
        return fold_digests(self._digests)
