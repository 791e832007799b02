from __future__ import annotations

from functools import reduce

from tarprint.fingerprint import FingerprintAggregator, fold_digests
from tarprint.hashing import extend, hash_str


def test_empty_set_fingerprint_is_hash_of_empty_string() -> None:
    assert fold_digests([]) == hash_str("")
    assert FingerprintAggregator().fingerprint() == hash_str("")


def test_fold_is_sorted_then_left_folded() -> None:
    digests = [hash_str("z"), hash_str("a"), hash_str("m")]
    expected = reduce(extend, sorted(digests), hash_str(""))
    manual = hash_str("")
    for d in sorted(digests):
        manual = extend(manual, d)

    assert fold_digests(digests) == expected == manual


def test_aggregator_ignores_insertion_order() -> None:
    digests = [hash_str(str(i)) for i in range(20)]

    forward = FingerprintAggregator()
    backward = FingerprintAggregator()
    for d in digests:
        forward.add(d)
    for d in reversed(digests):
        backward.add(d)

    assert len(forward) == 20
    assert forward.fingerprint() == backward.fingerprint()


def test_aggregator_detects_added_digest() -> None:
    agg = FingerprintAggregator()
    agg.add(hash_str("one"))
    before = agg.fingerprint()
    agg.add(hash_str("two"))
    assert agg.fingerprint() != before
