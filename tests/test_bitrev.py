import threading

import numpy as np
import pytest

from spectral_equalizer.bitrev import BitReversalCache, bit_reverse_indices, is_power_of_two
from spectral_equalizer.errors import InvalidLengthError


def test_is_power_of_two() -> None:
    assert [n for n in range(0, 20) if is_power_of_two(n)] == [1, 2, 4, 8, 16]


def test_known_permutation() -> None:
    assert bit_reverse_indices(8).tolist() == [0, 4, 2, 6, 1, 5, 3, 7]
    assert bit_reverse_indices(1).tolist() == [0]
    assert bit_reverse_indices(2).tolist() == [0, 1]


def test_permutation_is_an_involution() -> None:
    p = bit_reverse_indices(1024)
    assert sorted(p.tolist()) == list(range(1024))
    assert np.array_equal(p[p], np.arange(1024))


@pytest.mark.parametrize("n", [0, 3, 6, 100])
def test_rejects_non_power_of_two(n: int) -> None:
    with pytest.raises(InvalidLengthError):
        bit_reverse_indices(n)
    with pytest.raises(InvalidLengthError):
        BitReversalCache().get(n)


def test_cache_reuses_tables() -> None:
    cache = BitReversalCache()
    assert 16 not in cache
    first = cache.get(16)
    assert 16 in cache
    assert cache.get(16) is first
    assert len(cache) == 1
    assert not first.flags.writeable

    cache.clear()
    assert len(cache) == 0
    assert cache.get(16) is not first


def test_concurrent_first_use_yields_one_table() -> None:
    cache = BitReversalCache()
    results = []
    barrier = threading.Barrier(8)

    def worker() -> None:
        barrier.wait()
        results.append(cache.get(4096))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 8
    assert all(r is results[0] for r in results)
    assert len(cache) == 1
