"""
Bit-reversal permutation tables for the iterative radix-2 FFT.

Tables depend only on the transform length, so a :class:`BitReversalCache`
computes each one once and hands out the same read-only array afterwards.
"""

from __future__ import annotations

import logging
import threading

import numpy as np

from .errors import InvalidLengthError

logger = logging.getLogger(__name__)


def is_power_of_two(n: int) -> bool:
    return n > 0 and n & (n - 1) == 0


def bit_reverse_indices(n: int) -> np.ndarray:
    """
    Return the permutation p where p[i] is i with its log2(n) bits reversed.

    Raises InvalidLengthError if n is not a power of two.
    """
    if not is_power_of_two(n):
        raise InvalidLengthError(n)
    num_bits = n.bit_length() - 1
    indices = np.arange(n, dtype=np.int64)
    reversed_idx = np.zeros(n, dtype=np.int64)
    for bit in range(num_bits):
        reversed_idx = (reversed_idx << 1) | ((indices >> bit) & 1)
    return reversed_idx


class BitReversalCache:
    """Lazily populated map from transform length to permutation table."""

    def __init__(self):
        self._tables: dict[int, np.ndarray] = {}
        self._lock = threading.Lock()

    def get(self, n: int) -> np.ndarray:
        table = self._tables.get(n)
        if table is not None:
            return table

        # Computed outside the lock; a racing duplicate yields the same table.
        table = bit_reverse_indices(n)
        table.setflags(write=False)
        with self._lock:
            table = self._tables.setdefault(n, table)
        logger.debug("Cached bit-reversal table for N=%d", n)
        return table

    def clear(self) -> None:
        with self._lock:
            self._tables.clear()

    def __contains__(self, n: int) -> bool:
        return n in self._tables

    def __len__(self) -> int:
        return len(self._tables)
