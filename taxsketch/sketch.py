"""MinHash sketch – N minimal (rank, k-mer) slots over one file's k-mers.

Every k-mer seen for a file is first appended to an accumulation buffer as a
``(fingerprint, kmer)`` pair.  Reducing the buffer computes, for every slot
``i``, the entry with the smallest ``fingerprint ^ masks[i]``.  XOR-ing one
fingerprint with N fixed random masks stands in for N independent hash
functions.

Slots never depend on each other, so the reduction is split into contiguous
slot ranges and run on a thread pool; each worker writes only its own range.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

MAX_HASH = 0xFFFFFFFFFFFFFFFF
BUCKETS = 4
DEFAULT_RESERVE = 1 << 20
SCAN_CHUNK = 1 << 20


class SketchState(Enum):
    CONSTRUCTED = "constructed"
    ACCUMULATING = "accumulating"
    FINALIZED = "finalized"


class SketchStateError(RuntimeError):
    """Raised when a finalized sketch is modified."""


@dataclass(frozen=True)
class Best:
    """Smallest rank seen for one slot and the k-mer that produced it."""

    hash: int = MAX_HASH
    kmer: int = 0


def make_masks(count: int, seed: int = 0) -> np.ndarray:
    """Per-slot 64-bit XOR masks from a Mersenne Twister seeded with *seed*.

    Each mask is two consecutive 32-bit draws, the first one in the high half.
    """
    rng = np.random.RandomState(seed)
    draws = rng.randint(0, 1 << 32, size=2 * count, dtype=np.uint32).astype(np.uint64)
    return (draws[0::2] << np.uint64(32)) | draws[1::2]


def scan_slot(
    hashes: np.ndarray,
    kmers: np.ndarray,
    mask: int,
    best: Best = Best(),
    chunk: int = SCAN_CHUNK,
    scratch: Optional[np.ndarray] = None,
) -> Best:
    """Return the best entry of the buffer for one slot, starting from *best*.

    The buffer is read in buckets of four: lane ``j`` tracks the minimum over
    entries ``j, j+4, j+8, ...``; the ``len % 4`` remainder is folded into
    lane 0 one entry at a time.  Lanes are merged in order with a strict
    comparison, so *best* only changes on a real improvement.  Within a lane
    the earliest entry wins a tie and lanes are merged lowest first, so ties
    between different k-mers are settled by buffer position alone and the
    result does not depend on how the scan is chunked or threaded.

    Ranks are computed *chunk* entries at a time into *scratch* (allocated
    here when not given), so memory use does not grow with the buffer.
    """
    if chunk <= 0 or chunk % BUCKETS:
        raise ValueError(f"chunk must be a positive multiple of {BUCKETS}, got {chunk}")
    xor = np.uint64(mask)
    lanes = [best] * BUCKETS
    n = len(hashes)
    limit = (n // BUCKETS) * BUCKETS

    if limit and scratch is None:
        scratch = np.empty(min(chunk, limit), dtype=np.uint64)

    for start in range(0, limit, chunk):
        stop = min(start + chunk, limit)
        ranks = scratch[: stop - start]
        np.bitwise_xor(hashes[start:stop], xor, out=ranks)
        body = ranks.reshape(-1, BUCKETS)
        rows = body.argmin(axis=0)
        for lane in range(BUCKETS):
            row = int(rows[lane])
            h = int(body[row, lane])
            if h < lanes[lane].hash:
                lanes[lane] = Best(h, int(kmers[start + row * BUCKETS + lane]))

    for i in range(limit, n):
        h = int(hashes[i] ^ xor)
        if h < lanes[0].hash:
            lanes[0] = Best(h, int(kmers[i]))

    result = best
    for candidate in lanes:
        if candidate.hash < result.hash:
            result = candidate
    return result


def partition(count: int, workers: int) -> List[Tuple[int, int]]:
    """Split ``range(count)`` into at most *workers* contiguous ranges."""
    workers = max(1, min(workers, count))
    step, extra = divmod(count, workers)
    ranges = []
    start = 0
    for w in range(workers):
        stop = start + step + (1 if w < extra else 0)
        ranges.append((start, stop))
        start = stop
    return ranges


class MinHashSketch:
    """Fixed-size MinHash sketch for a single input file."""

    def __init__(
        self,
        count: int,
        seed: int = 0,
        reserve: int = DEFAULT_RESERVE,
        scan_chunk: int = SCAN_CHUNK,
    ):
        if count <= 0:
            raise ValueError(f"min_hash_count must be positive, got {count}")
        if scan_chunk <= 0 or scan_chunk % BUCKETS:
            raise ValueError(f"scan_chunk must be a positive multiple of {BUCKETS}, got {scan_chunk}")
        self.count = count
        self.seed = seed
        self.scan_chunk = scan_chunk
        self.masks = make_masks(count, seed)
        self.state = SketchState.CONSTRUCTED

        self._best_hash = np.full(count, MAX_HASH, dtype=np.uint64)
        self._best_kmer = np.zeros(count, dtype=np.uint64)

        # fingerprints and k-mers live in separate arrays so the scan only
        # touches the k-mer column when a lane improves
        capacity = max(int(reserve), 1)
        self._hashes = np.empty(capacity, dtype=np.uint64)
        self._kmers = np.empty(capacity, dtype=np.uint64)
        self._size = 0

    # -- accumulation -------------------------------------------------------

    @property
    def pending(self) -> int:
        """Number of buffered entries not yet reduced into the slots."""
        return self._size

    def _check_open(self) -> None:
        if self.state is SketchState.FINALIZED:
            raise SketchStateError("sketch is already finalized")

    def _grow(self, extra: int) -> None:
        needed = self._size + extra
        capacity = len(self._hashes)
        if needed <= capacity:
            return
        while capacity < needed:
            capacity *= 2
        hashes = np.empty(capacity, dtype=np.uint64)
        kmers = np.empty(capacity, dtype=np.uint64)
        hashes[: self._size] = self._hashes[: self._size]
        kmers[: self._size] = self._kmers[: self._size]
        self._hashes, self._kmers = hashes, kmers

    def accumulate(self, fingerprint: int, kmer: int) -> None:
        self._check_open()
        self.state = SketchState.ACCUMULATING
        self._grow(1)
        self._hashes[self._size] = fingerprint
        self._kmers[self._size] = kmer
        self._size += 1

    def accumulate_many(self, fingerprints: np.ndarray, kmers: np.ndarray) -> None:
        """Append matching arrays of fingerprints and k-mers."""
        self._check_open()
        if len(fingerprints) != len(kmers):
            raise ValueError("fingerprints and kmers must be the same length")
        self.state = SketchState.ACCUMULATING
        n = len(fingerprints)
        if n == 0:
            return
        self._grow(n)
        self._hashes[self._size : self._size + n] = fingerprints
        self._kmers[self._size : self._size + n] = kmers
        self._size += n

    # -- reduction ----------------------------------------------------------

    def _reduce_range(self, start: int, stop: int, hashes: np.ndarray, kmers: np.ndarray) -> None:
        # one scratch buffer per worker, reused for every slot of the range
        scratch = np.empty(min(self.scan_chunk, len(hashes)), dtype=np.uint64)
        for i in range(start, stop):
            current = Best(int(self._best_hash[i]), int(self._best_kmer[i]))
            best = scan_slot(
                hashes, kmers, int(self.masks[i]), current,
                chunk=self.scan_chunk, scratch=scratch,
            )
            if best.hash < current.hash:
                self._best_hash[i] = best.hash
                self._best_kmer[i] = best.kmer

    def reduce(self, workers: Optional[int] = None) -> None:
        """Fold the buffered entries into the slots and clear the buffer.

        The sketch stays open, so more k-mers can be added and reduced later;
        slot ranks only ever go down.
        """
        self._check_open()
        hashes = self._hashes[: self._size]
        kmers = self._kmers[: self._size]

        if self._size:
            if workers is None:
                workers = os.cpu_count() or 1
            ranges = partition(self.count, workers)
            logger.debug(
                "Reducing %d k-mers into %d slots on %d worker(s)",
                self._size, self.count, len(ranges),
            )
            if len(ranges) == 1:
                self._reduce_range(0, self.count, hashes, kmers)
            else:
                with ThreadPoolExecutor(max_workers=len(ranges)) as pool:
                    futures = [
                        pool.submit(self._reduce_range, start, stop, hashes, kmers)
                        for start, stop in ranges
                    ]
                    for fut in futures:
                        fut.result()

        self._size = 0

    def finalize(self, workers: Optional[int] = None) -> None:
        """Reduce what is buffered and seal the sketch."""
        self.reduce(workers=workers)
        self.state = SketchState.FINALIZED
        self._hashes = np.empty(0, dtype=np.uint64)
        self._kmers = np.empty(0, dtype=np.uint64)

    # -- results ------------------------------------------------------------

    @property
    def slots(self) -> List[Best]:
        return [Best(int(h), int(k)) for h, k in zip(self._best_hash, self._best_kmer)]

    def kmers(self) -> np.ndarray:
        """Slot k-mers in slot order (a copy)."""
        return self._best_kmer.copy()
