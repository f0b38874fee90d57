"""Rolling k-mer hashing over 2-bit encoded DNA."""

from __future__ import annotations

from typing import Generator, Sequence

import numpy as np

from taxsketch.encoding import decode_base, encode_array, encode_base

MAX_KMER_LEN = 32


def check_kmer_len(kmer_len: int) -> None:
    if not 1 <= kmer_len <= MAX_KMER_LEN:
        raise ValueError(
            f"kmer_len must be between 1 and {MAX_KMER_LEN}, got {kmer_len}"
        )


def _mask(kmer_len: int) -> int:
    return (1 << (2 * kmer_len)) - 1


def initial_hash(window: Sequence[str], kmer_len: int) -> int:
    """Encode the first *kmer_len* characters of *window*."""
    h = 0
    for ch in window[:kmer_len]:
        h = (h << 2) | encode_base(ch)
    return h


def slide(old_hash: int, next_char: str, kmer_len: int) -> int:
    """Drop the oldest base of *old_hash* and append *next_char*."""
    return ((old_hash << 2) & _mask(kmer_len)) | encode_base(next_char)


def decode(kmer: int, kmer_len: int) -> str:
    """Text form of *kmer*; the most significant base comes first."""
    chars = []
    for _ in range(kmer_len):
        chars.append(decode_base(kmer & 3))
        kmer >>= 2
    return "".join(reversed(chars))


def iter_kmers(seq: str, kmer_len: int) -> Generator[int, None, None]:
    """Lazily yield the k-mer at every position of *seq*.

    Yields ``len(seq) - kmer_len + 1`` values, or nothing when the sequence
    is shorter than *kmer_len*.
    """
    if len(seq) < kmer_len:
        return
    h = initial_hash(seq, kmer_len)
    yield h
    for ch in seq[kmer_len:]:
        h = slide(h, ch, kmer_len)
        yield h


def kmer_array(seq: str, kmer_len: int) -> np.ndarray:
    """All k-mers of *seq* as a uint64 array (same values as iter_kmers)."""
    n = len(seq) - kmer_len + 1
    if n <= 0:
        return np.empty(0, dtype=np.uint64)
    codes = encode_array(seq).astype(np.uint64)
    out = np.zeros(n, dtype=np.uint64)
    for j in range(kmer_len):
        shift = np.uint64(2 * (kmer_len - 1 - j))
        out |= codes[j : j + n] << shift
    return out


def reverse_complement(kmer: int, kmer_len: int) -> int:
    """Reverse complement of an encoded k-mer."""
    rc = 0
    for _ in range(kmer_len):
        rc = (rc << 2) | ((kmer & 3) ^ 2)
        kmer >>= 2
    return rc


def canonical(kmer: int, kmer_len: int) -> int:
    """Strand-independent representative: min of forward and reverse complement."""
    return min(kmer, reverse_complement(kmer, kmer_len))


def reverse_complement_array(kmers: np.ndarray, kmer_len: int) -> np.ndarray:
    kmers = np.asarray(kmers, dtype=np.uint64)
    rc = np.zeros_like(kmers)
    two = np.uint64(2)
    three = np.uint64(3)
    for j in range(kmer_len):
        base = (kmers >> np.uint64(2 * j)) & three
        rc |= (base ^ two) << np.uint64(2 * (kmer_len - 1 - j))
    return rc


def canonical_array(kmers: np.ndarray, kmer_len: int) -> np.ndarray:
    kmers = np.asarray(kmers, dtype=np.uint64)
    return np.minimum(kmers, reverse_complement_array(kmers, kmer_len))
