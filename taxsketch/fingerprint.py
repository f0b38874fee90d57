"""FNV-1 fingerprint of a k-mer, used to rank k-mers inside the sketch."""

from __future__ import annotations

import numpy as np

FNV_OFFSET_BASIS = 14695981039346656037
FNV_PRIME = 1099511628211

_U64 = 0xFFFFFFFFFFFFFFFF


def mix(kmer: int) -> int:
    """FNV-1 (multiply, then xor) over the 8 little-endian bytes of *kmer*."""
    h = FNV_OFFSET_BASIS
    for byte in int(kmer).to_bytes(8, "little"):
        h = ((h * FNV_PRIME) & _U64) ^ byte
    return h


def mix_array(kmers: np.ndarray) -> np.ndarray:
    """Vectorized :func:`mix`; uint64 arithmetic wraps like the scalar mask."""
    kmers = np.asarray(kmers, dtype=np.uint64)
    h = np.full(kmers.shape, FNV_OFFSET_BASIS, dtype=np.uint64)
    prime = np.uint64(FNV_PRIME)
    byte_mask = np.uint64(0xFF)
    for i in range(8):
        h = (h * prime) ^ ((kmers >> np.uint64(8 * i)) & byte_mask)
    return h
