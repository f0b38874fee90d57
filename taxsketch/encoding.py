"""Nucleotide encoding – 2 bits per base, taken straight from the ASCII bits."""

from __future__ import annotations

import numpy as np


# Codes produced by encode_base: A=0, C=1, T=2, G=3 (lower case is identical)
CODE_TO_BASE = ("A", "C", "T", "G")
BASE_TO_CODE = {"A": 0, "C": 1, "T": 2, "G": 3,
                "a": 0, "c": 1, "t": 2, "g": 3}

UNKNOWN_BASE = "N"


def encode_base(ch: str) -> int:
    """Return the 2-bit code of *ch*.

    Bit 0 comes from ASCII bit 1 and bit 1 from ASCII bit 2.  No validation
    is done here; sequences are expected to be ACGT-only.
    """
    c = ord(ch)
    return ((c & 2) >> 1) | ((c & 4) >> 1)


def decode_base(code: int) -> str:
    """Inverse of :func:`encode_base`; unknown codes decode to ``N``."""
    if 0 <= code < 4:
        return CODE_TO_BASE[code]
    return UNKNOWN_BASE


def complement_code(code: int) -> int:
    """A<->T and C<->G are one bit apart in this encoding."""
    return code ^ 2


def encode_array(seq: str) -> np.ndarray:
    """Encode a whole sequence into a uint8 array of 2-bit codes."""
    raw = np.frombuffer(seq.encode("ascii"), dtype=np.uint8)
    return ((raw & 2) >> 1) | ((raw & 4) >> 1)
