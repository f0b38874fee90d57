"""Sequence and profile I/O – FASTA sequence source, file lists, profile files."""

from __future__ import annotations

import gzip
import os
import re
import struct
from pathlib import Path
from typing import Generator, Iterable, List, Tuple, Union

import numpy as np

PROFILE_SUFFIX = ".profile"

# count field, then one field per k-mer; both unsigned 64-bit little-endian
_COUNT = struct.Struct("<Q")
_KMER_DTYPE = np.dtype("<u8")

_NON_ACGT = re.compile(r"[^ACGT]+")


def read_fasta(filepath: Union[str, Path]) -> Generator[Tuple[str, str], None, None]:
    """Yield (name, sequence) tuples from a FASTA file.

    Supports plain-text and gzip-compressed files (.gz).
    """
    filepath = Path(filepath)
    opener = gzip.open if filepath.suffix == ".gz" else open

    name: str | None = None
    parts: list[str] = []

    with opener(filepath, "rt") as fh:  # type: ignore[arg-type]
        for line in fh:
            line = line.rstrip("\n").rstrip("\r")
            if line.startswith(">"):
                if name is not None:
                    yield name, "".join(parts)
                name = line[1:].split()[0] if line[1:].strip() else ""
                parts = []
            elif line.startswith(";"):
                continue
            else:
                parts.append(line.strip())
        if name is not None:
            yield name, "".join(parts)


def clean_sequences(filepath: Union[str, Path]) -> Generator[str, None, None]:
    """Yield the ACGT-only fragments of every record in *filepath*.

    Records are upper-cased and split at every run of other characters
    (N, IUPAC codes, gaps), so no k-mer spans an ambiguous base.
    """
    for _, seq in read_fasta(filepath):
        for fragment in _NON_ACGT.split(seq.upper()):
            if fragment:
                yield fragment


def load_file_list(filepath: Union[str, Path]) -> List[str]:
    """Read one input filename per line, skipping blanks and ``#`` comments."""
    files = []
    with open(filepath) as fh:
        for line in fh:
            line = line.strip()
            if line and not line.startswith("#"):
                files.append(line)
    return files


def profile_path(input_file: Union[str, Path], out_dir: Union[str, Path] = ".") -> Path:
    """``<out_dir>/<basename of input_file>.profile``."""
    return Path(out_dir) / (Path(input_file).name + PROFILE_SUFFIX)


def write_profile(filepath: Union[str, Path], kmers: Iterable[int]) -> None:
    """Write a profile: the k-mer count followed by the k-mers in slot order.

    Data goes to a temporary file next to *filepath* that is renamed into
    place, so a failed write leaves no truncated profile behind.
    """
    filepath = Path(filepath)
    if not isinstance(kmers, np.ndarray):
        kmers = list(kmers)
    body = np.asarray(kmers, dtype=_KMER_DTYPE)
    tmp = filepath.with_name(filepath.name + ".tmp")
    try:
        with open(tmp, "wb") as fh:
            fh.write(_COUNT.pack(len(body)))
            fh.write(body.tobytes())
        os.replace(tmp, filepath)
    except OSError:
        if tmp.exists():
            tmp.unlink()
        raise


def read_profile(filepath: Union[str, Path]) -> np.ndarray:
    """Read the k-mers of a profile written by :func:`write_profile`."""
    data = Path(filepath).read_bytes()
    if len(data) < _COUNT.size:
        raise ValueError(f"{filepath}: profile is too short for its count field")
    (count,) = _COUNT.unpack_from(data)
    body = data[_COUNT.size:]
    if len(body) != count * _KMER_DTYPE.itemsize:
        raise ValueError(
            f"{filepath}: expected {count} k-mers, found {len(body)} bytes of data"
        )
    return np.frombuffer(body, dtype=_KMER_DTYPE).astype(np.uint64)
