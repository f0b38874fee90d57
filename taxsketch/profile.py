"""Profile building – one MinHash sketch per input file."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np

from taxsketch.fingerprint import mix_array
from taxsketch.io import clean_sequences, profile_path, write_profile
from taxsketch.kmer import canonical_array, check_kmer_len, decode, kmer_array
from taxsketch.sketch import MinHashSketch

logger = logging.getLogger(__name__)

# k-mers hashed per step of a long sequence
SEQUENCE_WINDOW = 1 << 20


@dataclass
class ProfileConfig:
    """Parameters shared by every file of a run."""

    kmer_len: int
    min_hash_count: int
    seed: int = 0
    workers: Optional[int] = None
    out_dir: Union[str, Path] = "."

    def validate(self) -> None:
        check_kmer_len(self.kmer_len)
        if self.min_hash_count <= 0:
            raise ValueError(f"min_hash_count must be positive, got {self.min_hash_count}")
        if self.workers is not None and self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")


@dataclass
class Profile:
    """Finalized sketch of one input: one k-mer per hash-function slot."""

    source: str
    kmer_len: int
    kmers: np.ndarray

    @property
    def count(self) -> int:
        return len(self.kmers)

    def decoded(self) -> List[str]:
        return [decode(int(k), self.kmer_len) for k in self.kmers]

    def save(self, filepath: Union[str, Path]) -> None:
        write_profile(filepath, self.kmers)


@dataclass
class ProfileRun:
    """Outcome of a multi-file run."""

    written: List[Path] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def add_sequence(
    sketch: MinHashSketch,
    seq: str,
    kmer_len: int,
    window: int = SEQUENCE_WINDOW,
) -> int:
    """Feed every canonical k-mer of *seq* into *sketch*; return how many.

    Long sequences are hashed *window* k-mers at a time; consecutive pieces
    overlap by ``kmer_len - 1`` bases so every position is seen exactly once.
    """
    if window <= 0:
        raise ValueError(f"window must be positive, got {window}")
    total = 0
    for start in range(0, max(len(seq) - kmer_len + 1, 0), window):
        kmers = kmer_array(seq[start : start + window + kmer_len - 1], kmer_len)
        kmers = canonical_array(kmers, kmer_len)
        sketch.accumulate_many(mix_array(kmers), kmers)
        total += len(kmers)
    return total


def build_profile(sequences: Iterable[str], config: ProfileConfig, source: str = "") -> Profile:
    """Sketch all *sequences* and finalize once."""
    config.validate()
    sketch = MinHashSketch(config.min_hash_count, seed=config.seed)

    n_seqs = 0
    n_kmers = 0
    for seq in sequences:
        added = add_sequence(sketch, seq, config.kmer_len)
        n_seqs += 1
        n_kmers += added
        logger.debug("%s: sequence %d, %d k-mers", source, n_seqs, added)

    sketch.finalize(workers=config.workers)
    logger.info("%s: %d sequences, %d k-mers sketched", source or "<input>", n_seqs, n_kmers)
    return Profile(source=source, kmer_len=config.kmer_len, kmers=sketch.kmers())


def profile_file(filename: Union[str, Path], config: ProfileConfig) -> Path:
    """Build and save the profile of one FASTA file; return the profile path."""
    logger.info("loading %s", filename)
    profile = build_profile(clean_sequences(filename), config, source=str(filename))
    out = profile_path(filename, config.out_dir)
    logger.info("saving to %s", out)
    profile.save(out)
    return out


def profile_files(filenames: Iterable[Union[str, Path]], config: ProfileConfig) -> ProfileRun:
    """Profile each file in turn; a failing file does not stop the others."""
    config.validate()
    run = ProfileRun()
    started = time.perf_counter()

    for filename in filenames:
        try:
            run.written.append(profile_file(filename, config))
        except (OSError, ValueError) as exc:
            logger.error("%s: %s", filename, exc)
            run.failures.append((str(filename), str(exc)))

    logger.info(
        "%d profile(s) written, %d failed, total time %.1f s",
        len(run.written), len(run.failures), time.perf_counter() - started,
    )
    return run
