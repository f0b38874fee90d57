"""Shared test fixtures for taxsketch tests."""

import gzip
import random

import pytest


@pytest.fixture
def simple_seq():
    """The short end-to-end sequence: 7 k-mers at k=4."""
    return "ACGTACGTAC"


@pytest.fixture
def random_seq():
    """A 500bp random ACGT sequence."""
    rng = random.Random(42)
    return "".join(rng.choice("ACGT") for _ in range(500))


@pytest.fixture
def fasta_file(tmp_path):
    p = tmp_path / "genome.fa"
    p.write_text(">seq1 first record\nACGTACGT\nACGTAC\n>seq2\nGGGGNNAAAA\n")
    return p


@pytest.fixture
def fasta_gz_file(tmp_path):
    p = tmp_path / "genome.fa.gz"
    with gzip.open(p, "wt") as f:
        f.write(">seq1\nACGTACGT\n>seq2\nGGGGAAAA\n")
    return p


@pytest.fixture
def random_fasta(tmp_path, random_seq):
    p = tmp_path / "random.fa"
    lines = [random_seq[i : i + 60] for i in range(0, len(random_seq), 60)]
    p.write_text(">rand\n" + "\n".join(lines) + "\n")
    return p
