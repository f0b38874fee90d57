"""Tests for I/O module."""

import struct

import numpy as np
import pytest

from taxsketch.io import (
    clean_sequences,
    load_file_list,
    profile_path,
    read_fasta,
    read_profile,
    write_profile,
)


class TestReadFasta:
    def test_read_plain(self, fasta_file):
        records = list(read_fasta(fasta_file))
        assert len(records) == 2
        assert records[0] == ("seq1", "ACGTACGTACGTAC")
        assert records[1] == ("seq2", "GGGGNNAAAA")

    def test_read_gzipped(self, fasta_gz_file):
        records = list(read_fasta(fasta_gz_file))
        assert len(records) == 2
        assert records[0][1] == "ACGTACGT"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list(read_fasta(tmp_path / "absent.fa"))


class TestCleanSequences:
    def test_splits_on_ambiguous_bases(self, fasta_file):
        assert list(clean_sequences(fasta_file)) == ["ACGTACGTACGTAC", "GGGG", "AAAA"]

    def test_upper_cases(self, tmp_path):
        p = tmp_path / "lower.fa"
        p.write_text(">s\nacgtRYacg\n")
        assert list(clean_sequences(p)) == ["ACGT", "ACG"]

    def test_drops_empty_fragments(self, tmp_path):
        p = tmp_path / "gaps.fa"
        p.write_text(">s\nNNNN\n>t\n\n>u\n-ACG-\n")
        assert list(clean_sequences(p)) == ["ACG"]


class TestFileList:
    def test_load(self, tmp_path):
        p = tmp_path / "files.txt"
        p.write_text("a.fa\n\n# skipped\n  dir/b.fa.gz  \n")
        assert load_file_list(p) == ["a.fa", "dir/b.fa.gz"]


class TestProfileFiles:
    def test_profile_path(self):
        assert str(profile_path("/data/run1/genome.fa")) == "genome.fa.profile"
        assert profile_path("x/genome.fa", "out").as_posix() == "out/genome.fa.profile"

    def test_wire_layout(self, tmp_path):
        p = tmp_path / "g.profile"
        write_profile(p, [30, 2**64 - 1, 0])
        data = p.read_bytes()
        assert len(data) == 8 + 3 * 8
        assert struct.unpack("<4Q", data) == (3, 30, 2**64 - 1, 0)

    def test_read_back(self, tmp_path):
        p = tmp_path / "g.profile"
        kmers = np.array([5, 6, 7], dtype=np.uint64)
        write_profile(p, kmers)
        assert read_profile(p).tolist() == [5, 6, 7]
        assert not (tmp_path / "g.profile.tmp").exists()

    def test_truncated(self, tmp_path):
        p = tmp_path / "bad.profile"
        p.write_bytes(struct.pack("<QQ", 3, 1))
        with pytest.raises(ValueError):
            read_profile(p)

    def test_too_short(self, tmp_path):
        p = tmp_path / "bad.profile"
        p.write_bytes(b"\x01")
        with pytest.raises(ValueError):
            read_profile(p)

    def test_write_failure_propagates(self, tmp_path):
        with pytest.raises(OSError):
            write_profile(tmp_path / "missing_dir" / "g.profile", [1])
