"""Tests for the command line and logging setup."""

import logging
import struct

import pytest

from taxsketch.cli import main
from taxsketch.io import read_profile
from taxsketch.kmer import decode
from taxsketch.logger import setup_logger


class TestProfileCommand:
    def test_profile_files(self, random_fasta, fasta_file, tmp_path):
        out_dir = tmp_path / "out"
        out_dir.mkdir()
        with pytest.raises(SystemExit) as exc:
            main(["profile", str(random_fasta), str(fasta_file),
                  "--kmer-len", "5", "--min-hash-count", "8",
                  "--out-dir", str(out_dir), "--workers", "2"])
        assert exc.value.code == 0
        assert len(read_profile(out_dir / "random.fa.profile")) == 8
        assert len(read_profile(out_dir / "genome.fa.profile")) == 8

    def test_file_list(self, random_fasta, tmp_path):
        listing = tmp_path / "files.txt"
        listing.write_text(f"{random_fasta}\n")
        with pytest.raises(SystemExit) as exc:
            main(["profile", "--file-list", str(listing),
                  "--kmer-len", "5", "--min-hash-count", "4", "--out-dir", str(tmp_path)])
        assert exc.value.code == 0
        assert (tmp_path / "random.fa.profile").exists()

    def test_failed_file_sets_exit_status(self, random_fasta, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["profile", str(tmp_path / "absent.fa"), str(random_fasta),
                  "--kmer-len", "5", "--min-hash-count", "4", "--out-dir", str(tmp_path)])
        assert exc.value.code == 1
        assert (tmp_path / "random.fa.profile").exists()

    @pytest.mark.parametrize("args", [
        ["--kmer-len", "0", "--min-hash-count", "4"],
        ["--kmer-len", "5", "--min-hash-count", "0"],
    ])
    def test_bad_config(self, random_fasta, args):
        with pytest.raises(SystemExit) as exc:
            main(["profile", str(random_fasta)] + args)
        assert exc.value.code == 2

    def test_no_inputs(self):
        with pytest.raises(SystemExit) as exc:
            main(["profile", "--kmer-len", "5", "--min-hash-count", "4"])
        assert exc.value.code == 2


class TestShowCommand:
    def test_show_decoded(self, random_fasta, tmp_path, capsys):
        with pytest.raises(SystemExit):
            main(["profile", str(random_fasta), "--kmer-len", "6",
                  "--min-hash-count", "3", "--out-dir", str(tmp_path)])
        capsys.readouterr()

        path = tmp_path / "random.fa.profile"
        main(["show", str(path), "--kmer-len", "6", "--decode"])
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "count\t3"
        expected = [decode(int(k), 6) for k in read_profile(path)]
        assert [line.split("\t")[1] for line in lines[1:]] == expected

    def test_missing_profile(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["show", str(tmp_path / "absent.profile"), "--kmer-len", "6"])
        assert exc.value.code == 1
        assert capsys.readouterr().out.startswith("Error:")

    def test_truncated_profile(self, tmp_path, capsys):
        path = tmp_path / "short.profile"
        path.write_bytes(struct.pack("<QQ", 3, 1))
        with pytest.raises(SystemExit) as exc:
            main(["show", str(path), "--kmer-len", "6"])
        assert exc.value.code == 1
        assert "expected 3 k-mers" in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 0
    assert "taxsketch" in capsys.readouterr().out


def test_setup_logger_writes_file(tmp_path):
    log_file = tmp_path / "run.log"
    logger = setup_logger(str(log_file), logging.DEBUG)
    logging.getLogger("taxsketch.profile").debug("sketching genome.fa")
    for handler in logger.handlers:
        handler.flush()
    text = log_file.read_text()
    assert "DEBUG" in text
    assert "sketching genome.fa" in text
    logger.handlers.clear()
