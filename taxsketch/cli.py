"""CLI entry point for taxsketch."""

from __future__ import annotations

import argparse
import logging
import sys

from taxsketch.io import load_file_list, read_profile
from taxsketch.kmer import decode
from taxsketch.logger import setup_logger
from taxsketch.profile import ProfileConfig, profile_files


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taxsketch",
        description="taxsketch – MinHash k-mer profiles of DNA sequence files",
    )
    sub = parser.add_subparsers(dest="command")

    # profile sub-command
    prof_p = sub.add_parser("profile", help="Build a MinHash profile for each FASTA file")
    prof_p.add_argument("files", nargs="*", help="FASTA files (plain or .gz)")
    prof_p.add_argument("--file-list", help="Text file with one FASTA path per line")
    prof_p.add_argument("--kmer-len", type=int, required=True)
    prof_p.add_argument("--min-hash-count", type=int, required=True)
    prof_p.add_argument("--seed", type=int, default=0)
    prof_p.add_argument("--workers", type=int, default=None,
                        help="Threads used to reduce sketch slots (default: CPU count)")
    prof_p.add_argument("--out-dir", default=".", help="Directory for .profile files")
    prof_p.add_argument("--log-file", help="Also append log messages to this file")
    prof_p.add_argument("-v", "--verbose", action="store_true")

    # show sub-command
    show_p = sub.add_parser("show", help="Print the k-mers stored in a profile")
    show_p.add_argument("profile", help="Profile file")
    show_p.add_argument("--kmer-len", type=int, required=True)
    show_p.add_argument("--decode", action="store_true", help="Print k-mers as bases")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "profile":
        _cmd_profile(parser, args)
    elif args.command == "show":
        _cmd_show(args)


def _cmd_profile(parser: argparse.ArgumentParser, args) -> None:
    setup_logger(args.log_file, logging.DEBUG if args.verbose else logging.INFO)

    config = ProfileConfig(
        kmer_len=args.kmer_len,
        min_hash_count=args.min_hash_count,
        seed=args.seed,
        workers=args.workers,
        out_dir=args.out_dir,
    )
    try:
        config.validate()
    except ValueError as e:
        parser.error(str(e))

    files = list(args.files)
    if args.file_list:
        try:
            files.extend(load_file_list(args.file_list))
        except OSError as e:
            parser.error(f"cannot read file list: {e}")
    if not files:
        parser.error("no input files given")

    run = profile_files(files, config)
    sys.exit(0 if run.ok else 1)


def _cmd_show(args) -> None:
    try:
        kmers = read_profile(args.profile)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"count\t{len(kmers)}")
    for slot, kmer in enumerate(kmers):
        value = decode(int(kmer), args.kmer_len) if args.decode else int(kmer)
        print(f"{slot}\t{value}")


if __name__ == "__main__":
    main()
