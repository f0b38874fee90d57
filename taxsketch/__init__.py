"""
taxsketch: fixed-size MinHash profiles of DNA sequence files.

Each input file is reduced to ``min_hash_count`` canonical k-mers, one per
hash-function slot, so that large sequence collections can be compared
without keeping the sequences themselves.
"""

__version__ = "0.1.0"

from taxsketch.sketch import MinHashSketch, Best, SketchState, SketchStateError
from taxsketch.profile import Profile, ProfileConfig, build_profile, profile_file, profile_files
from taxsketch.io import read_fasta, clean_sequences, read_profile, write_profile

__all__ = [
    "MinHashSketch",
    "Best",
    "SketchState",
    "SketchStateError",
    "Profile",
    "ProfileConfig",
    "build_profile",
    "profile_file",
    "profile_files",
    "read_fasta",
    "clean_sequences",
    "read_profile",
    "write_profile",
]
