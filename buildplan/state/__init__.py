"""State layer: package snapshots, snapshot references, loaders and diffing."""

from .diff import Classified, Diff, DiffKind, changed, classify
from .loaders import load_binary, load_repo, load_source, load_state
from .models import BinarySnapshot, LoadError, Package, RepoSnapshot, Snapshot, SourceSnapshot
from .tpath import InvalidTPathError, TPath, parse_tpath, valid_tpath

__all__ = [
    "Classified",
    "Diff",
    "DiffKind",
    "changed",
    "classify",
    "load_binary",
    "load_repo",
    "load_source",
    "load_state",
    "BinarySnapshot",
    "LoadError",
    "Package",
    "RepoSnapshot",
    "Snapshot",
    "SourceSnapshot",
    "InvalidTPathError",
    "TPath",
    "parse_tpath",
    "valid_tpath",
]
