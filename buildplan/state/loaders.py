"""
Snapshot loaders.

Three metadata sources produce the same Snapshot contract:

- src:  a source tree of ``package.yml`` recipes (YAML)
- bin:  a directory of ``*.eopkg`` binary packages (zip + metadata.xml)
- repo: a repository index ``eopkg-index.xml`` (optionally ``.xz``)

Binary and repository metadata describe binary packages; they are grouped
under their source package name so every kind yields one Package per
source package.
"""

from __future__ import annotations

import logging
import lzma
import zipfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

import yaml

from buildplan.state.models import (
    BinarySnapshot,
    LoadError,
    Package,
    RepoSnapshot,
    Snapshot,
    SourceSnapshot,
)
from buildplan.state.tpath import parse_tpath

logger = logging.getLogger(__name__)

RECIPE_NAME = "package.yml"
INDEX_NAMES: tuple[str, ...] = ("eopkg-index.xml", "eopkg-index.xml.xz")
SKIP_DIRS = {".git", ".svn", "__pycache__", "node_modules"}


def load_state(tpath: str) -> Snapshot:
    """Parse a ``<kind>:<path>`` reference and load the matching snapshot."""
    ref = parse_tpath(tpath)
    if ref.kind == "src":
        return load_source(ref.path)
    if ref.kind == "bin":
        return load_binary(ref.path)
    return load_repo(ref.path)


# --- source tree ---------------------------------------------------------


def _require_dir(root: Path) -> None:
    if not root.exists():
        raise LoadError(f"path does not exist: {root}")
    if not root.is_dir():
        raise LoadError(f"not a directory: {root}")


def _recipe_files(root: Path) -> List[Path]:
    files = [
        p
        for p in root.rglob(RECIPE_NAME)
        if p.is_file() and not any(part in SKIP_DIRS for part in p.relative_to(root).parts)
    ]
    return sorted(files, key=lambda p: p.relative_to(root).as_posix())


def _parse_release(raw: Any, where: Path) -> int:
    try:
        return int(str(raw).strip())
    except ValueError:
        raise LoadError(f"{where}: release must be an integer, got {raw!r}") from None


def _dep_names(raw: Any, where: Path) -> Tuple[str, ...]:
    if raw is None or raw == "":
        return ()
    if not isinstance(raw, list):
        raise LoadError(f"{where}: builddeps must be a list")
    names: List[str] = []
    for item in raw:
        if isinstance(item, dict) and len(item) == 1:
            item = next(iter(item))
        if not isinstance(item, str) or not item.strip():
            raise LoadError(f"{where}: invalid build dependency {item!r}")
        names.append(item.strip())
    return tuple(names)


def parse_recipe(path: Path) -> Package:
    """Read one package.yml. All scalars are kept as strings (no float versions)."""
    try:
        text = path.read_text(encoding="utf-8")
        data = yaml.load(text, Loader=yaml.BaseLoader)
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise LoadError(f"malformed YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise LoadError(f"{path}: recipe must be a mapping")
    for key in ("name", "version", "release"):
        if not data.get(key):
            raise LoadError(f"{path}: missing required field {key!r}")
    return Package(
        name=str(data["name"]).strip(),
        version=str(data["version"]).strip(),
        release=_parse_release(data["release"], path),
        build_deps=_dep_names(data.get("builddeps"), path),
    )


def load_source(root: Path) -> SourceSnapshot:
    _require_dir(root)
    packages = [parse_recipe(p) for p in _recipe_files(root)]
    logger.debug("loaded %d recipes from %s", len(packages), root)
    return SourceSnapshot(packages, origin=root)


# --- eopkg metadata ------------------------------------------------------


def _text(elem: ET.Element | None, tag: str) -> str:
    if elem is None:
        return ""
    child = elem.find(tag)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _latest_update(pkg: ET.Element, where: str) -> Tuple[int, str]:
    updates = pkg.findall("History/Update")
    if not updates:
        raise LoadError(f"{where}: package {_text(pkg, 'Name')!r} has no history")
    history: List[Tuple[int, str]] = []
    for upd in updates:
        raw = upd.get("release", "")
        try:
            history.append((int(raw), _text(upd, "Version")))
        except ValueError:
            raise LoadError(f"{where}: invalid release {raw!r}") from None
    return max(history, key=lambda item: item[0])


# (source name, binary name, release, version, build deps)
_Entry = Tuple[str, str, int, str, Tuple[str, ...]]


def _binary_entries(root: ET.Element, where: str) -> Iterable[_Entry]:
    """Yield one entry per <Package> element."""
    top_source = root.find("Source")
    for pkg in root.findall("Package"):
        source = pkg.find("Source")
        if source is None:
            source = top_source
        bin_name = _text(pkg, "Name")
        src_name = _text(source, "Name") or bin_name
        if not src_name:
            raise LoadError(f"{where}: package without a name")
        release, version = _latest_update(pkg, where)
        deps: Tuple[str, ...] = ()
        if source is not None:
            deps = tuple(
                d.text.strip()
                for d in source.findall("BuildDependencies/Dependency")
                if d.text and d.text.strip()
            )
        yield src_name, bin_name, release, version, deps


def _group_by_source(entries: Iterable[_Entry]) -> List[Package]:
    """
    One Package per source name: highest release wins, build deps are merged.

    Binary names other than the source name are kept as ``provides`` so a
    build dependency on a subpackage (``zlib-devel``) resolves to its source.
    """
    merged: Dict[str, Tuple[int, str, List[str], List[str]]] = {}
    for name, bin_name, release, version, deps in entries:
        if name not in merged:
            merged[name] = (release, version, list(deps), [])
        best_release, best_version, all_deps, provides = merged[name]
        all_deps.extend(d for d in deps if d not in all_deps)
        if bin_name and bin_name != name and bin_name not in provides:
            provides.append(bin_name)
        if release > best_release:
            best_release, best_version = release, version
        merged[name] = (best_release, best_version, all_deps, provides)
    return [
        Package(
            name=name,
            version=version,
            release=release,
            build_deps=tuple(deps),
            provides=tuple(provides),
        )
        for name, (release, version, deps, provides) in merged.items()
    ]


def _parse_xml(data: bytes, where: str) -> ET.Element:
    try:
        return ET.fromstring(data)
    except ET.ParseError as e:
        raise LoadError(f"malformed XML in {where}: {e}") from e


def read_eopkg_metadata(path: Path) -> ET.Element:
    try:
        with zipfile.ZipFile(path) as zf:
            data = zf.read("metadata.xml")
    except KeyError:
        raise LoadError(f"{path}: archive has no metadata.xml") from None
    except (OSError, zipfile.BadZipFile) as e:
        raise LoadError(f"cannot read package {path}: {e}") from e
    return _parse_xml(data, str(path))


def load_binary(root: Path) -> BinarySnapshot:
    _require_dir(root)
    entries: List[_Entry] = []
    archives = sorted(root.glob("*.eopkg"))
    for archive in archives:
        entries.extend(_binary_entries(read_eopkg_metadata(archive), str(archive)))
    packages = _group_by_source(entries)
    logger.debug("loaded %d source packages from %d archives in %s", len(packages), len(archives), root)
    return BinarySnapshot(packages, origin=root)


def _find_index(path: Path) -> Path:
    if path.is_dir():
        for name in INDEX_NAMES:
            candidate = path / name
            if candidate.is_file():
                return candidate
        raise LoadError(f"no repository index ({', '.join(INDEX_NAMES)}) in {path}")
    if not path.is_file():
        raise LoadError(f"path does not exist: {path}")
    return path


def read_index(path: Path) -> ET.Element:
    index = _find_index(path)
    try:
        if index.suffix == ".xz":
            with lzma.open(index) as fh:
                data = fh.read()
        else:
            data = index.read_bytes()
    except (OSError, lzma.LZMAError) as e:
        raise LoadError(f"cannot read index {index}: {e}") from e
    return _parse_xml(data, str(index))


def load_repo(path: Path) -> RepoSnapshot:
    root = read_index(path)
    packages = _group_by_source(_binary_entries(root, str(path)))
    logger.debug("loaded %d source packages from index %s", len(packages), path)
    return RepoSnapshot(packages, origin=path)


__all__ = [
    "load_state",
    "load_source",
    "load_binary",
    "load_repo",
    "parse_recipe",
    "read_eopkg_metadata",
    "read_index",
]
