"""Tests for buildplan.state.loaders (src / bin / repo snapshots)."""

import lzma
import zipfile
from pathlib import Path

import pytest

from buildplan.state.loaders import load_state
from buildplan.state.models import BinarySnapshot, LoadError, RepoSnapshot, SourceSnapshot

from conftest import write_recipe


def _update(release: int, version: str) -> str:
    return f'<Update release="{release}"><Date>2023-01-01</Date><Version>{version}</Version></Update>'


def _index_package(name: str, source: str, updates: str, deps=()) -> str:
    dep_xml = "".join(f"<Dependency>{d}</Dependency>" for d in deps)
    build_deps = f"<BuildDependencies>{dep_xml}</BuildDependencies>" if deps else ""
    return (
        f"<Package><Name>{name}</Name>"
        f"<Source><Name>{source}</Name>{build_deps}</Source>"
        f"<History>{updates}</History></Package>"
    )


def _index_xml(*packages: str) -> str:
    return (
        "<PISI><Distribution><SourceName>Test</SourceName>"
        "<Obsoletes><Package>oldthing</Package></Obsoletes></Distribution>"
        + "".join(packages)
        + "</PISI>"
    )


def _write_eopkg(path: Path, source: str, name: str, updates: str, deps=()) -> None:
    dep_xml = "".join(f"<Dependency>{d}</Dependency>" for d in deps)
    metadata = (
        f"<PISI><Source><Name>{source}</Name>"
        f"<BuildDependencies>{dep_xml}</BuildDependencies></Source>"
        f"<Package><Name>{name}</Name><History>{updates}</History></Package></PISI>"
    )
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("metadata.xml", metadata)
        zf.writestr("install.tar.xz", b"")


# --- src -----------------------------------------------------------------


def test_load_source_tree(tmp_path: Path):
    write_recipe(tmp_path, "zlib", "1.3", 4)
    write_recipe(tmp_path, "curl", "8.4.0", 12, deps=["zlib", "pkgconfig(openssl)"])
    (tmp_path / ".git").mkdir()
    write_recipe(tmp_path / ".git", "ignored", "1", 1)

    snap = load_state(f"src:{tmp_path}")

    assert isinstance(snap, SourceSnapshot)
    assert [p.name for p in snap.packages] == ["curl", "zlib"]
    curl = snap.get("curl")
    assert (curl.version, curl.release) == ("8.4.0", 12)
    assert curl.build_deps == ("zlib", "pkgconfig(openssl)")
    assert list(snap.dep_graph.edges()) == [(0, 1)]


def test_source_versions_stay_strings(tmp_path: Path):
    recipe = tmp_path / "pkg" / "package.yml"
    recipe.parent.mkdir()
    recipe.write_text("name: pkg\nversion: 1.10\nrelease: 3\n", encoding="utf-8")
    snap = load_state(f"src:{tmp_path}")
    assert snap.get("pkg").version == "1.10"


def test_source_builddeps_mapping_entries(tmp_path: Path):
    recipe = tmp_path / "pkg" / "package.yml"
    recipe.parent.mkdir()
    recipe.write_text(
        "name: pkg\nversion: '1'\nrelease: 1\nbuilddeps:\n  - gcc: '>=13'\n  - make\n",
        encoding="utf-8",
    )
    assert load_state(f"src:{tmp_path}").get("pkg").build_deps == ("gcc", "make")


@pytest.mark.parametrize(
    "content,match",
    [
        ("name: [unclosed\n", "malformed YAML"),
        ("- just\n- a list\n", "must be a mapping"),
        ("name: p\nversion: '1'\n", "missing required field 'release'"),
        ("name: p\nversion: '1'\nrelease: two\n", "release must be an integer"),
        ("name: p\nversion: '1'\nrelease: 1\nbuilddeps: gcc\n", "builddeps must be a list"),
    ],
)
def test_malformed_recipe_fails(tmp_path: Path, content, match):
    recipe = tmp_path / "p" / "package.yml"
    recipe.parent.mkdir()
    recipe.write_text(content, encoding="utf-8")
    with pytest.raises(LoadError, match=match):
        load_state(f"src:{tmp_path}")


def test_duplicate_recipe_names_fail(tmp_path: Path):
    write_recipe(tmp_path / "a", "dup", "1", 1)
    write_recipe(tmp_path / "b", "dup", "2", 2)
    with pytest.raises(LoadError, match="duplicate"):
        load_state(f"src:{tmp_path}")


def test_missing_source_dir_fails(tmp_path: Path):
    with pytest.raises(LoadError, match="does not exist"):
        load_state(f"src:{tmp_path / 'nope'}")


# --- bin -----------------------------------------------------------------


def test_load_binary_dir_groups_by_source(tmp_path: Path):
    _write_eopkg(tmp_path / "glib2-2.78-5-1-x86_64.eopkg", "glib2", "glib2", _update(5, "2.78"), deps=["meson"])
    _write_eopkg(tmp_path / "glib2-devel-2.78-5-1-x86_64.eopkg", "glib2", "glib2-devel", _update(5, "2.78"), deps=["meson", "python3"])
    _write_eopkg(tmp_path / "meson-1.2-9-1-x86_64.eopkg", "meson", "meson", _update(8, "1.1") + _update(9, "1.2"))
    (tmp_path / "README").write_text("not a package", encoding="utf-8")

    snap = load_state(f"bin:{tmp_path}")

    assert isinstance(snap, BinarySnapshot)
    assert [p.name for p in snap.packages] == ["glib2", "meson"]
    glib = snap.get("glib2")
    assert (glib.version, glib.release) == ("2.78", 5)
    assert glib.build_deps == ("meson", "python3")
    meson = snap.get("meson")
    assert (meson.version, meson.release) == ("1.2", 9)
    assert glib.provides == ("glib2-devel",)
    assert meson.provides == ()
    assert snap.dep_index["glib2-devel"] == snap.index_of("glib2")


def test_corrupt_eopkg_fails(tmp_path: Path):
    (tmp_path / "bad.eopkg").write_bytes(b"definitely not a zip")
    with pytest.raises(LoadError, match="cannot read package"):
        load_state(f"bin:{tmp_path}")


def test_eopkg_without_metadata_fails(tmp_path: Path):
    with zipfile.ZipFile(tmp_path / "empty.eopkg", "w") as zf:
        zf.writestr("files.xml", "<Files/>")
    with pytest.raises(LoadError, match="no metadata.xml"):
        load_state(f"bin:{tmp_path}")


# --- repo ----------------------------------------------------------------


def test_load_repo_index(tmp_path: Path):
    index = tmp_path / "eopkg-index.xml"
    index.write_text(
        _index_xml(
            _index_package("nano", "nano", _update(40, "7.2") + _update(39, "7.1")),
            _index_package("libfoo", "foo", _update(2, "0.9")),
            _index_package("libfoo-devel", "foo", _update(3, "1.0")),
        ),
        encoding="utf-8",
    )

    snap = load_state(f"repo:{index}")

    assert isinstance(snap, RepoSnapshot)
    assert [(p.name, p.version, p.release) for p in snap.packages] == [
        ("nano", "7.2", 40),
        ("foo", "1.0", 3),
    ]


def test_load_repo_from_directory_with_xz_index(tmp_path: Path):
    data = _index_xml(_index_package("nano", "nano", _update(40, "7.2"))).encode("utf-8")
    with lzma.open(tmp_path / "eopkg-index.xml.xz", "wb") as fh:
        fh.write(data)
    snap = load_state(f"repo:{tmp_path}")
    assert snap.get("nano").release == 40


def test_repo_malformed_xml_fails(tmp_path: Path):
    index = tmp_path / "eopkg-index.xml"
    index.write_text("<PISI><Package>", encoding="utf-8")
    with pytest.raises(LoadError, match="malformed XML"):
        load_state(f"repo:{index}")


def test_repo_bad_release_fails(tmp_path: Path):
    index = tmp_path / "eopkg-index.xml"
    index.write_text(_index_xml(_index_package("x", "x", _update("abc", "1"))), encoding="utf-8")
    with pytest.raises(LoadError, match="invalid release"):
        load_state(f"repo:{index}")


def test_repo_build_dep_on_subpackage_resolves(tmp_path: Path):
    index = tmp_path / "eopkg-index.xml"
    index.write_text(
        _index_xml(
            _index_package("zlib", "zlib", _update(4, "1.3")),
            _index_package("zlib-devel", "zlib", _update(4, "1.3")),
            _index_package("curl", "curl", _update(12, "8.4"), deps=["zlib-devel"]),
        ),
        encoding="utf-8",
    )

    snap = load_state(f"repo:{index}")

    assert [p.name for p in snap.packages] == ["zlib", "curl"]
    assert snap.get("zlib").provides == ("zlib-devel",)
    assert snap.dep_graph.has_edge(1, 0)


def test_repo_package_without_history_fails(tmp_path: Path):
    index = tmp_path / "eopkg-index.xml"
    index.write_text(
        _index_xml("<Package><Name>x</Name><Source><Name>x</Name></Source></Package>"),
        encoding="utf-8",
    )
    with pytest.raises(LoadError, match="has no history"):
        load_state(f"repo:{index}")


def test_repo_missing_index_fails(tmp_path: Path):
    with pytest.raises(LoadError, match="no repository index"):
        load_state(f"repo:{tmp_path}")
