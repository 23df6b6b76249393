"""Shared fixtures for dep-tree-diff tests."""

import os

import pytest

from dep_tree_diff import cli_config, error_handling
from dep_tree_diff.dependency import Dependency, Version


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep config lookup and global handlers from leaking between tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("DEP_TREE_DIFF_"):
            monkeypatch.delenv(key)

    cli_config.reset_config()
    error_handling.setup_error_handling()
    yield
    cli_config.reset_config()


@pytest.fixture
def temp_dir(tmp_path):
    """Directory for test input and output files."""
    directory = tmp_path / "work"
    directory.mkdir()
    return directory


@pytest.fixture
def make_dep():
    """Build a Dependency from a short coordinate like 'org.example:a:1.0.0'."""

    def _make(coordinate: str, source_file=None, dep_type="jar", classifier=None):
        group_id, artifact_id, version = coordinate.split(":")
        return Dependency(
            group_id=group_id,
            artifact_id=artifact_id,
            version=Version.parse(version),
            type=dep_type,
            classifier=classifier,
            source_file=source_file,
        )

    return _make


@pytest.fixture
def as_mapping():
    """Turn a list of dependencies into a canonical mapping."""

    def _as_mapping(dependencies):
        return {dep.key: dep for dep in dependencies}

    return _as_mapping


@pytest.fixture
def write_tree(temp_dir):
    """Write a dependency:tree report with the given entries and return its path."""

    def _write(name: str, entries, root="org.example:app:jar:1.0.0"):
        lines = [
            "[INFO] --- maven-dependency-plugin:3.6.1:tree (default-cli) @ app ---",
            f"[INFO] {root}",
        ]
        for index, entry in enumerate(entries):
            marker = "\\-" if index == len(entries) - 1 else "+-"
            lines.append(f"[INFO] {marker} {entry}")
        lines.append("[INFO] " + "-" * 72)
        lines.append("[INFO] BUILD SUCCESS")
        path = temp_dir / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def sample_original_tree(write_tree):
    return write_tree(
        "original.txt",
        [
            "org.example:lib-a:jar:1.0.0:compile",
            "org.example:lib-b:jar:2.0.0:compile",
        ],
    )


@pytest.fixture
def sample_new_tree(write_tree):
    return write_tree(
        "new.txt",
        [
            "org.example:lib-b:jar:2.1.0:compile",
            "org.example:lib-c:jar:1.0.0:runtime",
        ],
    )
