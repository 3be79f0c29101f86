"""Shared test fixtures for PHP Insight tests."""

import shutil
import textwrap
from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def php_project(tmp_path):
    """Factory writing ``{relative path: source}`` into a fresh project root."""

    def _make(files):
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
        return tmp_path

    return _make


@pytest.fixture
def laravel_app(tmp_path):
    """A writable copy of the sample Laravel application."""
    target = tmp_path / "laravel_app"
    shutil.copytree(FIXTURES / "laravel_app", target)
    return target


@pytest.fixture
def snapshot_tree():
    """Function returning relative path -> bytes for every file under a root."""

    def _snapshot(root: Path) -> dict:
        return {
            path.relative_to(root).as_posix(): path.read_bytes()
            for path in sorted(root.rglob("*"))
            if path.is_file()
        }

    return _snapshot
