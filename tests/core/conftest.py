"""Shared fixtures for build pipeline tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any, Callable

import pytest

from sitebuilder.core.config import BuildConfig
from sitebuilder.core.filename_mapping import FilenameMapping
from sitebuilder.core.output_writer import OutputWriter
from sitebuilder.core.transformer import FileTransformer


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------

def create_test_file(directory: Path, name: str, content: str | bytes = "") -> Path:
    """Create a test file with the given name and content."""
    file_path = directory / name
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        file_path.write_bytes(content)
    else:
        with open(file_path, "w", encoding="utf-8", newline="") as handle:
            handle.write(textwrap.dedent(content))
    return file_path


def snapshot_tree(root: Path) -> dict[str, bytes]:
    """Return {relative posix path: bytes} for every file below root."""
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """Empty source root."""
    path = tmp_path / "site"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Output root outside the source tree (not created)."""
    return tmp_path / "out"


@pytest.fixture
def make_config(site_dir: Path, output_dir: Path) -> Callable[..., BuildConfig]:
    """Return a factory for BuildConfig objects rooted at the test dirs.

    The rjsmin backend is forced so results do not depend on whether a
    terser executable happens to be installed.
    """
    def factory(**overrides: Any) -> BuildConfig:
        options: dict[str, Any] = {
            "source_dir": str(site_dir),
            "output_dir": str(output_dir),
            "js_minifier": "rjsmin",
        }
        options.update(overrides)
        return BuildConfig(**options)

    return factory


@pytest.fixture
def make_transformer(output_dir: Path) -> Callable[..., FileTransformer]:
    """Return a factory for FileTransformer objects writing to output_dir."""
    def factory(config: BuildConfig, mapping: FilenameMapping | None = None) -> FileTransformer:
        writer = OutputWriter(output_dir)
        writer.reset()
        if mapping is None:
            mapping = FilenameMapping()
        return FileTransformer(config, writer, mapping)

    return factory
