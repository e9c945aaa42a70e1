"""Shared pytest fixtures for all tests."""

import gzip
import os

import pytest
from pathlib import Path

from builder.config import BuilderSettings
from common.constants import KIB, MIB


def write_random_file(path: Path, size: int) -> Path:
    """Create path (and parents) holding size random bytes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(os.urandom(size))
    return path


def decompress_artifact(chunks_dir: Path, chunk_id: int) -> bytes:
    """Read one chunk artifact back without going through chunk_storage."""
    return gzip.decompress((chunks_dir / f"{chunk_id}.chunk").read_bytes())


@pytest.fixture
def chunks_dir(tmp_path):
    """
    Directory receiving chunk artifacts.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to a not-yet-created chunks directory
    """
    return tmp_path / 'chunks'


@pytest.fixture
def build_dir(tmp_path):
    """
    Create an empty input directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to the build directory
    """
    path = tmp_path / 'build'
    path.mkdir()
    return path


@pytest.fixture
def sample_tree(build_dir):
    """
    Create a small nested build tree.

    Layout:
        build/app.bin          300 KiB
        build/data/assets.pak  1 MiB + 123 bytes
        build/data/empty.txt   0 bytes
        build/data/nested/readme.txt  text

    Returns:
        Path to the build directory
    """
    write_random_file(build_dir / 'app.bin', 300 * KIB)
    write_random_file(build_dir / 'data' / 'assets.pak', MIB + 123)
    (build_dir / 'data' / 'empty.txt').write_bytes(b'')
    (build_dir / 'data' / 'nested').mkdir()
    (build_dir / 'data' / 'nested' / 'readme.txt').write_text('Sample content for testing')
    return build_dir


@pytest.fixture
def settings(chunks_dir):
    """
    Builder settings writing into the temporary chunks directory.

    Returns:
        BuilderSettings with default chunk bounds and a small worker pool
    """
    return BuilderSettings(chunks_dir=chunks_dir, worker_count=4, queue_factor=2)
