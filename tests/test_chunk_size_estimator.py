"""Tests for chunk size estimation."""

import pytest

from builder.chunk_size_estimator import ChunkSizeEstimator
from builder.exceptions import InvalidSettingsError, ScanError
from common.constants import CHUNK_SIZE_ALIGNMENT, DEFAULT_MAX_CHUNK_SIZE, DEFAULT_MIN_CHUNK_SIZE, KIB, MIB
from conftest import write_random_file


@pytest.fixture
def estimator():
    return ChunkSizeEstimator()


def test_empty_directory_returns_minimum(estimator, build_dir):
    """An empty tree gets the minimum chunk size."""
    assert estimator.estimate(build_dir) == DEFAULT_MIN_CHUNK_SIZE


def test_single_one_mib_file_returns_minimum(estimator, build_dir):
    """One 1 MiB file would give 1 chunk, so the size shrinks to the minimum."""
    write_random_file(build_dir / 'only.bin', MIB)

    assert estimator.estimate(build_dir) == 512 * KIB


def test_uniform_large_files_use_their_size(estimator):
    sizes = [8 * MIB] * 200

    assert estimator.estimate_from_sizes(sizes) == 8 * MIB


def test_size_clamped_to_maximum(estimator):
    sizes = [50 * MIB] * 200

    assert estimator.estimate_from_sizes(sizes) == DEFAULT_MAX_CHUNK_SIZE


def test_size_rounded_down_to_alignment(estimator):
    sizes = [1_000_000] * 1000

    result = estimator.estimate_from_sizes(sizes)

    assert result == 983040
    assert result % CHUNK_SIZE_ALIGNMENT == 0


def test_too_few_chunks_shrinks_to_hundredth_of_total(estimator):
    """10 files of 20 MiB: 10 MiB chunks would give only 20 chunks."""
    sizes = [20 * MIB] * 10

    assert estimator.estimate_from_sizes(sizes) == 2 * MIB


def test_uses_ninetieth_percentile_and_mean(estimator):
    """p90 is sizes[int(n * 0.9)] of the sorted list; the mean is integer."""
    sizes = [1 * MIB] * 9 + [100 * MIB] * 1
    sizes = sizes * 100
    # sorted: 900 x 1 MiB then 100 x 100 MiB; index 900 -> 100 MiB
    # mean = (900 + 10000) / 1000 MiB = 10.9 MiB; sqrt(100 * 10.9) MiB > max
    assert estimator.estimate_from_sizes(sizes) == DEFAULT_MAX_CHUNK_SIZE


def test_result_always_within_bounds(estimator):
    distributions = [
        [1],
        [0, 0, 0],
        [10 * KIB] * 5000,
        [3 * MIB, 7 * MIB, 900 * KIB] * 40,
        [200 * MIB] * 3,
        [600 * KIB] * 1000,
    ]
    for sizes in distributions:
        result = ChunkSizeEstimator().estimate_from_sizes(sizes)
        assert DEFAULT_MIN_CHUNK_SIZE <= result <= DEFAULT_MAX_CHUNK_SIZE, sizes


def test_estimate_is_idempotent(estimator, sample_tree):
    assert estimator.estimate(sample_tree) == estimator.estimate(sample_tree)


def test_custom_bounds():
    estimator = ChunkSizeEstimator(min_chunk_size=64 * KIB, max_chunk_size=256 * KIB)

    assert estimator.estimate_from_sizes([10 * MIB] * 1000) == 256 * KIB
    assert estimator.estimate_from_sizes([]) == 64 * KIB


def test_missing_directory_raises_scan_error(estimator, tmp_path):
    with pytest.raises(ScanError):
        estimator.estimate(tmp_path / 'does-not-exist')


@pytest.mark.parametrize('min_size,max_size', [(0, MIB), (MIB, KIB), (-1, -1)])
def test_invalid_bounds_rejected(min_size, max_size):
    with pytest.raises(InvalidSettingsError):
        ChunkSizeEstimator(min_chunk_size=min_size, max_chunk_size=max_size)
