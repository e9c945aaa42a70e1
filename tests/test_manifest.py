"""Tests for the manifest model, assembler and writer."""

import json
import os
import random

import pytest
from pydantic import ValidationError

from builder.exceptions import DirectoryCreationError, GenerationError, SerializationError
from builder.manifest_assembler import ManifestAssembler, to_manifest_path
from builder.manifest_writer import read_manifest, serialize_manifest, write_manifest
from common.types import Chunk, FileResult, Manifest


@pytest.fixture
def results():
    return [
        FileResult(chunk_ids=(1, 2), relative_path='bin/app.exe', size=1_048_576),
        FileResult(chunk_ids=(), relative_path='empty.txt', size=0),
        FileResult(chunk_ids=(3,), relative_path='data/levels/one.pak', size=1234),
    ]


@pytest.fixture
def manifest(results):
    assembler = ManifestAssembler('build')
    assembler.add_all(results)
    return assembler.finalize()


class TestManifestModel:
    """Test Manifest and Chunk models."""

    def test_field_names_by_alias(self):
        chunk = Chunk.model_validate({'ChunksIds': [1], 'File': 'a', 'FileSize': 5})

        assert chunk.chunk_ids == [1]
        assert chunk.source_file == 'a'
        assert chunk.file_size == 5

    def test_models_are_frozen(self, manifest):
        with pytest.raises(ValidationError):
            manifest.name = 'other'

    def test_chunk_list_is_immutable(self, manifest):
        assert isinstance(manifest.chunks, tuple)
        with pytest.raises(AttributeError):
            manifest.chunks.append(Chunk(chunk_ids=[9], source_file='late.bin', file_size=1))

    def test_negative_size_rejected(self):
        with pytest.raises(ValidationError):
            Chunk(chunk_ids=[], source_file='a', file_size=-1)

    def test_chunk_count(self, manifest):
        assert manifest.chunk_count == 3


class TestManifestAssembler:
    """Test folding results into a manifest."""

    def test_paths_use_backslashes(self):
        assert to_manifest_path('data/levels/one.pak') == 'data\\levels\\one.pak'
        assert to_manifest_path('top.bin') == 'top.bin'

    def test_undecodable_name_bytes_are_replaced(self):
        relative = os.fsdecode(b'data/bad\xff.bin')

        assert to_manifest_path(relative) == 'data\\bad\ufffd.bin'

    def test_entries_follow_arrival_order(self, manifest):
        assert [c.source_file for c in manifest.chunks] == [
            'bin\\app.exe',
            'empty.txt',
            'data\\levels\\one.pak',
        ]
        assert manifest.chunks[0].chunk_ids == [1, 2]
        assert manifest.chunks[1].chunk_ids == []

    def test_total_size_is_sum_of_file_sizes(self, manifest):
        assert manifest.total_size == sum(c.file_size for c in manifest.chunks)
        assert manifest.total_size == 1_048_576 + 1234

    def test_totals_independent_of_order(self, results):
        shuffled = list(results)
        random.Random(7).shuffle(shuffled)
        first = ManifestAssembler('build')
        second = ManifestAssembler('build')
        first.add_all(results)
        second.add_all(shuffled)

        a, b = first.finalize(), second.finalize()

        assert a.total_size == b.total_size
        assert a.chunk_count == b.chunk_count
        assert sorted(c.source_file for c in a.chunks) == sorted(c.source_file for c in b.chunks)

    def test_empty_manifest(self):
        manifest = ManifestAssembler('empty').finalize()

        assert manifest.chunks == ()
        assert manifest.total_size == 0

    def test_finalize_raises_reported_error(self, results):
        assembler = ManifestAssembler('build')
        assembler.add_all(results)
        error = GenerationError('build/broken.bin', OSError('Permission denied'))

        with pytest.raises(GenerationError) as exc_info:
            assembler.finalize(error)

        assert exc_info.value is error

    def test_running_counters(self, results):
        assembler = ManifestAssembler('build')
        assembler.add_all(results)

        assert assembler.file_count == 3
        assert assembler.chunk_count == 3
        assert assembler.total_size == 1_048_576 + 1234


class TestManifestWriter:
    """Test manifest serialization."""

    def test_serialized_layout(self, manifest):
        document = serialize_manifest(manifest)
        data = json.loads(document)

        assert list(data.keys()) == ['Name', 'Chunks', 'Size']
        assert list(data['Chunks'][0].keys()) == ['ChunksIds', 'File', 'FileSize']
        assert data['Name'] == 'build'
        assert data['Size'] == 1_048_576 + 1234
        assert data['Chunks'][1] == {'ChunksIds': [], 'File': 'empty.txt', 'FileSize': 0}
        assert document.startswith('{\n  "Name": "build",')
        assert document.endswith('}\n')

    def test_write_and_read_back(self, manifest, tmp_path):
        path = write_manifest(manifest, tmp_path / 'build.manifest')

        assert read_manifest(path) == manifest

    def test_write_creates_parent_directories(self, manifest, tmp_path):
        target = tmp_path / 'out' / 'nested' / 'build.manifest'

        write_manifest(manifest, target)

        assert target.exists()
        assert [p.name for p in target.parent.iterdir()] == ['build.manifest']

    def test_utf8_names(self, tmp_path):
        manifest = Manifest(
            name='сборка',
            chunks=[Chunk(chunk_ids=[1], source_file='données\\ファイル.bin', file_size=3)],
            total_size=3,
        )

        path = write_manifest(manifest, tmp_path / 'build.manifest')

        assert read_manifest(path).chunks[0].source_file == 'données\\ファイル.bin'

    def test_unwritable_parent_raises_directory_error(self, manifest, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('not a directory')

        with pytest.raises(DirectoryCreationError):
            write_manifest(manifest, blocker / 'sub' / 'build.manifest')

    def test_destination_is_directory_raises_serialization_error(self, manifest, tmp_path):
        target = tmp_path / 'build.manifest'
        target.mkdir()

        with pytest.raises(SerializationError) as exc_info:
            write_manifest(manifest, target)

        assert 'build.manifest' in str(exc_info.value)
        assert not (tmp_path / '.build.manifest.tmp').exists()

    def test_read_invalid_manifest(self, tmp_path):
        path = tmp_path / 'bad.manifest'
        path.write_text('{"Name": "x", "Chunks": "nope"}', encoding='utf-8')

        with pytest.raises(SerializationError):
            read_manifest(path)

    def test_read_missing_manifest(self, tmp_path):
        with pytest.raises(SerializationError):
            read_manifest(tmp_path / 'missing.manifest')
