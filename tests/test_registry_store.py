"""Tests for the registry store and its JSON snapshot."""

import json
from unittest.mock import patch

from common.types import FileKind, FileRecord
from registry.exceptions import SnapshotIOError
from registry.repositories.registry_store import JsonSnapshotFile, RegistryStore


def _record(file_ref='tg-1', kind=FileKind.DOCUMENT, uploader='alice'):
    return FileRecord(
        file_ref=file_ref,
        kind=kind,
        uploader=uploader,
        uploaded_at='2026-01-07T10:30:45+00:00',
    )


class TestRegistryStoreLoad:
    """Test snapshot loading."""

    def test_missing_snapshot_gives_empty_registry(self, tmp_path):
        store = RegistryStore(JsonSnapshotFile(str(tmp_path / 'missing.json')))

        assert store.load() == {}
        assert len(store) == 0

    def test_corrupt_snapshot_gives_empty_registry(self, tmp_path):
        path = tmp_path / 'db.json'
        path.write_text('{not json')
        store = RegistryStore(JsonSnapshotFile(str(path)))

        assert store.load() == {}

    def test_wrong_shape_gives_empty_registry(self, tmp_path):
        path = tmp_path / 'db.json'
        path.write_text(json.dumps({'document(aaaa1111)': {}}))
        store = RegistryStore(JsonSnapshotFile(str(path)))

        assert store.load() == {}

    def test_loads_snapshot_written_as_pairs(self, tmp_path):
        path = tmp_path / 'db.json'
        path.write_text(json.dumps([
            ['document(aaaa1111)', {
                'file_id': 'tg-1',
                'fileType': 'document',
                'uploader': 'alice',
                'uploadDate': '2026-01-07T10:30:45.000Z',
            }],
            ['unknown(bbbb2222)', {
                'file_id': 'tg-2',
                'fileType': 'sticker',
                'uploader': 12345,
                'uploadDate': '2026-01-08T00:00:00.000Z',
            }],
        ]))
        store = RegistryStore(JsonSnapshotFile(str(path)))

        loaded = store.load()

        assert set(loaded) == {'document(aaaa1111)', 'unknown(bbbb2222)'}
        assert loaded['document(aaaa1111)'].file_ref == 'tg-1'
        assert loaded['unknown(bbbb2222)'].kind == FileKind.UNKNOWN
        assert loaded['unknown(bbbb2222)'].uploader == '12345'


class TestRegistryStorePersist:
    """Test snapshot persistence."""

    def test_round_trip_preserves_pairs(self, store, snapshot_path):
        store.set('document(aaaa1111)', _record('tg-1'))
        store.set('photo(bbbb2222)', _record('tg-2', FileKind.PHOTO, 'bob'))
        before = dict(store.list())

        assert store.persist() is True

        reloaded = RegistryStore(JsonSnapshotFile(str(snapshot_path)))
        assert reloaded.load() == before

    def test_persist_writes_list_of_pairs(self, store, snapshot_path):
        store.set('video(cccc3333)', _record('tg-3', FileKind.VIDEO))
        store.persist()

        data = json.loads(snapshot_path.read_text())

        assert data == [[
            'video(cccc3333)',
            {
                'file_id': 'tg-3',
                'fileType': 'video',
                'uploader': 'alice',
                'uploadDate': '2026-01-07T10:30:45+00:00',
            },
        ]]

    def test_persist_creates_parent_directories(self, tmp_path):
        path = tmp_path / 'nested' / 'dir' / 'db.json'
        store = RegistryStore(JsonSnapshotFile(str(path)))
        store.set('audio(dddd4444)', _record(kind=FileKind.AUDIO))

        assert store.persist() is True
        assert path.exists()

    def test_persist_failure_keeps_memory_state(self, store):
        store.set('document(aaaa1111)', _record())

        with patch.object(JsonSnapshotFile, 'write', side_effect=SnapshotIOError('disk full')):
            assert store.persist() is False

        assert store.get('document(aaaa1111)') == _record()

    def test_failed_write_leaves_previous_snapshot_intact(self, store, snapshot_path):
        store.set('document(aaaa1111)', _record())
        store.persist()
        original = snapshot_path.read_text()

        store.set('photo(bbbb2222)', _record('tg-2', FileKind.PHOTO))
        with patch('registry.repositories.registry_store.json.dump', side_effect=TypeError('boom')):
            assert store.persist() is False

        assert snapshot_path.read_text() == original
        assert [p.name for p in snapshot_path.parent.iterdir()] == [snapshot_path.name]


class TestRegistryStoreOperations:
    """Test map operations."""

    def test_get_missing_returns_none(self, store):
        assert store.get('document(00000000)') is None

    def test_set_and_get(self, store):
        store.set('document(aaaa1111)', _record())

        assert 'document(aaaa1111)' in store
        assert store.get('document(aaaa1111)').uploader == 'alice'

    def test_delete_reports_presence(self, store):
        store.set('document(aaaa1111)', _record())

        assert store.delete('document(aaaa1111)') is True
        assert store.delete('document(aaaa1111)') is False

    def test_list_with_predicate(self, store):
        store.set('document(aaaa1111)', _record(uploader='alice'))
        store.set('document(bbbb2222)', _record(uploader='bob'))
        store.set('document(cccc3333)', _record(uploader='alice'))

        ids = [file_id for file_id, _ in store.list(lambda _, r: r.uploader == 'alice')]

        assert ids == ['document(aaaa1111)', 'document(cccc3333)']

    def test_set_does_not_persist(self, store, snapshot_path):
        store.set('document(aaaa1111)', _record())

        assert not snapshot_path.exists()
