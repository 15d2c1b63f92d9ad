"""Tests for blob storage on disk."""

import io
from unittest.mock import patch

import pytest

from fileshare import blob_storage
from fileshare.exceptions import FileNotFoundError, StorageIOError


class TestStageBlob:
    @pytest.mark.parametrize('source', [
        b'hello world',
        bytearray(b'hello world'),
        io.BytesIO(b'hello world'),
        [b'hello', b' ', b'world'],
    ])
    def test_stage_blob_accepts_sources(self, tmp_path, source):
        staged, size = blob_storage.stage_blob(tmp_path / '.staging', source)
        assert size == 11
        assert staged.read_bytes() == b'hello world'

    def test_stage_blob_reads_file_objects_in_pieces(self, tmp_path):
        data = bytes(range(256)) * 100
        staged, size = blob_storage.stage_blob(tmp_path, io.BytesIO(data), piece_size=1000)
        assert size == len(data)
        assert staged.read_bytes() == data

    def test_failed_write_leaves_nothing(self, tmp_path):
        def broken_source():
            yield b'partial'
            raise OSError('disk went away')

        with pytest.raises(StorageIOError):
            blob_storage.stage_blob(tmp_path, broken_source())

        assert list(tmp_path.iterdir()) == []

    def test_source_error_is_wrapped_and_cleaned_up(self, tmp_path):
        def disconnecting_source():
            yield b'part'
            raise RuntimeError('client disconnected')

        staging = tmp_path / '.staging'
        with pytest.raises(StorageIOError) as exc_info:
            blob_storage.stage_blob(staging, disconnecting_source())

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert list(staging.iterdir()) == []

    def test_text_pieces_are_rejected_and_cleaned_up(self, tmp_path):
        staging = tmp_path / '.staging'
        with pytest.raises(StorageIOError):
            blob_storage.stage_blob(staging, ['not bytes'])
        assert list(staging.iterdir()) == []

    def test_stage_and_commit(self, tmp_path):
        staging = tmp_path / '.staging'
        staged, size = blob_storage.stage_blob(staging, b'abc')
        assert staged.parent == staging
        assert staged.name.startswith('.')
        assert size == 3

        target = tmp_path / 'final.txt'
        blob_storage.commit_blob(staged, target)
        assert target.read_bytes() == b'abc'
        assert not staged.exists()

    def test_commit_into_missing_directory(self, tmp_path):
        staged, _ = blob_storage.stage_blob(tmp_path, b'abc')
        with pytest.raises(StorageIOError):
            blob_storage.commit_blob(staged, tmp_path / 'missing' / 'final.txt')
        blob_storage.discard_staged(staged)
        assert not staged.exists()

    def test_discard_missing_staged_file(self, tmp_path):
        blob_storage.discard_staged(tmp_path / 'never-existed')


class TestReadBlob:
    def test_open_reports_size(self, tmp_path):
        target = tmp_path / 'blob.bin'
        target.write_bytes(b'12345')
        f, size = blob_storage.open_blob(target)
        f.close()
        assert size == 5

    def test_streams_in_pieces_and_closes(self, tmp_path):
        target = tmp_path / 'blob.bin'
        target.write_bytes(b'x' * 10)
        f, _ = blob_storage.open_blob(target)
        pieces = list(blob_storage.stream_blob(f, piece_size=4))
        assert pieces == [b'xxxx', b'xxxx', b'xx']
        assert f.closed

    def test_open_missing_blob(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            blob_storage.open_blob(tmp_path / 'missing')

    def test_exists(self, tmp_path):
        target = tmp_path / 'blob.bin'
        assert not blob_storage.blob_exists(target)
        target.write_bytes(b'12345')
        assert blob_storage.blob_exists(target)


class TestDeleteBlob:
    def test_delete_existing(self, tmp_path):
        target = tmp_path / 'blob.bin'
        target.write_bytes(b'x')
        assert blob_storage.delete_blob(target) is True
        assert not target.exists()

    def test_delete_missing(self, tmp_path):
        assert blob_storage.delete_blob(tmp_path / 'missing') is False

    def test_delete_failure_is_storage_error(self, tmp_path):
        target = tmp_path / 'blob.bin'
        target.write_bytes(b'x')
        with patch('pathlib.Path.unlink', side_effect=PermissionError('denied')):
            with pytest.raises(StorageIOError):
                blob_storage.delete_blob(target)


class TestListBlobs:
    def test_skips_ledger_and_hidden_files(self, tmp_path):
        (tmp_path / 'data.json').write_text('[]')
        (tmp_path / '.upload_123').write_bytes(b'')
        (tmp_path / 'b_file.txt').write_bytes(b'')
        (tmp_path / 'a_file.txt').write_bytes(b'')
        (tmp_path / 'subdir').mkdir()

        assert blob_storage.list_blobs(tmp_path) == ['a_file.txt', 'b_file.txt']

    def test_missing_directory(self, tmp_path):
        assert blob_storage.list_blobs(tmp_path / 'missing') == []


class TestSetAside:
    def test_set_aside_and_restore(self, tmp_path):
        target = tmp_path / 'blob.bin'
        target.write_bytes(b'x')
        aside = blob_storage.set_aside(target, tmp_path / '.deleting_blob.bin')
        assert not target.exists()
        blob_storage.restore(aside, target)
        assert target.read_bytes() == b'x'

    def test_set_aside_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            blob_storage.set_aside(tmp_path / 'missing', tmp_path / '.aside')

    def test_purge_file_and_directory(self, tmp_path):
        aside_file = tmp_path / '.aside_file'
        aside_file.write_bytes(b'x')
        aside_dir = tmp_path / '.aside_dir'
        aside_dir.mkdir()
        (aside_dir / 'data.json').write_text('[]')

        assert blob_storage.purge(aside_file) is True
        assert blob_storage.purge(aside_dir) is True
        assert list(tmp_path.iterdir()) == []

    def test_purge_failure_is_reported(self, tmp_path):
        aside_dir = tmp_path / '.aside_dir'
        aside_dir.mkdir()
        with patch('fileshare.blob_storage.shutil.rmtree', side_effect=OSError('busy')):
            assert blob_storage.purge(aside_dir) is False
