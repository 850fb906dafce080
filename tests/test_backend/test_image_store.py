"""Tests for the filesystem image store."""
import os
import pytest
from unittest.mock import patch
from backend.services.image_store import ImageStore, CleanupResult
from shared.validation import ValidationError


def test_save_creates_directory_and_returns_bare_name(standalone_store, uploads_dir, image_b64):
    """Saving writes the decoded bytes under a random .png name."""
    assert not uploads_dir.exists()

    name = standalone_store.save(image_b64(b'abc'))

    assert os.sep not in name
    assert name.endswith('.png')
    assert (uploads_dir / name).read_bytes() == b'abc'


def test_save_accepts_raw_base64(standalone_store, uploads_dir, image_b64):
    name = standalone_store.save(image_b64(b'raw-bytes', media_type=None))
    assert (uploads_dir / name).read_bytes() == b'raw-bytes'


def test_save_generates_distinct_names(standalone_store, image_b64):
    names = {standalone_store.save(image_b64()) for _ in range(5)}
    assert len(names) == 5


def test_named_save_uses_media_type_extension(standalone_store, uploads_dir, image_b64):
    name = standalone_store.save(image_b64(b'jpeg', media_type='image/jpeg'), name='meterImage_C1')
    assert name == 'meterImage_C1.jpg'
    assert (uploads_dir / name).read_bytes() == b'jpeg'


def test_named_save_is_confined_to_uploads(standalone_store, uploads_dir, image_b64):
    """Path separators in the name never escape the uploads directory."""
    name = standalone_store.save(image_b64(), name='../../etc/meterImage_C1')
    assert '/' not in name and '..' not in name
    assert (uploads_dir / name).exists()


def test_named_save_avoids_referenced_names(standalone_store, image_b64):
    first = standalone_store.save(image_b64(b'one'), name='poleImage_C1_0')
    second = standalone_store.save(image_b64(b'two'), name='poleImage_C1_0', avoid={first})

    assert first == 'poleImage_C1_0.png'
    assert second != first
    assert second.startswith('poleImage_C1_0_')
    assert standalone_store.exists(first)


def test_save_rejects_invalid_base64(standalone_store, uploads_dir):
    with pytest.raises(ValidationError):
        standalone_store.save('data:image/png;base64,not*base64!')
    assert not uploads_dir.exists() or not list(uploads_dir.iterdir())


def test_save_propagates_write_failures(standalone_store, image_b64):
    with patch('builtins.open', side_effect=PermissionError('read-only')):
        with pytest.raises(PermissionError):
            standalone_store.save(image_b64())


def test_delete_removes_file(standalone_store, uploads_dir, image_b64):
    name = standalone_store.save(image_b64())

    result = standalone_store.delete(name)

    assert result == CleanupResult(name=name, deleted=True)
    assert not (uploads_dir / name).exists()


def test_delete_missing_file_is_reported_not_raised(standalone_store):
    result = standalone_store.delete('does-not-exist.png')
    assert result.deleted is False
    assert result.error == 'missing'


def test_delete_os_error_is_reported_not_raised(standalone_store, image_b64):
    name = standalone_store.save(image_b64())
    with patch('backend.services.image_store.os.remove', side_effect=OSError('busy')):
        result = standalone_store.delete(name)
    assert result.deleted is False
    assert 'busy' in result.error


def test_delete_without_name_is_noop(standalone_store):
    assert standalone_store.delete(None) == CleanupResult(name=None, deleted=False)
    assert standalone_store.discard([None, '']) == []


def test_list_files(standalone_store, image_b64):
    assert standalone_store.list_files() == []
    a = standalone_store.save(image_b64(), name='a')
    b = standalone_store.save(image_b64(), name='b')
    assert standalone_store.list_files() == sorted([a, b])


def test_store_resolves_relative_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    store = ImageStore('uploads')
    assert store.uploads_dir == str(tmp_path / 'uploads')


@pytest.mark.parametrize('stem', ['meterImage_C/1', 'meterImage_उप१'])
def test_named_save_suffixes_names_changed_by_sanitizing(standalone_store, image_b64, stem):
    """Distinct stems that sanitize alike must not share a file."""
    first = standalone_store.save(image_b64(b'one'), name=stem)
    second = standalone_store.save(image_b64(b'two'), name=stem)

    assert first != second
    assert standalone_store.exists(first) and standalone_store.exists(second)


def test_named_save_keeps_safe_names(standalone_store, image_b64):
    assert standalone_store.save(image_b64(), name='meterImage_C_1') == 'meterImage_C_1.png'
