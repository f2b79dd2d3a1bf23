import re

import pytest

from app.core.errors import ValidationError
from app.models.enums import FileType
from app.services.storage import (
    IncomingFile,
    LocalBlobStorage,
    build_object_path,
    file_type_for,
    validate_submission,
)


def test_build_object_path_keeps_extension():
    path = build_object_path("report-1", "Foto.JPG")
    assert re.fullmatch(r"report-1/\d+-[a-z0-9]{7}\.jpg", path)


def test_build_object_path_without_extension():
    assert build_object_path("entities/u1", "README").endswith(".bin")


def test_local_storage_writes_and_returns_public_url(tmp_path):
    storage = LocalBlobStorage(tmp_path, "/files/")

    url = storage.upload("r1/a.png", b"png", "image/png")

    assert url == "/files/r1/a.png"
    assert (tmp_path / "r1" / "a.png").read_bytes() == b"png"
    with pytest.raises(FileExistsError):
        storage.upload("r1/a.png", b"other", "image/png")


@pytest.mark.parametrize("path", ["../escape.png", "/etc/passwd"])
def test_local_storage_rejects_paths_outside_root(tmp_path, path):
    with pytest.raises(ValueError):
        LocalBlobStorage(tmp_path, "/files").upload(path, b"x", "image/png")


@pytest.mark.parametrize(
    ("content_type", "expected"),
    [
        ("image/png", FileType.IMAGE),
        ("video/mp4", FileType.VIDEO),
        ("application/pdf", FileType.DOCUMENT),
    ],
)
def test_file_type_for(content_type, expected):
    assert file_type_for(content_type) == expected


def test_validate_submission_limits(monkeypatch):
    from app.core.config import settings

    monkeypatch.setattr(settings, "MAX_FILE_SIZE_BYTES", 5)
    validate_submission([IncomingFile("a.png", "image/png", b"12345")])
    with pytest.raises(ValidationError):
        validate_submission([IncomingFile("b.png", "image/png", b"123456")])
    with pytest.raises(ValidationError):
        validate_submission([IncomingFile(f"{i}.png", "image/png", b"1") for i in range(4)])


def test_local_storage_delete_is_idempotent(tmp_path):
    storage = LocalBlobStorage(tmp_path, "/files")
    storage.upload("entities/u1/rut.pdf", b"%PDF", "application/pdf")

    storage.delete("entities/u1/rut.pdf")
    storage.delete("entities/u1/rut.pdf")

    assert not (tmp_path / "entities" / "u1" / "rut.pdf").exists()
