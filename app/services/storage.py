from __future__ import annotations

import secrets
import string
import time
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Protocol

from app.core.config import settings
from app.core.errors import ValidationError
from app.models.enums import FileType

_RANDOM_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class IncomingFile:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class BlobStorage(Protocol):
    def upload(self, path: str, data: bytes, content_type: str) -> str: ...

    def delete(self, path: str) -> None: ...


class LocalBlobStorage:
    """Writes blobs under a root directory and serves them from a public base URL."""

    def __init__(self, root: Path, public_url: str) -> None:
        self._root = root
        self._public_url = public_url.rstrip('/')

    def _resolve(self, path: str) -> Path:
        relative = PurePosixPath(path)
        if relative.is_absolute() or '..' in relative.parts:
            raise ValueError(f'Invalid storage path: {path}')
        return self._root.joinpath(*relative.parts)

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        target = self._resolve(path)
        if target.exists():
            raise FileExistsError(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return f'{self._public_url}/{path}'

    def delete(self, path: str) -> None:
        self._resolve(path).unlink(missing_ok=True)


def build_object_path(owner: str, filename: str) -> str:
    ext = PurePosixPath(filename).suffix.lstrip('.').lower() or 'bin'
    timestamp = int(time.time() * 1000)
    random_part = ''.join(secrets.choice(_RANDOM_ALPHABET) for _ in range(7))
    return f'{owner}/{timestamp}-{random_part}.{ext}'


def file_type_for(content_type: str) -> FileType:
    if content_type.startswith('image/'):
        return FileType.IMAGE
    if content_type.startswith('video/'):
        return FileType.VIDEO
    return FileType.DOCUMENT


def validate_submission(files: list[IncomingFile]) -> None:
    if len(files) > settings.MAX_FILES_PER_SUBMISSION:
        raise ValidationError(f'Máximo {settings.MAX_FILES_PER_SUBMISSION} archivos permitidos')
    for item in files:
        if item.size > settings.MAX_FILE_SIZE_BYTES:
            limit_mb = settings.MAX_FILE_SIZE_BYTES // (1024 * 1024)
            raise ValidationError(f'El archivo {item.filename} excede el tamaño máximo de {limit_mb}MB')


@lru_cache
def get_blob_storage() -> BlobStorage:
    return LocalBlobStorage(Path(settings.STORAGE_DIR).expanduser().resolve(), settings.STORAGE_PUBLIC_URL)


def reset_blob_storage() -> None:
    get_blob_storage.cache_clear()
