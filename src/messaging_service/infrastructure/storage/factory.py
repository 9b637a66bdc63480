from __future__ import annotations

from messaging_service.config import Settings
from messaging_service.infrastructure.storage.local import LocalObjectStorage
from messaging_service.infrastructure.storage.s3 import S3ObjectStorage


def build_storage(settings: Settings) -> S3ObjectStorage | LocalObjectStorage:
    if settings.STORAGE_BACKEND == "local":
        return LocalObjectStorage(settings.STORAGE_LOCAL_ROOT)
    assert settings.S3_BUCKET, "S3_BUCKET must be set when STORAGE_BACKEND=s3"
    return S3ObjectStorage.from_settings(settings)
