"""S3 object storage for message attachments (boto3).

boto3 is synchronous, so calls are pushed to a worker thread. Timeouts are
enforced by the botocore client configuration.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import PurePosixPath
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from messaging_service.application.dto.message import AttachmentUpload
from messaging_service.application.exceptions import StorageError
from messaging_service.application.ports.storage import StoredObject
from messaging_service.config import Settings

logger = logging.getLogger(__name__)


def build_object_key(namespace: str, filename: str) -> str:
    suffix = PurePosixPath(filename).suffix.lower()
    return f"{namespace}/{uuid.uuid4().hex}{suffix}"


class S3ObjectStorage:
    """Implements application.ports.storage.ObjectStorage."""

    def __init__(self, client: Any, bucket: str) -> None:
        self._client = client
        self._bucket = bucket

    @classmethod
    def from_settings(cls, settings: Settings) -> S3ObjectStorage:
        client = boto3.client(
            "s3",
            region_name=settings.S3_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            aws_access_key_id=settings.S3_ACCESS_KEY_ID,
            aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            config=Config(
                connect_timeout=settings.STORAGE_TIMEOUT_SECONDS,
                read_timeout=settings.STORAGE_TIMEOUT_SECONDS,
                retries={"max_attempts": 2},
            ),
        )
        return cls(client, settings.S3_BUCKET)

    async def upload(self, file: AttachmentUpload, namespace: str) -> StoredObject:
        key = build_object_key(namespace, file.filename)
        extra: dict[str, Any] = {}
        if file.content_type:
            extra["ContentType"] = file.content_type
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=file.data,
                **extra,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 upload failed for %s: %s", key, exc)
            raise StorageError("Failed to upload file") from exc
        return StoredObject(key=key)

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._client.delete_object, Bucket=self._bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to delete {key}") from exc

    def close(self) -> None:
        self._client.close()
