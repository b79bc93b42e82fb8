"""File storage: local disk (served at /storage) or AWS S3.

Keys are relative paths such as `logbooks/week_1_TT26H500SO001.pdf` or
`attachments/<uuid>.pdf`; both backends store the same key layout.
"""
import asyncio
import logging
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import ClientError

from internhub.config import settings
from internhub.errors import StorageError

logger = logging.getLogger(__name__)

_s3 = None


def get_s3():
    global _s3
    if _s3 is None:
        _s3 = boto3.client(
            "s3",
            region_name=settings.aws_region,
            aws_access_key_id=settings.aws_access_key_id or None,
            aws_secret_access_key=settings.aws_secret_access_key or None,
        )
    return _s3


class LocalStorage:
    def __init__(self, root: str, url_prefix: str):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise StorageError(f"Invalid storage key: {key}")
        return path

    def _write(self, key: str, body: bytes) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(body)

    async def save(self, key: str, body: bytes, content_type: str = "application/octet-stream") -> str:
        try:
            await asyncio.to_thread(self._write, key, body)
        except OSError as e:
            raise StorageError(f"Could not write {key}: {e}")
        return key

    async def read(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        if not path.is_file():
            return None
        return await asyncio.to_thread(path.read_bytes)

    async def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    async def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def url(self, key: str) -> str:
        return f"{self.url_prefix}/{key}"


class S3Storage:
    def __init__(self, bucket: str, region: str):
        self.bucket = bucket
        self.region = region

    async def save(self, key: str, body: bytes, content_type: str = "application/octet-stream") -> str:
        try:
            await asyncio.to_thread(
                get_s3().put_object, Bucket=self.bucket, Key=key, Body=body, ContentType=content_type
            )
        except ClientError as e:
            raise StorageError(f"Could not upload {key}: {e}")
        return key

    async def read(self, key: str) -> Optional[bytes]:
        try:
            obj = await asyncio.to_thread(get_s3().get_object, Bucket=self.bucket, Key=key)
        except ClientError:
            return None
        return await asyncio.to_thread(obj["Body"].read)

    async def exists(self, key: str) -> bool:
        try:
            await asyncio.to_thread(get_s3().head_object, Bucket=self.bucket, Key=key)
        except ClientError:
            return False
        return True

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(get_s3().delete_object, Bucket=self.bucket, Key=key)
        except ClientError as e:
            logger.warning(f"Failed to delete s3://{self.bucket}/{key}: {e}")

    def url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"


def get_storage():
    """Storage backend selected by STORAGE_BACKEND."""
    if settings.storage_backend == "s3":
        return S3Storage(settings.s3_bucket, settings.aws_region)
    return LocalStorage(settings.storage_root, settings.storage_url_prefix)
