"""Attachment storage backends.

Two ``ObjectStore`` implementations, selected by ``STORAGE_BACKEND``:

  - ``local``: files under ``LOCAL_STORAGE_PATH``, served by the app
    itself at ``PUBLIC_STORAGE_BASE_URL``
  - ``s3``:    ``put_object`` into ``S3_BUCKET`` (any S3-compatible
    endpoint); boto3 is blocking, so calls run in a worker thread
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path, PurePosixPath

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from holoforms.errors import UploadFailed
from holoforms.interfaces import ObjectStore

from holoforms_server.config import ServerSettings

logger = logging.getLogger(__name__)


def _safe_key(path: str) -> PurePosixPath:
    """Reject absolute keys and ``..`` segments."""
    key = PurePosixPath(path)
    if key.is_absolute() or ".." in key.parts or not key.parts:
        raise ValueError(f"Invalid storage path: {path}")
    return key


class LocalObjectStore(ObjectStore):
    """Writes attachments to a directory on local disk."""

    def __init__(self, root: str | Path, public_base_url: str) -> None:
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _write(self, key: PurePosixPath, content: bytes) -> None:
        target = self.root.joinpath(*key.parts)
        os.makedirs(target.parent, exist_ok=True)
        with open(target, "wb") as f:
            f.write(content)

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        key = _safe_key(path)
        try:
            await asyncio.to_thread(self._write, key, content)
        except OSError as exc:
            raise UploadFailed(key.name, str(exc)) from exc
        return f"{self.public_base_url}/{key.as_posix()}"


def get_s3_client(
    *,
    region: str | None = None,
    endpoint_url: str | None = None,
) -> BaseClient:
    """Return an S3 client; ``endpoint_url`` selects an S3-compatible service."""
    return boto3.client(
        "s3",
        region_name=region,
        endpoint_url=endpoint_url.rstrip("/") if endpoint_url else None,
    )


class S3ObjectStore(ObjectStore):
    """Uploads attachments to an S3 bucket."""

    def __init__(
        self,
        bucket: str,
        *,
        region: str | None = None,
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
        client: BaseClient | None = None,
    ) -> None:
        self.bucket = bucket
        self._client = client or get_s3_client(region=region, endpoint_url=endpoint_url)
        if public_base_url:
            self.public_base_url = public_base_url.rstrip("/")
        elif endpoint_url:
            self.public_base_url = f"{endpoint_url.rstrip('/')}/{bucket}"
        elif region:
            self.public_base_url = f"https://{bucket}.s3.{region}.amazonaws.com"
        else:
            self.public_base_url = f"https://{bucket}.s3.amazonaws.com"

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        key = _safe_key(path).as_posix()
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.warning("S3 put_object failed for %s/%s: %s", self.bucket, key, exc)
            raise UploadFailed(PurePosixPath(key).name, str(exc)) from exc
        return f"{self.public_base_url}/{key}"


def build_object_store(settings: ServerSettings) -> ObjectStore:
    """Create the store selected by ``settings.storage_backend``."""
    if settings.storage_backend == "s3":
        if not settings.s3_bucket:
            raise ValueError("S3_BUCKET must be set when STORAGE_BACKEND=s3")
        logger.info("Using S3 attachment storage (bucket=%s)", settings.s3_bucket)
        return S3ObjectStore(
            settings.s3_bucket,
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            public_base_url=settings.s3_public_base_url,
        )
    if settings.storage_backend != "local":
        raise ValueError(f"Unknown STORAGE_BACKEND: {settings.storage_backend}")
    logger.info("Using local attachment storage at %s", settings.local_storage_path)
    return LocalObjectStore(settings.local_storage_path, settings.public_storage_base_url)
