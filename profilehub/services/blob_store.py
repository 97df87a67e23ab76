"""
profilehub/services/blob_store.py

Purpose: Storage for uploaded profile images

- Local disk storage served back through static files
- S3 (or S3-compatible) object storage via boto3
- In-memory storage for tests
- Every backend returns a retrievable URL for the stored bytes
"""

from __future__ import annotations

import secrets
import time
from pathlib import Path
from typing import Dict, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from profilehub.core.config import Settings
from profilehub.core.exceptions import BlobStoreError
from profilehub.core.logging import get_logger
from profilehub.schemas.user import ImageUpload
from utils.validation_utils import safe_extension

logger = get_logger(__name__)


def generate_blob_name(filename: Optional[str]) -> str:
    """Unique object name: <epoch millis>-<random hex><extension>."""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}{safe_extension(filename)}"


class BlobStore(Protocol):
    """Defines the operation the registration service needs from blob storage."""

    async def save(self, upload: ImageUpload) -> str:
        ...


class InMemoryBlobStore:
    """Test double for blob storage."""

    def __init__(self, base_url: str = "https://example.test/uploads"):
        self.base_url = base_url.rstrip("/")
        self.stored_objects: Dict[str, bytes] = {}

    async def save(self, upload: ImageUpload) -> str:
        name = generate_blob_name(upload.filename)
        self.stored_objects[name] = upload.data
        return f"{self.base_url}/{name}"


class LocalBlobStore:
    """
    Writes uploads into a directory that the app serves as static files.
    """

    def __init__(self, upload_dir: str, public_url: str):
        self.upload_dir = Path(upload_dir)
        self.public_url = public_url.rstrip("/")

    def ensure_directory(self):
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    async def save(self, upload: ImageUpload) -> str:
        name = generate_blob_name(upload.filename)
        target = self.upload_dir / name
        try:
            await run_in_threadpool(self.ensure_directory)
            await run_in_threadpool(target.write_bytes, upload.data)
        except OSError as e:
            logger.error(f"Failed to write upload {name}: {e}")
            raise BlobStoreError(details=str(e)) from e
        logger.debug(f"Stored upload locally as {name}")
        return f"{self.public_url}/{name}"


class S3BlobStore:
    """
    S3-compatible object storage client.
    """

    def __init__(
        self,
        bucket: str,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        public_base_url: Optional[str] = None,
        key_prefix: str = "",
        client=None,
    ):
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.key_prefix = key_prefix
        self._client = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )

    def object_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        if self.region:
            return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def _put(self, key: str, upload: ImageUpload):
        self._client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=upload.data,
            ContentType=upload.content_type or "application/octet-stream",
        )

    async def save(self, upload: ImageUpload) -> str:
        key = f"{self.key_prefix}{generate_blob_name(upload.filename)}"
        try:
            await run_in_threadpool(self._put, key, upload)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 upload failed for {key}: {e}")
            raise BlobStoreError(details=str(e)) from e
        logger.debug(f"Uploaded {key} to bucket {self.bucket}")
        return self.object_url(key)


def build_blob_store(settings: Settings) -> Optional[BlobStore]:
    """
    Picks the blob store backend from settings.
    Returns None when image uploads are disabled.
    """
    if not settings.uploads_enabled:
        return None

    if settings.BLOB_BACKEND == "s3":
        logger.info(f"Using S3 blob store (bucket={settings.S3_BUCKET})")
        return S3BlobStore(
            bucket=settings.S3_BUCKET,
            region=settings.S3_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            access_key_id=settings.AWS_ACCESS_KEY_ID,
            secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            public_base_url=settings.S3_PUBLIC_BASE_URL,
            key_prefix=settings.S3_KEY_PREFIX,
        )

    if settings.BLOB_BACKEND == "memory":
        logger.warning("Using in-memory blob store; uploads are lost on restart")
        return InMemoryBlobStore(
            base_url=settings.PUBLIC_SERVER_URL.rstrip("/") + settings.UPLOADS_URL_PREFIX
        )

    logger.info(f"Using local blob store at {settings.UPLOAD_DIR}")
    return LocalBlobStore(
        upload_dir=settings.UPLOAD_DIR,
        public_url=settings.PUBLIC_SERVER_URL.rstrip("/") + settings.UPLOADS_URL_PREFIX,
    )
