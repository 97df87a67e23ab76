"""Tests for the blob store backends."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from profilehub.core.config import Settings
from profilehub.core.exceptions import BlobStoreError
from profilehub.schemas.user import ImageUpload
from profilehub.services.blob_store import (
    InMemoryBlobStore,
    LocalBlobStore,
    S3BlobStore,
    build_blob_store,
)

UPLOAD = ImageUpload(filename="me.PNG", content_type="image/png", data=b"\x89PNG")


@pytest.mark.asyncio
async def test_local_store_writes_file_and_returns_url(tmp_path):
    store = LocalBlobStore(str(tmp_path / "uploads"), "http://localhost:5000/uploads/")

    url = await store.save(UPLOAD)

    assert url.startswith("http://localhost:5000/uploads/")
    assert url.endswith(".png")
    name = url.rsplit("/", 1)[1]
    assert (tmp_path / "uploads" / name).read_bytes() == b"\x89PNG"


@pytest.mark.asyncio
async def test_local_store_names_are_unique(tmp_path):
    store = LocalBlobStore(str(tmp_path), "http://h/uploads")

    urls = {await store.save(UPLOAD) for _ in range(5)}

    assert len(urls) == 5


@pytest.mark.asyncio
async def test_local_store_write_failure_is_blob_error(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file")
    store = LocalBlobStore(str(blocker), "http://h/uploads")

    with pytest.raises(BlobStoreError):
        await store.save(UPLOAD)


@pytest.mark.asyncio
async def test_s3_store_puts_object_and_builds_public_url():
    s3 = MagicMock()
    store = S3BlobStore(
        bucket="profiles",
        public_base_url="https://cdn.example.com/",
        key_prefix="profile-images/",
        client=s3,
    )

    url = await store.save(UPLOAD)

    kwargs = s3.put_object.call_args.kwargs
    assert kwargs["Bucket"] == "profiles"
    assert kwargs["Key"].startswith("profile-images/")
    assert kwargs["ContentType"] == "image/png"
    assert kwargs["Body"] == b"\x89PNG"
    assert url == f"https://cdn.example.com/{kwargs['Key']}"


def test_s3_object_url_without_public_base():
    regional = S3BlobStore(bucket="b", region="eu-west-1", client=MagicMock())
    custom = S3BlobStore(bucket="b", endpoint_url="http://minio:9000/", client=MagicMock())

    assert regional.object_url("k.png") == "https://b.s3.eu-west-1.amazonaws.com/k.png"
    assert custom.object_url("k.png") == "http://minio:9000/b/k.png"


@pytest.mark.asyncio
async def test_s3_failure_is_blob_error():
    s3 = MagicMock()
    s3.put_object.side_effect = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutObject"
    )
    store = S3BlobStore(bucket="b", client=s3)

    with pytest.raises(BlobStoreError) as exc_info:
        await store.save(UPLOAD)

    assert "Access Denied" in exc_info.value.details


@pytest.mark.asyncio
async def test_in_memory_store_keeps_bytes():
    store = InMemoryBlobStore()

    url = await store.save(UPLOAD)

    assert url.startswith("https://example.test/uploads/")
    assert list(store.stored_objects.values()) == [b"\x89PNG"]


def test_build_blob_store_by_backend(tmp_path):
    assert build_blob_store(Settings(_env_file=None, IMAGE_MODE="none")) is None

    local = build_blob_store(
        Settings(_env_file=None, IMAGE_MODE="single", UPLOAD_DIR=str(tmp_path))
    )
    assert isinstance(local, LocalBlobStore)
    assert local.public_url == "http://localhost:5000/uploads"

    memory = build_blob_store(
        Settings(_env_file=None, IMAGE_MODE="multiple", BLOB_BACKEND="memory")
    )
    assert isinstance(memory, InMemoryBlobStore)

    s3 = build_blob_store(
        Settings(
            _env_file=None,
            IMAGE_MODE="multiple",
            BLOB_BACKEND="s3",
            S3_BUCKET="profiles",
            S3_REGION="us-east-1",
            AWS_ACCESS_KEY_ID="test",
            AWS_SECRET_ACCESS_KEY="test",
        )
    )
    assert isinstance(s3, S3BlobStore)
    assert s3.bucket == "profiles"
