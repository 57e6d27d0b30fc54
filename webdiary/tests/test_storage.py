from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from webdiary.storage import InMemoryBlobStorage, StorageError, build_blob_storage
from webdiary.storage.s3 import S3BlobStorage

pytestmark = pytest.mark.unit


def _client_error(operation: str) -> ClientError:
    return ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, operation)


def test_memory_storage_round_trip():
    storage = InMemoryBlobStorage(key_prefix="uploads", public_url="https://cdn.test/")
    blob = storage.upload(b"hello", "Note.TXT", "text/plain")
    assert blob.external_ref.startswith("uploads/")
    assert blob.external_ref.endswith(".txt")
    assert blob.public_url == f"https://cdn.test/{blob.external_ref}"
    assert storage.blobs[blob.external_ref] == b"hello"

    storage.delete(blob.external_ref)
    assert storage.blobs == {}


def test_memory_storage_injected_failures():
    storage = InMemoryBlobStorage()
    storage.failing_names.add("bad.png")
    with pytest.raises(StorageError):
        storage.upload(b"x", "bad.png", "image/png")
    storage.failing_deletes.add("uploads/gone.png")
    with pytest.raises(StorageError):
        storage.delete("uploads/gone.png")


def test_keys_are_unique():
    storage = InMemoryBlobStorage()
    keys = {storage.make_key("a.png") for _ in range(20)}
    assert len(keys) == 20


def test_s3_upload_puts_object():
    client = MagicMock()
    storage = S3BlobStorage("diary-bucket", region="eu-west-1", client=client)
    blob = storage.upload(b"data", "photo.jpg", "image/jpeg")

    client.put_object.assert_called_once()
    kwargs = client.put_object.call_args.kwargs
    assert kwargs["Bucket"] == "diary-bucket"
    assert kwargs["Key"] == blob.external_ref
    assert kwargs["ContentType"] == "image/jpeg"
    assert blob.public_url == f"https://diary-bucket.s3.eu-west-1.amazonaws.com/{blob.external_ref}"
    assert blob.stored_name == blob.external_ref.split("/")[-1]


def test_s3_urls_follow_endpoint_or_public_base():
    client = MagicMock()
    custom = S3BlobStorage("b", endpoint="https://minio.local:9000", client=client)
    assert custom.url_for("k/x.png") == "https://minio.local:9000/b/k/x.png"
    public = S3BlobStorage("b", public_url="https://files.example.com/", client=client)
    assert public.url_for("k/x.png") == "https://files.example.com/k/x.png"


def test_s3_errors_become_storage_errors():
    client = MagicMock()
    client.put_object.side_effect = _client_error("PutObject")
    client.delete_object.side_effect = _client_error("DeleteObject")
    storage = S3BlobStorage("b", client=client)
    with pytest.raises(StorageError):
        storage.upload(b"x", "a.pdf", "application/pdf")
    with pytest.raises(StorageError):
        storage.delete("uploads/a.pdf")


def test_s3_without_bucket_fails_per_file():
    storage = S3BlobStorage("", client=MagicMock())
    with pytest.raises(StorageError):
        storage.upload(b"x", "a.pdf", "application/pdf")


def test_build_blob_storage_picks_backend(app):
    app.config["STORAGE_BACKEND"] = "memory"
    assert isinstance(build_blob_storage(app), InMemoryBlobStorage)
    app.config["STORAGE_BACKEND"] = "ftp"
    with pytest.raises(ValueError):
        build_blob_storage(app)
