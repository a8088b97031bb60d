"""Tests for S3 storage helpers. The boto3 client is always mocked."""

from __future__ import annotations

from io import BytesIO
from unittest import mock

import pytest
from botocore.exceptions import ClientError
from PIL import Image

from shared.domain.exceptions import ExternalServiceError, ValidationError
from shared.infrastructure.storage import (
    delete_from_s3,
    key_from_url,
    optimize_image,
    safe_filename,
    upload_to_s3,
)


def _png(width: int = 40, height: int = 20) -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", (width, height), (255, 0, 0, 128)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_safe_filename_strips_unsafe_characters():
    assert safe_filename("my photo (1).png") == "my_photo_1.png"
    assert safe_filename("???") == "file"


def test_optimize_image_converts_to_jpeg_and_downscales():
    content, mimetype = optimize_image(_png(400, 200), max_dimension=100)
    assert mimetype == "image/jpeg"
    image = Image.open(BytesIO(content))
    assert image.format == "JPEG"
    assert image.size == (100, 50)


def test_optimize_image_rejects_garbage():
    with pytest.raises(ValidationError) as excinfo:
        optimize_image(b"not an image")
    assert excinfo.value.code == "invalid_image"


def test_upload_puts_object_and_returns_public_url(settings):
    settings.S3_PUBLIC_BASE = ""
    client = mock.Mock()

    url = upload_to_s3(b"data", "hall photo.jpg", mimetype="image/jpeg", folder="venues/3", client=client)

    kwargs = client.put_object.call_args.kwargs
    assert kwargs["Bucket"] == settings.S3_BUCKET_NAME
    assert kwargs["Key"].startswith("venues/3/")
    assert kwargs["Key"].endswith("_hall_photo.jpg")
    assert kwargs["ContentType"] == "image/jpeg"
    assert url == f"https://{settings.S3_BUCKET_NAME}.s3.{settings.S3_REGION}.amazonaws.com/{kwargs['Key']}"


def test_upload_requires_a_buffer():
    with pytest.raises(ValidationError) as excinfo:
        upload_to_s3(b"", "x.jpg", client=mock.Mock())
    assert excinfo.value.code == "missing_file"


def test_upload_failure_becomes_external_service_error():
    client = mock.Mock()
    client.put_object.side_effect = ClientError({"Error": {"Code": "500", "Message": "down"}}, "PutObject")

    with pytest.raises(ExternalServiceError) as excinfo:
        upload_to_s3(b"data", "x.jpg", client=client)
    assert excinfo.value.code == "storage_error"


def test_delete_uses_key_from_public_base(settings):
    settings.S3_PUBLIC_BASE = "https://cdn.example.com"
    client = mock.Mock()

    assert delete_from_s3("https://cdn.example.com/venues/3/1_a.jpg", client=client) is True
    client.delete_object.assert_called_once_with(Bucket=settings.S3_BUCKET_NAME, Key="venues/3/1_a.jpg")


def test_key_from_plain_s3_url(settings):
    settings.S3_PUBLIC_BASE = ""
    assert key_from_url("https://bucket.s3.ap-south-1.amazonaws.com/venues/1/a.jpg") == "venues/1/a.jpg"
