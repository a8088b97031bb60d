"""S3 object storage for venue images.

``upload_to_s3`` stores a buffer under ``<folder>/<timestamp>_<safe name>``
and returns its public URL. Images are validated and downscaled with Pillow
before upload.
"""

from __future__ import annotations

import logging
import re
import time
from io import BytesIO
from urllib.parse import urlparse

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings
from PIL import Image, UnidentifiedImageError

from shared.domain.exceptions import ExternalServiceError, ValidationError

logger = logging.getLogger(__name__)

IMAGE_FORMATS = {"JPEG", "PNG", "WEBP"}


def get_s3_client():
    return boto3.client(
        "s3",
        endpoint_url=getattr(settings, "S3_ENDPOINT_URL", None) or None,
        aws_access_key_id=getattr(settings, "S3_ACCESS_KEY", ""),
        aws_secret_access_key=getattr(settings, "S3_SECRET_KEY", ""),
        region_name=getattr(settings, "S3_REGION", "us-east-1"),
        config=BotoConfig(signature_version="s3v4"),
    )


def safe_filename(filename: str) -> str:
    """Whitespace becomes underscores, anything outside [A-Za-z0-9._-] is dropped."""
    name = re.sub(r"\s+", "_", filename or "")
    return re.sub(r"[^a-zA-Z0-9._-]", "", name) or "file"


def build_object_key(filename: str, folder: str = "uploads") -> str:
    return f"{folder}/{int(time.time() * 1000)}_{safe_filename(filename)}"


def public_url(key: str) -> str:
    base = getattr(settings, "S3_PUBLIC_BASE", "").rstrip("/")
    if base:
        return f"{base}/{key}"
    return f"https://{settings.S3_BUCKET_NAME}.s3.{settings.S3_REGION}.amazonaws.com/{key}"


def key_from_url(url: str) -> str:
    base = getattr(settings, "S3_PUBLIC_BASE", "").rstrip("/")
    if base and url.startswith(base + "/"):
        return url[len(base) + 1:]
    return urlparse(url).path.lstrip("/")


def optimize_image(buffer: bytes, max_dimension: int | None = None, quality: int = 85) -> tuple[bytes, str]:
    """Validate an image and re-encode it as JPEG, downscaled to max_dimension.

    Returns (bytes, content_type).
    """
    max_dimension = max_dimension or getattr(settings, "PHOTO_MAX_DIMENSION", 1920)
    try:
        img = Image.open(BytesIO(buffer))
        img.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError("Invalid image", code="invalid_image", details={"error": str(exc)})
    if img.format not in IMAGE_FORMATS:
        raise ValidationError(f"Unsupported image format: {img.format}", code="invalid_image")

    if img.mode == "RGBA":
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[3])
        img = background
    elif img.mode != "RGB":
        img = img.convert("RGB")

    if img.width > max_dimension or img.height > max_dimension:
        img.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

    out = BytesIO()
    img.save(out, format="JPEG", quality=quality, optimize=True)
    return out.getvalue(), "image/jpeg"


def upload_to_s3(buffer: bytes, filename: str, mimetype: str | None = None, folder: str = "uploads", client=None) -> str:
    if not buffer:
        raise ValidationError("Missing file buffer", code="missing_file")

    key = build_object_key(filename, folder)
    client = client or get_s3_client()
    try:
        client.put_object(
            Bucket=settings.S3_BUCKET_NAME,
            Key=key,
            Body=buffer,
            ContentType=mimetype or "application/octet-stream",
            CacheControl="max-age=31536000",
        )
    except (BotoCoreError, ClientError) as exc:
        logger.error("S3 upload failed for %s: %s", key, exc)
        raise ExternalServiceError("Failed to upload to S3", code="storage_error") from exc

    logger.info("Uploaded object %s", key)
    return public_url(key)


def delete_from_s3(url: str, client=None) -> bool:
    key = key_from_url(url) if url else ""
    if not key:
        raise ValidationError("S3 object key is required for deletion", code="missing_key")

    client = client or get_s3_client()
    try:
        client.delete_object(Bucket=settings.S3_BUCKET_NAME, Key=key)
    except (BotoCoreError, ClientError) as exc:
        logger.error("S3 delete failed for %s: %s", key, exc)
        raise ExternalServiceError("Failed to delete from S3", code="storage_error") from exc

    logger.info("Deleted object %s", key)
    return True
