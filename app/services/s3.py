"""AWS S3: justification documents."""
import asyncio
import logging
import re
import time

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import settings

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


def justification_key(filename: str, now_ms: int | None = None) -> str:
    """``justifications/<epoch-ms>_<filename>`` with a path-safe filename."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    safe = re.sub(r"[^A-Za-z0-9._-]+", "_", (filename or "").strip()).strip("._") or "document"
    return f"justifications/{now_ms}_{safe}"


def public_url(key: str) -> str:
    if settings.s3_public_base_url:
        return f"{settings.s3_public_base_url.rstrip('/')}/{key}"
    bucket = settings.s3_bucket_justifications
    return f"https://{bucket}.s3.{settings.aws_region}.amazonaws.com/{key}"


def _put_sync(key: str, body: bytes, content_type: str) -> None:
    get_s3().put_object(
        Bucket=settings.s3_bucket_justifications,
        Key=key,
        Body=body,
        ContentType=content_type,
    )


async def upload_justification_document(body: bytes, filename: str, content_type: str) -> tuple[str, str]:
    """Upload a supporting document; return (public_url, s3_key)."""
    key = justification_key(filename)
    await asyncio.to_thread(_put_sync, key, body, content_type or "application/octet-stream")
    return public_url(key), key


async def delete_justification_document(key: str) -> None:
    """Best-effort removal used when the database write after an upload fails."""
    try:
        await asyncio.to_thread(
            get_s3().delete_object, Bucket=settings.s3_bucket_justifications, Key=key
        )
    except (BotoCoreError, ClientError) as e:
        logger.warning("Could not delete orphaned document %s: %s", key, e)
