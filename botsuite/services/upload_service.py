"""
botsuite/services/upload_service.py

Purpose: Uploaded file handling

- Stages multipart uploads to the scratch directory under a random name
- Enforces the size ceiling and rejects audio/video
- Deletes the staged file on every exit path
- Optionally copies the original file to an S3-compatible object store
"""

import os
import secrets
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import boto3
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from botsuite.core.config import settings, Settings
from botsuite.core.exceptions import ValidationError
from botsuite.core.logging import get_logger
from botsuite.schemas.bot import StagedFile
from botsuite.services.extraction_service import resolve_mime_type
from botsuite.utils.constants import MSG_FILE_TOO_LARGE, MSG_MEDIA_NOT_SUPPORTED

logger = get_logger(__name__)

CHUNK_SIZE = 1024 * 1024
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def staged_filename(original_name: Optional[str]) -> str:
    """<epoch-ms>-<12 hex chars><original extension>"""
    ext = Path(original_name or "").suffix
    return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}{ext}"


def _remove(path: Path):
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.error(f"Failed to delete staged upload {path}: {e}")


@asynccontextmanager
async def stage_upload(
    upload: Optional[UploadFile],
    upload_dir: str,
    max_bytes: int,
) -> AsyncIterator[Optional[StagedFile]]:
    """
    Writes an upload to disk for the duration of the block.

    Yields None when the request carried no file. The staged file is removed
    when the block exits, whether it raised or not.

    Raises:
        ValidationError: Audio/video upload or file over `max_bytes`
    """
    if upload is None or not upload.filename:
        yield None
        return

    content_type = upload.content_type or ""
    if content_type.startswith(("audio/", "video/")):
        raise ValidationError(MSG_MEDIA_NOT_SUPPORTED)

    directory = Path(upload_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / staged_filename(upload.filename)

    try:
        size = 0
        with open(path, "wb") as fh:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    raise ValidationError(MSG_FILE_TOO_LARGE, details={"max_bytes": max_bytes})
                fh.write(chunk)

        logger.debug(f"Staged upload {upload.filename} ({size} bytes) at {path.name}")

        yield StagedFile(
            path=str(path),
            filename=upload.filename,
            content_type=upload.content_type,
            size=size,
        )
    finally:
        _remove(path)


class ObjectUploader:
    """
    Copies uploads to an S3-compatible bucket (Cloudflare R2 by default).

    Disabled unless endpoint, access key, secret key and bucket are all set.
    A public URL is only returned when R2_PUBLIC_URL is configured.
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        bucket: Optional[str] = None,
        public_url: Optional[str] = None,
        client=None,
    ):
        self.bucket = bucket
        self.public_url = public_url
        self.enabled = all([endpoint, access_key_id, secret_access_key, bucket])
        self._client = client

        if self.enabled and self._client is None:
            self._client = boto3.client(
                "s3",
                region_name="auto",
                endpoint_url=endpoint,
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
            )

    @classmethod
    def from_settings(cls, config: Settings) -> "ObjectUploader":
        return cls(
            endpoint=config.R2_ENDPOINT,
            access_key_id=config.R2_ACCESS_KEY_ID,
            secret_access_key=config.R2_SECRET_ACCESS_KEY,
            bucket=config.R2_BUCKET,
            public_url=config.R2_PUBLIC_URL,
        )

    @staticmethod
    def object_key(filename: str) -> str:
        """uploads/<epoch-ms>-<16 hex chars>-<original name>"""
        return f"uploads/{int(time.time() * 1000)}-{secrets.token_hex(8)}-{os.path.basename(filename)}"

    def _put(self, staged: StagedFile, key: str, content_type: str):
        with open(staged.path, "rb") as body:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )

    async def upload(self, staged: Optional[StagedFile]) -> Optional[str]:
        """
        Uploads a staged file.

        Returns:
            Public URL of the object, or None when disabled or when no public
            base URL is configured

        Raises:
            botocore errors on network/store failure
        """
        if staged is None or not self.enabled:
            return None

        key = self.object_key(staged.filename)
        content_type = resolve_mime_type(staged.filename, staged.content_type) or DEFAULT_CONTENT_TYPE

        await run_in_threadpool(self._put, staged, key, content_type)
        logger.info(f"Uploaded {staged.filename} to object store as {key}")

        if not self.public_url:
            return None
        return f"{self.public_url.rstrip('/')}/{key}"


# Global uploader instance
_object_uploader: Optional[ObjectUploader] = None


def get_object_uploader() -> ObjectUploader:
    """Get or create the global object uploader."""
    global _object_uploader
    if _object_uploader is None:
        _object_uploader = ObjectUploader.from_settings(settings)
        if _object_uploader.enabled:
            logger.info(f"Object store uploads enabled (bucket={settings.R2_BUCKET})")
    return _object_uploader
