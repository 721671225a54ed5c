"""
Upload Service

Validates and stores image uploads under ``settings.upload_dir``. Files are
checked (extension, MIME type, size) before anything touches the disk.
"""
import os
import secrets
import time

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from app.config import get_settings
from app.exceptions import ValidationError
from app.utils.logger import log

CHUNK_SIZE = 64 * 1024
PUBLIC_PREFIX = "/uploads"


def _extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


def _write_file(path: str, data: bytes) -> None:
    with open(path, "wb") as fh:
        fh.write(data)


def stored_name(field: str, ext: str) -> str:
    """``<field>-<epoch ms>-<random hex><ext>``, unique per upload"""
    return f"{field}-{int(time.time() * 1000)}-{secrets.token_hex(4)}{ext}"


async def save_image(upload: UploadFile, field: str) -> str:
    """
    Validate and persist an uploaded image.

    Returns the public path (``/uploads/<name>``).
    Raises ValidationError for a non-image or a file over the size limit.
    """
    settings = get_settings()
    if upload is None or not upload.filename:
        raise ValidationError("Please upload a file.")

    ext = _extension(upload.filename)
    mime = (upload.content_type or "").lower()
    if ext not in settings.image_extensions or mime not in settings.image_mime_types:
        raise ValidationError("Images only! Allowed types: jpeg, jpg, png, gif.")

    # Read one byte past the limit so an oversized file is detected without buffering it all
    data = bytearray()
    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        data.extend(chunk)
        if len(data) > settings.max_upload_bytes:
            raise ValidationError(
                f"File too large. Maximum size is {settings.max_upload_bytes // 1000} KB."
            )

    os.makedirs(settings.upload_dir, exist_ok=True)
    name = stored_name(field, ext)
    await run_in_threadpool(_write_file, os.path.join(settings.upload_dir, name), bytes(data))

    log.info(f"Stored upload {name} ({len(data)} bytes)")
    return f"{PUBLIC_PREFIX}/{name}"
