import logging
import os
import re
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from slugify import slugify

from app.core.config import settings
from app.core.exceptions import BadRequestException

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads"
DEFAULT_MAX_SIZE = 5 * 1024 * 1024  # 5MB
IMAGE_TYPES = re.compile(r"\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)

def upload_root() -> Path:
    return Path(settings.UPLOAD_DIR).resolve()

def validate_file(upload_file: UploadFile, contents: bytes, max_size: int, allowed_types: re.Pattern):
    if len(contents) > max_size:
        raise BadRequestException("file_too_large", error={"max_size_mb": max_size // (1024 * 1024)})
    if not allowed_types.search(upload_file.filename or ""):
        raise BadRequestException("file_type_not_allowed", error={"allowed": allowed_types.pattern})

def save_upload_file(
    upload_file: Optional[UploadFile],
    bucket: str,
    required: bool = False,
    max_size: int = DEFAULT_MAX_SIZE,
    allowed_types: re.Pattern = IMAGE_TYPES,
) -> Optional[str]:
    """Validate and store an uploaded file under UPLOAD_DIR/<bucket>/, returning its relative URL."""
    if upload_file is None or not upload_file.filename:
        if required:
            raise BadRequestException("file_required")
        return None

    contents = upload_file.file.read(max_size + 1)
    validate_file(upload_file, contents, max_size, allowed_types)

    base_name, extension = os.path.splitext(upload_file.filename)
    base_name = slugify(base_name, separator="_")[:50] or "file"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
    generated_filename = f"{base_name}_{timestamp}-{secrets.randbelow(10**9)}{extension.lower()}"

    upload_dir = upload_root() / bucket
    upload_dir.mkdir(parents=True, exist_ok=True)
    (upload_dir / generated_filename).write_bytes(contents)

    return f"{URL_PREFIX}/{bucket}/{generated_filename}"

def delete_file(relative_path: str) -> bool:
    """Delete a file relative to the upload root, e.g. 'products/image.jpg'."""
    root = upload_root()
    absolute_path = (root / relative_path.lstrip("/")).resolve()
    if root not in absolute_path.parents:
        logger.warning(f"Refusing to delete file outside upload dir: {relative_path}")
        return False
    try:
        absolute_path.unlink()
        logger.info(f"Deleted file: {absolute_path}")
        return True
    except OSError as e:
        logger.error(f"Error deleting file {relative_path}: {e}")
        return False

def delete_file_by_url(file_url: Optional[str]) -> bool:
    if not file_url:
        return False
    return delete_file(re.sub(rf"^{URL_PREFIX}/", "", file_url))

def replace_file(old_file_url: Optional[str], new_file_url: Optional[str]) -> bool:
    if old_file_url and old_file_url != new_file_url:
        return delete_file_by_url(old_file_url)
    return False
