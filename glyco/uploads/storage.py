# -*- coding: utf-8 -*-
"""Uploads — recipe photos written under the public upload directory."""

from __future__ import annotations

import logging
import random
import re
import time
from pathlib import Path

from fastapi import HTTPException, UploadFile

from ..config import settings

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = ".jpg"
_CHUNK_SIZE = 1024 * 256


def _safe_suffix(filename: str) -> str:
    suffix = Path(filename or "").suffix.lower()
    if not suffix or len(suffix) > 12:
        return DEFAULT_SUFFIX
    if not re.fullmatch(r"\.[a-z0-9]+", suffix):
        return DEFAULT_SUFFIX
    return suffix


def upload_name(filename: str) -> str:
    """``recipe-<epoch_ms>-<random><ext>``."""
    return f"recipe-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{_safe_suffix(filename)}"


def save_upload(upload: UploadFile, upload_dir: Path | None = None) -> str:
    """Stream ``upload`` to disk and return the stored file name."""
    root = upload_dir or settings.upload_dir
    root.mkdir(parents=True, exist_ok=True)
    name = upload_name(upload.filename or "")
    target = root / name

    size = 0
    max_bytes = int(settings.max_upload_mb) * 1024 * 1024
    try:
        with target.open("wb") as f:
            while True:
                chunk = upload.file.read(_CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    raise HTTPException(status_code=400, detail=f"File too large (> {settings.max_upload_mb} MB)")
                f.write(chunk)
    except Exception:
        # Too large or failed mid-write: never leave a truncated photo behind.
        target.unlink(missing_ok=True)
        raise
    finally:
        upload.file.close()

    logger.info("Stored upload %s (%d bytes)", name, size)
    return name
