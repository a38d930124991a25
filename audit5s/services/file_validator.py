"""Pre-flight checks on a candidate image file.

Every check fails closed: an I/O error is logged and reported as invalid,
never raised to the caller.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

_MB = 1024 * 1024

# Ceiling applied before the in-memory (base64) compression path.
MAX_FILE_SIZE = 20 * _MB


def check_image_file(image_path: str | Path) -> bool:
    """True if the file exists and can be read."""
    p = Path(image_path)
    try:
        if not p.is_file():
            logger.error("Image file '%s' not found", p)
            return False
        with open(p, "rb") as f:
            f.read(1)
        return True
    except OSError as e:
        logger.error("Error checking image file %s: %s", p, e)
        return False


def is_valid_image(image_path: str | Path, max_size_mb: float = 10) -> bool:
    """True if the file is readable and no larger than ``max_size_mb``."""
    if not check_image_file(image_path):
        return False
    try:
        size_mb = os.path.getsize(image_path) / _MB
    except OSError as e:
        logger.error("Error checking image file %s: %s", image_path, e)
        return False
    if size_mb > max_size_mb:
        logger.warning(
            "Image file '%s' is too large (%.2f MB). Maximum allowed size is %s MB.",
            image_path, size_mb, max_size_mb,
        )
        return False
    return True


def validate_image_size(image_path: str | Path, max_bytes: int = MAX_FILE_SIZE) -> bool:
    """Byte-exact size check; a file of exactly ``max_bytes`` passes."""
    try:
        return os.path.getsize(image_path) <= max_bytes
    except OSError as e:
        logger.error("Error validating file size for %s: %s", image_path, e)
        return False
