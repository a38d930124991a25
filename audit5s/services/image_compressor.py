"""Image compression: bound the long side, re-encode as JPEG, check the budget.

Compression is a single pass (resize to at most 1920px, JPEG quality 80).
Only a JPEG source that already fits the budget is sent as-is; every other
format is re-encoded so the model always receives JPEG bytes.
If the result is still over budget the attempt fails; no further quality
reduction is tried.
"""

from __future__ import annotations

import asyncio
import base64
import io
import logging
import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from PIL import Image

from audit5s.exceptions import CompressionError

logger = logging.getLogger(__name__)

MAX_DIMENSION = 1920
JPEG_QUALITY = 80
_MB = 1024 * 1024


def budget_bytes(max_size_mb: float) -> int:
    return int(max_size_mb * _MB)


def scaled_dimensions(width: int, height: int, max_dimension: int = MAX_DIMENSION) -> tuple[int, int]:
    """Shrink (width, height) so the longer side is at most max_dimension."""
    if width <= max_dimension and height <= max_dimension:
        return width, height
    if width > height:
        return max_dimension, max(1, int(height / width * max_dimension))
    return max(1, int(width / height * max_dimension)), max_dimension


def compress_bytes(data: bytes, max_dimension: int = MAX_DIMENSION, quality: int = JPEG_QUALITY) -> bytes:
    """Resize + re-encode raw image bytes as JPEG. Returns the new bytes."""
    with Image.open(io.BytesIO(data)) as img:
        size = scaled_dimensions(img.width, img.height, max_dimension)
        out = img.convert("RGB") if img.mode not in ("RGB", "L") else img
        if size != (img.width, img.height):
            out = out.resize(size, Image.Resampling.LANCZOS)
        buf = io.BytesIO()
        out.save(buf, "JPEG", quality=quality)
    return buf.getvalue()


def compress_base64(b64: str, max_dimension: int = MAX_DIMENSION, quality: int = JPEG_QUALITY) -> str:
    """In-memory variant: base64 image in, base64 JPEG out."""
    try:
        data = base64.b64decode(b64)
        return base64.standard_b64encode(compress_bytes(data, max_dimension, quality)).decode("utf-8")
    except (ValueError, OSError) as e:
        raise CompressionError(f"Error compressing image: {e}") from e


def compress_image(
    image_path: str | Path,
    work_dir: str | Path,
    max_dimension: int = MAX_DIMENSION,
    quality: int = JPEG_QUALITY,
) -> Path:
    """Write a compressed copy of image_path to a new file under work_dir."""
    data = Path(image_path).read_bytes()
    compressed = compress_bytes(data, max_dimension, quality)
    fd, tmp = tempfile.mkstemp(prefix="compressed_", suffix=".jpg", dir=str(work_dir))
    with os.fdopen(fd, "wb") as f:
        f.write(compressed)
    logger.debug("Compressed %s (%d bytes) -> %s (%d bytes)", image_path, len(data), tmp, len(compressed))
    return Path(tmp)


def is_jpeg(image_path: str | Path) -> bool:
    try:
        with Image.open(image_path) as img:
            return img.format == "JPEG"
    except OSError:
        return False


def verify_size(image_path: str | Path, max_size_mb: float) -> bool:
    try:
        return os.path.getsize(image_path) <= budget_bytes(max_size_mb)
    except OSError:
        return False


def encode_image(image_path: str | Path) -> str:
    """Base64-encode an image file."""
    return base64.standard_b64encode(Path(image_path).read_bytes()).decode("utf-8")


def _remove(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove temporary file %s: %s", path, e)


@asynccontextmanager
async def prepared_image(
    image_path: str | Path,
    max_size_mb: float,
    work_dir: str | Path,
    max_dimension: int = MAX_DIMENSION,
    quality: int = JPEG_QUALITY,
) -> AsyncIterator[Path]:
    """Yield a path to an image that fits the size budget.

    A JPEG source already within budget is yielded as-is. Otherwise a
    compressed JPEG copy is yielded and removed when the block exits.
    """
    src = Path(image_path)
    if verify_size(src, max_size_mb) and await asyncio.to_thread(is_jpeg, src):
        yield src
        return

    logger.info("Compressing image %s ...", src)
    tmp: Path | None = None
    try:
        try:
            tmp = await asyncio.to_thread(compress_image, src, work_dir, max_dimension, quality)
        except (OSError, ValueError) as e:
            raise CompressionError(f"Error compressing image {src}: {e}") from e
        if not verify_size(tmp, max_size_mb):
            raise CompressionError(
                f"Unable to compress {src} below {max_size_mb} MB "
                f"(got {os.path.getsize(tmp) / _MB:.2f} MB)"
            )
        yield tmp
    finally:
        if tmp is not None:
            _remove(tmp)
