import io
import logging
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from ..error_handler import InvalidPngError, OutputTooSmallError

logger = logging.getLogger(__name__)

PNG_SIGNATURE = bytes([0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A])

# Nothing shorter than this is a real screenshot, whatever min_bytes says
ABSOLUTE_MIN_BYTES = 100


def has_png_signature(content: Optional[bytes]) -> bool:
    return bool(content) and content[:len(PNG_SIGNATURE)] == PNG_SIGNATURE


def validate_png(content: Optional[bytes], min_bytes: int) -> bytes:
    """Reject buffers that are not PNG or too small to be a real capture"""
    if not has_png_signature(content):
        head = content[:8].hex(' ') if content else 'empty'
        raise InvalidPngError(f"Buffer does not start with the PNG signature ({head})")

    required = max(ABSOLUTE_MIN_BYTES, min_bytes)
    if len(content) < required:
        raise OutputTooSmallError(f"PNG is {len(content)} bytes, expected at least {required}")

    return content


def read_png_dimensions(content: bytes) -> Optional[Tuple[int, int]]:
    """Pixel size of a PNG buffer, or None if Pillow cannot read its header"""
    try:
        with Image.open(io.BytesIO(content)) as image:
            return image.size
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Could not read PNG dimensions: {e}")
        return None
