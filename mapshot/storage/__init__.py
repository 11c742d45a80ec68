"""
Storage and output validation modules
"""

from .file_storage import FileStorage
from .png import PNG_SIGNATURE, validate_png, read_png_dimensions

__all__ = [
    'FileStorage',
    'PNG_SIGNATURE',
    'validate_png',
    'read_png_dimensions'
]
