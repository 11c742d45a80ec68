import logging
import aiofiles
from pathlib import Path
from typing import Union

from ..error_handler import StorageError

logger = logging.getLogger(__name__)


class FileStorage:
    """Writes capture output under a base directory"""

    def __init__(self, base_path: Union[str, Path] = 'docs'):
        self.base_path = Path(base_path)

    def resolve(self, output_path: Union[str, Path]) -> Path:
        """Absolute paths are kept, relative ones land under base_path"""
        path = Path(output_path)
        if path.is_absolute():
            return path
        return self.base_path / path

    async def save_bytes(self, output_path: Union[str, Path], content: bytes) -> Path:
        """Write binary content, creating the containing directory if absent

        Returns:
            Path the content was written to

        Raises:
            StorageError: if the directory or file cannot be written
        """
        file_path = self.resolve(output_path)

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(file_path, 'wb') as f:
                await f.write(content)
        except OSError as e:
            raise StorageError(f"Error writing {file_path}: {e}") from e

        logger.debug(f"Wrote {len(content)} bytes to {file_path}")
        return file_path

    def get_storage_stats(self):
        """Count and size of PNG files under base_path"""
        if not self.base_path.exists():
            return {'file_count': 0, 'total_size_mb': 0}

        files = [f for f in self.base_path.rglob('*.png') if f.is_file()]
        total_size = sum(f.stat().st_size for f in files)
        return {
            'file_count': len(files),
            'total_size_mb': round(total_size / (1024 * 1024), 2)
        }
