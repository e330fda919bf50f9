"""Local file storage for candidate resumes and letters of acceptance."""

import logging
import shutil
from pathlib import Path
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)

# Subfolders per document kind
RESUMES = "resumes"
LOA = "loa"
SIGNED_LOA = "signed-loa"


class LocalStorage:
    """Local file storage handler."""

    def __init__(self, base_path: str = "./storage/uploads", url_prefix: str = "/uploads"):
        """
        Initialize local storage.

        Args:
            base_path: Base directory for file storage
            url_prefix: Prefix of the URLs recorded for stored files
        """
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.url_prefix = url_prefix.rstrip("/")

    def _path(self, filename: str, subfolder: Optional[str] = None) -> Path:
        if subfolder:
            return self.base_path / subfolder / filename
        return self.base_path / filename

    def save(
        self,
        file_data: bytes | BinaryIO,
        filename: str,
        subfolder: Optional[str] = None
    ) -> Path:
        """
        Save file to local storage.

        Args:
            file_data: File data (bytes or file-like object)
            filename: Name of the file
            subfolder: Optional subfolder path

        Returns:
            Path to saved file
        """
        file_path = self._path(filename, subfolder)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        if isinstance(file_data, bytes):
            file_path.write_bytes(file_data)
        else:
            with open(file_path, 'wb') as f:
                shutil.copyfileobj(file_data, f)

        logger.info(f"Saved file to {file_path}")
        return file_path

    def read(self, filename: str, subfolder: Optional[str] = None) -> bytes:
        """
        Read file from local storage.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        file_path = self._path(filename, subfolder)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        return file_path.read_bytes()

    def delete(self, filename: str, subfolder: Optional[str] = None) -> bool:
        """
        Delete file from local storage.

        Returns:
            True if a file was deleted
        """
        file_path = self._path(filename, subfolder)
        if not file_path.exists():
            return False

        file_path.unlink()
        logger.info(f"Deleted file: {file_path}")
        return True

    def exists(self, filename: str, subfolder: Optional[str] = None) -> bool:
        """Check if file exists in local storage."""
        return self._path(filename, subfolder).exists()

    def get_url(self, filename: str, subfolder: Optional[str] = None) -> str:
        """
        Get the URL recorded for a stored file.

        Args:
            filename: Name of the file
            subfolder: Optional subfolder path

        Returns:
            URL path such as ``/uploads/resumes/<filename>``
        """
        if subfolder:
            return f"{self.url_prefix}/{subfolder}/{filename}"
        return f"{self.url_prefix}/{filename}"

    def _split_url(self, url: str) -> Optional[tuple[str, Optional[str]]]:
        """Map a URL produced by ``get_url`` back to (filename, subfolder)."""
        if not url.startswith(self.url_prefix + "/"):
            return None

        relative = url[len(self.url_prefix) + 1:]
        subfolder, _, filename = relative.rpartition("/")
        if not filename or ".." in relative:
            return None
        return filename, subfolder or None

    def read_by_url(self, url: str) -> bytes:
        """
        Read the file a URL produced by ``get_url`` points to.

        Raises:
            FileNotFoundError: If the URL is outside storage or the file is gone
        """
        location = self._split_url(url)
        if location is None:
            raise FileNotFoundError(f"Not a storage URL: {url}")
        return self.read(*location)

    def delete_by_url(self, url: str) -> bool:
        """Delete the file a URL produced by ``get_url`` points to."""
        location = self._split_url(url)
        if location is None:
            logger.warning(f"Refusing to delete file outside storage: {url}")
            return False
        return self.delete(*location)
