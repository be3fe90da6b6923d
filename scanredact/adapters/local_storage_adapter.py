from pathlib import Path

from ..ports.file_storage_port import FileStoragePort
from ..domain.exceptions import FileStorageError


class LocalStorageAdapter(FileStoragePort):
    """Adapter for local file storage, relative paths resolved against ``base_path``."""

    def __init__(self, base_path: str = "."):
        self.base_path = Path(base_path).resolve()

    def read_file(self, file_path: str) -> bytes:
        """
        Read a file from the local file system.

        Raises:
            FileStorageError: If the path is missing, not a file, or unreadable
        """
        resolved_path = self._require_file(file_path)
        try:
            return resolved_path.read_bytes()
        except OSError as e:
            raise FileStorageError(f"Error reading file {file_path}: {e}") from e

    def file_size(self, file_path: str) -> int:
        """Size of a file in bytes."""
        resolved_path = self._require_file(file_path)
        try:
            return resolved_path.stat().st_size
        except OSError as e:
            raise FileStorageError(f"Error inspecting file {file_path}: {e}") from e

    def write_file(self, file_path: str, content: bytes) -> None:
        """
        Write a file, creating parent directories if necessary.

        Raises:
            FileStorageError: In case of write error
        """
        try:
            resolved_path = self._resolve_path(file_path)
            resolved_path.parent.mkdir(parents=True, exist_ok=True)
            resolved_path.write_bytes(content)
        except OSError as e:
            raise FileStorageError(f"Error writing file {file_path}: {e}") from e

    def file_exists(self, file_path: str) -> bool:
        """True if the path exists and is a regular file."""
        try:
            resolved_path = self._resolve_path(file_path)
            return resolved_path.is_file()
        except OSError:
            return False

    def delete_file(self, file_path: str) -> None:
        """
        Delete a file. Missing files are ignored.

        Raises:
            FileStorageError: In case of deletion error
        """
        try:
            self._resolve_path(file_path).unlink(missing_ok=True)
        except OSError as e:
            raise FileStorageError(f"Error deleting file {file_path}: {e}") from e

    def _require_file(self, file_path: str) -> Path:
        resolved_path = self._resolve_path(file_path)
        if not resolved_path.exists():
            raise FileStorageError(f"File {resolved_path} does not exist")
        if not resolved_path.is_file():
            raise FileStorageError(f"{resolved_path} is not a file")
        return resolved_path

    def _resolve_path(self, file_path: str) -> Path:
        """Absolute paths are kept as is, relative ones are joined to the base directory."""
        path = Path(file_path)
        if path.is_absolute():
            return path
        return self.base_path / path
