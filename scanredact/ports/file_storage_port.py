"""
Port for file storage operations.
Source documents are read and redacted documents written through this interface.
"""
from abc import ABC, abstractmethod


class FileStoragePort(ABC):
    """Interface for file storage operations."""

    @abstractmethod
    def file_exists(self, file_path: str) -> bool:
        """Check if a file exists at the given path."""
        pass

    @abstractmethod
    def file_size(self, file_path: str) -> int:
        """
        Get the size of a file in bytes without reading it.

        Raises:
            FileStorageError: If the file cannot be inspected
        """
        pass

    @abstractmethod
    def read_file(self, file_path: str) -> bytes:
        """
        Read file content as bytes.

        Raises:
            FileStorageError: If there's an error reading the file
        """
        pass

    @abstractmethod
    def write_file(self, file_path: str, content: bytes) -> None:
        """
        Write content to a file, creating parent directories.

        Raises:
            FileStorageError: If there's an error writing the file
        """
        pass

    @abstractmethod
    def delete_file(self, file_path: str) -> None:
        """
        Delete a file. Missing files are ignored.

        Raises:
            FileStorageError: If there's an error deleting the file
        """
        pass
