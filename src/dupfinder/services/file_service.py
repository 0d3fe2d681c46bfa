"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
File removal for the disposition engine: permanent unlink or move to the system trash.
Both raise DeletionFailed so the engine can record the failure and continue.
"""
from pathlib import Path
from send2trash import send2trash

from dupfinder.core.errors import DeletionFailed


class FileService:
    """
    Filesystem mutations performed on behalf of the disposition engine.
    """

    @staticmethod
    def delete_file(file_path: str) -> None:
        """Permanently removes a file."""
        path = Path(file_path)

        if not path.exists() and not path.is_symlink():
            raise DeletionFailed(file_path, "File not found")

        try:
            path.unlink()
        except OSError as e:
            raise DeletionFailed(file_path, f"Failed to delete: {e.strerror or e}") from e

    @staticmethod
    def move_to_trash(file_path: str) -> None:
        """Moves a file to the system trash."""
        path = Path(file_path).resolve()

        if not path.exists():
            raise DeletionFailed(file_path, "File not found")

        try:
            send2trash(str(path))
        except Exception as e:
            raise DeletionFailed(file_path, f"Failed to move to trash: {e}") from e

    @classmethod
    def get_remover(cls, use_trash: bool = False):
        """Picks the removal strategy used by the disposition engine."""
        return cls.move_to_trash if use_trash else cls.delete_file
