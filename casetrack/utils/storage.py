# casetrack/utils/storage.py
import logging
import os
import uuid
from pathlib import Path
from typing import BinaryIO, Optional

from casetrack.exceptions import ValidationError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

# Extension -> accepted MIME types
ALLOWED_TYPES = {
    "jpg": {"image/jpeg", "image/jpg", "image/pjpeg"},
    "jpeg": {"image/jpeg", "image/jpg", "image/pjpeg"},
    "png": {"image/png"},
    "pdf": {"application/pdf"},
    "doc": {"application/msword"},
    "docx": {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"},
}


class FileTooLarge(ValidationError):
    def __init__(self, max_size: int):
        message = f"File exceeds the maximum size of {max_size // (1024 * 1024)} MB."
        super().__init__([{"field": "document", "message": message}], detail=message)


def check_file_type(filename: Optional[str], content_type: Optional[str]) -> None:
    ext = Path(filename or "").suffix.lower().lstrip(".")
    allowed = ALLOWED_TYPES.get(ext)
    if not allowed or (content_type or "").lower() not in allowed:
        raise ValidationError.single("document", "Unsupported file type.")


class UploadStorage:
    """Flat directory of uploaded files named ``<uuid4>-<original name>``."""

    def __init__(self, root: str, max_size: int):
        self.root = Path(root)
        self.max_size = max_size

    def ensure_dir(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, file_name: str) -> Path:
        # Stored names never contain separators; strip any just in case
        return self.root / Path(file_name).name

    def save(self, source: BinaryIO, original_name: str) -> tuple:
        """Stream *source* to disk; returns ``(file_name, size)``.

        Stops and removes the partial file as soon as the size cap is passed.
        """
        self.ensure_dir()
        file_name = f"{uuid.uuid4()}-{Path(original_name).name}"
        save_path = self.path_for(file_name)
        size = 0
        try:
            with open(save_path, "wb") as buffer:
                while True:
                    chunk = source.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_size:
                        raise FileTooLarge(self.max_size)
                    buffer.write(chunk)
        except Exception:
            self.remove(file_name)
            raise
        return file_name, size

    def remove(self, file_name: str) -> bool:
        """Best-effort delete; failures are logged, never raised."""
        path = self.path_for(file_name)
        try:
            os.remove(path)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Failed to remove uploaded file %s: %s", path, e)
            return False
