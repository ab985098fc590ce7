import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List

from fastapi import UploadFile

from cryptonews.core.exceptions import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
PUBLIC_PREFIX = "/uploads"


@dataclass
class StoredFile:
    file_name: str
    size: int
    url: str
    original_name: str = ""
    mime_type: str = ""


class UploadService:
    """Stores images on the local disk and serves them under ``/uploads``."""

    def __init__(self, base_path: Path, max_size: int):
        self.base_path = Path(base_path)
        self.max_size = max_size
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _path(self, file_name: str) -> Path:
        # Plain names only, no directories
        if not file_name or Path(file_name).name != file_name or file_name in (".", ".."):
            raise NotFoundError("File not found")
        return self.base_path / file_name

    async def save(self, file: UploadFile) -> StoredFile:
        if file.content_type not in ALLOWED_CONTENT_TYPES:
            raise BadRequestError("Please upload an image file (jpeg, jpg, png, gif, webp)")

        data = await file.read(self.max_size + 1)
        if len(data) > self.max_size:
            raise BadRequestError(f"File size cannot exceed {self.max_size // (1024 * 1024)}MB")
        if not data:
            raise BadRequestError("No files were uploaded")

        suffix = Path(file.filename or "").suffix.lower()
        file_name = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"
        (self.base_path / file_name).write_bytes(data)

        logger.info("File uploaded", extra={"file_name": file_name, "size": len(data)})
        return StoredFile(
            file_name=file_name,
            original_name=file.filename or "",
            size=len(data),
            mime_type=file.content_type,
            url=f"{PUBLIC_PREFIX}/{file_name}",
        )

    def list_files(self) -> List[StoredFile]:
        files = sorted(
            (p for p in self.base_path.iterdir() if p.is_file()),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
        return [
            StoredFile(file_name=p.name, size=p.stat().st_size, url=f"{PUBLIC_PREFIX}/{p.name}")
            for p in files
        ]

    def delete(self, file_name: str) -> None:
        path = self._path(file_name)
        if not path.is_file():
            raise NotFoundError("File not found")
        path.unlink()
        logger.info("File deleted", extra={"file_name": file_name})
