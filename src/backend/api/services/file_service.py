"""
Local disk storage for ticket attachments.

Files land in settings.file_upload.upload_dir under a generated name and are
referenced from tickets as "<url_prefix>/<stored name>", served statically.
"""

import logging
import time
import uuid
from pathlib import Path
from typing import List, Optional, Sequence

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from core.config import settings
from core.exceptions import ValidationError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB


class FileService:
    """Validates and stores uploaded attachments."""

    def __init__(self, upload_dir: Optional[str] = None):
        self.upload_dir = Path(upload_dir or settings.file_upload.upload_dir)
        self.url_prefix = settings.file_upload.url_prefix.rstrip("/")
        self.max_size = settings.file_upload.max_upload_size
        self.max_files = settings.file_upload.max_files
        self.allowed_extensions = {
            ext.lower().lstrip(".") for ext in settings.file_upload.allowed_extensions
        }

    @staticmethod
    def _extension(filename: str) -> str:
        return Path(filename).suffix.lower().lstrip(".")

    def validate(self, files: Sequence[UploadFile]) -> None:
        """Reject the batch before anything is written to disk.

        Raises:
            ValidationError: Too many files or a disallowed extension
        """
        if len(files) > self.max_files:
            raise ValidationError(
                errors=[
                    {
                        "field": "files",
                        "message": f"At most {self.max_files} files may be attached",
                    }
                ]
            )
        for upload in files:
            ext = self._extension(upload.filename or "")
            if ext not in self.allowed_extensions:
                raise ValidationError(
                    errors=[
                        {
                            "field": "files",
                            "message": f"File type not allowed: {upload.filename}",
                        }
                    ]
                )

    def _stored_name(self, filename: str) -> str:
        ext = self._extension(filename)
        return f"{int(time.time() * 1000)}-{uuid.uuid4().hex}.{ext}"

    async def _write(self, upload: UploadFile, target: Path) -> None:
        written = 0
        async with aiofiles.open(target, "wb") as out_file:
            while content := await upload.read(CHUNK_SIZE):
                written += len(content)
                if written > self.max_size:
                    break
                await out_file.write(content)

        if written > self.max_size:
            await aiofiles.os.remove(target)
            raise ValidationError(
                errors=[
                    {
                        "field": "files",
                        "message": f"File too large: {upload.filename}",
                    }
                ]
            )

    async def save_files(self, files: Sequence[UploadFile]) -> List[str]:
        """Store every file and return their references in upload order.

        If any file fails, the ones already written are removed.
        """
        self.validate(files)
        if not files:
            return []

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        stored: List[str] = []
        try:
            for upload in files:
                name = self._stored_name(upload.filename or "")
                await self._write(upload, self.upload_dir / name)
                stored.append(f"{self.url_prefix}/{name}")
        except Exception:
            await self.delete_files(stored)
            raise

        logger.info(f"Stored {len(stored)} attachment(s)")
        return stored

    async def delete_files(self, references: Sequence[str]) -> None:
        """Remove stored files by reference. Missing files are ignored."""
        for reference in references:
            path = self.upload_dir / Path(reference).name
            try:
                await aiofiles.os.remove(path)
            except FileNotFoundError:
                logger.debug(f"Attachment already gone: {path}")
