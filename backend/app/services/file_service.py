"""
CampFinder Backend — Photo Storage Service
============================================

What:  Validates and stores bootcamp photos, and resolves stored photos for
       serving.
Who:   BootcampService.upload_photo() and the GET /uploads/{filename} route.
How:   Every method takes the UploadConfig it should apply. The route receives
       that struct from a FastAPI dependency, so nothing here reads global state.

Validation order:
    1. A file was sent at all         → "Please upload a file"
    2. Content type starts with image → "Please upload an image file"
    3. Size within max_file_size      → "Please upload an image less than N bytes"
    4. Write to <upload_path>/photo_<bootcamp id><ext>

Naming:
    The stored name is built from the bootcamp id plus the original extension,
    so a new upload replaces the previous photo and no user-supplied text reaches
    the file system beyond a lowercased suffix.
"""

import logging
import re
from pathlib import Path
from typing import Optional

import aiofiles

from app.config import UploadConfig
from app.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_SAFE_SUFFIX = re.compile(r"^\.[a-z0-9]{1,10}$")


class FileService:
    """Stateless photo validation and storage."""

    def validate_presence(self, filename: Optional[str], content: Optional[bytes]) -> None:
        if not filename or content is None:
            raise ValidationError(message="Please upload a file", field="file")

    def validate_content_type(self, content_type: Optional[str]) -> None:
        if not content_type or not content_type.startswith("image"):
            raise ValidationError(
                message="Please upload an image file",
                field="file",
                context={"content_type": content_type},
            )

    def validate_size(self, size: int, config: UploadConfig) -> None:
        if size > config.max_file_size:
            raise ValidationError(
                message=f"Please upload an image less than {config.max_file_size} bytes",
                field="file",
                context={"max_size": config.max_file_size, "actual_size": size},
            )

    def photo_filename(self, bootcamp_id: str, original_filename: str) -> str:
        """`photo_<bootcamp id><ext>`; unsafe or missing suffixes are dropped."""
        suffix = Path(original_filename).suffix.lower()
        if not _SAFE_SUFFIX.match(suffix):
            suffix = ""
        return f"photo_{bootcamp_id}{suffix}"

    async def store_file(self, content: bytes, filename: str, config: UploadConfig) -> Path:
        """
        Write `content` to `<upload_path>/<filename>`.

        Raises:
            FileStorageError: the directory can't be created or the write fails.
        """
        target = Path(config.upload_path) / filename
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(target, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", target, str(e))
            raise FileStorageError(
                message="Problem with file upload. Please try again.",
                context={"path": str(target), "os_error": str(e)},
            )

        logger.info("Stored upload %s (%d bytes)", filename, len(content))
        return target

    async def save_photo(
        self,
        bootcamp_id: str,
        filename: Optional[str],
        content_type: Optional[str],
        content: Optional[bytes],
        config: UploadConfig,
    ) -> str:
        """
        Run the full validation pipeline and store the photo.

        Returns:
            The stored filename (what gets saved on the bootcamp record).
        """
        self.validate_presence(filename, content)
        self.validate_content_type(content_type)
        self.validate_size(len(content), config)

        stored_name = self.photo_filename(bootcamp_id, filename)
        await self.store_file(content, stored_name, config)
        return stored_name

    def cleanup_file(self, filename: str, config: UploadConfig) -> None:
        """
        Remove a stored upload. Missing files are ignored and failures are
        logged only.
        """
        path = Path(config.upload_path) / filename
        try:
            if path.is_file():
                path.unlink()
                logger.info("Cleaned up file: %s", filename)
            else:
                logger.debug("Cleanup: file already gone: %s", filename)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", path, str(e))

    def resolve_stored_file(self, filename: str, config: UploadConfig) -> Path:
        """
        Absolute path of a stored upload, refusing anything outside upload_path.

        Raises:
            ValidationError: the name escapes the upload directory.
            NotFoundError:   no such file.
        """
        root = Path(config.upload_path).resolve()
        full_path = (root / filename).resolve()
        if root not in full_path.parents:
            raise ValidationError(message="Invalid file path", field="filename")
        if not full_path.is_file():
            raise NotFoundError(resource="file", resource_id=filename)
        return full_path


file_service = FileService()
