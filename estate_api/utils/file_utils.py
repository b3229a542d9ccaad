"""
File upload utilities for image validation and local storage.
Uploaded listing images live under ``<upload_dir>/properties`` and are
served back under the configured URL prefix.
"""

import io
import uuid
import logging
from pathlib import Path
from typing import Optional, Tuple
from PIL import Image, UnidentifiedImageError
import aiofiles

from estate_api.config import Settings
from estate_api.utils.exceptions import (
    ValidationError,
    UnsupportedFileTypeError,
    FileSizeExceededError,
)

logger = logging.getLogger(__name__)


class FileValidator:
    """Validates uploaded image files against the configured limits."""

    # Supported image formats and their extensions
    SUPPORTED_FORMATS = {
        'image/jpeg': ['.jpg', '.jpeg'],
        'image/png': ['.png'],
        'image/webp': ['.webp']
    }

    # Pillow format names per MIME type
    PIL_FORMATS = {
        'image/jpeg': 'jpeg',
        'image/png': 'png',
        'image/webp': 'webp'
    }

    MAX_WIDTH = 10000
    MAX_HEIGHT = 10000

    def __init__(self, settings: Settings):
        self.allowed_types = [t for t in settings.allowed_file_types if t in self.SUPPORTED_FORMATS]
        self.max_file_size = settings.max_file_size
        self.min_width = settings.min_image_width
        self.min_height = settings.min_image_height

    def validate_file_extension(self, filename: str) -> str:
        """
        Validate file extension.

        Returns:
            Lowercase file extension

        Raises:
            ValidationError: If extension is missing or not supported
        """
        if not filename:
            raise ValidationError("Filename is required")

        extension = Path(filename).suffix.lower()
        if not extension:
            raise ValidationError("File must have an extension")

        supported_extensions = [
            ext for mime_type in self.allowed_types for ext in self.SUPPORTED_FORMATS[mime_type]
        ]
        if extension not in supported_extensions:
            raise ValidationError(
                f"File extension '{extension}' not supported. "
                f"Supported extensions: {', '.join(supported_extensions)}"
            )

        return extension

    def validate_mime_type(self, mime_type: str) -> str:
        if not mime_type:
            raise ValidationError("MIME type is required")

        if mime_type not in self.allowed_types:
            raise UnsupportedFileTypeError(mime_type, self.allowed_types)

        return mime_type

    def validate_file_size(self, file_size: int) -> int:
        if file_size <= 0:
            raise ValidationError("File is empty")

        if file_size > self.max_file_size:
            raise FileSizeExceededError(file_size, self.max_file_size)

        return file_size

    def validate_image_dimensions(self, width: int, height: int) -> Tuple[int, int]:
        """
        Validate image dimensions.

        Raises:
            ValidationError: If dimensions are outside the allowed range
        """
        if width < self.min_width:
            raise ValidationError(f"Image width ({width}px) is below minimum ({self.min_width}px)")

        if height < self.min_height:
            raise ValidationError(f"Image height ({height}px) is below minimum ({self.min_height}px)")

        if width > self.MAX_WIDTH:
            raise ValidationError(f"Image width ({width}px) exceeds maximum ({self.MAX_WIDTH}px)")

        if height > self.MAX_HEIGHT:
            raise ValidationError(f"Image height ({height}px) exceeds maximum ({self.MAX_HEIGHT}px)")

        return width, height

    def validate_image(self, filename: str, content_type: Optional[str], content: bytes) -> str:
        """
        Validate one uploaded image.

        Args:
            filename: Client-supplied file name
            content_type: Client-supplied MIME type
            content: Raw file bytes

        Returns:
            The lowercase file extension to store the file under

        Raises:
            ValidationError: If any validation fails
        """
        extension = self.validate_file_extension(filename)
        mime_type = self.validate_mime_type(content_type or "")

        # Check if extension matches MIME type
        if extension not in self.SUPPORTED_FORMATS[mime_type]:
            raise ValidationError(
                f"File extension '{extension}' doesn't match MIME type '{mime_type}'"
            )

        self.validate_file_size(len(content))

        # Validate image content using PIL
        try:
            with Image.open(io.BytesIO(content)) as img:
                self.validate_image_dimensions(*img.size)
                pil_format = img.format.lower() if img.format else ""
        except (UnidentifiedImageError, OSError) as e:
            raise ValidationError(f"Invalid image file: {str(e)}")

        if pil_format != self.PIL_FORMATS[mime_type]:
            raise ValidationError(
                f"Image format '{pil_format}' doesn't match MIME type '{mime_type}'"
            )

        return extension


class FileStorage:
    """Stores listing images on the local filesystem."""

    SUBDIRECTORY = "properties"

    def __init__(self, settings: Settings):
        self.base_dir = Path(settings.upload_dir)
        self.url_prefix = settings.upload_url_prefix.rstrip("/")
        self.image_dir = self.base_dir / self.SUBDIRECTORY
        self.image_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def generate_unique_filename(extension: str) -> str:
        return f"{uuid.uuid4()}{extension}"

    def public_url(self, filename: str) -> str:
        """URL under which a stored file is served."""
        return f"{self.url_prefix}/{self.SUBDIRECTORY}/{filename}"

    def path_for_url(self, url: str) -> Optional[Path]:
        """
        Map a public URL back to the stored file.

        Returns None for URLs that do not point into the image directory,
        such as external image links.
        """
        prefix = f"{self.url_prefix}/{self.SUBDIRECTORY}/"
        if not url or not url.startswith(prefix):
            return None

        filename = url[len(prefix):]
        if not filename or "/" in filename or "\\" in filename or filename in (".", ".."):
            return None

        return self.image_dir / filename

    async def save(self, content: bytes, extension: str) -> str:
        """
        Write file content under a fresh unique name.

        Returns:
            Public URL of the stored file
        """
        filename = self.generate_unique_filename(extension)
        file_path = self.image_dir / filename

        try:
            async with aiofiles.open(file_path, 'wb') as f:
                await f.write(content)
        except OSError as e:
            # Clean up partial file if it exists
            if file_path.exists():
                file_path.unlink(missing_ok=True)
            logger.error(f"Failed to save upload {file_path}: {e}")
            raise

        logger.debug(f"Stored upload {file_path} ({len(content)} bytes)")
        return self.public_url(filename)

    def delete_by_url(self, url: str) -> bool:
        """
        Delete a locally stored file given its public URL.

        Returns:
            True if a file was deleted, False otherwise
        """
        file_path = self.path_for_url(url)
        if file_path is None:
            return False

        try:
            if file_path.exists():
                file_path.unlink()
                logger.debug(f"Deleted stored image {file_path}")
                return True
            return False
        except OSError as e:
            logger.warning(f"Could not delete stored image {file_path}: {e}")
            return False
