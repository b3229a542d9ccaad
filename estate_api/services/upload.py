"""
Upload service for listing images.
Validates a batch of multipart files and stores them on disk, returning
the public URLs that property create/update requests refer to.
"""

from typing import List, Optional
from fastapi import UploadFile

from estate_api.config import Settings, get_settings
from estate_api.models.user import User
from estate_api.utils.file_utils import FileValidator, FileStorage
from estate_api.utils.exceptions import FileUploadError, ValidationError
import logging

logger = logging.getLogger(__name__)


class UploadService:
    """Service for validating and storing uploaded images."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        validator: Optional[FileValidator] = None,
        storage: Optional[FileStorage] = None
    ):
        self.settings = settings or get_settings()
        self.validator = validator or FileValidator(self.settings)
        self.storage = storage or FileStorage(self.settings)

    async def upload_images(self, files: List[UploadFile], uploaded_by: User) -> List[str]:
        """
        Validate and store a batch of images.

        Every file is validated before anything is written, so a bad file
        rejects the whole batch.

        Returns:
            Public URLs of the stored images, in upload order

        Raises:
            FileUploadError: If no files or too many files are sent
            ValidationError: If any file is not an acceptable image
        """
        if not files:
            raise FileUploadError("No images provided")

        if len(files) > self.settings.max_upload_files:
            raise FileUploadError(f"At most {self.settings.max_upload_files} images can be uploaded at once")

        validated = []
        for upload in files:
            content = await upload.read()
            try:
                extension = self.validator.validate_image(upload.filename, upload.content_type, content)
            except ValidationError as e:
                raise ValidationError(f"{upload.filename}: {e.detail}")
            validated.append((content, extension))

        urls: List[str] = []
        try:
            for content, extension in validated:
                urls.append(await self.storage.save(content, extension))
        except OSError as e:
            for url in urls:
                self.storage.delete_by_url(url)
            raise FileUploadError(f"Could not store image: {e}")

        logger.info(f"User {uploaded_by.email} uploaded {len(urls)} images")
        return urls
