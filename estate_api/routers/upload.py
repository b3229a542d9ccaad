"""
Image upload endpoint. Stored images are referenced by URL when creating
or editing a property.
"""

from fastapi import APIRouter, Depends, status, File, UploadFile
from typing import List

from estate_api.models.user import User
from estate_api.services.upload import UploadService
from estate_api.schemas.image import ImageUploadResponse
from estate_api.schemas.error import get_error_responses
from estate_api.utils.dependencies import get_current_user, get_upload_service


router = APIRouter(prefix="/upload", tags=["Images"])


@router.post(
    "/images",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload listing images",
    description="Upload up to 10 JPEG, PNG or WebP images in the multipart field `images`",
    responses=get_error_responses(400, 401, 422)
)
async def upload_images(
    images: List[UploadFile] = File(..., description="Image files"),
    current_user: User = Depends(get_current_user),
    upload_service: UploadService = Depends(get_upload_service)
) -> ImageUploadResponse:
    """
    Validate and store a batch of images.

    Raises:
        FileUploadError: If the batch is empty or too large
        ValidationError: If a file is not an acceptable image
    """
    urls = await upload_service.upload_images(images, current_user)

    return ImageUploadResponse(
        message="Images uploaded successfully",
        images=urls
    )
