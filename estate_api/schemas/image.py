"""
Pydantic schemas for property images and image uploads.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List
import uuid


class PropertyImageResponse(BaseModel):
    """A single image attached to a property."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(..., description="Image identifier")
    image_url: str = Field(
        ...,
        description="Public URL of the image",
        examples=["/uploads/properties/3f0c9a8e-1b2c-4d5e-8f90-123456789abc.jpg"]
    )
    is_primary: bool = Field(..., description="Whether this is the lead image")
    display_order: int = Field(..., description="Position among the property's images")


class ImageUploadResponse(BaseModel):
    """Response for a multipart image upload."""

    message: str = Field(..., examples=["Images uploaded successfully"])
    images: List[str] = Field(
        ...,
        description="Public URLs of the stored files, in upload order",
        examples=[["/uploads/properties/3f0c9a8e-1b2c-4d5e-8f90-123456789abc.jpg"]]
    )
