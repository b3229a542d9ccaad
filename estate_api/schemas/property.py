"""
Pydantic schemas for property requests and responses.
Handles property CRUD operations, image edits and validation.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from estate_api.models.property import PropertyType, ListingType, PropertyStatus
from estate_api.schemas.image import PropertyImageResponse
import uuid


# Columns that may be omitted from an update but never set to null
NON_NULLABLE_FIELDS = (
    "title", "description", "property_type", "listing_type", "price", "address",
    "city", "state", "country", "bedrooms", "bathrooms", "area_sqft", "featured", "status",
)


def _strip_required_text(v, label: str):
    if v is None:
        return v
    if not v.strip():
        raise ValueError(f"{label} cannot be empty")
    return v.strip()


class PropertyBase(BaseModel):
    """Base property schema with common fields."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Property listing title",
        examples=["2BR Condo"]
    )

    description: str = Field(
        ...,
        min_length=1,
        max_length=5000,
        description="Detailed property description",
        examples=["Bright corner unit close to downtown, with covered parking."]
    )

    property_type: PropertyType = Field(
        ...,
        description="house, apartment, condo, villa or townhouse",
        examples=["condo"]
    )

    listing_type: ListingType = Field(
        ...,
        description="sale or rent",
        examples=["sale"]
    )

    price: Decimal = Field(
        ...,
        gt=0,
        max_digits=12,
        decimal_places=2,
        description="Asking price, or monthly rent for rentals",
        examples=[300000]
    )

    address: str = Field(..., min_length=1, max_length=255, examples=["100 Congress Ave"])
    city: str = Field(..., min_length=1, max_length=100, examples=["Austin"])
    state: str = Field(..., min_length=1, max_length=100, examples=["TX"])
    zip_code: Optional[str] = Field(None, max_length=20, examples=["78701"])
    country: str = Field("USA", min_length=1, max_length=100, examples=["USA"])

    bedrooms: int = Field(0, ge=0, le=100, description="Number of bedrooms", examples=[2])
    bathrooms: int = Field(0, ge=0, le=100, description="Number of bathrooms", examples=[1])

    area_sqft: int = Field(
        ...,
        gt=0,
        description="Property area in square feet",
        examples=[950]
    )

    year_built: Optional[int] = Field(None, ge=1000, le=2100, examples=[2015])

    @field_validator('title', 'description', 'address', 'city', 'state', 'country')
    @classmethod
    def validate_text(cls, v, info):
        """Trim text fields and reject blank values."""
        return _strip_required_text(v, info.field_name.replace("_", " ").capitalize())


class PropertyCreate(PropertyBase):
    """Schema for creating a new property."""

    featured: bool = Field(False, description="Promote the listing to the top of results")
    status: PropertyStatus = Field(PropertyStatus.AVAILABLE, description="Initial lifecycle status")
    images: List[str] = Field(
        default_factory=list,
        description="Image URLs, typically returned by the upload endpoint; the first becomes primary",
        examples=[["/uploads/properties/3f0c9a8e-1b2c-4d5e-8f90-123456789abc.jpg"]]
    )
    agent_id: Optional[uuid.UUID] = Field(
        None,
        description="Owning agent; only administrators may assign a listing to someone else"
    )

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "title": "2BR Condo",
            "description": "Bright corner unit close to downtown, with covered parking.",
            "property_type": "condo",
            "listing_type": "sale",
            "price": 300000,
            "address": "100 Congress Ave",
            "city": "Austin",
            "state": "TX",
            "zip_code": "78701",
            "bedrooms": 2,
            "bathrooms": 1,
            "area_sqft": 950,
            "images": ["/uploads/properties/3f0c9a8e-1b2c-4d5e-8f90-123456789abc.jpg"]
        }
    })

    @field_validator('images')
    @classmethod
    def validate_images(cls, v):
        return [url.strip() for url in v if url and url.strip()]


class PropertyUpdate(BaseModel):
    """
    Schema for updating an existing property.

    Only the fields present in the request are written. ``images`` are
    appended, ``remove_image_ids`` are deleted and ``primary_image_id``
    selects the lead image among the images that remain.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    property_type: Optional[PropertyType] = None
    listing_type: Optional[ListingType] = None
    price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[str] = Field(None, min_length=1, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, min_length=1, max_length=100)
    bedrooms: Optional[int] = Field(None, ge=0, le=100)
    bathrooms: Optional[int] = Field(None, ge=0, le=100)
    area_sqft: Optional[int] = Field(None, gt=0)
    year_built: Optional[int] = Field(None, ge=1000, le=2100)
    featured: Optional[bool] = None
    status: Optional[PropertyStatus] = None
    agent_id: Optional[uuid.UUID] = Field(None, description="Reassign the listing (administrators only)")

    images: List[str] = Field(default_factory=list, description="Image URLs to append")
    remove_image_ids: List[uuid.UUID] = Field(default_factory=list, description="Images to delete")
    primary_image_id: Optional[uuid.UUID] = Field(None, description="Image to mark as primary")

    @field_validator('title', 'description', 'address', 'city', 'state', 'country')
    @classmethod
    def validate_text(cls, v, info):
        return _strip_required_text(v, info.field_name.replace("_", " ").capitalize())

    @model_validator(mode='after')
    def reject_null_required_fields(self):
        """Required columns may be left out but not cleared."""
        for field in NON_NULLABLE_FIELDS:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

    def field_changes(self) -> dict:
        """Column values explicitly provided in the request."""
        data = self.model_dump(exclude_unset=True)
        for key in ("images", "remove_image_ids", "primary_image_id"):
            data.pop(key, None)
        return data


class PropertyStatusUpdate(BaseModel):
    """Schema for marking a listing available, pending, sold or rented."""

    status: Optional[str] = Field(
        None,
        description="available, pending, sold or rented",
        examples=["sold"]
    )


class AgentContact(BaseModel):
    """Denormalized contact details of the owning agent."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    full_name: str
    email: str
    phone: Optional[str] = None


class PropertyResponse(BaseModel):
    """Schema for property response with images and agent contact."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(..., description="Property unique identifier")
    title: str
    description: str
    property_type: PropertyType
    listing_type: ListingType
    price: float = Field(..., examples=[300000.0])
    address: str
    city: str
    state: str
    zip_code: Optional[str] = None
    country: str
    bedrooms: int
    bathrooms: int
    area_sqft: int
    year_built: Optional[int] = None
    featured: bool
    status: PropertyStatus
    is_public: bool = Field(
        ...,
        description="False once the listing is sold or rented and hidden from public search"
    )
    agent_id: Optional[uuid.UUID] = Field(None, description="ID of the owning agent")
    agent: Optional[AgentContact] = Field(None, description="Owning agent's contact details")
    images: List[PropertyImageResponse] = Field(
        default_factory=list,
        description="Images, primary first"
    )
    primary_image: Optional[PropertyImageResponse] = None
    created_at: datetime
    updated_at: datetime


class PropertyListResponse(BaseModel):
    """Schema for property list response."""

    properties: List[PropertyResponse] = Field(..., description="Matching properties")
    total: int = Field(..., description="Total number of properties matching the filters", examples=[42])
    page: Optional[int] = Field(None, description="Current page when paginated", examples=[1])
    page_size: Optional[int] = Field(None, description="Page size when paginated", examples=[20])
    total_pages: Optional[int] = Field(None, description="Number of pages when paginated", examples=[3])


class PropertyMessageResponse(BaseModel):
    """Confirmation message with the affected property."""

    message: str = Field(..., examples=["Property updated successfully"])
    property: PropertyResponse
