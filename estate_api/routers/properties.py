"""
Property management API endpoints for CRUD operations, search and status changes.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from typing import Optional, Type, TypeVar
from enum import Enum
from decimal import Decimal
from uuid import UUID
import math

from estate_api.models.user import User
from estate_api.models.property import PropertyType, ListingType
from estate_api.repositories.property import PropertySearchFilters
from estate_api.services.property import PropertyService
from estate_api.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyStatusUpdate,
    PropertyResponse,
    PropertyListResponse,
    PropertyMessageResponse
)
from estate_api.schemas.error import get_error_responses
from estate_api.utils.dependencies import (
    get_current_user,
    get_optional_current_user,
    get_property_service
)
from estate_api.utils.exceptions import ValidationError


router = APIRouter(prefix="/properties", tags=["Properties"])

EnumType = TypeVar("EnumType", bound=Enum)


def _parse_enum(enum_cls: Type[EnumType], value: Optional[str], label: str) -> Optional[EnumType]:
    if value is None:
        return None
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {label}: {value}. Must be one of: {allowed}")


@router.get(
    "",
    response_model=PropertyListResponse,
    status_code=status.HTTP_200_OK,
    summary="List properties with search and filtering",
    description="Search listings. Sold and rented listings are hidden unless the caller may see them.",
    responses=get_error_responses(400, 422)
)
async def list_properties(
    city: Optional[str] = Query(None, description="City, case-insensitive substring match"),
    property_type: Optional[str] = Query(None, description="house, apartment, condo, villa or townhouse"),
    listing_type: Optional[str] = Query(None, description="sale or rent"),
    min_price: Optional[Decimal] = Query(None, ge=0, description="Minimum price (inclusive)"),
    max_price: Optional[Decimal] = Query(None, ge=0, description="Maximum price (inclusive)"),
    bedrooms: Optional[int] = Query(None, ge=0, description="Minimum number of bedrooms"),
    status_filter: Optional[str] = Query(None, alias="status", description="Lifecycle status"),
    featured: Optional[bool] = Query(None, description="Only featured (or non-featured) listings"),
    agent_id: Optional[UUID] = Query(None, description="Listings owned by this agent"),
    page: Optional[int] = Query(None, description="Page number, starting at 1"),
    page_size: Optional[int] = Query(None, description="Results per page; omit to return every match"),
    current_user: Optional[User] = Depends(get_optional_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    """
    Search listings visible to the caller, featured first then newest first.
    """
    filters = PropertySearchFilters(
        city=city.strip() if city and city.strip() else None,
        property_type=_parse_enum(PropertyType, property_type, "property type"),
        listing_type=_parse_enum(ListingType, listing_type, "listing type"),
        min_price=min_price,
        max_price=max_price,
        min_bedrooms=bedrooms,
        status=PropertyService.parse_status(status_filter) if status_filter is not None else None,
        featured=featured,
        agent_id=agent_id
    )

    properties, total = await property_service.list_properties(
        filters, current_user, page=page, page_size=page_size
    )

    response = PropertyListResponse(
        properties=[PropertyResponse.model_validate(prop) for prop in properties],
        total=total
    )
    if page_size is not None:
        response.page = page or 1
        response.page_size = page_size
        response.total_pages = math.ceil(total / page_size) if total > 0 else 1
    return response


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    status_code=status.HTTP_200_OK,
    summary="Get property details",
    description="Get a listing with its images and agent contact",
    responses=get_error_responses(404)
)
async def get_property(
    property_id: UUID = Path(..., description="Property ID"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.get_property(property_id)
    return PropertyResponse.model_validate(property_obj)


@router.post(
    "",
    response_model=PropertyMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    description="Create a listing owned by the caller. Requires agent or admin role.",
    responses=get_error_responses(400, 401, 403, 422)
)
async def create_property(
    property_data: PropertyCreate,
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyMessageResponse:
    """
    Create a new property listing.

    Raises:
        InsufficientPermissionsError: If the caller is not an agent or admin
    """
    property_obj = await property_service.create_property(property_data, current_user)

    return PropertyMessageResponse(
        message="Property created successfully",
        property=PropertyResponse.model_validate(property_obj)
    )


@router.put(
    "/{property_id}",
    response_model=PropertyMessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Update property",
    description="Update listing fields and images. Only the owning agent or an admin can update.",
    responses=get_error_responses(400, 401, 403, 404, 422)
)
async def update_property(
    property_data: PropertyUpdate,
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyMessageResponse:
    updated_property = await property_service.update_property(
        property_id, property_data, current_user
    )

    return PropertyMessageResponse(
        message="Property updated successfully",
        property=PropertyResponse.model_validate(updated_property)
    )


@router.patch(
    "/{property_id}/status",
    response_model=PropertyMessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Change listing status",
    description="Mark a listing available, pending, sold or rented",
    responses=get_error_responses(400, 401, 403, 404)
)
async def update_property_status(
    status_data: PropertyStatusUpdate,
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyMessageResponse:
    updated_property = await property_service.update_status(
        property_id, status_data.status, current_user
    )

    return PropertyMessageResponse(
        message="Property status updated successfully",
        property=PropertyResponse.model_validate(updated_property)
    )


@router.delete(
    "/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete property",
    description="Delete a listing with its images and viewing requests. Only the owning agent or an admin can delete.",
    responses=get_error_responses(401, 403, 404)
)
async def delete_property(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> None:
    await property_service.delete_property(property_id, current_user)
