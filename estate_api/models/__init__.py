"""
Database models for the Real Estate Listing API.
Includes User, Property, PropertyImage and Schedule models.
"""

from estate_api.models.user import User, UserRole
from estate_api.models.property import Property, PropertyType, ListingType, PropertyStatus, PUBLIC_STATUSES
from estate_api.models.image import PropertyImage
from estate_api.models.schedule import Schedule, ScheduleStatus, SCHEDULE_TRANSITIONS

# Export all models for easy importing
__all__ = [
    "User",
    "UserRole",
    "Property",
    "PropertyType",
    "ListingType",
    "PropertyStatus",
    "PUBLIC_STATUSES",
    "PropertyImage",
    "Schedule",
    "ScheduleStatus",
    "SCHEDULE_TRANSITIONS",
]
