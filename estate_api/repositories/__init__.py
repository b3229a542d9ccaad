"""
Repository layer for data access operations.
The SQLAlchemy repositories implement the store contracts in ``interfaces``.
"""

from estate_api.repositories.base import BaseRepository
from estate_api.repositories.property import PropertyRepository, PropertySearchFilters
from estate_api.repositories.user import UserRepository
from estate_api.repositories.schedule import ScheduleRepository
from estate_api.repositories.interfaces import UserStore, PropertyStore, ScheduleStore

__all__ = [
    "BaseRepository",
    "PropertyRepository",
    "PropertySearchFilters",
    "UserRepository",
    "ScheduleRepository",
    "UserStore",
    "PropertyStore",
    "ScheduleStore",
]
