"""
Property repository for listings, their images and dependent records.
Multi-row writes (property + images, image edits, cascading delete)
run inside a single commit.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_, func, desc
from estate_api.repositories.base import BaseRepository
from estate_api.models.property import Property, PropertyType, ListingType, PropertyStatus
from estate_api.models.image import PropertyImage
from estate_api.models.schedule import Schedule
from typing import Optional, List, Dict, Any, Tuple, Collection
from decimal import Decimal
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertySearchFilters:
    """Data class for property search filters."""

    def __init__(
        self,
        city: Optional[str] = None,
        property_type: Optional[PropertyType] = None,
        listing_type: Optional[ListingType] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        min_bedrooms: Optional[int] = None,
        status: Optional[PropertyStatus] = None,
        featured: Optional[bool] = None,
        agent_id: Optional[uuid.UUID] = None,
        visible_statuses: Optional[Collection[PropertyStatus]] = None
    ):
        self.city = city
        self.property_type = property_type
        self.listing_type = listing_type
        self.min_price = min_price
        self.max_price = max_price
        self.min_bedrooms = min_bedrooms
        self.status = status
        self.featured = featured
        self.agent_id = agent_id
        # None means every status is visible
        self.visible_statuses = visible_statuses


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property listings with filtering and image management.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def search_properties(
        self,
        filters: PropertySearchFilters,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> Tuple[List[Property], int]:
        """
        Search properties, featured first and then newest first.

        Args:
            filters: PropertySearchFilters instance with search criteria
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return, None for all

        Returns:
            Tuple of (properties list, total count)
        """
        try:
            query = select(Property)
            count_query = select(func.count(Property.id))

            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))
                count_query = count_query.where(and_(*conditions))

            count_result = await self.db.execute(count_query)
            total_count = count_result.scalar()

            query = query.order_by(desc(Property.featured), desc(Property.created_at)).offset(skip)
            if limit is not None:
                query = query.limit(limit)

            result = await self.db.execute(query)
            properties = result.scalars().all()

            logger.debug(f"Property search returned {len(properties)} of {total_count} total results")
            return list(properties), total_count
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        """
        Build SQLAlchemy filter conditions from search filters.
        """
        conditions = []

        if filters.visible_statuses is not None:
            conditions.append(Property.status.in_(list(filters.visible_statuses)))

        # City filter (case-insensitive partial match)
        if filters.city:
            conditions.append(Property.city.icontains(filters.city, autoescape=True))

        if filters.property_type:
            conditions.append(Property.property_type == filters.property_type)
        if filters.listing_type:
            conditions.append(Property.listing_type == filters.listing_type)

        # Price range filters
        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)

        if filters.min_bedrooms is not None:
            conditions.append(Property.bedrooms >= filters.min_bedrooms)

        if filters.status:
            conditions.append(Property.status == filters.status)
        if filters.featured is not None:
            conditions.append(Property.featured == filters.featured)
        if filters.agent_id:
            conditions.append(Property.agent_id == filters.agent_id)

        return conditions

    async def create_with_images(self, property_data: Dict[str, Any], image_urls: List[str]) -> Property:
        """
        Insert a property and its images in one transaction.
        The first image becomes primary.
        """
        property_obj = Property(**property_data)
        property_obj.images.extend(
            PropertyImage(image_url=url, is_primary=position == 0, display_order=position)
            for position, url in enumerate(image_urls)
        )

        async with self.transaction("create with images"):
            self.db.add(property_obj)

        logger.info(f"Created property: {property_obj.title} (ID: {property_obj.id}) with {len(image_urls)} images")
        return await self.get_by_id(property_obj.id)

    async def update_with_images(
        self,
        property_id: uuid.UUID,
        fields: Dict[str, Any],
        new_image_urls: Optional[List[str]] = None,
        remove_image_ids: Optional[Collection[uuid.UUID]] = None,
        primary_image_id: Optional[uuid.UUID] = None
    ) -> Optional[Property]:
        """
        Overwrite property fields and edit its image set in one transaction.

        New images are appended after the existing ones. The current primary
        is kept unless ``primary_image_id`` names another image or the primary
        is removed, in which case the earliest remaining image takes over.

        Returns:
            Updated property or None if not found
        """
        property_obj = await self.get_by_id(property_id)
        if property_obj is None:
            return None

        remove_ids = set(remove_image_ids or [])
        new_image_urls = new_image_urls or []

        async with self.transaction(f"update {property_id} with images"):
            self.assign_columns(property_obj, fields)

            for image in [img for img in property_obj.images if img.id in remove_ids]:
                property_obj.images.remove(image)

            next_order = max((img.display_order for img in property_obj.images), default=-1) + 1
            property_obj.images.extend(
                PropertyImage(image_url=url, is_primary=False, display_order=next_order + offset)
                for offset, url in enumerate(new_image_urls)
            )

            self._resolve_primary(property_obj.images, primary_image_id)

        logger.info(f"Updated property {property_id} (removed {len(remove_ids)} images, "
                    f"added {len(new_image_urls)} images)")
        return await self.get_by_id(property_id)

    @staticmethod
    def _resolve_primary(images: List[PropertyImage], primary_image_id: Optional[uuid.UUID]) -> None:
        """Leave exactly one primary image when any images exist."""
        if not images:
            return

        if primary_image_id is not None:
            chosen = next((img for img in images if img.id == primary_image_id), None)
        else:
            chosen = next((img for img in images if img.is_primary), None)

        if chosen is None:
            chosen = min(images, key=lambda img: img.display_order)

        for image in images:
            image.is_primary = image is chosen

    async def update_status(self, property_id: uuid.UUID, status: PropertyStatus) -> Optional[Property]:
        """
        Update property lifecycle status.

        Returns:
            Updated property or None if not found
        """
        updated_property = await self.update(property_id, {"status": status})
        if updated_property:
            logger.info(f"Property {property_id} marked {status.value}")
        return updated_property

    async def delete_with_dependents(self, property_id: uuid.UUID) -> Optional[List[str]]:
        """
        Delete a property together with its schedules and images.

        Returns:
            URLs of the removed images, or None if the property was not found
        """
        image_result = await self.db.execute(
            select(PropertyImage.image_url).where(PropertyImage.property_id == property_id)
        )
        image_urls = list(image_result.scalars().all())

        async with self.transaction(f"delete {property_id} with dependents"):
            await self.db.execute(delete(Schedule).where(Schedule.property_id == property_id))
            await self.db.execute(delete(PropertyImage).where(PropertyImage.property_id == property_id))
            result = await self.db.execute(delete(Property).where(Property.id == property_id))

        if result.rowcount == 0:
            logger.debug(f"Property {property_id} not found for deletion")
            return None

        logger.info(f"Deleted property {property_id} with {len(image_urls)} images and its schedules")
        return image_urls
