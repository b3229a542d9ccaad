"""
Property model for sale and rental listings.
Handles listing details, location, lifecycle status and the owning agent.
"""

from sqlalchemy import String, Text, Integer, Numeric, Boolean, Enum as SQLEnum, Index, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from estate_api.database import Base
from decimal import Decimal
import enum
import uuid
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from estate_api.models.user import User
    from estate_api.models.image import PropertyImage


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class PropertyType(str, enum.Enum):
    """Kind of building being listed."""
    HOUSE = "house"
    APARTMENT = "apartment"
    CONDO = "condo"
    VILLA = "villa"
    TOWNHOUSE = "townhouse"


class ListingType(str, enum.Enum):
    """Whether the property is offered for sale or for rent."""
    SALE = "sale"
    RENT = "rent"


class PropertyStatus(str, enum.Enum):
    """Lifecycle status of a listing."""
    AVAILABLE = "available"
    PENDING = "pending"
    SOLD = "sold"
    RENTED = "rented"


# Statuses shown in public browse/search and open for viewing requests
PUBLIC_STATUSES = frozenset({PropertyStatus.AVAILABLE, PropertyStatus.PENDING})


class Property(Base):
    """
    Property model for managing sale and rental listings.
    Owned by an agent; carries an ordered set of images.
    """

    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    property_type: Mapped[PropertyType] = mapped_column(
        SQLEnum(PropertyType, name="property_type", values_callable=_enum_values), nullable=False, index=True
    )
    listing_type: Mapped[ListingType] = mapped_column(
        SQLEnum(ListingType, name="listing_type", values_callable=_enum_values), nullable=False, index=True
    )
    # Asking price, or monthly rent for rentals
    price: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False, index=True)

    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    zip_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    country: Mapped[str] = mapped_column(String(100), nullable=False, default="USA")

    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    area_sqft: Mapped[int] = mapped_column(Integer, nullable=False)
    year_built: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    status: Mapped[PropertyStatus] = mapped_column(
        SQLEnum(PropertyStatus, name="property_status", values_callable=_enum_values),
        nullable=False,
        default=PropertyStatus.AVAILABLE,
        index=True
    )

    # Null once the owning agent's account is removed
    agent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Relationships
    agent: Mapped[Optional["User"]] = relationship(
        "User",
        lazy="selectin"
    )

    images: Mapped[List["PropertyImage"]] = relationship(
        "PropertyImage",
        back_populates="property_rel",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="PropertyImage.is_primary.desc(), PropertyImage.display_order.asc()"
    )

    def __repr__(self) -> str:
        """String representation of the property."""
        return f"<Property(id={self.id}, title={self.title[:30]}..., status={self.status})>"

    @property
    def is_public(self) -> bool:
        """Whether the listing still shows up in public browse and search."""
        return self.status in PUBLIC_STATUSES

    @property
    def primary_image(self) -> Optional["PropertyImage"]:
        """Get the primary image for this property."""
        for image in self.images:
            if image.is_primary:
                return image
        return self.images[0] if self.images else None


# Composite index for the default listing order
Index(
    "idx_properties_featured_created",
    Property.featured.desc(),
    Property.created_at.desc()
)

# Composite index for public search by city and price
Index(
    "idx_properties_city_price_status",
    Property.city,
    Property.price,
    Property.status
)

# Composite index for an agent's own listings
Index(
    "idx_properties_agent_status",
    Property.agent_id,
    Property.status
)
