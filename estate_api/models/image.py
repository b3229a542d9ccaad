"""
PropertyImage model linking stored image URLs to a listing.
"""

from sqlalchemy import String, Integer, Boolean, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from estate_api.database import Base
import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from estate_api.models.property import Property


class PropertyImage(Base):
    """
    An image attached to a property, in upload order.
    Exactly one image per property is primary whenever any exist.
    """

    __tablename__ = "property_images"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Upload path under the static mount, or an external URL
    image_url: Mapped[str] = mapped_column(String(500), nullable=False)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    property_rel: Mapped["Property"] = relationship("Property", back_populates="images")

    def __repr__(self) -> str:
        return f"<PropertyImage(id={self.id}, property_id={self.property_id}, primary={self.is_primary})>"


Index(
    "idx_property_images_display",
    PropertyImage.property_id,
    PropertyImage.is_primary.desc(),
    PropertyImage.display_order.asc()
)
