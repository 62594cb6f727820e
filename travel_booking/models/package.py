"""Package model definition."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base, utcnow


class PackageStatus(str, Enum):
    """Package publication status."""
    DRAFT = "draft"
    PUBLISHED = "published"


class Package(Base):
    """Multi-day itinerary offering that travelers can book once published."""

    __tablename__ = "packages"

    package_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    no_of_days: Mapped[int] = mapped_column(Integer, nullable=False)
    base_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    is_template: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PackageStatus.DRAFT.value,
        index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("admins.admin_id", ondelete="SET NULL"),
        nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("no_of_days > 0", name="ck_package_days_positive"),
        CheckConstraint("status IN ('draft', 'published')", name="ck_package_status"),
    )

    @property
    def is_bookable(self) -> bool:
        return self.status == PackageStatus.PUBLISHED.value

    def __repr__(self) -> str:
        return f"<Package(package_id={self.package_id}, title='{self.title}', status={self.status})>"
