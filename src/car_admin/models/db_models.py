"""SQLAlchemy ORM models."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from car_admin.models.pydantic_models import ListingStatus, utc_now


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class Brand(Base):
    """Vehicle manufacturer shown in lookup lists."""

    __tablename__ = "brands"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    logo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<Brand(id={self.id}, name='{self.name}')>"


class Vehicle(Base):
    """Catalog vehicle managed by operators."""

    __tablename__ = "cars"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    brand_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("brands.id"), nullable=False, index=True
    )
    make: Mapped[str] = mapped_column(String(100), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mileage: Mapped[int | None] = mapped_column(Integer, nullable=True)  # km
    fuel_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    transmission: Mapped[str | None] = mapped_column(String(50), nullable=True)
    color: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_urls: Mapped[list[str]] = mapped_column(JSON, default=list)

    is_sold: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    # Set when the vehicle was promoted from an approved private listing
    source_listing_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=True
    )

    # Relationships
    brand: Mapped["Brand"] = relationship("Brand")
    features: Mapped[list["VehicleFeature"]] = relationship(
        "VehicleFeature",
        back_populates="vehicle",
        cascade="all, delete-orphan",
        order_by="VehicleFeature.id",
    )

    def __repr__(self) -> str:
        return f"<Vehicle(id={self.id}, {self.year} {self.make} {self.model}, sold={self.is_sold})>"


class VehicleFeature(Base):
    """Equipment feature attached to a vehicle."""

    __tablename__ = "car_features"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    car_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cars.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    vehicle: Mapped["Vehicle"] = relationship("Vehicle", back_populates="features")


class PrivateListing(Base):
    """Vehicle submitted by a third party, awaiting moderation."""

    __tablename__ = "private_listings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    brand_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("brands.id"), nullable=False, index=True
    )
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mileage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    fuel_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    transmission: Mapped[str | None] = mapped_column(String(50), nullable=True)
    color: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_urls: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Seller contact
    seller_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    seller_email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    seller_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    status: Mapped[ListingStatus] = mapped_column(
        Enum(ListingStatus, values_callable=lambda e: [m.value for m in e]),
        default=ListingStatus.PENDING,
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False, index=True
    )
    processed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Catalog vehicle created on approval
    car_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("cars.id", ondelete="SET NULL"), nullable=True
    )

    brand: Mapped["Brand"] = relationship("Brand")

    def __repr__(self) -> str:
        return f"<PrivateListing(id={self.id}, status={self.status})>"
