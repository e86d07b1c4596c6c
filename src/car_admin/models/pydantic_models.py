"""Pydantic models for data validation."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class ListingStatus(str, Enum):
    """Moderation status of a private listing."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Statuses a moderator may move a pending listing into.
TRANSITION_TARGETS = frozenset({ListingStatus.APPROVED, ListingStatus.REJECTED})


class BrandRead(BaseModel):
    """Brand as shown in lookup lists."""

    id: int
    name: str
    logo_url: str | None = None

    model_config = ConfigDict(from_attributes=True, frozen=True)


class FeatureRead(BaseModel):
    """Single equipment feature of a vehicle."""

    id: int
    name: str
    available: bool = True

    model_config = ConfigDict(from_attributes=True, frozen=True)


class VehicleSummary(BaseModel):
    """Vehicle row for the dashboard car list."""

    id: int
    make: str
    model: str
    year: int
    price: int | None = Field(None, ge=0, description="Price in whole currency units")
    mileage: int | None = Field(None, ge=0, description="Odometer in km")
    is_sold: bool = False
    brand: BrandRead
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @property
    def title(self) -> str:
        """Display title, e.g. '2021 BMW i4'."""
        return f"{self.year} {self.make} {self.model}"


class VehicleRead(VehicleSummary):
    """Vehicle with all catalog fields, brand and features, as loaded for editing."""

    brand_id: int
    fuel_type: str | None = None
    transmission: str | None = None
    color: str | None = None
    description: str | None = None
    image_urls: list[str] = Field(default_factory=list)
    source_listing_id: int | None = None
    updated_at: datetime | None = None
    features: list[FeatureRead] = Field(default_factory=list)


class VehicleUpdate(BaseModel):
    """Editable vehicle fields. Only fields that are explicitly set get written."""

    brand_id: int | None = None
    make: str | None = Field(None, min_length=1, max_length=100)
    model: str | None = Field(None, min_length=1, max_length=100)
    year: int | None = Field(None, ge=1900, le=2100)
    price: int | None = Field(None, ge=0)
    mileage: int | None = Field(None, ge=0)
    fuel_type: str | None = None
    transmission: str | None = None
    color: str | None = None
    description: str | None = None
    image_urls: list[str] | None = None

    model_config = ConfigDict(extra="forbid")


class PrivateListingRead(BaseModel):
    """Third-party submission as shown in the moderation queue."""

    id: int
    brand_id: int
    model: str
    year: int
    price: int | None = None
    mileage: int | None = None
    fuel_type: str | None = None
    transmission: str | None = None
    color: str | None = None
    description: str | None = None
    image_urls: list[str] = Field(default_factory=list)
    seller_name: str | None = None
    seller_email: str | None = None
    seller_phone: str | None = None
    status: ListingStatus
    created_at: datetime
    processed_at: datetime | None = None
    car_id: int | None = None
    brand: BrandRead

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_pending(self) -> bool:
        """Whether the listing still awaits a moderation decision."""
        return self.status == ListingStatus.PENDING
