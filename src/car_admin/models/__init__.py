"""Data models for the back office."""

from car_admin.models.pydantic_models import (
    BrandRead,
    FeatureRead,
    ListingStatus,
    PrivateListingRead,
    VehicleRead,
    VehicleSummary,
    VehicleUpdate,
)

__all__ = [
    "BrandRead",
    "FeatureRead",
    "ListingStatus",
    "PrivateListingRead",
    "VehicleRead",
    "VehicleSummary",
    "VehicleUpdate",
]
