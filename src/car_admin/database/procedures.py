"""Store-side procedures.

Each procedure receives an open session and runs inside the single
transaction the gateway wraps around it: any exception rolls back every
change the procedure made.
"""

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from car_admin.errors import StoreError
from car_admin.models.db_models import PrivateListing, Vehicle
from car_admin.models.pydantic_models import TRANSITION_TARGETS, ListingStatus, utc_now

logger = logging.getLogger(__name__)


def process_private_listing(
    session: Session, listing_id: int, status: ListingStatus | str
) -> int | None:
    """Approve or reject a pending private listing.

    Approval promotes the listing into the catalog as a new, unsold vehicle.

    Args:
        session: Session of the enclosing transaction.
        listing_id: Private listing ID.
        status: Target status, "approved" or "rejected".

    Returns:
        ID of the promoted vehicle on approval, None on rejection.

    Raises:
        StoreError: If the status is not a valid target, the listing does not
            exist, or it was already processed.
    """
    try:
        target = ListingStatus(status)
    except ValueError:
        raise StoreError(f"Invalid listing status: {status!r}") from None
    if target not in TRANSITION_TARGETS:
        raise StoreError(f"Invalid listing status: {target.value!r}")

    stmt = select(PrivateListing).where(PrivateListing.id == listing_id).with_for_update()
    listing = session.scalars(stmt).first()
    if listing is None:
        raise StoreError(f"Private listing {listing_id} not found")
    if listing.status != ListingStatus.PENDING:
        raise StoreError(
            f"Private listing {listing_id} was already {listing.status.value}"
        )

    listing.status = target
    listing.processed_at = utc_now()

    if target == ListingStatus.APPROVED:
        vehicle = Vehicle(
            brand_id=listing.brand_id,
            make=listing.brand.name,
            model=listing.model,
            year=listing.year,
            price=listing.price,
            mileage=listing.mileage,
            fuel_type=listing.fuel_type,
            transmission=listing.transmission,
            color=listing.color,
            description=listing.description,
            image_urls=list(listing.image_urls or []),
            is_sold=False,
            source_listing_id=listing.id,
        )
        session.add(vehicle)
        session.flush()
        listing.car_id = vehicle.id
        logger.info("Promoted private listing %d to vehicle %d", listing.id, vehicle.id)

    return listing.car_id


PROCEDURES: dict[str, Callable[..., Any]] = {
    "process_private_listing": process_private_listing,
}
