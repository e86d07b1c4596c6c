"""Service layer for private listing moderation."""

import logging
from collections.abc import Sequence

from car_admin.database.gateway import StoreGateway
from car_admin.errors import RefreshError, StoreError, ValidationError
from car_admin.models.db_models import PrivateListing
from car_admin.models.pydantic_models import (
    TRANSITION_TARGETS,
    ListingStatus,
    PrivateListingRead,
)

logger = logging.getLogger(__name__)

PROCESS_LISTING_PROCEDURE = "process_private_listing"


class ModerationWorkflow:
    """Drives approve/reject transitions of private listings.

    A transition is a single store procedure call. It may change more than the
    targeted row (approval creates a catalog vehicle), so after every
    transition the queue is re-read in full instead of patched locally.
    """

    def __init__(self, gateway: StoreGateway) -> None:
        """Initialize with the store gateway.

        Args:
            gateway: Gateway used for every store call.
        """
        self._gateway = gateway

    async def list_moderation_queue(self) -> list[PrivateListingRead]:
        """Get all private listings with their brand, newest first.

        Returns:
            Complete queue. Nothing is returned on failure.

        Raises:
            StoreError: On any gateway fault.
        """
        rows = await self._gateway.query(
            PrivateListing,
            joins=("brand",),
            order_by=(("created_at", "desc"), ("id", "desc")),
        )
        return [PrivateListingRead.model_validate(row) for row in rows]

    async def transition(
        self, listing_id: int, target_status: ListingStatus
    ) -> list[PrivateListingRead]:
        """Approve or reject a listing, then re-read the queue.

        The listing's current status is not checked here; the store procedure
        decides whether the transition is legal.

        Args:
            listing_id: Private listing ID.
            target_status: APPROVED or REJECTED.

        Returns:
            The refreshed queue.

        Raises:
            ValidationError: If target_status is not APPROVED or REJECTED.
            StoreError: If the procedure fails. Nothing was applied.
            RefreshError: If the procedure succeeded but re-reading the queue failed.
        """
        try:
            target_status = ListingStatus(target_status)
        except ValueError:
            raise ValidationError(f"Unknown listing status: {target_status!r}") from None
        if target_status not in TRANSITION_TARGETS:
            raise ValidationError(f"Cannot move a listing to {target_status.value!r}")

        await self._gateway.call_procedure(
            PROCESS_LISTING_PROCEDURE,
            listing_id=listing_id,
            status=target_status.value,
        )
        logger.info("Private listing %d %s", listing_id, target_status.value)

        try:
            return await self.list_moderation_queue()
        except StoreError as e:
            raise RefreshError(
                f"Listing {listing_id} was {target_status.value} but the queue "
                f"could not be reloaded: {e.detail}"
            ) from e


def pending_count(listings: Sequence[PrivateListingRead]) -> int:
    """Count listings still awaiting a decision."""
    return sum(1 for listing in listings if listing.is_pending)
