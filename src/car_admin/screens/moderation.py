"""Moderation screen for private listings."""

import logging

from car_admin.config import RoutesConfig
from car_admin.errors import AdminError, RefreshError
from car_admin.models.pydantic_models import ListingStatus, PrivateListingRead
from car_admin.screens.base import Navigator, Notifier, Screen
from car_admin.services.moderation_service import ModerationWorkflow

logger = logging.getLogger(__name__)


class ModerationScreen(Screen[list[PrivateListingRead]]):
    """Queue of private listings with approve/reject actions."""

    def __init__(
        self,
        workflow: ModerationWorkflow,
        notifier: Notifier,
        navigator: Navigator,
        routes: RoutesConfig,
    ) -> None:
        super().__init__(notifier, navigator, routes)
        self._workflow = workflow
        self.processing = False

    async def enter(self, session_present: bool) -> None:
        """Open the queue; redirects to login without a session."""
        if not self._require_session(session_present):
            return
        await self.load()

    async def load(self) -> None:
        """Re-read the queue. On failure the previous list stays visible."""
        try:
            listings = await self._workflow.list_moderation_queue()
        except AdminError as e:
            if self._discard("queue load"):
                return
            logger.exception("Error loading listings")
            self._notify_error("Failed to load listings")
            self._set_error(e.detail, data=self.state.data or [])
            return
        if self._discard("queue load"):
            return
        self._set_ready(listings)

    async def update_status(self, listing_id: int, status: ListingStatus) -> bool:
        """Approve or reject a listing and show the refreshed queue.

        Only one transition runs at a time; a call made while another is in
        flight is ignored.

        Returns:
            True if the transition was applied.
        """
        if self.processing:
            logger.debug("Ignoring update of listing %d while another is in flight", listing_id)
            return False
        self.processing = True
        try:
            listings = await self._workflow.transition(listing_id, status)
        except RefreshError as e:
            if self._discard("listing transition"):
                return True
            logger.exception("Error reloading listings after updating %d", listing_id)
            self._notify_error(
                f"Listing {ListingStatus(status).value}, but the list could not be reloaded"
            )
            self._set_error(e.detail, data=self.state.data or [])
            return True
        except AdminError:
            if self._discard("listing transition"):
                return False
            logger.exception("Error updating listing %d", listing_id)
            self._notify_error("Failed to update listing")
            return False
        finally:
            self.processing = False

        if self._discard("listing transition"):
            return True
        self._notify_success(f"Listing {ListingStatus(status).value} successfully")
        self._set_ready(listings)
        return True
