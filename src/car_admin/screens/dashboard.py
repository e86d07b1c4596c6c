"""Dashboard screen: car list, delete, sale status and logout."""

import logging

from car_admin.config import RoutesConfig
from car_admin.database.repository import CatalogRepository
from car_admin.errors import AdminError
from car_admin.models.pydantic_models import VehicleSummary
from car_admin.screens.base import Navigator, Notifier, Screen, SessionManager

logger = logging.getLogger(__name__)


class DashboardScreen(Screen[list[VehicleSummary]]):
    """Catalog overview. Every successful mutation reloads the full list."""

    def __init__(
        self,
        catalog: CatalogRepository,
        notifier: Notifier,
        navigator: Navigator,
        routes: RoutesConfig,
        session_manager: SessionManager | None = None,
    ) -> None:
        super().__init__(notifier, navigator, routes)
        self._catalog = catalog
        self._session_manager = session_manager

    async def enter(self, session_present: bool) -> None:
        """Open the dashboard; redirects to login without a session."""
        if not self._require_session(session_present):
            return
        await self.reload()

    async def reload(self) -> None:
        """Re-read the car list, replacing what is shown."""
        try:
            vehicles = await self._catalog.list_vehicles()
        except AdminError as e:
            if self._discard("car list load"):
                return
            logger.exception("Error loading cars")
            self._notify_error("Failed to load cars")
            self._set_error(e.detail, data=self.state.data or [])
            return
        if self._discard("car list load"):
            return
        self._set_ready(vehicles)

    async def delete_vehicle(self, vehicle_id: int) -> bool:
        """Delete a car, then reload the list.

        Returns:
            True if the car was deleted.
        """
        try:
            await self._catalog.delete_vehicle(vehicle_id)
        except AdminError:
            if self._discard("car delete"):
                return False
            logger.exception("Error deleting car %d", vehicle_id)
            self._notify_error("Failed to delete car")
            return False
        if self._discard("car delete"):
            return True
        self._notify_success("Car deleted successfully")
        await self.reload()
        return True

    async def set_sold_status(self, vehicle_id: int, sold: bool) -> bool:
        """Store the given sale status for a car, then reload the list.

        Returns:
            True if the status was stored.
        """
        try:
            await self._catalog.set_sold_status(vehicle_id, sold)
        except AdminError:
            if self._discard("sale status update"):
                return False
            logger.exception("Error updating car %d", vehicle_id)
            self._notify_error("Failed to update car status")
            return False
        if self._discard("sale status update"):
            return True
        self._notify_success(f"Car marked as {'sold' if sold else 'available'}")
        await self.reload()
        return True

    async def toggle_sold(self, vehicle: VehicleSummary) -> bool:
        """Flip the sale status of a car as currently shown to the operator.

        The target is computed from the displayed row and stored as-is, so a
        concurrent change by another operator is overwritten.
        """
        return await self.set_sold_status(vehicle.id, not vehicle.is_sold)

    async def logout(self) -> bool:
        """End the session and go to the login screen.

        Returns:
            True if signed out.
        """
        if self._session_manager is None:
            raise RuntimeError("DashboardScreen has no session manager")
        try:
            await self._session_manager.sign_out()
        except Exception:
            if self._discard("sign out"):
                return False
            logger.exception("Error signing out")
            self._notify_error("Failed to sign out")
            return False
        if self._discard("sign out"):
            return True
        self._navigator.navigate_to(self._routes.login)
        return True
