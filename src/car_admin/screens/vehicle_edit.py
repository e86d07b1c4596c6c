"""Edit screen for a single car."""

import logging
from dataclasses import dataclass

from car_admin.config import RoutesConfig
from car_admin.database.repository import CatalogRepository
from car_admin.errors import AdminError
from car_admin.models.pydantic_models import BrandRead, VehicleRead, VehicleUpdate
from car_admin.screens.base import Navigator, Notifier, Screen

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VehicleEditData:
    """Everything the edit form needs."""

    vehicle: VehicleRead
    brands: list[BrandRead]


class VehicleEditScreen(Screen[VehicleEditData]):
    """Loads a car with the brand list and saves edits.

    A failed load leaves nothing to show, so the operator is sent back to the
    dashboard.
    """

    def __init__(
        self,
        catalog: CatalogRepository,
        notifier: Notifier,
        navigator: Navigator,
        routes: RoutesConfig,
    ) -> None:
        super().__init__(notifier, navigator, routes)
        self._catalog = catalog

    async def enter(self, session_present: bool, vehicle_id: int) -> None:
        """Open the edit screen for ``vehicle_id``."""
        if not self._require_session(session_present):
            return
        try:
            vehicle, brands = await self._catalog.load_vehicle_editor(vehicle_id)
        except AdminError as e:
            if self._discard("car load"):
                return
            logger.exception("Error loading car %d", vehicle_id)
            self._notify_error("Failed to load car details")
            self._set_error(e.detail)
            self._navigator.navigate_to(self._routes.dashboard)
            return
        if self._discard("car load"):
            return
        self._set_ready(VehicleEditData(vehicle=vehicle, brands=brands))

    async def save(self, data: VehicleUpdate) -> bool:
        """Save edited fields and return to the dashboard.

        Returns:
            True if saved.
        """
        if self.state.data is None:
            raise RuntimeError("VehicleEditScreen.save called before a car was loaded")
        vehicle_id = self.state.data.vehicle.id
        try:
            await self._catalog.update_vehicle(vehicle_id, data)
        except AdminError:
            if self._discard("car save"):
                return False
            logger.exception("Error updating car %d", vehicle_id)
            self._notify_error("Failed to update car")
            return False
        if self._discard("car save"):
            return True
        self._notify_success("Car updated successfully")
        self._navigator.navigate_to(self._routes.dashboard)
        return True
