"""Repository layer for catalog data."""

import asyncio
import logging

from car_admin.database.gateway import StoreGateway
from car_admin.errors import NotFoundError, ValidationError
from car_admin.models.db_models import Brand, Vehicle
from car_admin.models.pydantic_models import (
    BrandRead,
    VehicleRead,
    VehicleSummary,
    VehicleUpdate,
)

logger = logging.getLogger(__name__)


class CatalogRepository:
    """Read/write access to vehicles and brands with a fixed join shape.

    Writes are plain overwrites: there is no version check, so two operators
    changing the same vehicle at once resolve as last write wins.
    """

    def __init__(self, gateway: StoreGateway) -> None:
        """Initialize repository with the store gateway.

        Args:
            gateway: Gateway used for every store call.
        """
        self._gateway = gateway

    # ========== READ ==========

    async def load_vehicle_for_edit(self, vehicle_id: int) -> VehicleRead:
        """Load one vehicle with its brand and features.

        Args:
            vehicle_id: Vehicle ID.

        Returns:
            The vehicle; features are in insertion order.

        Raises:
            NotFoundError: If no vehicle has this ID.
            StoreError: On any gateway fault.
        """
        rows = await self._gateway.query(
            Vehicle,
            filters={"id": vehicle_id},
            joins=("brand", "features"),
        )
        if not rows:
            raise NotFoundError(f"Car {vehicle_id} not found")
        return VehicleRead.model_validate(rows[0])

    async def list_brands(self) -> list[BrandRead]:
        """Get all brands ordered by name ascending."""
        rows = await self._gateway.query(Brand, order_by=(("name", "asc"),))
        return [BrandRead.model_validate(row) for row in rows]

    async def load_vehicle_editor(
        self, vehicle_id: int
    ) -> tuple[VehicleRead, list[BrandRead]]:
        """Load a vehicle and the brand list concurrently.

        Fails as soon as either read fails. The other read is left to finish
        on its own and its result is dropped.

        Raises:
            NotFoundError: If no vehicle has this ID.
            StoreError: On any gateway fault.
        """
        vehicle, brands = await asyncio.gather(
            self.load_vehicle_for_edit(vehicle_id),
            self.list_brands(),
        )
        return vehicle, brands

    async def list_vehicles(self) -> list[VehicleSummary]:
        """Get all vehicles with their brand, newest first."""
        rows = await self._gateway.query(
            Vehicle,
            joins=("brand",),
            order_by=(("created_at", "desc"), ("id", "desc")),
        )
        return [VehicleSummary.model_validate(row) for row in rows]

    # ========== UPDATE ==========

    async def set_sold_status(self, vehicle_id: int, sold: bool) -> None:
        """Set ``is_sold`` to the given target value.

        The caller passes the value it wants stored, never "flip".

        Raises:
            NotFoundError: If no vehicle has this ID.
            StoreError: On any gateway fault.
        """
        updated = await self._gateway.update(Vehicle, vehicle_id, {"is_sold": sold})
        if not updated:
            raise NotFoundError(f"Car {vehicle_id} not found")
        logger.info("Car %d marked as %s", vehicle_id, "sold" if sold else "available")

    async def update_vehicle(self, vehicle_id: int, data: VehicleUpdate) -> None:
        """Write the fields that are set on ``data``.

        Raises:
            ValidationError: If no field is set.
            NotFoundError: If no vehicle has this ID.
            StoreError: On any gateway fault.
        """
        fields = data.model_dump(exclude_unset=True)
        if not fields:
            raise ValidationError("No fields to update")
        updated = await self._gateway.update(Vehicle, vehicle_id, fields)
        if not updated:
            raise NotFoundError(f"Car {vehicle_id} not found")
        logger.info("Car %d updated: %s", vehicle_id, ", ".join(sorted(fields)))

    # ========== DELETE ==========

    async def delete_vehicle(self, vehicle_id: int) -> None:
        """Delete a vehicle and its features.

        Raises:
            NotFoundError: If no vehicle has this ID.
            StoreError: If the store rejects the delete.
        """
        deleted = await self._gateway.delete(Vehicle, vehicle_id)
        if not deleted:
            raise NotFoundError(f"Car {vehicle_id} not found")
        logger.info("Car %d deleted", vehicle_id)
