"""Shared fixtures: a SQLite store per test and helpers to seed it."""

from datetime import datetime
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from car_admin.database.engine import create_db_engine, make_session_factory
from car_admin.database.gateway import StoreGateway
from car_admin.models.db_models import Brand, PrivateListing, Vehicle, VehicleFeature
from car_admin.models.pydantic_models import ListingStatus


class StoreSeeder:
    """Inserts rows the way external submission paths would."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def brand(self, name: str, logo_url: str | None = None) -> int:
        with self._session_factory.begin() as session:
            brand = Brand(name=name, logo_url=logo_url or f"https://cdn.example.com/{name.lower()}.png")
            session.add(brand)
            session.flush()
            return brand.id

    def vehicle(
        self,
        brand_id: int,
        model: str = "i4 eDrive40",
        year: int = 2023,
        features: list[tuple[str, bool]] | None = None,
        **fields: Any,
    ) -> int:
        with self._session_factory.begin() as session:
            brand = session.get(Brand, brand_id)
            vehicle = Vehicle(
                brand_id=brand_id,
                make=brand.name if brand else "Unknown",
                model=model,
                year=year,
                **fields,
            )
            vehicle.features = [
                VehicleFeature(name=name, available=available)
                for name, available in (features or [])
            ]
            session.add(vehicle)
            session.flush()
            return vehicle.id

    def listing(
        self,
        brand_id: int,
        created_at: datetime,
        status: ListingStatus = ListingStatus.PENDING,
        model: str = "Model 3",
        year: int = 2021,
        **fields: Any,
    ) -> int:
        with self._session_factory.begin() as session:
            listing = PrivateListing(
                brand_id=brand_id,
                model=model,
                year=year,
                status=status,
                created_at=created_at,
                **fields,
            )
            session.add(listing)
            session.flush()
            return listing.id

    def get(self, model: type, record_id: int) -> Any:
        with self._session_factory() as session:
            return session.get(model, record_id)

    def count(self, model: type) -> int:
        with self._session_factory() as session:
            return session.query(model).count()


@pytest.fixture
def engine(tmp_path: Path) -> Engine:
    """Create a file-backed SQLite engine (worker threads share it)."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def gateway(engine: Engine) -> StoreGateway:
    """Create a gateway over the test store."""
    return StoreGateway(engine)


@pytest.fixture
def seed(engine: Engine) -> StoreSeeder:
    """Create a seeder for the test store."""
    return StoreSeeder(make_session_factory(engine))
