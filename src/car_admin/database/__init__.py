"""Database module."""

from car_admin.database.engine import get_engine, init_db
from car_admin.database.gateway import StoreGateway
from car_admin.database.repository import CatalogRepository

__all__ = ["get_engine", "init_db", "CatalogRepository", "StoreGateway"]
