"""car-admin: back office for a vehicle listing catalog."""

__version__ = "0.1.0"
