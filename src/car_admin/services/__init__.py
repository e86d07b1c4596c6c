"""Service layer for car-admin business logic."""

from car_admin.services.moderation_service import ModerationWorkflow, pending_count

__all__ = [
    "ModerationWorkflow",
    "pending_count",
]
