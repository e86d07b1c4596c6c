"""Screens that sequence repository calls for one view's lifetime."""

from car_admin.screens.base import (
    NotificationKind,
    Navigator,
    Notifier,
    ScreenState,
    ScreenStatus,
    SessionManager,
)
from car_admin.screens.dashboard import DashboardScreen
from car_admin.screens.moderation import ModerationScreen
from car_admin.screens.vehicle_edit import VehicleEditData, VehicleEditScreen

__all__ = [
    "DashboardScreen",
    "ModerationScreen",
    "Navigator",
    "NotificationKind",
    "Notifier",
    "ScreenState",
    "ScreenStatus",
    "SessionManager",
    "VehicleEditData",
    "VehicleEditScreen",
]
