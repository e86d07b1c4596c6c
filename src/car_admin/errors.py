"""Typed errors shared by the gateway, repositories and screens.

Repositories and the moderation workflow raise ``AdminError`` subtypes.
Screens catch them, notify the operator once and apply their fallback.
"""


class AdminError(Exception):
    """Base class for all back office errors."""

    def __init__(self, detail: str = "Internal error") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AdminError):
    """Requested record does not exist."""


class StoreError(AdminError):
    """Gateway-level fault: connection, constraint violation, rejected procedure."""


class RefreshError(StoreError):
    """A mutation was applied but re-reading the view afterwards failed."""


class ValidationError(AdminError):
    """Input rejected before reaching the store."""
