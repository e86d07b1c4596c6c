"""Screen state and the collaborators every screen reports to."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Protocol, TypeVar

from car_admin.config import RoutesConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScreenStatus(str, Enum):
    """Observable state of a screen."""

    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class NotificationKind(str, Enum):
    """Kind of operator notification."""

    SUCCESS = "success"
    ERROR = "error"


class Notifier(Protocol):
    """Fire-and-forget operator feedback."""

    def notify(self, kind: NotificationKind, message: str) -> None: ...


class Navigator(Protocol):
    """Moves the operator to another screen."""

    def navigate_to(self, route: str) -> None: ...


class SessionManager(Protocol):
    """Ends the operator's session. May raise any exception on failure."""

    async def sign_out(self) -> None: ...


@dataclass(frozen=True)
class ScreenState(Generic[T]):
    """Snapshot of what a screen shows.

    Every load replaces the whole snapshot; data is never merged.
    """

    status: ScreenStatus = ScreenStatus.LOADING
    data: T | None = None
    error: str | None = None


class Screen(Generic[T]):
    """Base class for screens: session gate, notifications and abandonment.

    Once ``abandon()`` is called, results of calls still in flight are
    dropped: state is not touched, nothing is notified and nothing navigates.
    """

    def __init__(self, notifier: Notifier, navigator: Navigator, routes: RoutesConfig) -> None:
        self._notifier = notifier
        self._navigator = navigator
        self._routes = routes
        self._abandoned = False
        self.state: ScreenState[T] = ScreenState()

    @property
    def abandoned(self) -> bool:
        return self._abandoned

    def abandon(self) -> None:
        """Mark the screen as left by the operator."""
        self._abandoned = True

    def _require_session(self, session_present: bool) -> bool:
        if not session_present:
            logger.info("No admin session, redirecting to %s", self._routes.login)
            self._navigator.navigate_to(self._routes.login)
            return False
        return True

    def _discard(self, operation: str) -> bool:
        if self._abandoned:
            logger.debug("Discarding result of %s on abandoned %s", operation, type(self).__name__)
        return self._abandoned

    def _set_ready(self, data: T) -> None:
        self.state = ScreenState(status=ScreenStatus.READY, data=data)

    def _set_error(self, detail: str, data: T | None = None) -> None:
        self.state = ScreenState(status=ScreenStatus.ERROR, data=data, error=detail)

    def _notify_success(self, message: str) -> None:
        self._notifier.notify(NotificationKind.SUCCESS, message)

    def _notify_error(self, message: str) -> None:
        self._notifier.notify(NotificationKind.ERROR, message)
