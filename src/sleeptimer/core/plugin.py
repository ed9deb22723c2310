"""Timer plugin: the host-facing lifecycle and menu action handlers.

This module holds the plugin behaviour without any toolkit code: a host
wires its menu entries to :meth:`TimerPlugin.trigger` (or the individual
``on_*`` handlers) and reflects :attr:`TimerPlugin.cancel_enabled` onto its
Cancel item.
"""

from __future__ import annotations

import logging
from typing import Callable

from sleeptimer.core.menu import (
    DEFAULT_MENU,
    MenuItem,
    MenuItemKind,
    coerce_adjustable,
    parse_fixed_label,
)
from sleeptimer.core.timer import TimerService

logger = logging.getLogger(__name__)


class PluginStateError(RuntimeError):
    """Raised when the plugin is used outside its active lifetime."""


class TimerPlugin:
    """Adds a programmable exit timer to a host application.

    The timer runs independently of whatever the host is doing: only one
    timer runs at a time, and configuring a new one replaces the old.  When
    it expires, *exit_action* is called from the timer thread and is
    expected to terminate the host.
    """

    def __init__(
        self,
        exit_action: Callable[[], None],
        *,
        menu: tuple[MenuItem, ...] = DEFAULT_MENU,
        unit_seconds: float = 60.0,
    ) -> None:
        self._exit_action = exit_action
        self._menu = menu
        self._unit_seconds = unit_seconds
        self._service: TimerService | None = None
        self._cancel_enabled: bool = False

    # -- lifecycle -----------------------------------------------------------

    def activate(self) -> None:
        """Start the timer service.  Called once when the host enables the plugin."""
        if self._service is not None:
            raise PluginStateError("activate() called on an active plugin")
        self._cancel_enabled = False
        self._service = TimerService(self._exit_action, unit_seconds=self._unit_seconds)
        logger.debug("Timer plugin activated")

    def deactivate(self) -> None:
        """Stop the timer service.  Any running timer is discarded."""
        service = self._require_service("deactivate")
        service.shutdown()
        self._service = None
        self._cancel_enabled = False
        logger.debug("Timer plugin deactivated")

    @property
    def active(self) -> bool:
        return self._service is not None

    @property
    def menu(self) -> tuple[MenuItem, ...]:
        return self._menu

    @property
    def cancel_enabled(self) -> bool:
        """Whether the host should offer its Cancel item."""
        return self._cancel_enabled

    # -- menu actions --------------------------------------------------------

    def on_cancel(self) -> None:
        self._require_service("on_cancel").cancel()
        self._cancel_enabled = False

    def on_fixed(self, label: str) -> int | None:
        """Start a fixed timer named by *label* (e.g. ``"30m"``).

        Returns the minutes armed, or ``None`` if the label does not name a
        valid timer, in which case nothing changes.
        """
        service = self._require_service("on_fixed")
        minutes = parse_fixed_label(label)
        if minutes is None:
            logger.warning("Ignoring malformed timer label %r", label)
            return None
        service.set_timeout(minutes)
        self._cancel_enabled = True
        return minutes

    def on_adjustable(self, value: int | None) -> int | None:
        """Apply the value entered in the adjustable-timer dialog.

        ``None`` means the dialog was aborted and leaves the timer alone.
        Out-of-range values fall back to the dialog default.
        """
        service = self._require_service("on_adjustable")
        if value is None:
            return None
        minutes = coerce_adjustable(value)
        service.set_timeout(minutes)
        self._cancel_enabled = True
        return minutes

    def trigger(self, item: MenuItem, value: int | None = None) -> int | None:
        """Dispatch a menu selection to its handler.

        *value* is only used by the adjustable item.
        """
        if item.kind is MenuItemKind.CANCEL:
            self.on_cancel()
            return None
        if item.kind is MenuItemKind.ADJUSTABLE:
            return self.on_adjustable(value)
        return self.on_fixed(item.label)

    # -- private helpers -----------------------------------------------------

    def _require_service(self, method: str) -> TimerService:
        if self._service is None:
            raise PluginStateError(f"{method}() is not valid while the plugin is inactive")
        return self._service
