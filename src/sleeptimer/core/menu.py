"""Timer menu model: preset items and value parsing for the host UI."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from sleeptimer.core.timer import MAX_MINUTES, MIN_MINUTES, is_valid_timeout

# Initial value offered by the adjustable-timer dialog, in minutes.
TIMER_ADJ_DEFAULT = 60

CANCEL_LABEL = "Cancel"
ADJUSTABLE_LABEL = "Adjustable..."

_FIXED_LABEL_RE = re.compile(r"^\s*(\d{1,3})m$")


class MenuItemKind(Enum):
    """What selecting a menu item does."""

    CANCEL = "cancel"
    ADJUSTABLE = "adjustable"
    FIXED = "fixed"


@dataclass(frozen=True)
class MenuItem:
    """A single entry in the Timer menu."""

    label: str
    kind: MenuItemKind


def fixed_label(minutes: int) -> str:
    """Return the menu label for a fixed timer of *minutes*."""
    return f"{minutes}m"


def parse_fixed_label(label: str) -> int | None:
    """Extract the minutes from a fixed-timer label such as ``"90m"``.

    Returns ``None`` if the label is malformed or names a value outside
    ``MIN_MINUTES..MAX_MINUTES``.
    """
    match = _FIXED_LABEL_RE.match(label)
    if match is None:
        return None
    minutes = int(match.group(1))
    if not is_valid_timeout(minutes):
        return None
    return minutes


def coerce_adjustable(value: int) -> int:
    """Return *value*, or ``TIMER_ADJ_DEFAULT`` if it is out of range."""
    if not is_valid_timeout(value):
        return TIMER_ADJ_DEFAULT
    return value


def build_menu(presets: Iterable[int]) -> tuple[MenuItem, ...]:
    """Build the Timer menu with one fixed item per value in *presets*.

    The cancel and adjustable items always come first.
    """
    items = [
        MenuItem(CANCEL_LABEL, MenuItemKind.CANCEL),
        MenuItem(ADJUSTABLE_LABEL, MenuItemKind.ADJUSTABLE),
    ]
    for minutes in presets:
        if not is_valid_timeout(minutes):
            raise ValueError(
                f"preset must be between {MIN_MINUTES} and {MAX_MINUTES}, got {minutes}"
            )
        items.append(MenuItem(fixed_label(minutes), MenuItemKind.FIXED))
    return tuple(items)


DEFAULT_MENU = build_menu((30, 60, 90, 120))
