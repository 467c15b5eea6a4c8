"""Display color resolution for calendar events.

Priority, highest first: a ``[type: <word>]`` tag in the description, the first
user keyword rule matching the title, then a fixed palette indexed by the event's
ordinal. Provider calendar colors are only used when no rule applies, and only
if they stay legible under white text.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Sequence

from ..domain import ColorRule, Event

EVENT_PALETTE: tuple[str, ...] = (
    "#6366f1",
    "#8b5cf6",
    "#a855f7",
    "#ec4899",
    "#f43f5e",
    "#ef4444",
    "#f97316",
    "#ca8a04",
    "#16a34a",
    "#0d9488",
    "#0891b2",
    "#3b82f6",
)

TYPE_TAG_COLORS: dict[str, str] = {
    "homework": "#22c55e",
    "assignment": "#22c55e",
    "lab": "#06b6d4",
    "quiz": "#f97316",
    "exam": "#ef4444",
    "project": "#a855f7",
}

# Light provider swatches that read badly under white text.
PROVIDER_COLOR_REPLACEMENTS: dict[str, str] = {
    "#7ae7bf": "#0d9488",
    "#51b749": "#16a34a",
    "#fbd75b": "#ca8a04",
    "#ffb878": "#ea580c",
    "#ff887c": "#dc2626",
    "#a4bdfc": "#3b82f6",
    "#dbadff": "#9333ea",
    "#e1e1e1": "#6366f1",
}

LUMINANCE_THRESHOLD = 0.6

_TYPE_TAG = re.compile(r"\[type:\s*(\w+)\]", re.IGNORECASE)
_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


def palette_color(ordinal_index: int) -> str:
    return EVENT_PALETTE[ordinal_index % len(EVENT_PALETTE)]


def type_tag(description: Optional[str]) -> Optional[str]:
    """Return the lower-cased ``[type: ...]`` word embedded in ``description``."""

    if not description:
        return None
    match = _TYPE_TAG.search(description)
    return match.group(1).lower() if match else None


def tag_color(description: Optional[str]) -> Optional[str]:
    tag = type_tag(description)
    return TYPE_TAG_COLORS.get(tag) if tag else None


def rule_color(title: str, rules: Iterable[ColorRule]) -> Optional[str]:
    lowered = (title or "").lower()
    for rule in rules:
        for keyword in rule.keywords:
            if keyword and keyword.lower() in lowered:
                return rule.color
    return None


def resolve(title: str, description: Optional[str], ordinal_index: int, rules: Sequence[ColorRule]) -> str:
    return tag_color(description) or rule_color(title, rules) or palette_color(ordinal_index)


def luminance(hex_color: str) -> float:
    red = int(hex_color[1:3], 16)
    green = int(hex_color[3:5], 16)
    blue = int(hex_color[5:7], 16)
    return (0.299 * red + 0.587 * green + 0.114 * blue) / 255


def is_too_light(hex_color: str) -> bool:
    return luminance(hex_color) > LUMINANCE_THRESHOLD


def resolve_provider_color(calendar_color: Optional[str], ordinal_index: int) -> str:
    if not calendar_color or not _HEX_COLOR.match(calendar_color):
        return palette_color(ordinal_index)
    lowered = calendar_color.lower()
    if lowered in PROVIDER_COLOR_REPLACEMENTS:
        return PROVIDER_COLOR_REPLACEMENTS[lowered]
    if is_too_light(lowered):
        return palette_color(ordinal_index)
    return calendar_color


def resolve_event_color(event: Event, ordinal_index: int, rules: Sequence[ColorRule]) -> str:
    """Rules first, then the provider's calendar color, then the palette."""

    matched = tag_color(event.description) or rule_color(event.summary, rules)
    if matched:
        return matched
    return resolve_provider_color(event.calendar_color, ordinal_index)
