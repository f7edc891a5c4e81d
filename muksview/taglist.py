"""Ordering and display names of room tags."""

from __future__ import annotations

import re
from typing import Iterable

TAG_ORDER: dict[str, int] = {
    "net.maunium.gomuks.fake.invite": 4,
    "m.favourite": 3,
    "net.maunium.gomuks.fake.direct": 2,
    "": 1,
    "m.lowpriority": -1,
    "m.server_notice": -2,
    "net.maunium.gomuks.fake.leave": -3,
}

_DISPLAY_NAMES = {
    "": "Rooms",
    "m.favourite": "Favorites",
    "m.lowpriority": "Low Priority",
    "m.server_notice": "System Alerts",
    "net.maunium.gomuks.fake.direct": "People",
    "net.maunium.gomuks.fake.invite": "Invites",
    "net.maunium.gomuks.fake.leave": "Historical",
}

_NAMESPACE = re.compile(r"[a-z]+\.[a-z]+(?:\.[a-z]+)*")


def tag_order(tag: str) -> int:
    """Return the fixed sort weight of a tag; unknown tags weigh 0."""
    return TAG_ORDER.get(tag, 0)


def sort_tags(tags: Iterable[str]) -> list[str]:
    """Sort tags by weight, highest first, then by name in descending order."""
    return sorted(tags, key=lambda tag: (tag_order(tag), tag), reverse=True)


def tag_display_name(tag: str) -> str:
    """Return the heading for a tag, or "" for namespaced tags that are hidden."""
    name = _DISPLAY_NAMES.get(tag)
    if name is not None:
        return name
    if tag.startswith("u."):
        return tag[len("u."):]
    if _NAMESPACE.fullmatch(tag) is None:
        return tag
    return ""