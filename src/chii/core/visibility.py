"""Visibility rules applied to records after they leave the cache.

Cached payloads do not know who is asking, so these checks run on every
read, for hits and misses alike. Banned rows never reach the cache for
ban-filtered kinds; they are excluded by the store query instead.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

# (owner_id, viewer_id) -> whether viewer is in owner's friend list
FriendshipCheck = Callable[[int, int], Awaitable[bool]]


class NsfwFlagged(Protocol):
    nsfw: bool


class PrivacyGated(Protocol):
    uid: int
    public: bool


@dataclass(frozen=True)
class VisibilityOptions:
    """Per-request visibility preferences.

    Attributes:
        allow_nsfw: Whether NSFW records may be returned
        viewer_id: Requesting user id, 0 for anonymous requests
    """

    allow_nsfw: bool = False
    viewer_id: int = 0


DEFAULT_VISIBILITY = VisibilityOptions()


def nsfw_visible(record: NsfwFlagged, options: VisibilityOptions) -> bool:
    return options.allow_nsfw or not record.nsfw


async def privacy_visible(
    record: PrivacyGated, viewer_id: int, is_friends: FriendshipCheck
) -> bool:
    """Whether a possibly private record is visible to ``viewer_id``.

    Public records and the owner's own records are visible without a
    friendship lookup; anonymous viewers never see private records.
    """
    if record.public:
        return True
    if viewer_id and record.uid == viewer_id:
        return True
    if not viewer_id:
        return False
    return await is_friends(record.uid, viewer_id)
