"""Hooks for torrent actions and the selection set they act on.

The engine never performs an action itself. It validates the request and
hands it to an :class:`ActionHandler`, typically the API client.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Protocol


class TorrentAction(str, Enum):
    """Actions that can be applied to one or more torrents."""

    PAUSE = "pause"
    RESUME = "resume"
    RECHECK = "recheck"
    DELETE = "delete"


class UnknownActionError(ValueError):
    """Raised for an action name outside :class:`TorrentAction`."""

    def __init__(self, action: str) -> None:
        self.action = action
        valid = ", ".join(a.value for a in TorrentAction)
        super().__init__(f"Unknown torrent action '{action}' (expected one of: {valid})")


class ActionHandler(Protocol):
    """Something that can carry out torrent actions."""

    def perform(self, action: TorrentAction, hashes: list[str]) -> None: ...

    def change_category(self, hashes: list[str], category: str) -> None: ...


def parse_action(action: str | TorrentAction) -> TorrentAction:
    """Resolve an action name.

    Raises:
        UnknownActionError: If the name is not a known action.
    """
    if isinstance(action, TorrentAction):
        return action
    try:
        return TorrentAction(action.strip().lower())
    except ValueError:
        raise UnknownActionError(action) from None


def normalize_hashes(hashes: str | Iterable[str]) -> list[str]:
    """De-duplicate and sort hashes, dropping blanks. A single hash is accepted."""
    if isinstance(hashes, str):
        hashes = [hashes]
    return sorted({h.strip() for h in hashes if h and h.strip()})


def dispatch_action(
    handler: ActionHandler,
    action: str | TorrentAction,
    hashes: str | Iterable[str],
) -> list[str]:
    """Validate an action request and pass it to ``handler``.

    Args:
        handler: Receiver of the action.
        action: Action name or member.
        hashes: One hash or a collection of hashes.

    Returns:
        The hashes the action was sent for. Empty if there was nothing to do.

    Raises:
        UnknownActionError: If the action name is not recognized.
    """
    resolved = parse_action(action)
    targets = normalize_hashes(hashes)
    if not targets:
        return []
    handler.perform(resolved, targets)
    return targets


def dispatch_category_change(
    handler: ActionHandler,
    hashes: str | Iterable[str],
    category: str,
) -> list[str]:
    """Pass a category change to ``handler``. Returns the affected hashes."""
    targets = normalize_hashes(hashes)
    if not targets:
        return []
    handler.change_category(targets, category)
    return targets


def toggle_selection(selected: frozenset[str], release_hash: str) -> frozenset[str]:
    """Return a new selection with ``release_hash`` toggled."""
    if release_hash in selected:
        return selected - {release_hash}
    return selected | {release_hash}
