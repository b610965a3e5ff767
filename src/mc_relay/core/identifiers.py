"""Naming helpers derived from player UUIDs.

Player UUIDs come straight from the game server and are never validated or
normalized here; these helpers only shape them for display.
"""

CHANNEL_PREFIX = "updates"
CHANNEL_UUID_CHARS = 6
DISPLAY_UUID_CHARS = 8


def truncate_uuid(uuid: str, length: int = DISPLAY_UUID_CHARS) -> str:
    """Return a shortened uuid for user-visible text (never the full id)."""
    if len(uuid) <= length:
        return uuid
    return f"{uuid[:length]}…"


def channel_name_for(uuid: str) -> str:
    """Deterministic lowercase channel name for a player."""
    return f"{CHANNEL_PREFIX}-{uuid[:CHANNEL_UUID_CHARS].lower()}"


def channel_topic_for(uuid: str) -> str:
    return f"Game updates for player {uuid}"
