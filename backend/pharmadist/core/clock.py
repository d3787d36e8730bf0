"""Timestamps are stored as ISO-8601 strings in UTC."""
from datetime import datetime, timezone

EPOCH_ISO = datetime(1970, 1, 1, tzinfo=timezone.utc).isoformat()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def parse_iso(value: str) -> datetime:
    """Parse an ISO timestamp, accepting the trailing "Z" form."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
