from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC now, the representation every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc_iso(dt: datetime | None) -> str | None:
    """Return a strict ISO8601 string with trailing Z."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


def parse_datetime(value) -> datetime:
    """Parse an ISO 8601 timestamp into naive UTC.

    Accepts the ``T`` or space separator and a trailing ``Z``. Offsets are
    converted to UTC; naive values are taken as UTC already.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("datetime value is required")
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError("Invalid datetime format. Use ISO 8601.") from exc
    if dt.tzinfo:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt
