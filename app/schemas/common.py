# app/schemas/common.py

from datetime import datetime, timezone
from typing import Optional


def to_utc_iso(v: Optional[datetime]) -> Optional[str]:
    """Serialize a timestamp as ISO8601 UTC with a 'Z' suffix (naive values are taken as UTC)."""
    if v is None:
        return None
    if v.tzinfo is None:
        v = v.replace(tzinfo=timezone.utc)
    v = v.astimezone(timezone.utc)
    return v.isoformat(timespec="milliseconds").replace("+00:00", "Z")
