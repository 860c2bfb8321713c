from datetime import datetime, timezone
from typing import Optional


def parse_flag(value: Optional[str]) -> bool:
    # Form checkboxes arrive as "true"/"false"; anything else is off.
    if value is None:
        return False
    return value.strip().lower() == "true"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()
