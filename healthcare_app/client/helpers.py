"""Small formatting and validation helpers used by the booking views."""
import random
import re
import string
import time
from datetime import datetime
from typing import Optional

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_BASE36 = string.digits + string.ascii_lowercase


def _parse(value: Optional[str]) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _clock(dt: datetime) -> str:
    # 2-digit hour, e.g. "09:05 AM"
    return dt.strftime("%I:%M %p")


def format_date(value: Optional[str]) -> str:
    """'2024-01-15T10:00' -> 'Mon, Jan 15, 2024'; '' when unparseable."""
    dt = _parse(value)
    if dt is None:
        return ""
    return f"{dt:%a}, {dt:%b} {dt.day}, {dt.year}"


def format_time(value: Optional[str]) -> str:
    """'14:30' -> '02:30 PM'; '' for anything outside 00:00-23:59."""
    if not value or not isinstance(value, str):
        return ""
    hours, _, minutes = value.partition(":")
    try:
        h, m = int(hours), int(minutes[:2])
    except ValueError:
        return ""
    if not (0 <= h <= 23 and 0 <= m <= 59):
        return ""
    return _clock(datetime(2000, 1, 1, h, m))


def format_date_time(value: Optional[str]) -> str:
    dt = _parse(value)
    if dt is None:
        return ""
    return f"{format_date(value)}, {_clock(dt)}"


def is_valid_email(email) -> bool:
    if not email or not isinstance(email, str):
        return False
    return bool(_EMAIL_RE.match(email))


def is_valid_phone(phone) -> bool:
    """US format: exactly ten digits once punctuation is stripped."""
    if not phone or not isinstance(phone, str):
        return False
    return len(re.sub(r"\D", "", phone)) == 10


def generate_appointment_id() -> str:
    """Millisecond timestamp followed by nine random base-36 characters."""
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return f"{int(time.time() * 1000)}{suffix}"
