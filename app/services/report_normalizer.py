"""
Report Normalizer - raw Firestore record -> canonical Report.

Citizen apps and data-entry tooling write loosely-typed documents:
coordinates as strings, images as "..." placeholders, timestamps under
several different keys. This module never fails on a missing or malformed
field; it applies the documented defaults instead.
"""

import calendar
import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from app.models.report import Report

DEFAULT_ADDRESS = "Unknown Location"
DEFAULT_DESCRIPTION = "No description provided"
UNKNOWN_TIME = "Unknown Time"

# Data-entry tooling writes this when the photo is still pending
IMAGE_PLACEHOLDER = "..."

TIMESTAMP_PREFIX = "timestamp"
MONTH_NAMES = [name for name in calendar.month_name if name]

# Leading decimal number; trailing text such as " N" or "°" is ignored
LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_coordinate(value: Any) -> float:
    """
    Parse a latitude/longitude value; anything unusable becomes 0.

    Strings are read up to the end of their leading number, so "3.007 N"
    gives 3.007 and "1_01.797" gives 1.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        match = LEADING_NUMBER.match(value)
        if match is None:
            return 0.0
        value = match.group(1)
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(parsed) or math.isinf(parsed):
        return 0.0
    return parsed


def format_display_time(value: datetime) -> str:
    """Render as M/D/YYYY, H:MM:SS AM|PM."""
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{value.month}/{value.day}/{value.year}, {hour}:{value.minute:02d}:{value.second:02d} {meridiem}"


def _as_datetime(value: Any) -> Optional[datetime]:
    # Firestore returns DatetimeWithNanoseconds (a datetime subclass);
    # protobuf-style timestamps expose to_datetime().
    if isinstance(value, datetime):
        return value
    to_datetime = getattr(value, "to_datetime", None)
    if callable(to_datetime):
        return to_datetime()
    return None


def resolve_timestamp_string(data: Mapping[str, Any]) -> str:
    """
    Resolve the display time label, first match wins:

    1. store-native temporal ``timestamp``
    2. any other truthy ``timestamp``
    3. ``timestamp<Month>`` keys, rendered "<Month> <value>"
    4. the first non-empty key starting with "timestamp"
    5. "Unknown Time"
    """
    raw = data.get(TIMESTAMP_PREFIX)
    if raw:
        native = _as_datetime(raw)
        if native is not None:
            return format_display_time(native)
        return str(raw)

    for month in MONTH_NAMES:
        month_value = data.get(f"{TIMESTAMP_PREFIX}{month}")
        if month_value:
            return f"{month} {month_value}"

    for key, value in data.items():
        if key.startswith(TIMESTAMP_PREFIX) and value:
            return str(value)

    return UNKNOWN_TIME


def normalize_image(value: Any) -> str:
    if not value:
        return ""
    image = str(value)
    if image == IMAGE_PLACEHOLDER:
        return ""
    return image


def _text_or_default(value: Any, default: str) -> str:
    if not value:
        return default
    return str(value)


def normalize_report(
    doc_id: str,
    data: Optional[Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> Report:
    """
    Convert one raw record into a Report.

    Args:
        doc_id: Firestore document ID (used verbatim)
        data: Raw field mapping (may be None or empty)
        now: Clock used when dateTime is missing; defaults to current UTC

    Returns:
        Report: Canonical report
    """
    data: Dict[str, Any] = dict(data or {})

    date_time = data.get("dateTime")
    if not date_time:
        date_time = now or datetime.now(timezone.utc)
    if isinstance(date_time, datetime):
        date_time = date_time.isoformat()

    return Report(
        id=doc_id,
        address=_text_or_default(data.get("address"), DEFAULT_ADDRESS),
        date_time=str(date_time),
        description=_text_or_default(data.get("description"), DEFAULT_DESCRIPTION),
        image_base64=normalize_image(data.get("imageBase64")),
        latitude=parse_coordinate(data.get("latitude")),
        longitude=parse_coordinate(data.get("longitude")),
        timestamp_string=resolve_timestamp_string(data),
    )
