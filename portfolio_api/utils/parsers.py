"""
Cell value coercion helpers for spreadsheet rows

Every function here is total: any cell value (str, int, float, bool, None,
datetime) yields a result and nothing raises.
"""
import math
from datetime import date, datetime, timezone, tzinfo
from decimal import Decimal
from typing import Any, List, Optional
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = 'Asia/Tokyo'
DATE_FORMAT = '%Y-%m-%d'

TRUTHY_STRINGS = ('true', '1', 'yes')


def number_text(value: float) -> str:
    """
    Format a float like the script runtime's Number#toString

    Uses the shortest round-trip digits. Plain notation for decimal exponents
    from -6 up to 20, otherwise exponent form without zero padding:
    3.0 -> "3", 0.00001 -> "0.00001", 1e-07 -> "1e-7", 1.5e21 -> "1.5e+21".
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    parts = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(str(d) for d in parts.digits).rstrip("0")
    # value == 0.digits * 10 ** point
    point = len(parts.digits) + parts.exponent

    if len(digits) <= point <= 21:
        return sign + digits + "0" * (point - len(digits))
    if 0 < point <= 21:
        return sign + digits[:point] + "." + digits[point:]
    if -6 < point <= 0:
        return sign + "0." + "0" * -point + digits

    exponent = point - 1
    mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
    return f"{sign}{mantissa}e{'+' if exponent > 0 else '-'}{abs(exponent)}"


def to_text(value: Any) -> str:
    """
    Stringify a cell value the way the spreadsheet scripting runtime does

    Booleans become lowercase, floats follow the script runtime's number
    formatting (see ``number_text``) and datetimes render as ISO-8601.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return number_text(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def coerce_text(value: Any) -> str:
    """
    Empty-or-string coercion for text columns

    Any falsy value (None, "", 0, 0.0, False) collapses to "". Note this means
    a numeric 0 or a boolean False in a text column is dropped, not rendered.

    Args:
        value: Raw cell value

    Returns:
        Cell text, or "" for falsy input
    """
    if not value:
        return ""
    return to_text(value)


def format_date(value: Any, tz: Optional[tzinfo] = None) -> str:
    """
    Render a date cell as yyyy-MM-dd

    Args:
        value: Raw cell value. Datetimes are converted to ``tz`` before
            formatting (naive datetimes are taken as UTC). Other non-empty
            values are stringified unchanged.
        tz: Target timezone (defaults to Asia/Tokyo)

    Returns:
        Formatted date, the stringified value, or "" for falsy input
    """
    if not value:
        return ""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(tz or ZoneInfo(DEFAULT_TIMEZONE)).strftime(DATE_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    return to_text(value)


def parse_tags(value: Any) -> List[str]:
    """
    Split a comma separated tag cell

    Example: "React, TypeScript, GAS" -> ["React", "TypeScript", "GAS"]
    """
    if not value:
        return []
    tags = [tag.strip() for tag in to_text(value).split(',')]
    return [tag for tag in tags if tag]


def parse_boolean(value: Any) -> bool:
    """Coerce a checkbox/text/number cell to a boolean"""
    if isinstance(value, bool):
        return value
    if not value:
        return False
    return to_text(value).lower().strip() in TRUTHY_STRINGS
