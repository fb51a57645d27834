"""
Request-body coercion shared by the flock services.

Bodies arrive from two clients: the original frontend sends camelCase keys,
newer callers send snake_case. Every field is looked up under all of its
aliases.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation


def pick(data, *keys, default=None):
    """Return the first present alias of a field."""
    for key in keys:
        if key in data:
            return data.get(key)
    return default


def has_any(data, *keys):
    return any(key in data for key in keys)


def is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def parse_date(date_str):
    """Parse an ISO date (a trailing time part is ignored). None when invalid."""
    if not date_str:
        return None
    try:
        return datetime.fromisoformat(str(date_str).replace('Z', '+00:00')).date()
    except (ValueError, TypeError, AttributeError):
        return None


def to_int(value, default=0):
    try:
        if value in (None, ''):
            return int(default)
        return int(value)
    except (TypeError, ValueError):
        return int(default)


def to_decimal(value, default=0):
    try:
        if value in (None, ''):
            return Decimal(default)
        number = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return Decimal(default)
    # NaN and Infinity parse but are not amounts
    if not number.is_finite():
        return Decimal(default)
    return number


def to_bool(value):
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() in {'true', '1', 'yes', 'y', 'on'}
    return bool(value)


def to_whole_number(value):
    """
    Strict integer parse: 5, '5' and 5.0 pass; '5.5', True and 'abc' give None.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None
