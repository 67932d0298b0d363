"""
Utility functions for the Storefront platform
"""
import json
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from django.utils.dateparse import parse_date, parse_datetime

from .exceptions import ValidationException

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')


def parse_array_field(value: Any) -> List[str]:
    """
    Normalize a list-ish form value.

    Accepts a real list, a JSON encoded array, or a comma separated string.
    Empty values become an empty list.
    """
    if value is None or value == '':
        return []
    if isinstance(value, (list, tuple)):
        if len(value) == 1 and isinstance(value[0], str):
            return parse_array_field(value[0])
        return [str(v).strip() for v in value if str(v).strip()]

    try:
        parsed = json.loads(value)
        if isinstance(parsed, list):
            return [str(v).strip() for v in parsed if str(v).strip()]
    except (TypeError, ValueError):
        pass

    return [part.strip() for part in str(value).split(',') if part.strip()]


def to_decimal(value: Any, field: str) -> Decimal:
    """Parse a money or rating value, raising ValidationException on garbage."""
    try:
        result = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationException(f"Invalid number for {field}", field=field)
    # NaN and Infinity parse but cannot be compared or stored
    if not result.is_finite():
        raise ValidationException(f"Invalid number for {field}", field=field)
    return result


def quantize_money(amount: Decimal) -> Decimal:
    return amount.quantize(TWO_PLACES)


def parse_bound(value: Optional[str], field: str, kind: str = 'number'):
    """
    Parse an optional query-string bound. Returns None when absent.
    """
    if value is None or value == '':
        return None
    if kind == 'number':
        return to_decimal(value, field)

    # A bare date bounds the whole day
    try:
        parsed = parse_date(value) or parse_datetime(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationException(f"Invalid date for {field}", field=field)
    return parsed


def iso_date(value: Optional[datetime]) -> str:
    """Render a timestamp as YYYY-MM-DD, or an empty string."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
