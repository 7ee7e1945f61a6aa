"""Decimal helpers applied at the data-access boundary.

Monetary columns may come back from the ORM as ``Decimal``, from raw rows or
JSON payloads as ``float``/``str``, or wrapped in numeric objects.  Every
aggregation path goes through :func:`to_decimal` instead of inline checks.
"""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_decimal(value, default="0"):
    """Coerce *value* into a ``Decimal``; unparseable input yields *default*."""
    if value is None:
        return Decimal(default)
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(str(value).strip())
    except (TypeError, ValueError, InvalidOperation):
        pass
    try:
        return Decimal(str(float(value)))
    except (TypeError, ValueError, InvalidOperation):
        return Decimal(default)


def quantize_money(value, places=2):
    """Round half-up to *places* decimal places."""
    exponent = Decimal(1).scaleb(-places) if places else Decimal("1")
    return to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def money_str(value, places=2):
    return str(quantize_money(value, places))
