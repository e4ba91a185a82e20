"""
Bucket record helpers.

A bucket record is a dict holding exactly the 27 fields of
``bucket_map.BUCKET_FIELDS``. ``None`` means "not applicable" and is
treated as zero when summed.

Sums are exact: values are converted to Decimal through ``str`` so that
0.1 + 0.2 is 0.3, and the order in which pages or flights are added never
changes the rounded result.
"""

from decimal import Decimal, ROUND_HALF_UP

from .bucket_map import (
    BUCKET_FIELDS, BUCKET_FIELD_SET, SE_FIELDS, ME_FIELDS, COUNT_FIELDS,
)
from .errors import UnknownBucketFieldError

ZERO = Decimal('0')
TENTH = Decimal('0.1')
ONE = Decimal('1')


def to_decimal(value):
    """Convert a bucket value to Decimal, treating None as zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def decimal_sum(values):
    """Exact sum of nullable numbers, accumulated in input order."""
    total = ZERO
    for value in values:
        total += to_decimal(value)
    return total


def round1(value):
    """Round to one decimal place, half away from zero.

    Args:
        value: int, float, Decimal or None.

    Returns:
        Float with one decimal (0.0 for None).
    """
    return float(to_decimal(value).quantize(TENTH, rounding=ROUND_HALF_UP))


def emit(field, value):
    """Final form of a summed column: int for counts, round1 for hours."""
    if field in COUNT_FIELDS:
        return int(to_decimal(value))
    return round1(value)


def store(field, value):
    """Stored form of a single bucket value.

    Hours are kept at one decimal and counts as whole numbers (half up).
    None stays None.
    """
    if value is None:
        return None
    if field in COUNT_FIELDS:
        return int(to_decimal(value).quantize(ONE, rounding=ROUND_HALF_UP))
    return round1(value)


def empty_buckets():
    """Return a bucket record with every field set to None."""
    return dict.fromkeys(BUCKET_FIELDS)


def make_buckets(**values):
    """Build a bucket record from keyword values.

    Raises:
        UnknownBucketFieldError: If a key is not a bucket field.
    """
    buckets = empty_buckets()
    for field, value in values.items():
        check_field(field)
        buckets[field] = value
    return buckets


def check_field(field):
    if field not in BUCKET_FIELD_SET:
        raise UnknownBucketFieldError(field)


def extract_buckets(flight):
    """Copy the bucket fields out of a flight dict (missing keys -> None)."""
    return {field: flight.get(field) for field in BUCKET_FIELDS}


def se_time(flight):
    """Exact single-engine time of a flight or bucket record."""
    return decimal_sum(flight.get(f) for f in SE_FIELDS)


def me_time(flight):
    """Exact multi-engine time of a flight or bucket record."""
    return decimal_sum(flight.get(f) for f in ME_FIELDS)


def aircraft_time(flight):
    """Exact SE + ME time. Simulator time is never part of it."""
    return se_time(flight) + me_time(flight)
