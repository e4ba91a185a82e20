"""
Totals verification.

Compares an independently computed set of expected totals (e.g. summed
straight from spreadsheet rows) with the totals the engine reports.

Status per field:
    PASS - exact match
    WARN - differs by no more than the tolerance (rounding noise)
    FAIL - anything else; count fields allow no difference at all
"""

from .bucket_map import COUNT_FIELDS
from .buckets import round1, to_decimal

PASS = 'PASS'
WARN = 'WARN'
FAIL = 'FAIL'

COUNT_KEYS = set(COUNT_FIELDS) | {'total_flights', 'aircraft_flights', 'simulator_flights'}


def compare_totals(expected, actual, tolerance=0.1):
    """Compare expected and actual totals field by field.

    Only fields present in ``expected`` are compared; a field missing from
    ``actual`` fails.

    Args:
        expected: Dict of field -> expected number.
        actual: Dict of field -> reported number.
        tolerance: Allowed difference for hour fields.

    Returns:
        List of dicts with field, expected, actual, difference and status.
    """
    results = []
    for field, expected_value in expected.items():
        actual_value = actual.get(field)
        if actual_value is None:
            results.append({
                'field': field,
                'expected': expected_value,
                'actual': None,
                'difference': None,
                'status': FAIL,
            })
            continue

        difference = abs(to_decimal(expected_value) - to_decimal(actual_value))
        allowed = 0 if field in COUNT_KEYS else to_decimal(tolerance)

        if difference == 0:
            status = PASS
        elif difference <= allowed:
            status = WARN
        else:
            status = FAIL

        results.append({
            'field': field,
            'expected': expected_value,
            'actual': actual_value,
            'difference': round1(difference),
            'status': status,
        })
    return results


def verification_passed(results):
    """True when no field failed (warnings allowed)."""
    return all(r['status'] != FAIL for r in results)


def print_verification_report(results, title="TOTALS VERIFICATION"):
    """Print a verification table to stdout.

    Returns:
        True if no field failed.
    """
    print("=" * 70)
    print(title)
    print("=" * 70)
    print(f"\n{'Field':<26} {'Expected':>10} {'Actual':>10} {'Diff':>8}  Status")
    print("-" * 70)

    for r in results:
        actual = '-' if r['actual'] is None else r['actual']
        diff = '-' if r['difference'] is None else r['difference']
        print(f"{r['field']:<26} {r['expected']!s:>10} {actual!s:>10} {diff!s:>8}  {r['status']}")

    counts = {status: sum(1 for r in results if r['status'] == status)
              for status in (PASS, WARN, FAIL)}

    print("\n" + "=" * 70)
    print(f"  {PASS}: {counts[PASS]}   {WARN}: {counts[WARN]}   {FAIL}: {counts[FAIL]}")
    print("=" * 70)

    return counts[FAIL] == 0
