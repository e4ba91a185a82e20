"""
Flight validation rules.

Checks a parsed flight against TCCA logbook consistency rules:
1. flight_hours matches the SE + ME bucket sum (warning, aircraft flights)
2. XC time never exceeds its base PIC / Dual / Copilot time (error)
3. Instrument time (IMC + hood) never exceeds flight_hours (error,
   simulator sessions exempt)
4. Flight date is not in the future (warning)
5. Aircraft make/model and registration are present (error each)
6. flight_hours is positive on aircraft flights (error)
7. No bucket holds a negative value (error, one per field)
8. Instructor time and dual received on the same flight (warning)

Issues are returned, never raised. Only a structurally broken flight
record (missing a required key) raises MalformedFlightError.
"""

import logging
from datetime import date

from .bucket_map import BUCKET_FIELDS, seat_fields
from .aggregation import as_date, is_simulator_only
from .buckets import ZERO, aircraft_time, decimal_sum, round1, to_decimal
from .config import resolve
from .errors import MalformedFlightError

logger = logging.getLogger(__name__)

ERROR = 'error'
WARNING = 'warning'

REQUIRED_KEYS = ('flight_date', 'aircraft_make_model', 'registration', 'flight_hours')


def _issue(flight, field, severity, message, actual_value, expected_value=None):
    return {
        'row_number': flight.get('row_number'),
        'field': field,
        'severity': severity,
        'message': message,
        'actual_value': actual_value,
        'expected_value': expected_value,
    }


def _check_shape(flight):
    for key in REQUIRED_KEYS:
        if key not in flight:
            raise MalformedFlightError(key, flight.get('row_number'))


def validate_flight(flight, today=None, config=None):
    """Validate one flight against every rule.

    Args:
        flight: Flight dict.
        today: Reference date for the future-date rule (default: today).
        config: Optional Config.

    Returns:
        List of issue dicts (empty when the flight is clean).

    Raises:
        MalformedFlightError: If a required key is missing.
    """
    _check_shape(flight)
    config = resolve(config)
    today = as_date(today) or date.today()
    issues = []

    flight_hours = to_decimal(flight['flight_hours'])
    sim_only = is_simulator_only(flight)

    # Rule 1: flight hours vs bucket sum
    bucket_hours = aircraft_time(flight)
    if not sim_only:
        if abs(flight_hours - bucket_hours) > to_decimal(config.hours_mismatch_tolerance):
            issues.append(_issue(
                flight, 'flight_hours', WARNING,
                f"Flight time ({flight['flight_hours']}) doesn't match sum of "
                f"time categories ({round1(bucket_hours)})",
                flight['flight_hours'], round1(bucket_hours),
            ))

    # Rule 2: XC is a subset of its base time, seat by seat
    for seat in ('pic', 'dual', 'copilot'):
        base = decimal_sum(flight.get(f) for f in seat_fields(seat))
        xc_fields = seat_fields(seat, families=('xc',))
        xc = decimal_sum(flight.get(f) for f in xc_fields)
        if xc > base:
            issues.append(_issue(
                flight, xc_fields[0], ERROR,
                f"Cross-country {seat.upper() if seat == 'pic' else seat} time "
                f"({round1(xc)}) exceeds total {seat} time ({round1(base)})",
                round1(xc), round1(base),
            ))

    # Rule 3: instrument time within flight time
    if not sim_only:
        instrument = decimal_sum([flight.get('actual_imc'), flight.get('hood')])
        if instrument > flight_hours:
            issues.append(_issue(
                flight, 'actual_imc', ERROR,
                f"Instrument time ({round1(instrument)}) exceeds flight time "
                f"({flight['flight_hours']})",
                round1(instrument), flight['flight_hours'],
            ))

    # Rule 4: future date
    flight_date = as_date(flight['flight_date'])
    if flight_date is not None and flight_date > today:
        issues.append(_issue(
            flight, 'flight_date', WARNING,
            'Flight dated in the future',
            flight_date.isoformat(),
        ))

    # Rule 5: required identity fields
    if not flight['aircraft_make_model']:
        issues.append(_issue(
            flight, 'aircraft_make_model', ERROR,
            'Aircraft make/model is required',
            flight['aircraft_make_model'],
        ))
    if not flight['registration']:
        issues.append(_issue(
            flight, 'registration', ERROR,
            'Registration is required',
            flight['registration'],
        ))

    # Rule 6: positive flight hours on aircraft flights
    if not sim_only and flight_hours <= ZERO:
        issues.append(_issue(
            flight, 'flight_hours', ERROR,
            'Flight hours must be greater than zero',
            flight['flight_hours'],
        ))

    # Rule 7: no negative buckets
    for field in BUCKET_FIELDS:
        value = flight.get(field)
        if value is not None and to_decimal(value) < ZERO:
            issues.append(_issue(
                flight, field, ERROR,
                f"{field} cannot be negative",
                value,
            ))

    # Rule 8: instructing and receiving dual on one flight
    instructor = to_decimal(flight.get('as_flight_instructor'))
    dual = to_decimal(flight.get('dual_received'))
    if instructor > ZERO and dual > ZERO:
        issues.append(_issue(
            flight, 'as_flight_instructor', WARNING,
            'Both instructor and dual received time logged - verify this is intentional',
            {'instructor': flight.get('as_flight_instructor'),
             'dual': flight.get('dual_received')},
        ))

    return issues


validate = validate_flight


def validate_flights(flights, today=None, config=None):
    """Validate a batch of flights.

    Warnings never block a batch; only errors do.

    Args:
        flights: Iterable of flight dicts.
        today: Reference date for the future-date rule.
        config: Optional Config.

    Returns:
        Dict with is_valid, total_flights, success_count, warning_count,
        error_count and the full issue list.
    """
    all_issues = []
    error_count = 0
    warning_count = 0
    success_count = 0
    total = 0

    for flight in flights:
        total += 1
        issues = validate_flight(flight, today=today, config=config)
        all_issues.extend(issues)

        errors = sum(1 for i in issues if i['severity'] == ERROR)
        error_count += errors
        warning_count += len(issues) - errors
        if errors == 0:
            success_count += 1

    logger.info(
        "Validated %d flights: %d clean, %d errors, %d warnings",
        total, success_count, error_count, warning_count,
    )

    return {
        'is_valid': error_count == 0,
        'total_flights': total,
        'success_count': success_count,
        'warning_count': warning_count,
        'error_count': error_count,
        'issues': all_issues,
    }


validate_batch = validate_flights


def issues_for_row(validation, row_number):
    """All issues of a batch result that belong to one spreadsheet row."""
    return [i for i in validation['issues'] if i['row_number'] == row_number]


def row_has_errors(validation, row_number):
    return any(i['row_number'] == row_number and i['severity'] == ERROR
               for i in validation['issues'])


def row_has_warnings(validation, row_number):
    return any(i['row_number'] == row_number and i['severity'] == WARNING
               for i in validation['issues'])
