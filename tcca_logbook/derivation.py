"""
Quick-entry bucket derivation.

Turns the handful of fields a pilot types after a flight (role, aircraft,
flight time, tags) into the full set of TCCA time buckets.

Allocation rules:
1. Role picks the seat: Student -> dual, PIC -> pic, Instructor -> pic
   (plus as_flight_instructor). Simulator role ignores the seat.
2. Engine class picks the family: SE -> se_*, ME -> me_*, SIM -> the
   simulator bucket only, with zero aircraft time.
3. Night tag routes the time to the night slot instead of day.
4. XC tag copies the slot value into the matching xc_* slot. XC is a
   qualifier: it never adds to flight hours.
5. IFR tag counts the whole flight as actual IMC. Partial IMC is entered
   through overrides.
6. Circuits tag raises the default takeoff/landing count to 4.
7. Checkride is informational only.
8. Overrides replace derived values, stored at one decimal (counts as
   whole numbers). A total that no longer matches the entered flight time
   is a warning, never an error.

Usage:
    buckets, warnings = derive('PIC', 'SE', 1.5, tags=['Night'])
"""

import logging

from .aircraft_rules import (
    ENGINE_TYPES, SINGLE_ENGINE, MULTI_ENGINE, SIMULATOR,
    engine_type_lookup, parse_route,
)
from .bucket_map import PERIODS, XC_FIELDS, slot_field, seat_fields, xc_base_fields
from .buckets import (
    aircraft_time, check_field, decimal_sum, empty_buckets, round1, store, to_decimal,
)
from .config import resolve
from .errors import InvalidEntryError

logger = logging.getLogger(__name__)

# ============ Roles and tags ============

STUDENT = 'Student'
PIC = 'PIC'
INSTRUCTOR = 'Instructor'
SIMULATOR_ROLE = 'Simulator'

ROLES = (STUDENT, PIC, INSTRUCTOR, SIMULATOR_ROLE)

XC = 'XC'
NIGHT = 'Night'
IFR = 'IFR'
CIRCUITS = 'Circuits'
CHECKRIDE = 'Checkride'

TAGS = (XC, NIGHT, IFR, CIRCUITS, CHECKRIDE)

SIMULATOR_SLOT = 'simulator'

ROLE_SEAT = {
    STUDENT: 'dual',
    PIC: 'pic',
    INSTRUCTOR: 'pic',
    SIMULATOR_ROLE: None,
}

ENGINE_FAMILY = {
    SINGLE_ENGINE: 'se',
    MULTI_ENGINE: 'me',
    SIMULATOR: None,
}


def _build_slot_table():
    """One entry per (role, engine class, night) combination."""
    table = {}
    for role in ROLES:
        seat = ROLE_SEAT[role]
        for engine in ENGINE_TYPES:
            family = ENGINE_FAMILY[engine]
            for night in (False, True):
                if seat is None or family is None:
                    table[(role, engine, night)] = SIMULATOR_SLOT
                else:
                    period = PERIODS[1] if night else PERIODS[0]
                    table[(role, engine, night)] = slot_field(family, period, seat)
    return table


SLOT_TABLE = _build_slot_table()

XC_WARNING = 'XC time duplicated as qualifier (not additive to total)'
IFR_WARNING = 'IFR tag allocated full time to Actual IMC. Use overrides for partial IMC.'
OVERRIDE_WARNING = 'Manual overrides applied - calculation may not follow standard rules'


def _check_entry(role, engine_type, flight_time, tags):
    if role not in ROLES:
        raise InvalidEntryError(f"Unknown flight role: {role!r}", field='role')
    if engine_type not in ENGINE_TYPES:
        raise InvalidEntryError(f"Unknown engine type: {engine_type!r}", field='engine_type')
    if flight_time is None or round1(flight_time) <= 0:
        raise InvalidEntryError(
            f"Flight time must be at least 0.05 hours, got {flight_time!r}",
            field='flight_time',
        )
    for tag in tags:
        if tag not in TAGS:
            raise InvalidEntryError(f"Unknown flight tag: {tag!r}", field='tags')


def derive(role, engine_type, flight_time, tags=(), overrides=None, config=None):
    """Allocate a flight's time into TCCA buckets.

    Args:
        role: 'Student', 'PIC', 'Instructor' or 'Simulator'.
        engine_type: 'SE', 'ME' or 'SIM'.
        flight_time: Decimal hours; must round to at least 0.1.
        tags: Iterable of 'XC', 'Night', 'IFR', 'Circuits', 'Checkride'.
        overrides: Optional dict of bucket field -> value, applied last.
        config: Optional Config.

    Returns:
        Tuple of (buckets dict, list of warning strings).

    Raises:
        InvalidEntryError: If role, engine type, tags or time are invalid.
        UnknownBucketFieldError: If an override names an unknown field.
    """
    config = resolve(config)
    tags = tuple(tags or ())
    _check_entry(role, engine_type, flight_time, tags)

    hours = round1(flight_time)
    night = NIGHT in tags
    buckets = empty_buckets()
    warnings = []

    slot = SLOT_TABLE[(role, engine_type, night)]
    buckets[slot] = hours
    on_aircraft = slot != SIMULATOR_SLOT

    xc_slot = None
    if on_aircraft:
        if role == STUDENT:
            buckets['dual_received'] = hours
        elif role == INSTRUCTOR:
            # Same hours land in both the PIC slot and the instructor bucket
            buckets['as_flight_instructor'] = hours

        if XC in tags:
            _, period, seat = slot.split('_')
            xc_slot = slot_field('xc', period, seat)
            buckets[xc_slot] = buckets[slot]
            warnings.append(XC_WARNING)

        if IFR in tags:
            buckets['actual_imc'] = hours
            warnings.append(IFR_WARNING)

        landings = config.circuit_landings if CIRCUITS in tags else config.default_landings
        if night:
            buckets['night_takeoffs_landings'] = landings
        else:
            buckets['day_takeoffs_landings'] = landings

    if overrides:
        _apply_overrides(buckets, overrides, slot, xc_slot, warnings)
        _check_override_total(buckets, hours, on_aircraft, config, warnings)

    logger.debug("Derived %s/%s %.1fh tags=%s -> %s", role, engine_type, hours, tags, slot)
    return buckets, warnings


def _apply_overrides(buckets, overrides, slot, xc_slot, warnings):
    derived = dict(buckets)
    for field, value in overrides.items():
        check_field(field)
        buckets[field] = store(field, value)

    # A tagged XC slot follows its base slot unless overridden itself
    if xc_slot and xc_slot not in overrides:
        buckets[xc_slot] = buckets[slot]

    for xc_field in XC_FIELDS:
        if xc_field not in overrides:
            continue
        base = decimal_sum(buckets[f] for f in xc_base_fields(xc_field))
        if to_decimal(buckets[xc_field]) > base:
            warnings.append(
                f"Override rejected: {xc_field} ({buckets[xc_field]}) exceeds "
                f"its base time ({float(base)})"
            )
            buckets[xc_field] = buckets[slot] if xc_field == xc_slot else derived[xc_field]

    warnings.append(OVERRIDE_WARNING)


def _check_override_total(buckets, hours, on_aircraft, config, warnings):
    if on_aircraft:
        total = aircraft_time(buckets)
        label = 'Bucket total'
    else:
        total = to_decimal(buckets[SIMULATOR_SLOT])
        label = 'Simulator time'

    if abs(total - to_decimal(hours)) > to_decimal(config.override_tolerance):
        warnings.append(
            f"{label} ({float(total)}) does not match flight time ({hours})"
        )


def flight_hours_from_buckets(buckets):
    """Total aircraft hours of a bucket record: round1(SE + ME).

    Simulator, XC, instrument and instructor buckets are never added.
    """
    return round1(aircraft_time(buckets))


def calculate(entry, lookup=None, config=None):
    """Live preview for a quick-entry form.

    Args:
        entry: Dict with 'role', 'flight_time', 'aircraft_make_model' and
            optional 'tags' and 'overrides'.
        lookup: Callable make/model -> engine class. Defaults to the
            configured pattern lookup.
        config: Optional Config.

    Returns:
        Dict with engine_type, buckets, flight_hours and warnings.
    """
    for key in ('role', 'flight_time', 'aircraft_make_model'):
        if key not in entry:
            raise InvalidEntryError(f"Quick entry is missing '{key}'", field=key)

    lookup = lookup or engine_type_lookup(config)
    engine_type = lookup(entry['aircraft_make_model'])
    buckets, warnings = derive(
        entry['role'], engine_type, entry['flight_time'],
        tags=entry.get('tags') or (),
        overrides=entry.get('overrides'),
        config=config,
    )
    return {
        'engine_type': engine_type,
        'buckets': buckets,
        'flight_hours': flight_hours_from_buckets(buckets),
        'warnings': warnings,
    }


def build_flight(entry, pilot_name=None, default_instructor=None, lookup=None, config=None):
    """Build a complete logbook row from a quick entry.

    PIC and Instructor flights name the pilot as PIC. Student flights name
    the instructor as PIC and the pilot as co-pilot/student.

    Args:
        entry: Quick-entry dict (see calculate()) plus 'flight_date',
            'registration', optional 'route' and 'remarks'.
        pilot_name: Logbook owner's name; falls back to config.
        default_instructor: Instructor name for Student flights; falls back
            to config.
        lookup: Optional engine class lookup.
        config: Optional Config.

    Returns:
        Flight dict with identity fields, all buckets and flight_hours.
    """
    cfg = resolve(config)
    for key in ('flight_date', 'registration'):
        if key not in entry:
            raise InvalidEntryError(f"Quick entry is missing '{key}'", field=key)

    result = calculate(entry, lookup=lookup, config=config)
    departure, arrival = parse_route(entry.get('route'))

    pilot_name = pilot_name or cfg.pilot_name or None
    default_instructor = default_instructor or cfg.default_instructor or None

    pic = None
    copilot = None
    if entry['role'] in (PIC, INSTRUCTOR):
        pic = pilot_name
    elif entry['role'] == STUDENT:
        pic = default_instructor
        copilot = pilot_name

    flight = {
        'row_number': entry.get('row_number'),
        'flight_date': entry['flight_date'],
        'aircraft_make_model': entry['aircraft_make_model'],
        'registration': entry['registration'],
        'pilot_in_command': pic,
        'copilot_or_student': copilot,
        'departure_airport': departure,
        'arrival_airport': arrival,
        'remarks': entry.get('remarks') or None,
    }
    flight.update(result['buckets'])
    flight['flight_hours'] = result['flight_hours']
    return flight


def bucket_sum_check(buckets, expected_flight_time):
    """Compare a bucket record's aircraft total with the entered time.

    Returns:
        Dict with is_valid, calculated_total and difference.
    """
    calculated = flight_hours_from_buckets(buckets)
    difference = abs(to_decimal(calculated) - to_decimal(expected_flight_time))
    return {
        'is_valid': difference < to_decimal('0.01'),
        'calculated_total': calculated,
        'difference': float(difference),
    }


def xc_subset_check(buckets):
    """Check that total XC time does not exceed PIC + Dual + Copilot time.

    Returns:
        Dict with is_valid and, when invalid, a message.
    """
    base = decimal_sum(buckets.get(f) for seat in ('pic', 'dual', 'copilot')
                       for f in seat_fields(seat))
    total_xc = decimal_sum(buckets.get(f) for f in XC_FIELDS)
    if total_xc > base:
        return {
            'is_valid': False,
            'message': f"Cross-country time ({float(total_xc)}) exceeds total "
                       f"PIC+Dual+Copilot time ({float(base)})",
        }
    return {'is_valid': True, 'message': None}
