"""
Logbook owner and quick-entry defaults.

The owner of an imported logbook is not written anywhere in the sheet, so
it is inferred from who accumulates hours:
    - instructor time, x3, to the PIC name
    - PIC time (SE, ME and XC PIC columns), x1, to the PIC name
    - dual received, x2, to the co-pilot/student name
"""

import logging
from datetime import date

from .aggregation import as_date
from .buckets import ZERO, decimal_sum, to_decimal
from .config import resolve
from .derivation import INSTRUCTOR, PIC, SIMULATOR_ROLE, STUDENT

logger = logging.getLogger(__name__)

DEFAULT_OWNER = 'Pilot'

OWNER_PIC_FIELDS = (
    'se_day_pic', 'se_night_pic', 'me_day_pic', 'me_night_pic',
    'xc_day_pic', 'xc_night_pic',
)

INSTRUCTOR_WEIGHT = 3
PIC_WEIGHT = 1
DUAL_WEIGHT = 2


def format_name_title_case(name):
    """'JOHN DOE' -> 'John Doe'."""
    return ' '.join(word[:1].upper() + word[1:].lower() for word in name.split(' '))


def _key(name):
    return (name or '').upper().strip()


def determine_logbook_owner(flights):
    """Name of the pilot who owns a logbook, by weighted hours.

    Args:
        flights: Iterable of flight dicts.

    Returns:
        Owner name in title case, or 'Pilot' when nobody scores.
    """
    scores = {}

    for flight in flights:
        pic_name = _key(flight.get('pilot_in_command'))
        student_name = _key(flight.get('copilot_or_student'))

        instructor = to_decimal(flight.get('as_flight_instructor'))
        if instructor > ZERO and pic_name:
            scores[pic_name] = scores.get(pic_name, ZERO) + instructor * INSTRUCTOR_WEIGHT

        pic_hours = decimal_sum(flight.get(f) for f in OWNER_PIC_FIELDS)
        if pic_hours > ZERO and pic_name:
            scores[pic_name] = scores.get(pic_name, ZERO) + pic_hours * PIC_WEIGHT

        dual = to_decimal(flight.get('dual_received'))
        if dual > ZERO and student_name:
            scores[student_name] = scores.get(student_name, ZERO) + dual * DUAL_WEIGHT

    owner = DEFAULT_OWNER
    best = ZERO
    # First name to reach the top score wins ties
    for name, score in scores.items():
        if score > best:
            best = score
            owner = name

    logger.debug("Logbook owner scores: %s", scores)
    return format_name_title_case(owner)


def infer_role_from_flight(flight):
    """Quick-entry role that most likely produced a flight's buckets."""
    if to_decimal(flight.get('simulator')) > ZERO:
        return SIMULATOR_ROLE
    if to_decimal(flight.get('as_flight_instructor')) > ZERO:
        return INSTRUCTOR
    if to_decimal(flight.get('dual_received')) > ZERO:
        return STUDENT
    return PIC


def _last_flight(flights):
    last = None
    last_date = None
    for flight in flights:
        flight_date = as_date(flight.get('flight_date'))
        if last is None or (flight_date is not None and (last_date is None or flight_date >= last_date)):
            last, last_date = flight, flight_date
    return last


def smart_defaults(flights, settings=None):
    """Pre-fill values for the quick-entry form.

    Args:
        flights: The pilot's existing flights.
        settings: Config holding the pilot profile (name, home base,
            default instructor).

    Returns:
        Dict with aircraft, registration, route_prefix, role, pilot_name,
        home_base, default_instructor, has_profile, aircraft_options,
        registrations_by_aircraft and flight_count.
    """
    settings = resolve(settings)
    flights = list(flights)
    last = _last_flight(flights)

    if last and last.get('arrival_airport'):
        route_prefix = f"{last['arrival_airport']}-"
    elif settings.home_base:
        route_prefix = f"{settings.home_base}-"
    else:
        route_prefix = None

    # Most recently flown first
    ordered = sorted(
        (f for f in flights if f.get('aircraft_make_model')),
        key=lambda f: as_date(f.get('flight_date')) or date.min,
        reverse=True,
    )
    aircraft_options = []
    registrations = {}
    for flight in ordered:
        make_model = flight['aircraft_make_model']
        if make_model not in aircraft_options:
            aircraft_options.append(make_model)
        regs = registrations.setdefault(make_model, [])
        if flight.get('registration') and flight['registration'] not in regs:
            regs.append(flight['registration'])

    return {
        'aircraft': last.get('aircraft_make_model') if last else None,
        'registration': last.get('registration') if last else None,
        'route_prefix': route_prefix,
        'role': infer_role_from_flight(last) if last else None,
        'pilot_name': settings.pilot_name or None,
        'home_base': settings.home_base or None,
        'default_instructor': settings.default_instructor or None,
        'has_profile': bool(settings.pilot_name and settings.home_base),
        'aircraft_options': aircraft_options,
        'registrations_by_aircraft': registrations,
        'flight_count': len(flights),
    }
