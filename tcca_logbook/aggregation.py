"""
Flight totals aggregation.

Single source of truth for dashboard and summary numbers. Every total is
recomputed from the flight list on demand; nothing here is stored.

Definitions:
1. Total hours = single-engine + multi-engine time only. Simulator time is
   always tracked separately.
2. Total flights = every logbook entry, simulator sessions included.
3. Aircraft flights = entries with aircraft time; simulator flights =
   entries with only simulator time.
4. Cross-country time is a qualifier (subset of PIC/Dual/Copilot time) and
   is reported on its own, never added to total hours.
5. Instrument time = actual IMC + hood; simulator is not instrument time.

All accumulation is exact (Decimal, input order) and each emitted number
is rounded once, at the end.
"""

from datetime import date, datetime

from .bucket_map import (
    BUCKET_FIELDS, SE_FIELDS, ME_FIELDS, XC_FIELDS,
    period_fields, seat_fields,
)
from .buckets import ZERO, aircraft_time, decimal_sum, emit, round1, to_decimal


# ============ Single flight ============

def calculate_total_hours(flight):
    """Aircraft hours of one flight (SE + ME, no simulator)."""
    return round1(aircraft_time(flight))


def calculate_pic_time(flight):
    return round1(decimal_sum(flight.get(f) for f in seat_fields('pic')))


def calculate_dual_time(flight):
    return round1(decimal_sum(flight.get(f) for f in seat_fields('dual')))


def calculate_copilot_time(flight):
    return round1(decimal_sum(flight.get(f) for f in seat_fields('copilot')))


def calculate_night_time(flight):
    return round1(decimal_sum(flight.get(f) for f in period_fields('night')))


def calculate_xc_time(flight):
    return round1(decimal_sum(flight.get(f) for f in XC_FIELDS))


def calculate_instrument_time(flight):
    """Actual IMC + hood time. Simulator time is not included."""
    return round1(decimal_sum([flight.get('actual_imc'), flight.get('hood')]))


def is_simulator_only(flight):
    """True for a session with no aircraft time and positive simulator time."""
    return aircraft_time(flight) == ZERO and to_decimal(flight.get('simulator')) > ZERO


# ============ Accumulation ============

def _accumulate(flights):
    """Exact per-bucket sums over a flight list, in input order."""
    sums = dict.fromkeys(BUCKET_FIELDS, ZERO)
    for flight in flights:
        for field in BUCKET_FIELDS:
            sums[field] += to_decimal(flight.get(field))
    return sums


def _rollups(sums):
    """Derived subtotals from exact bucket sums (still exact)."""
    def group(fields):
        return sum((sums[f] for f in fields), ZERO)

    se_day = group(period_fields('day', ('se',)))
    se_night = group(period_fields('night', ('se',)))
    me_day = group(period_fields('day', ('me',)))
    me_night = group(period_fields('night', ('me',)))
    xc_day = group(period_fields('day', ('xc',)))
    xc_night = group(period_fields('night', ('xc',)))

    return {
        'total_hours': se_day + se_night + me_day + me_night,
        'total_pic': group(seat_fields('pic')),
        'total_dual': group(seat_fields('dual')),
        'total_copilot': group(seat_fields('copilot')),
        'total_night': se_night + me_night,
        'total_xc': xc_day + xc_night,
        'total_instrument': sums['actual_imc'] + sums['hood'],
        'total_simulator': sums['simulator'],
        'se_day_total': se_day,
        'se_night_total': se_night,
        'se_total': se_day + se_night,
        'me_day_total': me_day,
        'me_night_total': me_night,
        'me_total': me_day + me_night,
        'xc_day_total': xc_day,
        'xc_night_total': xc_night,
    }


def _emit_sums(sums):
    return {field: emit(field, value) for field, value in sums.items()}


def aggregate_flight_totals(flights):
    """Grand totals across all flights.

    Args:
        flights: Iterable of flight dicts.

    Returns:
        Dict of counts, primary totals, subtotals and every bucket total.
    """
    flights = list(flights)
    simulator_flights = sum(1 for f in flights if is_simulator_only(f))

    sums = _accumulate(flights)
    totals = {
        'total_flights': len(flights),
        'aircraft_flights': len(flights) - simulator_flights,
        'simulator_flights': simulator_flights,
    }
    totals.update({key: round1(value) for key, value in _rollups(sums).items()})
    totals.update(_emit_sums(sums))
    # simulator is reported as total_simulator
    del totals['simulator']
    return totals


aggregate = aggregate_flight_totals


# ============ Per aircraft ============

def as_date(value):
    """Coerce a datetime, date or ISO string to a date (anything else -> None)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    return None


def aggregate_by_aircraft(flights, today=None):
    """Per-aircraft-type summaries for the dashboard.

    Groups by the make/model string exactly as entered. Aircraft come
    first by total hours (descending), simulators last by simulator hours
    (descending); ties keep first-seen order.

    Each summary also carries ``bucket_sums``, the unrounded Decimal sums its
    emitted bucket values were rounded from.

    Args:
        flights: Iterable of flight dicts.
        today: Reference date for days_since_last_flight (default: today).

    Returns:
        List of summary dicts.
    """
    today = as_date(today) or date.today()

    groups = {}
    for flight in flights:
        groups.setdefault(flight.get('aircraft_make_model'), []).append(flight)

    summaries = []
    for aircraft_type, group in groups.items():
        dates = [d for d in (as_date(f.get('flight_date')) for f in group) if d]
        last_flight_date = max(dates) if dates else None

        sums = _accumulate(group)
        total_hours = round1(sum((sums[f] for f in SE_FIELDS + ME_FIELDS), ZERO))
        simulator = round1(sums['simulator'])

        summary = {
            'aircraft_type': aircraft_type,
            'total_hours': total_hours,
            'num_flights': len(group),
            'last_flight_date': last_flight_date,
            'days_since_last_flight': (today - last_flight_date).days if last_flight_date else None,
            'is_simulator': total_hours == 0 and simulator > 0,
            'bucket_sums': sums,
        }
        summary.update(_emit_sums(sums))
        summaries.append(summary)

    # sorted() is stable, so equal keys keep grouping order
    return sorted(summaries, key=lambda s: (
        s['is_simulator'],
        -s['simulator'] if s['is_simulator'] else -s['total_hours'],
    ))


def grand_total_from_summaries(summaries):
    """TOTALS row for the per-aircraft dashboard table.

    Adds the exact ``bucket_sums`` of each summary and rounds once, so the
    row matches aggregate_flight_totals() over the same flights.
    """
    sums = dict.fromkeys(BUCKET_FIELDS, ZERO)
    num_flights = 0
    for s in summaries:
        num_flights += s['num_flights']
        for field in BUCKET_FIELDS:
            sums[field] += s['bucket_sums'][field]

    grand = {
        'aircraft_type': 'TOTALS',
        'total_hours': round1(sum((sums[f] for f in SE_FIELDS + ME_FIELDS), ZERO)),
        'num_flights': num_flights,
        'last_flight_date': None,
        'days_since_last_flight': None,
        'is_simulator': False,
        'bucket_sums': sums,
    }
    grand.update(_emit_sums(sums))
    return grand


# ============ Date range ============

def earliest_flight_date(flights):
    dates = [d for d in (as_date(f.get('flight_date')) for f in flights) if d]
    return min(dates) if dates else None


def latest_flight_date(flights):
    dates = [d for d in (as_date(f.get('flight_date')) for f in flights) if d]
    return max(dates) if dates else None
