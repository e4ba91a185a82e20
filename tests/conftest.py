# tests/conftest.py
"""
Pytest Configuration and Fixtures

Shared fixtures for logbook engine tests.
"""

from datetime import date, timedelta

import pytest

from tcca_logbook.buckets import empty_buckets
from tcca_logbook.config import Config
from tcca_logbook.derivation import flight_hours_from_buckets


def build_flight(row_number=None, flight_date=date(2024, 3, 1), aircraft='C172',
                 registration='C-GABC', pic='Jane Doe', copilot=None, **buckets):
    """Flight dict with identity fields, all buckets and computed flight_hours."""
    flight = {
        'row_number': row_number,
        'flight_date': flight_date,
        'aircraft_make_model': aircraft,
        'registration': registration,
        'pilot_in_command': pic,
        'copilot_or_student': copilot,
        'departure_airport': 'CYKZ',
        'arrival_airport': 'CYKZ',
        'remarks': None,
    }
    flight.update(empty_buckets())
    flight.update(buckets)
    flight['flight_hours'] = flight_hours_from_buckets(flight)
    return flight


# =============================================================================
# Config Fixtures
# =============================================================================

@pytest.fixture
def config():
    """Default engine configuration with a pilot profile."""
    cfg = Config()
    cfg.override(pilot_name='Jane Doe', home_base='CYKZ', default_instructor='John Smith')
    return cfg


@pytest.fixture
def today():
    """Fixed reference date."""
    return date(2024, 6, 1)


# =============================================================================
# Flight Fixtures
# =============================================================================

@pytest.fixture
def make_flight():
    """Factory for flight dicts."""
    return build_flight


@pytest.fixture
def pic_flight():
    """Day SE PIC flight with one landing."""
    return build_flight(row_number=4, se_day_pic=1.5, day_takeoffs_landings=1)


@pytest.fixture
def simulator_flight():
    """Simulator-only session."""
    return build_flight(row_number=5, aircraft='Redbird FMX', registration='SIM-1',
                        simulator=2.0, hood=1.0)


@pytest.fixture
def mixed_flights():
    """SE, ME, night, XC and simulator flights in date order."""
    return [
        build_flight(row_number=4, flight_date=date(2024, 1, 5), copilot='Jane Doe',
                     pic='John Smith', se_day_dual=1.2, dual_received=1.2,
                     day_takeoffs_landings=4),
        build_flight(row_number=5, flight_date=date(2024, 1, 9), se_day_pic=2.0,
                     xc_day_pic=2.0, day_takeoffs_landings=1),
        build_flight(row_number=6, flight_date=date(2024, 2, 2), se_night_pic=1.1,
                     night_takeoffs_landings=2),
        build_flight(row_number=7, flight_date=date(2024, 2, 20), aircraft='PA44',
                     registration='C-FMEI', me_day_pic=1.3, actual_imc=0.4,
                     ifr_approaches=2, holding=1, day_takeoffs_landings=1),
        build_flight(row_number=8, flight_date=date(2024, 3, 3), aircraft='Redbird FMX',
                     registration='SIM-1', simulator=1.5, ifr_approaches=3),
    ]


@pytest.fixture
def logbook_37():
    """37 flights of 0.1 to 1.3 hours on consecutive days."""
    start = date(2023, 1, 1)
    flights = []
    for i in range(37):
        hours = round(0.1 * (i % 13 + 1), 1)
        if i % 5 == 0:
            flights.append(build_flight(
                row_number=i + 4, flight_date=start + timedelta(days=i),
                se_night_pic=hours, night_takeoffs_landings=1,
            ))
        elif i % 7 == 0:
            flights.append(build_flight(
                row_number=i + 4, flight_date=start + timedelta(days=i),
                aircraft='ALSIM AL250', registration='SIM-2', simulator=hours,
            ))
        else:
            flights.append(build_flight(
                row_number=i + 4, flight_date=start + timedelta(days=i),
                se_day_pic=hours, xc_day_pic=hours if i % 3 == 0 else None,
                hood=0.3, day_takeoffs_landings=1,
            ))
    return flights
