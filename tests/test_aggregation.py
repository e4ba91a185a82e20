# tests/test_aggregation.py
"""
Aggregation Tests

Tests for flight totals and per-aircraft summaries.
"""

from datetime import date

from tcca_logbook.aggregation import (
    aggregate_by_aircraft, aggregate_flight_totals, calculate_instrument_time,
    calculate_total_hours, earliest_flight_date, grand_total_from_summaries,
    is_simulator_only, latest_flight_date,
)
from tcca_logbook.bucket_map import BUCKET_FIELDS
from tcca_logbook.buckets import store


# =============================================================================
# Single flight
# =============================================================================

class TestSingleFlight:
    """Tests for per-flight helpers."""

    def test_simulator_only(self, simulator_flight, pic_flight):
        """A session with only simulator time is simulator-only."""
        assert is_simulator_only(simulator_flight)
        assert simulator_flight['flight_hours'] == 0
        assert not is_simulator_only(pic_flight)

    def test_total_hours_excludes_simulator(self, make_flight):
        """Simulator time never counts as flight hours."""
        flight = make_flight(se_day_pic=1.0, simulator=0.5)

        assert calculate_total_hours(flight) == 1.0
        assert not is_simulator_only(flight)

    def test_instrument_time(self, simulator_flight):
        """Instrument time is IMC + hood, never simulator."""
        assert calculate_instrument_time(simulator_flight) == 1.0


# =============================================================================
# Grand totals
# =============================================================================

class TestAggregateFlightTotals:
    """Tests for aggregate_flight_totals()."""

    def test_counts(self, mixed_flights):
        """Simulator sessions count as flights but not aircraft flights."""
        totals = aggregate_flight_totals(mixed_flights)

        assert totals['total_flights'] == 5
        assert totals['aircraft_flights'] == 4
        assert totals['simulator_flights'] == 1

    def test_primary_totals(self, mixed_flights):
        """Rollups are computed from the buckets."""
        totals = aggregate_flight_totals(mixed_flights)

        assert totals['total_hours'] == 5.6
        assert totals['total_pic'] == 4.4
        assert totals['total_dual'] == 1.2
        assert totals['total_copilot'] == 0.0
        assert totals['total_night'] == 1.1
        assert totals['total_xc'] == 2.0
        assert totals['total_instrument'] == 0.4
        assert totals['total_simulator'] == 1.5
        assert 'simulator' not in totals

    def test_subtotals_and_counts(self, mixed_flights):
        """Day/night subtotals and integer counts."""
        totals = aggregate_flight_totals(mixed_flights)

        assert totals['se_day_total'] == 3.2
        assert totals['se_night_total'] == 1.1
        assert totals['se_total'] == 4.3
        assert totals['me_total'] == 1.3
        assert totals['xc_day_total'] == 2.0
        assert totals['day_takeoffs_landings'] == 6
        assert totals['ifr_approaches'] == 5
        assert isinstance(totals['holding'], int)

    def test_xc_not_added(self, make_flight):
        """XC time never inflates total hours."""
        totals = aggregate_flight_totals([make_flight(se_day_pic=2.0, xc_day_pic=2.0)])

        assert totals['total_hours'] == 2.0

    def test_exact_accumulation(self, make_flight):
        """Ten flights of 0.1h sum to exactly 1.0."""
        totals = aggregate_flight_totals([make_flight(se_day_pic=0.1)] * 10)

        assert totals['total_hours'] == 1.0
        assert totals['se_day_pic'] == 1.0

    def test_order_independent(self, mixed_flights):
        """Input order does not change the totals."""
        assert aggregate_flight_totals(mixed_flights) == \
            aggregate_flight_totals(list(reversed(mixed_flights)))

    def test_reaggregating_rounded_flights(self, mixed_flights, make_flight):
        """Re-aggregating after rounding each flight's buckets gives the same totals."""
        def rounded(flights):
            return [dict(f, **{field: store(field, f[field]) for field in BUCKET_FIELDS})
                    for f in flights]

        assert aggregate_flight_totals(rounded(mixed_flights)) == \
            aggregate_flight_totals(mixed_flights)

        off_grid = rounded(mixed_flights + [make_flight(se_day_pic=0.04, hood=0.06)])
        assert aggregate_flight_totals(rounded(off_grid)) == aggregate_flight_totals(off_grid)

    def test_empty(self):
        """An empty logbook has zero totals."""
        totals = aggregate_flight_totals([])

        assert totals['total_flights'] == 0
        assert totals['total_hours'] == 0.0


# =============================================================================
# Per aircraft
# =============================================================================

class TestAggregateByAircraft:
    """Tests for aggregate_by_aircraft()."""

    def test_ordering(self, mixed_flights, today):
        """Aircraft by hours descending, simulators last."""
        summaries = aggregate_by_aircraft(mixed_flights, today=today)

        assert [s['aircraft_type'] for s in summaries] == ['C172', 'PA44', 'Redbird FMX']
        assert summaries[-1]['is_simulator']

    def test_summary_fields(self, mixed_flights, today):
        """Per-type hours, counts and recency."""
        c172 = aggregate_by_aircraft(mixed_flights, today=today)[0]

        assert c172['num_flights'] == 3
        assert c172['total_hours'] == 4.3
        assert c172['last_flight_date'] == date(2024, 2, 2)
        assert c172['days_since_last_flight'] == (today - date(2024, 2, 2)).days

    def test_grand_total_row(self, mixed_flights, today):
        """The TOTALS row adds up every summary."""
        grand = grand_total_from_summaries(aggregate_by_aircraft(mixed_flights, today=today))

        assert grand['aircraft_type'] == 'TOTALS'
        assert grand['num_flights'] == 5
        assert grand['total_hours'] == 5.6
        assert grand['simulator'] == 1.5

    def test_grand_total_row_matches_totals(self, mixed_flights, make_flight, today):
        """The TOTALS row rounds once, like aggregate_flight_totals()."""
        flights = mixed_flights + [
            make_flight(aircraft='C182', se_day_pic=0.04, hood=0.04),
            make_flight(aircraft='PA34', me_day_pic=0.04, hood=0.04),
        ]
        grand = grand_total_from_summaries(aggregate_by_aircraft(flights, today=today))
        totals = aggregate_flight_totals(flights)

        assert grand['num_flights'] == totals['total_flights']
        assert grand['total_hours'] == totals['total_hours'] == 5.7
        assert grand['simulator'] == totals['total_simulator']
        for field in BUCKET_FIELDS:
            if field != 'simulator':
                assert grand[field] == totals[field], field


class TestDateRange:
    """Tests for earliest/latest flight dates."""

    def test_range(self, mixed_flights):
        assert earliest_flight_date(mixed_flights) == date(2024, 1, 5)
        assert latest_flight_date(mixed_flights) == date(2024, 3, 3)

    def test_empty(self):
        assert earliest_flight_date([]) is None
