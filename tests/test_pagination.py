# tests/test_pagination.py
"""
Pagination Tests

Tests for page chunking, running totals and totals row rendering.
"""

from datetime import date

import pytest

from tcca_logbook.aggregation import aggregate_flight_totals
from tcca_logbook.bucket_map import SUMMABLE_COLUMNS
from tcca_logbook.config import Config
from tcca_logbook.derivation import build_flight
from tcca_logbook.errors import ConfigurationError, TotalsMismatchError
from tcca_logbook.pagination import (
    LEFT_PAGE_COLUMNS, RIGHT_PAGE_COLUMNS, TOTALS_TO_DATE,
    calculate_all_totals, calculate_grand_totals, calculate_page_totals,
    check_against_aggregation, chunk_flights, format_cell, format_date,
    format_time, iter_pages, page_count, render_row, render_totals,
    totals_forwarded_from_date,
)


class TestChunking:
    """Tests for chunk_flights() and page_count()."""

    def test_37_flights(self, logbook_37):
        """37 flights make pages of 18, 18 and 1."""
        pages = chunk_flights(logbook_37, 18)

        assert [len(p) for p in pages] == [18, 18, 1]
        assert page_count(37, 18) == 3
        assert pages[2][0] is logbook_37[-1]

    def test_exact_multiple(self):
        assert page_count(36, 18) == 2
        assert page_count(0, 18) == 0
        assert chunk_flights([], 18) == []

    @pytest.mark.parametrize('size', [0, -3, 2.5])
    def test_invalid_page_size(self, size):
        """A non-positive page size is a configuration error."""
        with pytest.raises(ConfigurationError):
            chunk_flights([], size)


class TestRunningTotals:
    """Tests for iter_pages() and calculate_all_totals()."""

    def test_recurrence(self, logbook_37):
        """Forwarded totals carry the previous page's totals to date."""
        pages = calculate_all_totals(logbook_37, rows_per_page=18)

        assert [p['flight_count'] for p in pages] == [18, 18, 1]
        assert all(v == 0 for v in pages[0]['totals_forwarded'].values())
        for previous, page in zip(pages, pages[1:]):
            assert page['totals_forwarded'] == previous['totals_to_date']

    def test_last_page_equals_grand_totals(self, logbook_37):
        """Totals to date on the last page equal the grand totals."""
        pages = calculate_all_totals(logbook_37, rows_per_page=18)

        assert pages[-1]['totals_to_date'] == calculate_grand_totals(logbook_37)

    def test_cross_check_with_aggregation(self, logbook_37):
        """The last page agrees with the aggregation engine."""
        pages = calculate_all_totals(logbook_37, rows_per_page=18)
        totals = aggregate_flight_totals(logbook_37)

        check_against_aggregation(pages, totals)
        assert pages[-1]['totals_to_date']['flight_hours'] == totals['total_hours']
        assert pages[-1]['totals_to_date']['simulator'] == totals['total_simulator']

    def test_cross_check_with_overridden_flights(self, config):
        """Flights built with off-grid overrides still agree with aggregation."""
        flights = [
            build_flight({
                'role': 'PIC', 'flight_time': 0.3, 'aircraft_make_model': 'C172',
                'flight_date': date(2024, 5, day), 'registration': 'C-GABC',
                'overrides': {'se_day_pic': 0.25, 'hood': 0.15},
            }, config=config)
            for day in (1, 2, 3)
        ]
        pages = calculate_all_totals(flights, rows_per_page=2)
        totals = aggregate_flight_totals(flights)

        check_against_aggregation(pages, totals)
        assert pages[-1]['totals_to_date']['flight_hours'] == totals['total_hours'] == 0.9
        assert totals['hood'] == 0.6

    def test_cross_check_detects_mismatch(self, logbook_37):
        """A drifted total raises TotalsMismatchError."""
        pages = calculate_all_totals(logbook_37, rows_per_page=18)
        totals = aggregate_flight_totals(logbook_37)
        totals['hood'] += 0.1

        with pytest.raises(TotalsMismatchError) as exc:
            check_against_aggregation(pages, totals)
        assert list(exc.value.details['mismatches']) == ['hood']

    def test_page_totals_sum_to_grand_totals(self, logbook_37):
        """Page totals add up to the grand totals column by column."""
        pages = calculate_all_totals(logbook_37, rows_per_page=18)
        grand = calculate_grand_totals(logbook_37)

        for column in SUMMABLE_COLUMNS:
            page_sum = sum(p['page_totals'][column] for p in pages)
            assert round(page_sum, 1) == grand[column]

    def test_page_size_from_config(self, logbook_37):
        """The configured page size is used by default."""
        config = Config()
        config.override(rows_per_page=10)

        assert [p['flight_count'] for p in iter_pages(logbook_37, config=config)] == [10, 10, 10, 7]

    def test_page_totals(self, mixed_flights):
        """Page totals keep counts as integers."""
        result = calculate_page_totals(mixed_flights, 1)

        assert result['flight_count'] == 5
        assert result['column_totals']['flight_hours'] == 5.6
        assert result['column_totals']['ifr_approaches'] == 5
        assert isinstance(result['column_totals']['ifr_approaches'], int)

    def test_totals_forwarded_from_date(self, mixed_flights):
        """Only flights before the start date are forwarded."""
        forwarded = totals_forwarded_from_date(mixed_flights, date(2024, 2, 2))

        assert forwarded['flight_hours'] == 3.2
        assert forwarded['day_takeoffs_landings'] == 5


class TestPresentation:
    """Tests for cell formatting."""

    def test_blank_zero(self):
        assert format_time(0) == ''
        assert format_time(None) == ''
        assert format_time(0.3) == '0.3'
        assert format_time(12.0) == '12.0'

    def test_cells(self):
        assert format_date(date(2024, 3, 9)) == '09/03/24'
        assert format_cell('day_takeoffs_landings', 4) == '4'
        assert format_cell('holding', 0) == ''
        assert format_cell('registration', 'C-GABC') == 'C-GABC'
        assert format_cell('remarks', None) == ''

    def test_render_row(self, pic_flight):
        """A row has one string per column, left page first."""
        row = render_row(pic_flight)

        assert len(row) == len(LEFT_PAGE_COLUMNS) + len(RIGHT_PAGE_COLUMNS)
        assert row[0] == '01/03/24'
        assert row[9] == '1.5'
        assert row[-1] == '1.5'

    def test_render_totals(self, mixed_flights):
        """Totals rows carry the label in the date column."""
        row = render_totals(calculate_grand_totals(mixed_flights))

        assert row[0] == TOTALS_TO_DATE
        assert row[1] == ''
        assert row[-1] == '5.6'
