"""
Logbook pagination and running totals.

Splits a chronologically ordered flight list into fixed-size logbook pages
and computes, for every page, the three TCCA totals rows:

    PAGE TOTALS       - sum of the flights on this page
    TOTALS FORWARDED  - TOTALS TO DATE of the previous page (zero on page 1)
    TOTALS TO DATE    - TOTALS FORWARDED + PAGE TOTALS

Running totals are carried as exact Decimals and only rounded when a page
is emitted, so the last page's TOTALS TO DATE always equals the grand
totals of the whole list.

Usage:
    for page in iter_pages(flights):
        print(page['page_number'], page['totals_to_date']['flight_hours'])
"""

import logging
from datetime import date, datetime

from .aggregation import as_date
from .bucket_map import COUNT_FIELDS, IDENTITY_COLUMNS, SUMMABLE_COLUMNS
from .buckets import ZERO, emit, to_decimal
from .config import resolve
from .errors import ConfigurationError, TotalsMismatchError

logger = logging.getLogger(__name__)

ROWS_PER_PAGE = 18

PAGE_TOTALS = 'PAGE TOTALS'
TOTALS_FORWARDED = 'TOTALS FORWARDED'
TOTALS_TO_DATE = 'TOTALS TO DATE'

TOTALS_LABELS = (PAGE_TOTALS, TOTALS_FORWARDED, TOTALS_TO_DATE)

# Column definitions: (field, header, width, group)
LEFT_PAGE_COLUMNS = [
    ('flight_date', 'DATE', 9, None),
    ('aircraft_make_model', 'MAKE/MODEL', 12, None),
    ('registration', 'REG', 9, None),
    ('pilot_in_command', 'PIC', 16, None),
    ('copilot_or_student', 'CO-PILOT', 16, None),
    ('departure_airport', 'FROM', 7, None),
    ('arrival_airport', 'TO', 7, None),
    ('remarks', 'REMARKS', 22, None),
    ('se_day_dual', 'DUAL', 6, 'SE DAY'),
    ('se_day_pic', 'PIC', 6, 'SE DAY'),
    ('se_day_copilot', 'COP', 6, 'SE DAY'),
    ('se_night_dual', 'DUAL', 6, 'SE NGT'),
    ('se_night_pic', 'PIC', 6, 'SE NGT'),
    ('se_night_copilot', 'COP', 6, 'SE NGT'),
    ('me_day_dual', 'DUAL', 6, 'ME DAY'),
    ('me_day_pic', 'PIC', 6, 'ME DAY'),
    ('me_day_copilot', 'COP', 6, 'ME DAY'),
]

RIGHT_PAGE_COLUMNS = [
    ('me_night_dual', 'DUAL', 6, 'ME NGT'),
    ('me_night_pic', 'PIC', 6, 'ME NGT'),
    ('me_night_copilot', 'COP', 6, 'ME NGT'),
    ('xc_day_dual', 'DUAL', 6, 'XC DAY'),
    ('xc_day_pic', 'PIC', 6, 'XC DAY'),
    ('xc_day_copilot', 'COP', 6, 'XC DAY'),
    ('xc_night_dual', 'DUAL', 6, 'XC NGT'),
    ('xc_night_pic', 'PIC', 6, 'XC NGT'),
    ('xc_night_copilot', 'COP', 6, 'XC NGT'),
    ('day_takeoffs_landings', 'DAY', 6, 'T/O LDG'),
    ('night_takeoffs_landings', 'NGT', 6, 'T/O LDG'),
    ('actual_imc', 'IMC', 6, 'INST'),
    ('hood', 'HOOD', 6, 'INST'),
    ('simulator', 'SIM', 6, 'INST'),
    ('ifr_approaches', 'APP', 5, 'INST'),
    ('holding', 'HLD', 5, 'INST'),
    ('as_flight_instructor', 'INST', 7, 'OTHER'),
    ('dual_received', 'DUAL', 7, 'OTHER'),
    ('flight_hours', 'TOTAL', 8, None),
]

# Aggregation keys that differ from their page column name
AGGREGATION_KEYS = {
    'flight_hours': 'total_hours',
    'simulator': 'total_simulator',
}


# ============ Chunking ============

def _check_page_size(rows_per_page):
    if not isinstance(rows_per_page, int) or rows_per_page <= 0:
        raise ConfigurationError(
            f"rows_per_page must be a positive integer, got {rows_per_page!r}",
            setting='rows_per_page',
        )


def chunk_flights(flights, rows_per_page=ROWS_PER_PAGE):
    """Split flights into consecutive pages, preserving order.

    Every page holds exactly ``rows_per_page`` flights except possibly the
    last one. An empty list gives no pages.

    Raises:
        ConfigurationError: If rows_per_page is not a positive integer.
    """
    _check_page_size(rows_per_page)
    flights = list(flights)
    return [flights[i:i + rows_per_page] for i in range(0, len(flights), rows_per_page)]


def page_count(flight_count, rows_per_page=ROWS_PER_PAGE):
    """Number of pages needed for ``flight_count`` flights (ceiling division)."""
    _check_page_size(rows_per_page)
    return -(-flight_count // rows_per_page)


# ============ Totals ============

def _zero_sums():
    return dict.fromkeys(SUMMABLE_COLUMNS, ZERO)


def _sum_flights(flights):
    sums = _zero_sums()
    for flight in flights:
        for column in SUMMABLE_COLUMNS:
            sums[column] += to_decimal(flight.get(column))
    return sums


def _emit(sums):
    return {column: emit(column, value) for column, value in sums.items()}


def calculate_page_totals(page_flights, page_number):
    """PAGE TOTALS for one page.

    Returns:
        Dict with page_number, flight_count and column_totals.
    """
    return {
        'page_number': page_number,
        'flight_count': len(page_flights),
        'column_totals': _emit(_sum_flights(page_flights)),
    }


def iter_pages(flights, rows_per_page=None, config=None):
    """Yield logbook pages with their three totals rows.

    Args:
        flights: Flights in logbook (chronological) order.
        rows_per_page: Page size; defaults to the configured value.
        config: Optional Config.

    Yields:
        Dict with page_number, flights, flight_count, page_totals,
        totals_forwarded and totals_to_date.

    Raises:
        ConfigurationError: If the page size is not a positive integer.
    """
    if rows_per_page is None:
        rows_per_page = resolve(config).rows_per_page

    forwarded = _zero_sums()
    for index, page_flights in enumerate(chunk_flights(flights, rows_per_page)):
        page_sums = _sum_flights(page_flights)
        to_date = {column: forwarded[column] + page_sums[column] for column in SUMMABLE_COLUMNS}

        yield {
            'page_number': index + 1,
            'flights': page_flights,
            'flight_count': len(page_flights),
            'page_totals': _emit(page_sums),
            'totals_forwarded': _emit(forwarded),
            'totals_to_date': _emit(to_date),
        }
        forwarded = to_date


def calculate_all_totals(flights, rows_per_page=None, config=None):
    """All pages of a logbook as a list (see iter_pages)."""
    pages = list(iter_pages(flights, rows_per_page=rows_per_page, config=config))
    logger.info("Paginated %d flights into %d pages",
                sum(p['flight_count'] for p in pages), len(pages))
    return pages


def calculate_grand_totals(flights):
    """Sum of every summable column over all flights."""
    return _emit(_sum_flights(flights))


def totals_forwarded_from_date(all_flights, start_date):
    """Totals of every flight dated strictly before ``start_date``.

    Used as the opening TOTALS FORWARDED of a date-range export.
    """
    start_date = as_date(start_date)
    before = [f for f in all_flights
              if as_date(f.get('flight_date')) is not None
              and as_date(f.get('flight_date')) < start_date]
    return calculate_grand_totals(before)


def check_against_aggregation(pages, totals):
    """Cross-check the last page's TOTALS TO DATE with aggregation totals.

    Args:
        pages: Page list from calculate_all_totals.
        totals: Result of aggregation.aggregate_flight_totals over the
            same flights.

    Raises:
        TotalsMismatchError: If any shared column differs.
    """
    to_date = pages[-1]['totals_to_date'] if pages else _emit(_zero_sums())

    mismatches = {}
    for column in SUMMABLE_COLUMNS:
        key = AGGREGATION_KEYS.get(column, column)
        if key not in totals:
            continue
        if to_date[column] != totals[key]:
            mismatches[column] = {'pages': to_date[column], 'aggregation': totals[key]}

    if mismatches:
        raise TotalsMismatchError(mismatches)


# ============ Presentation ============

def format_time(value):
    """Decimal hours with one decimal; zero and None render blank."""
    if value is None or value == 0:
        return ''
    return f"{float(value):.1f}"


def format_count(value):
    """Whole count; zero and None render blank."""
    if value is None or value == 0:
        return ''
    return str(int(value))


def format_date(value):
    """DD/MM/YY, as printed in a TCCA logbook."""
    if isinstance(value, str):
        value = as_date(value)
    if isinstance(value, (date, datetime)):
        return value.strftime('%d/%m/%y')
    return ''


def format_cell(column, value):
    if column == 'flight_date':
        return format_date(value)
    if column in COUNT_FIELDS:
        return format_count(value)
    if column in SUMMABLE_COLUMNS:
        return format_time(value)
    return '' if value is None else str(value)


def render_row(flight):
    """Display strings for every column of one flight, left page first."""
    return [format_cell(column, flight.get(column))
            for column, _, _, _ in LEFT_PAGE_COLUMNS + RIGHT_PAGE_COLUMNS]


def render_totals(totals, label=TOTALS_TO_DATE):
    """Display strings for a totals row.

    The label takes the identity columns; summable columns are formatted.
    """
    row = []
    for column, _, _, _ in LEFT_PAGE_COLUMNS + RIGHT_PAGE_COLUMNS:
        if column == IDENTITY_COLUMNS[0]:
            row.append(label)
        elif column in IDENTITY_COLUMNS:
            row.append('')
        else:
            row.append(format_cell(column, totals.get(column)))
    return row
