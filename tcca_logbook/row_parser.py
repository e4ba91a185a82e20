"""
TCCA spreadsheet row parser.

Maps spreadsheet rows that are already in memory (lists of cell values in
TCCA column order) into flight dicts. Reading the file itself is the
caller's concern; ``read_worksheet`` accepts an openpyxl worksheet that
has already been loaded.

Sheet layout:
    Rows 1-3   multi-row headers (skipped)
    Row 4+     one flight per row, see bucket_map.COLUMN_MAPPING

Data normalization:
    - Dates: datetime/date objects, ISO, DD/MM/YYYY and variants, Excel
      serial numbers, anything else python-dateutil understands
    - Hours: decimal or H:MM, comma decimals accepted, rounded to 0.1
    - Counts: whole numbers
    - Text: trimmed, empty -> None

Usage:
    flights = parse_rows(rows)
    flights = read_worksheet(load_workbook(path, data_only=True).active)
"""

import logging
import re
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from dateutil import parser as dateutil_parser

from .bucket_map import (
    COL_DATE, COL_FIRST_BUCKET, COL_MAKE_MODEL, COLUMN_MAPPING,
    COUNT_FIELDS, HEADER_ROW_COUNT,
)
from .buckets import round1, to_decimal
from .derivation import flight_hours_from_buckets

logger = logging.getLogger(__name__)

# Excel day 0 (accounts for the 1900 leap-year bug)
EXCEL_EPOCH = datetime(1899, 12, 30)

DATE_FORMATS = [
    '%Y-%m-%d',      # 2024-01-15
    '%d/%m/%Y',      # 15/01/2024
    '%d-%m-%Y',      # 15-01-2024
    '%d.%m.%Y',      # 15.01.2024
    '%d/%m/%y',      # 15/01/24
    '%Y/%m/%d',      # 2024/01/15
    '%d %b %Y',      # 15 Jan 2024
    '%b %d, %Y',     # Jan 15, 2024
]

ONE = Decimal('1')

HEADER_WORDS = ('MAKE', 'MODEL')


def normalize_date(val):
    """Parse a date cell.

    Args:
        val: datetime, date, Excel serial number, string or None.

    Returns:
        date object, or None if the cell holds no date.
    """
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    if isinstance(val, (int, float)):
        if val <= 0:
            return None
        return (EXCEL_EPOCH + timedelta(days=float(val))).date()

    s = str(val).strip()
    if not s:
        return None

    # Try common formats explicitly first
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue

    try:
        # dayfirst=True for Canadian/European convention
        return dateutil_parser.parse(s, dayfirst=True).date()
    except (ValueError, OverflowError):
        return None


def parse_number(val):
    """Convert an hours cell to decimal hours rounded to 0.1.

    Handles: floats, integers, decimal strings, '1,5', H:MM.

    Returns:
        Float hours, or None for an empty or unreadable cell. A literal
        zero stays 0.0.
    """
    if val is None or isinstance(val, bool):
        return None

    if isinstance(val, (int, float)):
        return round1(val)

    s = str(val).strip()
    if not s:
        return None

    # H:MM or HH:MM format
    match = re.match(r'^(\d+):(\d{1,2})$', s)
    if match:
        h, m = int(match.group(1)), int(match.group(2))
        return round1(h + m / 60)

    # Decimal with comma (European: "1,5" -> 1.5)
    s = s.replace(',', '.')

    try:
        return round1(float(s))
    except ValueError:
        return None


def parse_integer(val):
    """Convert a count cell (landings, approaches, holds) to int or None."""
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, int):
        return val
    if isinstance(val, float):
        return int(to_decimal(val).quantize(ONE, rounding=ROUND_HALF_UP))

    s = str(val).strip()
    if not s:
        return None

    try:
        return parse_integer(float(s))
    except ValueError:
        return None


def parse_string(val):
    if val is None:
        return None
    s = str(val).strip()
    return s or None


def _is_header_row(make_model):
    upper = make_model.upper()
    return any(word in upper for word in HEADER_WORDS) or upper == 'TYPE'


def map_row_to_flight(row, row_number):
    """Map one spreadsheet row to a flight dict.

    Args:
        row: Sequence of cell values in TCCA column order.
        row_number: 1-based spreadsheet row number, kept for issue reports.

    Returns:
        Flight dict, or None for rows that are not flights (no date,
        repeated header rows).
    """
    row = list(row)
    flight_date = normalize_date(row[COL_DATE]) if row else None
    if flight_date is None:
        return None

    make_model = parse_string(row[COL_MAKE_MODEL]) if len(row) > COL_MAKE_MODEL else None
    if make_model and _is_header_row(make_model):
        logger.debug("Skipping repeated header at row %d", row_number)
        return None

    def cell(index):
        return row[index] if index < len(row) else None

    flight = {'row_number': row_number}
    for index, field in COLUMN_MAPPING.items():
        if index < COL_FIRST_BUCKET:
            flight[field] = parse_string(cell(index))
        elif field in COUNT_FIELDS:
            flight[field] = parse_integer(cell(index))
        else:
            flight[field] = parse_number(cell(index))

    flight['flight_date'] = flight_date
    flight['aircraft_make_model'] = make_model or ''
    flight['registration'] = flight['registration'] or ''
    flight['flight_hours'] = flight_hours_from_buckets(flight)
    return flight


def _is_row_empty(row):
    return all(c is None or str(c).strip() == '' for c in row)


def parse_rows(rows, header_rows=HEADER_ROW_COUNT):
    """Parse every data row of a TCCA sheet.

    Args:
        rows: Iterable of row sequences, header rows included.
        header_rows: Number of leading header rows to skip.

    Returns:
        List of flight dicts in sheet order.
    """
    flights = []
    skipped = 0
    for index, row in enumerate(rows):
        if index < header_rows:
            continue
        if not row or _is_row_empty(row):
            continue

        flight = map_row_to_flight(row, index + 1)
        if flight is None:
            skipped += 1
            continue
        flights.append(flight)

    logger.info("Parsed %d flights (%d non-flight rows skipped)", len(flights), skipped)
    return flights


def read_worksheet(ws, header_rows=HEADER_ROW_COUNT):
    """Parse an openpyxl worksheet already held in memory."""
    return parse_rows(ws.iter_rows(values_only=True), header_rows=header_rows)
