"""
In-memory TCCA logbook workbook.

Renders paginated flights into an openpyxl Workbook:
    - "Logbook": one block per page (page title, group header, column
      header, flight rows, PAGE TOTALS / TOTALS FORWARDED / TOTALS TO DATE)
    - "Dashboard": per-aircraft summary with a TOTALS row

The workbook is returned unsaved; writing it anywhere is up to the caller.

Usage:
    wb = create_logbook_workbook(flights, pilot_name="Jane Doe")
"""

import logging
from datetime import date

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter

from .aggregation import aggregate_by_aircraft, grand_total_from_summaries
from .bucket_map import COUNT_FIELDS, IDENTITY_COLUMNS, SUMMABLE_COLUMNS
from .pagination import (
    LEFT_PAGE_COLUMNS, RIGHT_PAGE_COLUMNS,
    PAGE_TOTALS, TOTALS_FORWARDED, TOTALS_TO_DATE,
    calculate_all_totals,
)

logger = logging.getLogger(__name__)


# ============ Styles ============

HEADER_FONT = Font(name='Calibri', bold=True, color='FFFFFF', size=10)
HEADER_FILL = PatternFill(start_color='1F4E79', end_color='1F4E79', fill_type='solid')
SUBHEADER_FILL = PatternFill(start_color='2E75B6', end_color='2E75B6', fill_type='solid')
DATA_FONT = Font(name='Calibri', size=9)
TOTALS_FONT = Font(name='Calibri', bold=True, size=9)
TOTALS_FILL = PatternFill(start_color='D9E1F2', end_color='D9E1F2', fill_type='solid')
SIMULATOR_FILL = PatternFill(start_color='E2EFDA', end_color='E2EFDA', fill_type='solid')
TITLE_FONT = Font(name='Calibri', bold=True, size=14, color='1F4E79')
THIN_BORDER = Border(
    left=Side(style='thin', color='B4C6E7'),
    right=Side(style='thin', color='B4C6E7'),
    top=Side(style='thin', color='B4C6E7'),
    bottom=Side(style='thin', color='B4C6E7')
)

LOGBOOK_COLUMNS = LEFT_PAGE_COLUMNS + RIGHT_PAGE_COLUMNS

# Dashboard columns: (key, header, width)
DASHBOARD_COLUMNS = [
    ('aircraft_type', 'Aircraft', 18),
    ('num_flights', 'Flights', 8),
    ('total_hours', 'Total Hours', 10),
    ('last_flight_date', 'Last Flight', 12),
    ('days_since_last_flight', 'Days Since', 10),
    ('day_takeoffs_landings', 'Day T/O LDG', 10),
    ('night_takeoffs_landings', 'Night T/O LDG', 10),
    ('actual_imc', 'Actual IMC', 9),
    ('hood', 'Hood', 8),
    ('simulator', 'Simulator', 9),
    ('ifr_approaches', 'Approaches', 10),
    ('as_flight_instructor', 'Instructor', 10),
    ('dual_received', 'Dual Received', 11),
]


def set_cell(ws, row, column, value, font=DATA_FONT, fill=None, number_format=None):
    """Write one styled cell."""
    cell = ws.cell(row=row, column=column, value=value)
    cell.font = font
    cell.border = THIN_BORDER
    cell.alignment = Alignment(horizontal='center', vertical='center')
    if fill is not None:
        cell.fill = fill
    if number_format:
        cell.number_format = number_format
    return cell


def _number_format(column):
    if column in COUNT_FIELDS:
        return '0'
    if column in SUMMABLE_COLUMNS:
        return '0.0'
    return None


def _cell_value(column, value):
    # Zero and N/A both print blank in the logbook
    if column in SUMMABLE_COLUMNS and not value:
        return None
    return value


def _write_headers(ws, row):
    for col_idx, (_, _, _, group) in enumerate(LOGBOOK_COLUMNS, 1):
        set_cell(ws, row, col_idx, group, font=HEADER_FONT, fill=SUBHEADER_FILL)
    for col_idx, (_, header, width, _) in enumerate(LOGBOOK_COLUMNS, 1):
        set_cell(ws, row + 1, col_idx, header, font=HEADER_FONT, fill=HEADER_FILL)
        ws.column_dimensions[get_column_letter(col_idx)].width = width
    return row + 2


def _write_flight(ws, row, flight):
    simulator_only = not flight.get('flight_hours') and flight.get('simulator')
    for col_idx, (column, _, _, _) in enumerate(LOGBOOK_COLUMNS, 1):
        cell = set_cell(ws, row, col_idx, _cell_value(column, flight.get(column)),
                        fill=SIMULATOR_FILL if simulator_only else None,
                        number_format=_number_format(column))
        if column == 'flight_date' and isinstance(cell.value, date):
            cell.number_format = 'DD/MM/YY'


def _write_totals(ws, row, label, totals):
    for col_idx, (column, _, _, _) in enumerate(LOGBOOK_COLUMNS, 1):
        if column == IDENTITY_COLUMNS[0]:
            value = label
        elif column in IDENTITY_COLUMNS:
            value = None
        else:
            value = _cell_value(column, totals.get(column))
        set_cell(ws, row, col_idx, value, font=TOTALS_FONT, fill=TOTALS_FILL,
                 number_format=_number_format(column))


def write_logbook_sheet(ws, pages, pilot_name=''):
    """Write every page block to a worksheet.

    Returns:
        Next free row number.
    """
    title = f"{pilot_name} - Pilot Logbook" if pilot_name else "Pilot Logbook"
    ws.cell(row=1, column=1, value=title).font = TITLE_FONT
    row = 3

    for page in pages:
        ws.cell(row=row, column=1, value=f"PAGE {page['page_number']}").font = TITLE_FONT
        row = _write_headers(ws, row + 1)

        for flight in page['flights']:
            _write_flight(ws, row, flight)
            row += 1

        _write_totals(ws, row, PAGE_TOTALS, page['page_totals'])
        _write_totals(ws, row + 1, TOTALS_FORWARDED, page['totals_forwarded'])
        _write_totals(ws, row + 2, TOTALS_TO_DATE, page['totals_to_date'])
        row += 4

    return row


def write_dashboard_sheet(ws, flights, today=None):
    """Per-aircraft summary table followed by a TOTALS row.

    Returns:
        List of summaries written (TOTALS row excluded).
    """
    summaries = aggregate_by_aircraft(flights, today=today)

    for col_idx, (_, header, width) in enumerate(DASHBOARD_COLUMNS, 1):
        set_cell(ws, 1, col_idx, header, font=HEADER_FONT, fill=HEADER_FILL)
        ws.column_dimensions[get_column_letter(col_idx)].width = width
    ws.freeze_panes = 'A2'

    row = 2
    for summary in summaries:
        fill = SIMULATOR_FILL if summary['is_simulator'] else None
        for col_idx, (key, _, _) in enumerate(DASHBOARD_COLUMNS, 1):
            cell = set_cell(ws, row, col_idx, summary[key], fill=fill,
                            number_format=_number_format(key))
            if key == 'total_hours':
                cell.number_format = '0.0'
            elif key == 'last_flight_date' and summary[key] is not None:
                cell.number_format = 'YYYY-MM-DD'
        row += 1

    grand = grand_total_from_summaries(summaries)
    for col_idx, (key, _, _) in enumerate(DASHBOARD_COLUMNS, 1):
        cell = set_cell(ws, row, col_idx, grand[key], font=TOTALS_FONT, fill=TOTALS_FILL,
                        number_format=_number_format(key))
        if key == 'total_hours':
            cell.number_format = '0.0'

    return summaries


def create_logbook_workbook(flights, pilot_name='', rows_per_page=None, config=None, today=None):
    """Build the logbook and dashboard sheets in a new Workbook.

    Args:
        flights: Flights in logbook (chronological) order.
        pilot_name: Owner name for the sheet title.
        rows_per_page: Page size; defaults to the configured value.
        config: Optional Config.
        today: Reference date for the dashboard's days-since column.

    Returns:
        openpyxl Workbook (not saved).
    """
    flights = list(flights)
    pages = calculate_all_totals(flights, rows_per_page=rows_per_page, config=config)

    wb = Workbook()
    ws = wb.active
    ws.title = "Logbook"
    write_logbook_sheet(ws, pages, pilot_name=pilot_name)

    write_dashboard_sheet(wb.create_sheet("Dashboard"), flights, today=today)

    logger.info("Rendered %d flights on %d pages", len(flights), len(pages))
    return wb
