"""
TCCA logbook bucket columns.

Single definition of the 27 time-bucket fields, their grouping, and the
spreadsheet column order of a TCCA logbook row. Every other module
iterates these tuples instead of listing field names itself.

Layout of a logbook row (0-based column index):
    0-7    identity: date, make/model, registration, PIC, co-pilot/student,
           from, to, remarks
    8-13   single-engine  {day,night} x {dual,pic,copilot}
    14-19  multi-engine   {day,night} x {dual,pic,copilot}
    20-25  cross-country  {day,night} x {dual,pic,copilot}  (qualifier only)
    26-27  day / night takeoffs & landings
    28-32  actual IMC, hood, simulator, IFR approaches, holding
    33-34  as flight instructor, dual received
"""

FAMILIES = ('se', 'me', 'xc')
PERIODS = ('day', 'night')
SEATS = ('dual', 'pic', 'copilot')


def slot_field(family, period, seat):
    """Return the bucket field for a family/period/seat slot.

    Args:
        family: 'se', 'me' or 'xc'.
        period: 'day' or 'night'.
        seat: 'dual', 'pic' or 'copilot'.

    Returns:
        Field name, e.g. 'se_night_pic'.
    """
    if family not in FAMILIES or period not in PERIODS or seat not in SEATS:
        raise ValueError(f"No bucket slot for ({family}, {period}, {seat})")
    return f"{family}_{period}_{seat}"


def _family_fields(family):
    return tuple(slot_field(family, p, s) for p in PERIODS for s in SEATS)


# ============ Field groups ============

SE_FIELDS = _family_fields('se')
ME_FIELDS = _family_fields('me')
XC_FIELDS = _family_fields('xc')

# SE + ME: the only fields that make up total flight hours
AIRCRAFT_FIELDS = SE_FIELDS + ME_FIELDS

COUNT_FIELDS = (
    'day_takeoffs_landings',
    'night_takeoffs_landings',
    'ifr_approaches',
    'holding',
)

INSTRUMENT_FIELDS = ('actual_imc', 'hood', 'simulator')

INSTRUCTION_FIELDS = ('as_flight_instructor', 'dual_received')

# Spreadsheet order of all 27 buckets
BUCKET_FIELDS = (
    SE_FIELDS + ME_FIELDS + XC_FIELDS +
    ('day_takeoffs_landings', 'night_takeoffs_landings') +
    ('actual_imc', 'hood', 'simulator', 'ifr_approaches', 'holding') +
    INSTRUCTION_FIELDS
)

# Decimal-hour buckets (rounded to 0.1)
TIME_FIELDS = tuple(f for f in BUCKET_FIELDS if f not in COUNT_FIELDS)

# Columns summed on every logbook page
SUMMABLE_COLUMNS = BUCKET_FIELDS + ('flight_hours',)

BUCKET_FIELD_SET = frozenset(BUCKET_FIELDS)


def seat_fields(seat, families=('se', 'me')):
    """All fields for one seat across families and periods."""
    return tuple(slot_field(f, p, seat) for f in families for p in PERIODS)


def period_fields(period, families=('se', 'me')):
    """All fields for one period across families and seats."""
    return tuple(slot_field(f, period, s) for f in families for s in SEATS)


def xc_base_fields(xc_field):
    """Return the SE and ME fields that an XC field is a subset of.

    Args:
        xc_field: Cross-country field, e.g. 'xc_day_pic'.

    Returns:
        Tuple of (se_field, me_field).
    """
    if xc_field not in XC_FIELDS:
        raise ValueError(f"Not a cross-country field: {xc_field}")
    _, period, seat = xc_field.split('_')
    return slot_field('se', period, seat), slot_field('me', period, seat)


# ============ Spreadsheet column order ============

IDENTITY_COLUMNS = (
    'flight_date',
    'aircraft_make_model',
    'registration',
    'pilot_in_command',
    'copilot_or_student',
    'departure_airport',
    'arrival_airport',
    'remarks',
)

COL_DATE = 0
COL_MAKE_MODEL = 1
COL_FIRST_BUCKET = len(IDENTITY_COLUMNS)

COLUMN_MAPPING = dict(enumerate(IDENTITY_COLUMNS + BUCKET_FIELDS))

# Rows 1-3 of a TCCA sheet are headers; data starts on row 4
HEADER_ROW_COUNT = 3

REQUIRED_COLUMNS = ('flight_date', 'aircraft_make_model', 'registration')
