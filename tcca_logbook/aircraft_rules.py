"""
Aircraft classification and route helpers.

Engine class decides which bucket family receives flight time:
    SE  - single-engine aircraft (se_* buckets)
    ME  - multi-engine aircraft (me_* buckets)
    SIM - simulator / training device (simulator bucket only)

The lookup is a plain substring match on the make/model string as the
pilot typed it. Callers may add their own patterns through configuration.
"""

import re

SINGLE_ENGINE = 'SE'
MULTI_ENGINE = 'ME'
SIMULATOR = 'SIM'

ENGINE_TYPES = (SINGLE_ENGINE, MULTI_ENGINE, SIMULATOR)

# Known multi-engine make/model fragments
MULTI_ENGINE_PATTERNS = ('PA44', 'BE76', 'DA42', 'PA34', 'C310', 'BE58', 'PA-44', 'BE-76')

# Known simulator / FTD fragments
SIMULATOR_PATTERNS = ('REDBIRD', 'ALSIM', 'AL250', 'FMX', 'SIM', 'FRASCA', 'SIMULATOR')

ROUTE_SEPARATORS = re.compile(r'[-–—>/\s]+')


def detect_engine_type(aircraft_make_model, extra_multi=(), extra_sim=()):
    """Return the engine class for an aircraft make/model.

    Simulator patterns are checked first since they are the most specific
    ("C172 SIM" is a simulator, not a Cessna).

    Args:
        aircraft_make_model: Make/model as entered (e.g. 'PA44', 'Redbird FMX').
        extra_multi: Additional multi-engine patterns.
        extra_sim: Additional simulator patterns.

    Returns:
        'SE', 'ME' or 'SIM'.
    """
    upper = (aircraft_make_model or '').upper()

    for pattern in SIMULATOR_PATTERNS + tuple(extra_sim):
        if pattern.upper() in upper:
            return SIMULATOR

    for pattern in MULTI_ENGINE_PATTERNS + tuple(extra_multi):
        if pattern.upper() in upper:
            return MULTI_ENGINE

    return SINGLE_ENGINE


def engine_type_lookup(config=None):
    """Build a ``make_model -> engine class`` callable honouring config patterns."""
    extra_multi = config.extra_multi_engine if config else ()
    extra_sim = config.extra_simulator if config else ()

    def lookup(aircraft_make_model):
        return detect_engine_type(aircraft_make_model, extra_multi, extra_sim)

    return lookup


def parse_route(route):
    """Split a route string into departure and arrival airports.

    'CZBB-CYCW-CZBB' -> ('CZBB', 'CZBB'); a single airport is a local
    flight and is both departure and arrival.

    Args:
        route: Route string or None.

    Returns:
        Tuple of (from, to), each upper-case or None.
    """
    if not route or not route.strip():
        return None, None

    parts = [p for p in ROUTE_SEPARATORS.split(route.strip()) if p]
    if not parts:
        return None, None

    return parts[0].upper(), parts[-1].upper()
