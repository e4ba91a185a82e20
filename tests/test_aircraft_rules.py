# tests/test_aircraft_rules.py
"""
Aircraft Rules Tests

Tests for engine class detection, route parsing and bucket column layout.
"""

import pytest

from tcca_logbook.aircraft_rules import detect_engine_type, engine_type_lookup, parse_route
from tcca_logbook.bucket_map import BUCKET_FIELDS, COLUMN_MAPPING, slot_field, xc_base_fields
from tcca_logbook.buckets import emit, make_buckets, round1
from tcca_logbook.config import Config
from tcca_logbook.errors import UnknownBucketFieldError


class TestEngineType:
    """Tests for detect_engine_type()."""

    @pytest.mark.parametrize('make_model,expected', [
        ('C172', 'SE'),
        ('Cessna 172S', 'SE'),
        ('PA44 Seminole', 'ME'),
        ('be-76', 'ME'),
        ('Redbird FMX', 'SIM'),
        ('ALSIM AL250', 'SIM'),
        ('C172 SIM', 'SIM'),
        ('', 'SE'),
        (None, 'SE'),
    ])
    def test_detect(self, make_model, expected):
        assert detect_engine_type(make_model) == expected

    def test_configured_patterns(self):
        config = Config()
        config.override(extra_multi_engine=('DA62',), extra_simulator=('ELITE',))
        lookup = engine_type_lookup(config)

        assert lookup('Diamond DA62') == 'ME'
        assert lookup('Elite PI-135') == 'SIM'


class TestRoute:
    """Tests for parse_route()."""

    @pytest.mark.parametrize('route,expected', [
        ('CYKZ-CYOO', ('CYKZ', 'CYOO')),
        ('cykz - cyoo - cykz', ('CYKZ', 'CYKZ')),
        ('CYKZ > CYTZ', ('CYKZ', 'CYTZ')),
        ('CYKZ', ('CYKZ', 'CYKZ')),
        ('', (None, None)),
        (None, (None, None)),
    ])
    def test_parse_route(self, route, expected):
        assert parse_route(route) == expected


class TestBucketColumns:
    """Tests for the bucket column set."""

    def test_column_layout(self):
        assert len(BUCKET_FIELDS) == 27
        assert COLUMN_MAPPING[8] == 'se_day_dual'
        assert COLUMN_MAPPING[34] == 'dual_received'

    def test_slots(self):
        assert slot_field('xc', 'night', 'copilot') == 'xc_night_copilot'
        assert xc_base_fields('xc_day_dual') == ('se_day_dual', 'me_day_dual')
        with pytest.raises(ValueError):
            slot_field('jet', 'day', 'pic')

    def test_make_buckets(self):
        buckets = make_buckets(se_day_pic=1.0, hood=0)

        assert buckets['hood'] == 0
        assert buckets['actual_imc'] is None
        with pytest.raises(UnknownBucketFieldError):
            make_buckets(solo=1.0)

    def test_rounding(self):
        """Half away from zero, once."""
        assert round1(0.05) == 0.1
        assert round1(2.45) == 2.5
        assert round1(None) == 0.0
        assert emit('holding', 3) == 3
        assert isinstance(emit('holding', 3), int)
