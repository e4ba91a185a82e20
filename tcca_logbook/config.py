"""
Configuration loading for the logbook engine.

Uses Python's built-in configparser (no extra dependencies).
Supports a config.ini file with caller overrides.
"""

import configparser
import logging
import os

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


DEFAULT_CONFIG = {
    'pilot': {
        'name': '',
        'home_base': '',
        'default_instructor': '',
    },
    'pagination': {
        'rows_per_page': '18',
    },
    'derivation': {
        'default_landings': '1',
        'circuit_landings': '4',
        'override_tolerance': '0.01',
    },
    'validation': {
        'hours_mismatch_tolerance': '0.1',
    },
    'aircraft': {
        'multi_engine': '',
        'simulator': '',
    },
}


def _split_patterns(value):
    return tuple(p.strip() for p in value.split(',') if p.strip())


class Config:
    """Engine configuration."""

    def __init__(self):
        self.pilot_name = ''
        self.home_base = ''
        self.default_instructor = ''
        self.rows_per_page = 18
        self.default_landings = 1
        self.circuit_landings = 4
        self.override_tolerance = 0.01
        self.hours_mismatch_tolerance = 0.1
        self.extra_multi_engine = ()
        self.extra_simulator = ()

    @classmethod
    def from_file(cls, config_path):
        """Load configuration from an INI file.

        Missing files and missing keys fall back to DEFAULT_CONFIG.

        Args:
            config_path: Path to the config.ini file.

        Returns:
            Config instance.

        Raises:
            ConfigurationError: If a numeric setting cannot be parsed or is
                out of range.
        """
        parser = configparser.ConfigParser()

        # Set defaults
        for section, values in DEFAULT_CONFIG.items():
            parser[section] = values

        # Read user config
        if os.path.exists(config_path):
            parser.read(config_path, encoding='utf-8')
            logger.debug("Loaded logbook config from %s", config_path)

        return cls.from_parser(parser)

    @classmethod
    def from_parser(cls, parser):
        """Build a Config from an already-populated ConfigParser."""
        config = cls()

        config.pilot_name = parser.get('pilot', 'name', fallback='')
        config.home_base = parser.get('pilot', 'home_base', fallback='')
        config.default_instructor = parser.get('pilot', 'default_instructor', fallback='')

        try:
            config.rows_per_page = parser.getint('pagination', 'rows_per_page', fallback=18)
            config.default_landings = parser.getint('derivation', 'default_landings', fallback=1)
            config.circuit_landings = parser.getint('derivation', 'circuit_landings', fallback=4)
            config.override_tolerance = parser.getfloat(
                'derivation', 'override_tolerance', fallback=0.01)
            config.hours_mismatch_tolerance = parser.getfloat(
                'validation', 'hours_mismatch_tolerance', fallback=0.1)
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting in logbook config: {e}")

        config.extra_multi_engine = _split_patterns(
            parser.get('aircraft', 'multi_engine', fallback=''))
        config.extra_simulator = _split_patterns(
            parser.get('aircraft', 'simulator', fallback=''))

        config.validate()
        return config

    def override(self, **kwargs):
        """Override config values from caller arguments.

        Only overrides non-None values; unknown names are ignored.
        """
        for key, value in kwargs.items():
            if value is not None and hasattr(self, key):
                setattr(self, key, value)
        self.validate()

    def validate(self):
        """Check that settings are usable.

        Raises:
            ConfigurationError: If a setting is out of range.
        """
        if not isinstance(self.rows_per_page, int) or self.rows_per_page <= 0:
            raise ConfigurationError(
                f"rows_per_page must be a positive integer, got {self.rows_per_page!r}",
                setting='rows_per_page',
            )
        for name in ('default_landings', 'circuit_landings'):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} cannot be negative", setting=name)
        for name in ('override_tolerance', 'hours_mismatch_tolerance'):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} cannot be negative", setting=name)

    def __repr__(self):
        return (
            f"Config(\n"
            f"  pilot_name='{self.pilot_name}',\n"
            f"  home_base='{self.home_base}',\n"
            f"  rows_per_page={self.rows_per_page},\n"
            f"  default_landings={self.default_landings},\n"
            f"  circuit_landings={self.circuit_landings},\n"
            f"  override_tolerance={self.override_tolerance},\n"
            f"  hours_mismatch_tolerance={self.hours_mismatch_tolerance},\n"
            f")"
        )


DEFAULTS = Config()


def resolve(config):
    """Return ``config`` or the module defaults when None."""
    return config if config is not None else DEFAULTS
