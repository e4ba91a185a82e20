"""
TCCA pilot logbook engine.

Turns quick-entry fields or imported logbook rows into the regulatory
time buckets, validates them, rolls them up for dashboards, and splits
them into logbook pages with running totals.
"""
