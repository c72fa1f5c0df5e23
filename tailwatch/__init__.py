"""
Tailwatch - an alert detector that tails a single log file.

This package scans newly appended log bytes for an alert marker, keeps a
durable acknowledgment offset so seen alerts are not raised again, and
reports alert state to notification sinks.
"""

__version__ = "0.1.0"
