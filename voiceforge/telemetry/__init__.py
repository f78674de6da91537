"""Logging scaffolds.

This package emits per-request synthesis events for auditing provider usage.
"""

from .logger import RequestLogger, configure_logging

__all__ = ["RequestLogger", "configure_logging"]
