"""Utility modules for tagmask.

Provides:
- logger: get_logger for logging
"""

from tagmask.utils.logger import get_logger

__all__ = ["get_logger"]
