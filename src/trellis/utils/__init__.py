"""Trellis utility modules.

- logging: Standardized logging with human/verbose/JSON modes
"""

from trellis.utils.logging import get_logger, log_structured, setup_logging

__all__ = [
    "get_logger",
    "log_structured",
    "setup_logging",
]
