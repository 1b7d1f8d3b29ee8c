"""sundial utilities."""

from sundial.utils.helpers import dedupe, format_list, truncate_string
from sundial.utils.logging import get_logger, setup_logging

__all__ = [
    "dedupe",
    "format_list",
    "truncate_string",
    "setup_logging",
    "get_logger",
]
