"""
Utilities module for Report Delivery.

This module contains utility functions and helper classes
used throughout the application.
"""

from report_delivery.utils.helpers import (
    calculate_file_checksum,
    format_bytes,
    get_unique_file_name,
    create_zip,
    load_config_file,
    sanitize_dict,
)
from report_delivery.utils.logging import (
    setup_logging,
    StructuredFormatter,
)

__all__ = [
    # Helper functions
    "calculate_file_checksum",
    "format_bytes",
    "get_unique_file_name",
    "create_zip",
    "load_config_file",
    "sanitize_dict",
    # Logging utilities
    "setup_logging",
    "StructuredFormatter",
]
