"""
Core module for Report Delivery.

This module contains the exception hierarchy shared by devices,
transfer sessions and the CLI.
"""

from report_delivery.core.exceptions import (
    ReportDeliveryError,
    ConfigurationError,
    ValidationError,
    ConnectionError,
    TransferError,
    SecurityError,
    DeviceLoadError,
    FileConflictError,
)

__all__ = [
    "ReportDeliveryError",
    "ConfigurationError",
    "ValidationError",
    "ConnectionError",
    "TransferError",
    "SecurityError",
    "DeviceLoadError",
    "FileConflictError",
]
