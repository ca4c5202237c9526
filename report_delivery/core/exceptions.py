"""
Custom exceptions for Report Delivery.

This module defines custom exception classes used throughout
the application for better error handling and reporting.
"""

from typing import Any, Dict, List, Optional


class ReportDeliveryError(Exception):
    """Base exception class for Report Delivery errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}


class ConfigurationError(ReportDeliveryError):
    """Raised when there's an error in configuration."""
    pass


class ValidationError(ReportDeliveryError):
    """Raised when validation fails."""

    def __init__(
        self,
        message: str,
        failed_checks: Optional[List[str]] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.failed_checks = failed_checks or []


class ConnectionError(ReportDeliveryError):
    """Raised when a session to the file server cannot be opened."""
    pass


class TransferError(ReportDeliveryError):
    """Raised when file transfer fails."""
    pass


class SecurityError(ReportDeliveryError):
    """Raised when encryption or decryption fails."""
    pass


class DeviceLoadError(ReportDeliveryError):
    """Raised when a device file cannot be read."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.path = path


class FileConflictError(ReportDeliveryError):
    """Raised when a device file was modified by someone else since it was loaded."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.path = path
