"""
Data models for Report Delivery.

This module contains the Pydantic configuration models and the report
context handed to output devices.
"""

from report_delivery.models.config import (
    Protocol,
    FtpSecure,
    TransferMode,
    SessionOptions,
    TransferOptions,
    DeliverySettings,
    load_settings,
)
from report_delivery.models.report import ReportContext, ReportOutput

__all__ = [
    "Protocol",
    "FtpSecure",
    "TransferMode",
    "SessionOptions",
    "TransferOptions",
    "DeliverySettings",
    "load_settings",
    "ReportContext",
    "ReportOutput",
]
