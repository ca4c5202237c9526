"""
Output devices for Report Delivery.

This module exposes the output device base class and the file server
device that uploads report results to remote servers.
"""

from report_delivery.devices.base import OutputDevice
from report_delivery.devices.file_server import OutputFileServerDevice
from report_delivery.devices.hooks import (
    default_processing_hook,
    default_session_hook,
    resolve_hook,
)

__all__ = [
    "OutputDevice",
    "OutputFileServerDevice",
    "default_processing_hook",
    "default_session_hook",
    "resolve_hook",
]
