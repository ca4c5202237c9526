"""
File transfer module for Report Delivery.

This module wraps the FTP/FTPS, SFTP, SCP and WebDAV client libraries
behind a common TransferSession interface.
"""

from .base import TransferSession, TransferResult, TransferStatus
from .factory import SessionFactory, register_session_type

__all__ = [
    'TransferSession',
    'TransferResult',
    'TransferStatus',
    'SessionFactory',
    'register_session_type',
]
