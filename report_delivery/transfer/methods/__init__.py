"""
Transfer session implementations.

Importing this package registers the FTP/FTPS, SFTP, SCP and WebDAV
sessions with the SessionFactory.
"""

from .ftp import FtpSession
from .ssh import SftpSession, ScpSession
from .webdav import WebDavSession

__all__ = [
    'FtpSession',
    'SftpSession',
    'ScpSession',
    'WebDavSession',
]
