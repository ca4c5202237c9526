"""
FTP/FTPS transfer session.

This module provides FTP uploads using Python's built-in ftplib, with
explicit (AUTH TLS) and implicit FTPS support.
"""

import ssl
from ftplib import FTP, FTP_TLS, error_perm
from pathlib import Path
from typing import Optional, Union
import logging

from ..base import TransferSession
from ..factory import register_session_type
from ...core.exceptions import ConnectionError
from ...models.config import FtpSecure, Protocol, SessionOptions, TransferMode

logger = logging.getLogger(__name__)


class ImplicitFTP_TLS(FTP_TLS):
    """FTP_TLS variant that wraps the control connection in TLS right away."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._sock = None

    @property
    def sock(self):
        return self._sock

    @sock.setter
    def sock(self, value):
        if value is not None and not isinstance(value, ssl.SSLSocket):
            value = self.context.wrap_socket(value, server_hostname=self.host)
        self._sock = value


@register_session_type(Protocol.FTP)
class FtpSession(TransferSession):
    """
    FTP/FTPS session using ftplib.

    The FTPS mode comes from the ftp_secure option: none for plain FTP,
    explicit for AUTH TLS on the regular port, implicit for TLS from the
    first byte (usually port 990).
    """

    def __init__(self, options: SessionOptions):
        super().__init__(options)
        self._ftp_client: Optional[Union[FTP, FTP_TLS]] = None

    @property
    def is_open(self) -> bool:
        return self._ftp_client is not None

    def _create_ssl_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if self.options.accept_any_certificate:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _create_client(self) -> Union[FTP, FTP_TLS]:
        secure = self.options.ftp_secure
        if secure == FtpSecure.EXPLICIT:
            return FTP_TLS(context=self._create_ssl_context())
        if secure == FtpSecure.IMPLICIT:
            return ImplicitFTP_TLS(context=self._create_ssl_context())
        return FTP()

    def open(self) -> "FtpSession":
        """Establish the FTP connection."""
        if self._ftp_client:
            return self

        client = self._create_client()
        try:
            client.connect(self.options.host_name, self.options.port_number, self.options.timeout)
            client.login(self.options.user_name or 'anonymous', self.options.password or '')

            client.set_pasv(self.options.passive_mode)

            # For FTPS, secure the data connection
            if self.options.ftp_secure != FtpSecure.NONE:
                client.prot_p()
        except Exception as e:
            self.logger.error(f"FTP connection to {self.host_label} failed: {e}")
            try:
                client.close()
            except OSError:
                pass
            raise ConnectionError(
                f"Unable to connect to '{self.host_label}': {e}",
                details={'protocol': 'ftp', 'ftp_secure': self.options.ftp_secure.value}
            ) from e

        self._ftp_client = client
        self.logger.info(f"FTP connection established to {self.host_label}")
        return self

    def close(self) -> None:
        """Close the FTP connection."""
        if not self._ftp_client:
            return

        try:
            self._ftp_client.quit()
        except Exception as e:
            self.logger.debug(f"FTP quit failed, closing socket: {e}")
            self._ftp_client.close()
        self._ftp_client = None

        self.logger.debug("FTP connection closed")

    def exists(self, remote_path: str) -> bool:
        """Check for a remote file with the SIZE command."""
        self._ftp_client.voidcmd('TYPE I')
        try:
            self._ftp_client.size(remote_path)
            return True
        except error_perm:
            return False

    def make_directories(self, remote_dir: str) -> None:
        """Create remote directories one level at a time."""
        path_parts = remote_dir.strip('/').split('/')
        current_path = '/' if remote_dir.startswith('/') else ''

        for part in path_parts:
            if not part:
                continue

            current_path = f"{current_path.rstrip('/')}/{part}" if current_path else part

            try:
                self._ftp_client.cwd(current_path)
            except error_perm:
                try:
                    self._ftp_client.mkd(current_path)
                except error_perm as e:
                    if "exists" not in str(e).lower():
                        raise

        self._ftp_client.cwd('/')

    def _upload(self, local_path: Path, remote_path: str, transfer_mode: TransferMode) -> int:
        command = f"STOR {remote_path}"
        if transfer_mode == TransferMode.ASCII:
            with open(local_path, 'rb') as f:
                self._ftp_client.storlines(command, f)
        else:
            with open(local_path, 'rb') as f:
                self._ftp_client.storbinary(command, f)
        return local_path.stat().st_size
