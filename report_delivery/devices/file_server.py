"""
File server output device.

Sends report results to an FTP, FTPS, SFTP, SCP or WebDAV server. The
connection and the upload can be customised through the session and
processing hooks (see report_delivery.devices.hooks).
"""

import logging
import uuid
from typing import Any, ClassVar, List, Optional

from pydantic import Field, PrivateAttr, field_validator

from report_delivery.core.exceptions import SecurityError, ValidationError
from report_delivery.devices.base import OutputDevice
from report_delivery.devices.hooks import (
    default_processing_hook,
    default_session_hook,
    resolve_hook,
)
from report_delivery.models.config import FtpSecure, Protocol, SessionOptions
from report_delivery.models.report import ReportContext
from report_delivery.security.encryption import PasswordCipher, get_password_cipher
from report_delivery.transfer.base import TransferSession

logger = logging.getLogger(__name__)

DEFAULT_GUID = "c428a6ba-061b-4a47-b9bc-f3f02442ab4b"
DEFAULT_NAME = "File Server Device"


class OutputFileServerDevice(OutputDevice):
    """Output device that uploads report results to a file server."""

    XML_ROOT: ClassVar[str] = "OutputFileServerDevice"
    DEVICE_LABEL: ClassVar[str] = "File Server"

    guid: str = DEFAULT_GUID
    name: str = DEFAULT_NAME

    protocol: Protocol = Protocol.FTP
    ftp_secure: FtpSecure = FtpSecure.NONE
    host_name: str = "127.0.0.1"
    port_number: int = Field(21, ge=1, le=65535)
    # Allowed remote directories, one per line or separated by ';'
    directories: str = "/"
    user_name: str = ""
    # Encrypted, see clear_password
    password: str = Field("", repr=False)

    # Hook references, empty for the built-in behaviour
    session_script: str = ""
    processing_script: str = ""

    passive_mode: bool = True
    timeout: int = Field(30, gt=0)
    accept_any_certificate: bool = False
    ssh_host_key_fingerprint: str = ""
    webdav_secure: bool = False

    _session: Optional[TransferSession] = PrivateAttr(None)
    _cipher: Optional[PasswordCipher] = PrivateAttr(None)

    @field_validator('directories')
    @classmethod
    def normalize_newlines(cls, v):
        return v.replace('\r\n', '\n').replace('\r', '\n')

    @classmethod
    def create(cls, **values: Any) -> "OutputFileServerDevice":
        """Create a device with a new identifier and the default name."""
        values.setdefault('guid', str(uuid.uuid4()))
        values.setdefault('name', DEFAULT_NAME)
        return cls(**values)

    @property
    def directories_list(self) -> List[str]:
        """Allowed remote directories."""
        entries = self.directories.replace(';', '\n').split('\n')
        return [entry.strip() for entry in entries if entry.strip()]

    # Password

    @property
    def cipher(self) -> PasswordCipher:
        return self._cipher or get_password_cipher()

    def use_cipher(self, cipher: PasswordCipher) -> None:
        """Encrypt and decrypt this device's password with a specific cipher."""
        self._cipher = cipher

    @property
    def clear_password(self) -> str:
        """The decrypted password. On failure the error is recorded and the stored value returned."""
        try:
            return self.cipher.decrypt(self.password)
        except SecurityError as e:
            self.error = f"Error during password decryption: {e.message}"
            logger.warning(f"Device '{self.name}': {self.error}")
            return self.password

    @clear_password.setter
    def clear_password(self, value: str) -> None:
        try:
            self.password = self.cipher.encrypt(value)
        except SecurityError as e:
            self.error = f"Error during password encryption: {e.message}"
            logger.warning(f"Device '{self.name}': {self.error}")
            self.password = value

    # Sessions

    @property
    def session(self) -> Optional[TransferSession]:
        """The session opened by the last open_session() call."""
        return self._session

    def session_options(self) -> SessionOptions:
        """Connection options built from the device settings."""
        return SessionOptions(
            protocol=self.protocol,
            host_name=self.host_name,
            port_number=self.port_number,
            user_name=self.user_name,
            password=self.clear_password,
            ftp_secure=self.ftp_secure,
            passive_mode=self.passive_mode,
            timeout=self.timeout,
            accept_any_certificate=self.accept_any_certificate,
            ssh_host_key_fingerprint=self.ssh_host_key_fingerprint,
            webdav_secure=self.webdav_secure,
        )

    def open_session(self) -> TransferSession:
        """
        Run the session hook and keep the session it opened.

        A session still open from a previous call is closed first.
        """
        hook = resolve_hook(self.session_script, default_session_hook)
        self.close_session()

        session = hook(self)
        if session is None:
            raise ValidationError(
                f"The session hook of device '{self.name}' did not return a session"
            )
        self._session = session
        return session

    def close_session(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    # Output device operations

    def process(self, report: ReportContext) -> None:
        """Deliver the report through the processing hook."""
        hook = resolve_hook(self.processing_script, default_processing_hook)
        logger.debug(f"Processing report '{report.result_file_name}' with device '{self.name}'")
        hook(report)

    def validate(self) -> None:
        if not self.host_name or not self.host_name.strip():
            raise ValidationError("The File Server cannot be empty.", failed_checks=['host_name'])

    def test_connection(self) -> None:
        """Open and close a session, reporting the outcome in information and error."""
        self.error = ""
        self.information = ""

        try:
            self.open_session()
            self.information = (
                f"The connection to '{self.host_name}:{self.port_number}' is successful"
            )
        except Exception as e:
            self.error = str(e)
            cause = e.__cause__
            if cause is not None and str(cause).strip() not in self.error:
                self.error += " " + str(cause).strip()
            self.information = "Error got testing the connection."
            logger.warning(f"Connection test of device '{self.name}' failed: {self.error}")
        finally:
            try:
                self.close_session()
            except Exception as e:
                logger.warning(f"Closing the test session of device '{self.name}' failed: {e}")
