"""
Configuration models for Report Delivery.

This module defines Pydantic models for session options, transfer
options and the application settings.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, field_validator

from report_delivery.utils.helpers import load_config_file


DEFAULT_SETTINGS_PATH = Path.home() / ".report-delivery" / "config.yaml"

ENV_PASSWORD_KEY = "REPORT_DELIVERY_PASSWORD_KEY"
ENV_LOG_LEVEL = "REPORT_DELIVERY_LOG_LEVEL"
ENV_LOG_FILE = "REPORT_DELIVERY_LOG_FILE"


class Protocol(str, Enum):
    """File server protocols supported by the device."""
    FTP = "ftp"
    SFTP = "sftp"
    SCP = "scp"
    WEBDAV = "webdav"


class FtpSecure(str, Enum):
    """TLS mode for FTP connections (FTPS)."""
    NONE = "none"
    IMPLICIT = "implicit"
    EXPLICIT = "explicit"


class TransferMode(str, Enum):
    """How file content is sent to the server."""
    BINARY = "binary"
    ASCII = "ascii"
    AUTOMATIC = "automatic"


class SessionOptions(BaseModel):
    """Connection options used to open a transfer session."""
    protocol: Protocol = Protocol.FTP
    host_name: str
    port_number: int = Field(21, ge=1, le=65535)
    user_name: str = ""
    password: str = Field("", repr=False)
    ftp_secure: FtpSecure = FtpSecure.NONE
    passive_mode: bool = True
    timeout: int = Field(30, gt=0)
    accept_any_certificate: bool = False
    ssh_host_key_fingerprint: str = ""
    webdav_secure: bool = False

    @field_validator('host_name')
    @classmethod
    def host_name_not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError('Host name is required to open a session')
        return v.strip()


class TransferOptions(BaseModel):
    """Options for a single file upload."""
    transfer_mode: TransferMode = TransferMode.BINARY
    overwrite: bool = True
    create_directories: bool = True


class DeliverySettings(BaseModel):
    """Application settings shared by every device."""
    password_key: Optional[str] = Field(None, repr=False)
    log_level: str = "INFO"
    log_file: Optional[str] = None
    structured_logging: bool = False

    @field_validator('log_level')
    @classmethod
    def log_level_known(cls, v):
        level = v.upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f'Unknown log level: {v}')
        return level


def load_settings(path: Optional[Union[str, Path]] = None) -> DeliverySettings:
    """
    Load application settings from a YAML/JSON file and the environment.

    Environment variables override values read from the file. A missing
    file at the default location is not an error.

    Args:
        path: Settings file path, defaults to ~/.report-delivery/config.yaml

    Returns:
        DeliverySettings instance
    """
    data: Dict[str, Any] = {}
    settings_path = Path(path) if path else DEFAULT_SETTINGS_PATH

    if path or settings_path.exists():
        data = load_config_file(settings_path) or {}

    overrides = {
        'password_key': os.environ.get(ENV_PASSWORD_KEY),
        'log_level': os.environ.get(ENV_LOG_LEVEL),
        'log_file': os.environ.get(ENV_LOG_FILE),
    }
    data.update({key: value for key, value in overrides.items() if value})

    return DeliverySettings(**data)
