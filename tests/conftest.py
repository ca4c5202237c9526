"""
Pytest configuration and fixtures for the Report Delivery tests.

This module provides a deterministic password key, sample devices and
reports, and an in-memory transfer session that records uploads.
"""

import sys
import types
from pathlib import Path
from typing import Callable, List, Tuple

import pytest

from report_delivery.devices.file_server import OutputFileServerDevice
from report_delivery.models.config import SessionOptions, TransferMode
from report_delivery.models.report import ReportContext, ReportOutput
from report_delivery.security.encryption import PasswordCipher, get_password_cipher
from report_delivery.transfer.base import TransferSession


TEST_PASSPHRASE = "test-passphrase"


class RecordingSession(TransferSession):
    """Transfer session that keeps uploads in memory."""

    def __init__(self, options: SessionOptions = None):
        super().__init__(options or SessionOptions(host_name="files.example.com"))
        self.opened = False
        self.closed = False
        self.uploads: List[Tuple[str, str, TransferMode, bytes]] = []
        self.directories: List[str] = []

    @property
    def is_open(self) -> bool:
        return self.opened and not self.closed

    def open(self) -> "RecordingSession":
        self.opened = True
        self.closed = False
        return self

    def close(self) -> None:
        self.closed = True

    def exists(self, remote_path: str) -> bool:
        return any(upload[1] == remote_path for upload in self.uploads)

    def make_directories(self, remote_dir: str) -> None:
        self.directories.append(remote_dir)

    def _upload(self, local_path: Path, remote_path: str, transfer_mode: TransferMode) -> int:
        content = local_path.read_bytes()
        self.uploads.append((str(local_path), remote_path, transfer_mode, content))
        return len(content)


@pytest.fixture(autouse=True)
def password_key(monkeypatch):
    """Use a fixed password key from the environment."""
    monkeypatch.setenv("REPORT_DELIVERY_PASSWORD_KEY", TEST_PASSPHRASE)
    get_password_cipher.cache_clear()
    yield TEST_PASSPHRASE
    get_password_cipher.cache_clear()


@pytest.fixture
def cipher() -> PasswordCipher:
    return PasswordCipher(TEST_PASSPHRASE)


@pytest.fixture
def device() -> OutputFileServerDevice:
    """Sample FTP device."""
    device = OutputFileServerDevice.create(
        host_name="files.example.com",
        port_number=2121,
        user_name="reports",
        directories="/reports\n/archive",
    )
    device.clear_password = "s3cret"
    return device


@pytest.fixture
def recording_session() -> RecordingSession:
    return RecordingSession()


@pytest.fixture
def result_file(tmp_path) -> Path:
    """A rendered report on local disk."""
    path = tmp_path / "render_1234.html"
    path.write_text("<html><body>Sales</body></html>", encoding="utf-8")
    return path


@pytest.fixture
def report(device, result_file) -> ReportContext:
    output = ReportOutput(device=device, folder="reports/daily")
    return ReportContext(
        result_file_path=str(result_file),
        output=output,
        result_file_name="Sales.html",
    )


@pytest.fixture
def hook_module(monkeypatch) -> Callable[..., str]:
    """Register callables in an importable module and return its name."""
    module = types.ModuleType("custom_delivery_hooks")
    monkeypatch.setitem(sys.modules, "custom_delivery_hooks", module)

    def register(**hooks) -> str:
        for name, hook in hooks.items():
            setattr(module, name, hook)
        return module.__name__

    return register
