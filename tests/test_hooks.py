"""
Tests for hook resolution and the built-in processing hook.
"""

import os
import zipfile
from pathlib import Path
from unittest.mock import patch

import pytest

from report_delivery.core.exceptions import ConfigurationError, TransferError
from report_delivery.devices.hooks import (
    default_processing_hook,
    default_session_hook,
    resolve_hook,
)
from report_delivery.models.config import TransferMode
from report_delivery.transfer.factory import SessionFactory


def _fallback(*args):
    return "fallback"


class TestResolveHook:
    """Test hook reference resolution."""

    def test_empty_reference_uses_default(self):
        assert resolve_hook("", _fallback) is _fallback
        assert resolve_hook(None, _fallback) is _fallback
        assert resolve_hook("   \n", _fallback) is _fallback

    def test_module_function(self, hook_module):
        def upload(report):
            return report

        module_name = hook_module(upload=upload)

        assert resolve_hook(f"{module_name}:upload", _fallback) is upload

    def test_dotted_attribute(self):
        assert resolve_hook("os:path.join", _fallback) is os.path.join

    def test_missing_separator(self):
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_hook("os.path.join", _fallback)
        assert "Invalid hook reference" in str(exc_info.value)

    def test_missing_module(self):
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_hook("no_such_module_for_tests:hook", _fallback)
        assert "no_such_module_for_tests" in str(exc_info.value)

    def test_missing_attribute(self, hook_module):
        module_name = hook_module()

        with pytest.raises(ConfigurationError):
            resolve_hook(f"{module_name}:absent", _fallback)

    def test_not_callable(self, hook_module):
        module_name = hook_module(VALUE=42)

        with pytest.raises(ConfigurationError):
            resolve_hook(f"{module_name}:VALUE", _fallback)


class TestDefaultSessionHook:
    """Test the built-in session hook."""

    def test_opens_factory_session(self, device, recording_session):
        with patch.object(SessionFactory, 'create_session', return_value=recording_session):
            session = default_session_hook(device)

        assert session is recording_session
        assert session.opened


class TestDefaultProcessingHook:
    """Test the built-in upload behaviour."""

    def test_upload_to_output_folder(self, report, result_file, recording_session):
        with patch.object(SessionFactory, 'create_session', return_value=recording_session):
            default_processing_hook(report)

        local_path, remote_path, mode, content = recording_session.uploads[0]
        assert local_path == str(result_file)
        assert remote_path == "/reports/daily/Sales.html"
        assert mode == TransferMode.ASCII
        assert content == result_file.read_bytes()
        assert recording_session.directories == ["/reports/daily"]
        assert recording_session.closed

    def test_device_forgets_closed_session(self, report, recording_session):
        device = report.output.device

        with patch.object(SessionFactory, 'create_session', return_value=recording_session):
            default_processing_hook(report)

        assert recording_session.closed
        assert device.session is None

    def test_information_and_log(self, report, recording_session):
        with patch.object(SessionFactory, 'create_session', return_value=recording_session):
            default_processing_hook(report)

        assert report.output.information == "Report result generated in '/reports/daily/Sales.html'"
        assert report.messages == ["Report result generated in '/reports/daily/Sales.html'"]

    def test_translated_information(self, report, recording_session):
        report.translator = {
            "Report result generated in '{0}'": "Résultat généré dans '{0}'"
        }.get

        with patch.object(SessionFactory, 'create_session', return_value=recording_session):
            default_processing_hook(report)

        assert report.output.information == "Résultat généré dans '/reports/daily/Sales.html'"

    def test_overwrites_existing_file(self, report, recording_session):
        with patch.object(SessionFactory, 'create_session', return_value=recording_session):
            default_processing_hook(report)
            default_processing_hook(report)

        assert len(recording_session.uploads) == 2

    def test_root_folder(self, report, recording_session):
        report.output.folder = "/"

        with patch.object(SessionFactory, 'create_session', return_value=recording_session):
            default_processing_hook(report)

        assert recording_session.uploads[0][1] == "/Sales.html"
        assert recording_session.directories == []

    def test_zip_result(self, report, result_file, recording_session):
        report.output.zip_result = True

        with patch.object(SessionFactory, 'create_session', return_value=recording_session):
            default_processing_hook(report)

        local_path, remote_path, mode, _ = recording_session.uploads[0]
        zip_path = result_file.with_suffix('.zip')
        assert remote_path == "/reports/daily/Sales.zip"
        assert local_path == str(zip_path)
        assert mode == TransferMode.BINARY
        assert report.result_file_path == str(zip_path)
        with zipfile.ZipFile(zip_path) as zf:
            assert zf.namelist() == ["Sales.html"]
            assert zf.read("Sales.html") == result_file.read_bytes()

    def test_zip_does_not_overwrite_existing_archive(self, report, result_file, recording_session):
        existing = result_file.with_suffix('.zip')
        existing.write_bytes(b"previous archive")
        report.output.zip_result = True

        with patch.object(SessionFactory, 'create_session', return_value=recording_session):
            default_processing_hook(report)

        assert existing.read_bytes() == b"previous archive"
        assert Path(report.result_file_path).name == "render_1234 (1).zip"
        assert recording_session.uploads[0][1] == "/reports/daily/Sales.zip"

    def test_upload_failure_propagates(self, report, recording_session):
        def fail(*args):
            raise OSError("disk quota exceeded")

        recording_session._upload = fail

        with patch.object(SessionFactory, 'create_session', return_value=recording_session):
            with pytest.raises(TransferError) as exc_info:
                default_processing_hook(report)

        assert "disk quota exceeded" in str(exc_info.value)
        assert report.output.information == ""
        assert recording_session.closed
        assert report.output.device.session is None

    def test_process_uses_default_hook(self, device, report, recording_session):
        with patch.object(SessionFactory, 'create_session', return_value=recording_session):
            device.process(report)

        assert recording_session.uploads[0][1] == "/reports/daily/Sales.html"
        assert "Sales.html" in report.output.information
