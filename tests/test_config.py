"""
Unit tests for settings loading and the configuration models.
"""

import json

import pydantic
import pytest
import yaml

from report_delivery.models.config import (
    DeliverySettings,
    Protocol,
    SessionOptions,
    TransferMode,
    TransferOptions,
    load_settings,
)


@pytest.fixture
def clean_environment(monkeypatch, tmp_path):
    for name in ("REPORT_DELIVERY_PASSWORD_KEY", "REPORT_DELIVERY_LOG_LEVEL", "REPORT_DELIVERY_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("report_delivery.models.config.DEFAULT_SETTINGS_PATH", tmp_path / "absent.yaml")


class TestLoadSettings:
    """Test load_settings."""

    def test_defaults_without_file(self, clean_environment):
        settings = load_settings()

        assert settings.password_key is None
        assert settings.log_level == "INFO"
        assert settings.log_file is None
        assert not settings.structured_logging

    def test_yaml_file(self, clean_environment, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            'password_key': 'from-file',
            'log_level': 'debug',
            'structured_logging': True,
        }))

        settings = load_settings(path)

        assert settings.password_key == 'from-file'
        assert settings.log_level == 'DEBUG'
        assert settings.structured_logging

    def test_json_file(self, clean_environment, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({'log_file': '/var/log/report-delivery.log'}))

        assert load_settings(path).log_file == '/var/log/report-delivery.log'

    def test_empty_yaml_file(self, clean_environment, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_settings(path).log_level == "INFO"

    def test_environment_overrides_file(self, clean_environment, monkeypatch, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({'password_key': 'from-file', 'log_level': 'INFO'}))
        monkeypatch.setenv("REPORT_DELIVERY_PASSWORD_KEY", "from-env")
        monkeypatch.setenv("REPORT_DELIVERY_LOG_LEVEL", "warning")

        settings = load_settings(path)

        assert settings.password_key == "from-env"
        assert settings.log_level == "WARNING"

    def test_explicit_missing_file(self, clean_environment, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "nope.yaml")

    def test_unsupported_format(self, clean_environment, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[settings]")

        with pytest.raises(ValueError):
            load_settings(path)

    def test_invalid_log_level(self):
        with pytest.raises(pydantic.ValidationError):
            DeliverySettings(log_level="VERBOSE")

    def test_password_key_hidden_from_repr(self):
        assert "hidden" not in repr(DeliverySettings(password_key="hidden"))


class TestSessionOptions:
    """Test session option validation."""

    def test_defaults(self):
        options = SessionOptions(host_name=" files.example.com ")

        assert options.host_name == "files.example.com"
        assert options.protocol == Protocol.FTP
        assert options.port_number == 21
        assert options.passive_mode
        assert options.timeout == 30

    def test_host_required(self):
        with pytest.raises(pydantic.ValidationError):
            SessionOptions(host_name="  ")

    @pytest.mark.parametrize("port", [0, 65536])
    def test_port_range(self, port):
        with pytest.raises(pydantic.ValidationError):
            SessionOptions(host_name="files.example.com", port_number=port)

    def test_password_hidden_from_repr(self):
        options = SessionOptions(host_name="files.example.com", password="s3cret")
        assert "s3cret" not in repr(options)

    def test_transfer_option_defaults(self):
        options = TransferOptions()

        assert options.transfer_mode == TransferMode.BINARY
        assert options.overwrite
        assert options.create_directories
