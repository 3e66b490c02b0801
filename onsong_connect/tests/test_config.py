"""
Tests de configuración, errores y logging
"""

import json
import logging

import pytest

from onsong_connect.core.config import OnSongConfig, validate_host
from onsong_connect.core.exceptions import (
    ErrorCodes,
    OnSongAuthError,
    OnSongConfigurationError,
    OnSongFileError,
    format_error,
)
from onsong_connect.core.logging import setup_logging


class TestConfig:
    """Tests de OnSongConfig"""

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("ONSONG_HOST", "192.168.1.20")
        monkeypatch.setenv("ONSONG_ALLOWED_HOSTS", "192.168.1.20, 192.168.1.21,")
        monkeypatch.setenv("ONSONG_ENABLE_IMPORT", "TRUE")
        monkeypatch.setenv("ONSONG_CALLBACK_PORT", "9999")

        cfg = OnSongConfig()

        assert cfg.default_host == "192.168.1.20"
        assert cfg.allowed_hosts == ["192.168.1.20", "192.168.1.21"]
        assert cfg.enable_import is True
        assert cfg.callback_port == 9999

    def test_defaults(self, monkeypatch):
        for name in ("ONSONG_HOST", "ONSONG_PORT", "ONSONG_TOKEN", "ONSONG_CALLBACK_PORT",
                     "ONSONG_CLIENT_TIMEOUT", "ONSONG_EXPORT_TIMEOUT", "ONSONG_ENABLE_IMPORT"):
            monkeypatch.delenv(name, raising=False)

        cfg = OnSongConfig()

        assert cfg.default_host is None
        assert cfg.default_port == 80
        assert cfg.callback_port == 9876
        assert cfg.client_timeout == 10.0
        assert cfg.export_timeout == 60.0
        assert cfg.enable_import is False
        assert cfg.default_target() is None

    def test_default_target(self):
        cfg = OnSongConfig(default_host="10.0.0.5", default_port=8080, default_token=None)

        target = cfg.default_target()

        assert (target.host, target.port, target.token) == ("10.0.0.5", 8080, None)

    def test_validate_ok(self):
        cfg = OnSongConfig(callback_port=9876, default_port=80, log_level="debug", log_format="simple")
        assert cfg.validate() is cfg
        assert cfg.log_level_value == logging.DEBUG

    def test_validate_collects_errors(self):
        cfg = OnSongConfig(callback_port=80, client_timeout=0, log_format="json")

        with pytest.raises(OnSongConfigurationError) as exc_info:
            cfg.validate()

        assert exc_info.value.code == ErrorCodes.INVALID_CONFIG
        assert len(exc_info.value.details["errors"]) == 3

    def test_validate_host(self):
        assert validate_host("cualquiera", [])
        assert validate_host("10.0.0.5", ["10.0.0.5"])
        assert not validate_host("10.0.0.6", ["10.0.0.5"])


class TestErrors:
    """Tests de la forma estructurada de los errores"""

    def test_to_dict_and_format(self):
        error = OnSongAuthError({"reason": "Not Accepting Users"})

        data = json.loads(format_error(error))

        assert data == {
            "code": "AUTH_FAILED",
            "message": error.message,
            "details": {"reason": "Not Accepting Users"},
        }
        assert "AUTH_FAILED" in str(error)

    def test_code_override(self):
        error = OnSongFileError({"path": "/x"}, code=ErrorCodes.FILE_WRITE_ERROR)

        assert error.code == ErrorCodes.FILE_WRITE_ERROR
        assert OnSongFileError().code == ErrorCodes.FILE_READ_ERROR

    def test_format_unknown_error(self):
        data = json.loads(format_error(RuntimeError("boom")))
        assert data == {"code": "UNKNOWN_ERROR", "message": "boom"}


def test_setup_logging_configures_package_logger():
    setup_logging(OnSongConfig(log_level="DEBUG", log_format="simple"))

    logger = logging.getLogger("onsong_connect")
    assert logger.level == logging.DEBUG
    assert logger.propagate is False
    assert logging.getLogger("httpx").level == logging.WARNING
