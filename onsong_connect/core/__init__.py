"""
Módulos core del cliente OnSong Connect
"""

from .config import config, OnSongConfig, validate_host
from .exceptions import (
    ErrorCodes,
    OnSongError,
    OnSongConnectionRefusedError,
    OnSongConnectionTimeoutError,
    OnSongHostNotAllowedError,
    OnSongAuthError,
    OnSongApiError,
    OnSongNotFoundError,
    OnSongInvalidResponseError,
    OnSongImportDisabledError,
    OnSongExportTimeoutError,
    OnSongExportError,
    OnSongUrlSchemeUnsupportedError,
    OnSongUrlSchemeError,
    OnSongInvalidInputError,
    OnSongInvalidTargetError,
    OnSongConfigurationError,
    OnSongDiscoveryError,
    OnSongFileError,
    format_error,
)
from .logging import setup_logging

__all__ = [
    "config",
    "OnSongConfig",
    "validate_host",
    "ErrorCodes",
    "OnSongError",
    "OnSongConnectionRefusedError",
    "OnSongConnectionTimeoutError",
    "OnSongHostNotAllowedError",
    "OnSongAuthError",
    "OnSongApiError",
    "OnSongNotFoundError",
    "OnSongInvalidResponseError",
    "OnSongImportDisabledError",
    "OnSongExportTimeoutError",
    "OnSongExportError",
    "OnSongUrlSchemeUnsupportedError",
    "OnSongUrlSchemeError",
    "OnSongInvalidInputError",
    "OnSongInvalidTargetError",
    "OnSongConfigurationError",
    "OnSongDiscoveryError",
    "OnSongFileError",
    "format_error",
    "setup_logging",
]
