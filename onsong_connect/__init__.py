"""
OnSong Connect - Control remoto de OnSong

Cliente del protocolo Connect, invocación del URL scheme onsong:// y
servidor local de callbacks para exports.
"""

__version__ = "1.0.0"

# Exportaciones principales
from .core.config import config, OnSongConfig
from .core.exceptions import (
    ErrorCodes,
    OnSongError,
    OnSongConnectionRefusedError,
    OnSongConnectionTimeoutError,
    OnSongAuthError,
    OnSongApiError,
    OnSongNotFoundError,
    OnSongInvalidResponseError,
    OnSongExportTimeoutError,
    OnSongExportError,
    OnSongUrlSchemeUnsupportedError,
    OnSongUrlSchemeError,
)
from .client import ConnectClient, TokenStore, create_authenticated_client, UrlSchemeService
from .callback import CallbackServer

__all__ = [
    # Configuración
    "config",
    "OnSongConfig",

    # Excepciones
    "ErrorCodes",
    "OnSongError",
    "OnSongConnectionRefusedError",
    "OnSongConnectionTimeoutError",
    "OnSongAuthError",
    "OnSongApiError",
    "OnSongNotFoundError",
    "OnSongInvalidResponseError",
    "OnSongExportTimeoutError",
    "OnSongExportError",
    "OnSongUrlSchemeUnsupportedError",
    "OnSongUrlSchemeError",

    # Componentes
    "ConnectClient",
    "TokenStore",
    "create_authenticated_client",
    "UrlSchemeService",
    "CallbackServer",
]
