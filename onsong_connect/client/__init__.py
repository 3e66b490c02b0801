"""
Módulos client: protocolo Connect, tokens, URL scheme y descubrimiento
"""

from .connect_client import ConnectClient
from .token_store import TokenStore, default_token_store
from .factory import create_authenticated_client
from .url_scheme import UrlSchemeService, KNOWN_ACTIONS
from .discovery import DiscoveryService

__all__ = [
    "ConnectClient",
    "TokenStore",
    "default_token_store",
    "create_authenticated_client",
    "UrlSchemeService",
    "KNOWN_ACTIONS",
    "DiscoveryService",
]
