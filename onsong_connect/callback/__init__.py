"""
Servidor de callbacks de export
"""

from .server import CallbackServer
from .parsing import CallbackParseError, parse_callback_body

__all__ = [
    "CallbackServer",
    "CallbackParseError",
    "parse_callback_body",
]
