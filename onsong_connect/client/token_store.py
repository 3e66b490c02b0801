"""Cache en memoria de tokens por endpoint (host:port)"""

import logging
from typing import Dict, Optional

from ..shared.utils import generate_token

logger = logging.getLogger(__name__)


class TokenStore:
    """
    Mapeo "{host}:{port}" -> token.
    Cache pura, sin I/O ni persistencia entre reinicios.
    """

    def __init__(self):
        self._tokens: Dict[str, str] = {}

    @staticmethod
    def _key(host: str, port: int) -> str:
        return f"{host}:{port}"

    def get_or_create_token(self, host: str, port: int) -> str:
        """Devuelve el token cacheado o genera, cachea y devuelve uno nuevo."""
        key = self._key(host, port)

        existing = self._tokens.get(key)
        if existing is not None:
            logger.debug(f"Reutilizando token cacheado para {key}")
            return existing

        token = generate_token()
        self._tokens[key] = token
        logger.info(f"Token nuevo generado y cacheado para {key}")
        return token

    def get_token(self, host: str, port: int) -> Optional[str]:
        return self._tokens.get(self._key(host, port))

    def set_token(self, host: str, port: int, token: str) -> None:
        self._tokens[self._key(host, port)] = token
        logger.debug(f"Token almacenado para {host}:{port}")

    def clear_token(self, host: str, port: int) -> None:
        self._tokens.pop(self._key(host, port), None)
        logger.debug(f"Token eliminado para {host}:{port}")

    def clear_all_tokens(self) -> None:
        self._tokens.clear()
        logger.debug("Todos los tokens eliminados")

    @property
    def size(self) -> int:
        return len(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)


# Instancia compartida para quien quiera un cache de proceso
default_token_store = TokenStore()
