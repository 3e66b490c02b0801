"""Construcción de clientes Connect autenticados"""

import logging
from typing import Optional

import httpx

from ..core.config import config
from ..core.exceptions import OnSongError
from ..shared.models import Target
from .connect_client import ConnectClient
from .token_store import TokenStore

logger = logging.getLogger(__name__)


async def create_authenticated_client(
    target: Target,
    token_store: TokenStore,
    device_name: Optional[str] = None,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ConnectClient:
    """
    Devuelve un ConnectClient listo para usar contra `target`.

    - Si el target trae token: se usa tal cual, sin red y sin tocar el store.
    - Si no: token del store (o uno nuevo), authenticate() y, solo si tuvo
      éxito, se guarda el token en el store para ese endpoint.
    """
    if target.token is not None:
        return ConnectClient(target.host, target.port, target.token, timeout, transport)

    was_cached = token_store.get_token(target.host, target.port) is not None
    token = token_store.get_or_create_token(target.host, target.port)
    client = ConnectClient(target.host, target.port, token, timeout, transport)

    try:
        await client.authenticate(device_name or config.device_name)
    except OnSongError:
        # El store queda como estaba antes del intento
        if not was_cached:
            token_store.clear_token(target.host, target.port)
        raise

    token_store.set_token(target.host, target.port, client.token)
    logger.debug(f"Cliente autenticado para {target.host}:{target.port}")
    return client
