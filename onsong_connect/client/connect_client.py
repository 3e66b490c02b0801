"""
Cliente del protocolo OnSong Connect.

El token va como segmento del path: http://{host}:{port}/api/{token}{path}.
Los errores de dominio llegan en el body (campo `error`) con status 2xx.
"""

import logging
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..core.config import config
from ..core.exceptions import (
    OnSongApiError,
    OnSongAuthError,
    OnSongConnectionRefusedError,
    OnSongConnectionTimeoutError,
    OnSongInvalidResponseError,
    OnSongNotFoundError,
)
from ..shared.models import (
    ApiAddSongToSetResponse,
    ApiAuthResponse,
    ApiCreateSetResponse,
    ApiCreateSongResponse,
    ApiPingResponse,
    ApiSetDetailResponse,
    ApiSetsListResponse,
    ApiSongsSearchResponse,
    ApiStateObject,
    ApiUpdateContentResponse,
    CreateSongParams,
    ImportResult,
    SearchParams,
)
from ..shared.utils import encode_component, generate_token, parse_chart_metadata

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Orden fijo de los parámetros de búsqueda
_SEARCH_FIELDS = ("q", "title", "artist", "key", "limit", "start")


class ConnectClient:
    """Cliente para la API REST de OnSong Connect."""

    def __init__(
        self,
        host: str,
        port: int,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._host = host
        self._port = port
        self._token = token or generate_token()
        self._timeout = timeout or config.client_timeout
        # Permite inyectar un transport (p. ej. httpx.MockTransport en tests)
        self._transport = transport

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def token(self) -> str:
        return self._token

    @property
    def timeout(self) -> float:
        return self._timeout

    def _build_url(self, path: str) -> str:
        return f"http://{self._host}:{self._port}/api/{self._token}{path}"

    async def _send(
        self,
        method: str,
        path: str,
        json: Any = None,
        content: Optional[str] = None,
        headers: Optional[dict] = None,
    ) -> httpx.Response:
        """Envía la petición y traduce fallos de transporte. No revisa el status."""
        logger.debug(f"{method} {path} -> {self._host}:{self._port}")

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                return await client.request(
                    method, self._build_url(path), json=json, content=content, headers=headers
                )
        except httpx.TimeoutException as e:
            logger.error(f"Timeout en {method} {path} ({self._timeout}s)")
            raise OnSongConnectionTimeoutError({"timeout": self._timeout}) from e
        except httpx.RequestError as e:
            logger.error(f"Error de conexión en {method} {path}: {e}")
            raise OnSongConnectionRefusedError({"message": str(e)}) from e

    async def _request(self, method: str, path: str, body: Any = None) -> Any:
        """Petición JSON: status no-2xx -> ConnectionRefused, body no-JSON -> InvalidResponse."""
        response = await self._send(method, path, json=body)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Petición fallida {method} {path}: {e.response.status_code}")
            raise OnSongConnectionRefusedError(
                {"status": e.response.status_code, "body": e.response.text}
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise OnSongInvalidResponseError({"path": path, "message": "El body no es JSON"}) from e

        logger.debug(f"Respuesta de {path}: {data}")
        return data

    @staticmethod
    def _validate(model: Type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise OnSongInvalidResponseError({"model": model.__name__, "message": str(e)}) from e

    async def authenticate(self, device_name: Optional[str] = None) -> ApiAuthResponse:
        """
        Registra (o confirma) el token en OnSong.

        Raises:
            OnSongAuthError: si la respuesta trae `error` o no tiene el formato esperado
        """
        body = {"name": device_name} if device_name is not None else None
        data = await self._request("PUT", "/auth", body)

        try:
            parsed = ApiAuthResponse.model_validate(data)
        except ValidationError as e:
            raise OnSongAuthError({"reason": "Invalid auth response format"}) from e

        if parsed.error is not None:
            logger.error(f"Autenticación rechazada por {self._host}:{self._port}: {parsed.error}")
            raise OnSongAuthError({"reason": parsed.error})

        logger.info(f"Autenticado con {self._host}:{self._port}: {parsed.success}")
        return parsed

    async def check_auth(self) -> ApiAuthResponse:
        """Consulta el estado del token. No lanza si la respuesta trae `error`."""
        data = await self._request("GET", "/auth")
        return self._validate(ApiAuthResponse, data)

    async def ping(self) -> ApiPingResponse:
        data = await self._request("GET", "/ping")
        return self._validate(ApiPingResponse, data)

    async def get_state(self) -> ApiStateObject:
        data = await self._request("GET", "/state")
        return self._validate(ApiStateObject, data)

    async def search_songs(self, params: SearchParams) -> ApiSongsSearchResponse:
        parts = []
        for name in _SEARCH_FIELDS:
            value = getattr(params, name)
            if value is not None:
                parts.append(f"{name}={encode_component(value)}")

        query = f"?{'&'.join(parts)}" if parts else ""
        data = await self._request("GET", f"/songs{query}")
        return self._validate(ApiSongsSearchResponse, data)

    async def list_sets(self) -> ApiSetsListResponse:
        data = await self._request("GET", "/sets")
        return self._validate(ApiSetsListResponse, data)

    async def create_song(self, params: CreateSongParams) -> ApiCreateSongResponse:
        data = await self._request("PUT", "/songs", params.model_dump(exclude_none=True))
        parsed = self._validate(ApiCreateSongResponse, data)

        if parsed.error:
            raise OnSongApiError({"message": parsed.error})

        song_id = parsed.success.ID if parsed.success else None
        logger.info(f"Canción creada: '{params.title}' (ID: {song_id})")
        return parsed

    async def update_song_content(self, song_id: str, content: str) -> ApiUpdateContentResponse:
        """Sube el contenido de la canción como text/plain (no JSON)."""
        path = f"/songs/{encode_component(song_id)}/content"
        logger.debug(f"Actualizando contenido de {song_id} ({len(content)} caracteres)")

        response = await self._send(
            "POST", path, content=content, headers={"Content-Type": "text/plain"}
        )

        if not response.is_success:
            logger.error(f"Actualización de contenido fallida: {response.status_code}")
            raise OnSongConnectionRefusedError(
                {"status": response.status_code, "body": response.text}
            )

        try:
            data = response.json()
        except ValueError as e:
            raise OnSongInvalidResponseError({"path": path, "message": "El body no es JSON"}) from e

        parsed = self._validate(ApiUpdateContentResponse, data)
        if parsed.error:
            raise OnSongApiError({"message": parsed.error})

        logger.info(f"Contenido actualizado para la canción {song_id}")
        return parsed

    async def get_song_content(self, song_id: str) -> str:
        """
        Descarga el contenido de una canción como texto plano.

        Raises:
            OnSongNotFoundError: si OnSong responde 404
            OnSongApiError: cualquier otro status no-2xx
        """
        response = await self._send("GET", f"/songs/{encode_component(song_id)}/content")

        if response.status_code == 404:
            raise OnSongNotFoundError({"song_id": song_id})
        if not response.is_success:
            raise OnSongApiError({"status": response.status_code, "body": response.text})

        return response.text

    async def create_set(self, name: str) -> ApiCreateSetResponse:
        data = await self._request("PUT", "/sets", {"name": name})
        parsed = self._validate(ApiCreateSetResponse, data)

        if parsed.error:
            raise OnSongApiError({"message": parsed.error})

        logger.info(f"Set creado: '{name}'")
        return parsed

    async def get_set(self, set_id: str) -> ApiSetDetailResponse:
        data = await self._request("GET", f"/sets/{encode_component(set_id)}")
        return self._validate(ApiSetDetailResponse, data)

    async def add_song_to_set(self, set_id: str, song_id: str) -> ApiAddSongToSetResponse:
        data = await self._request(
            "PUT", f"/sets/{encode_component(set_id)}/songs", {"songID": song_id}
        )
        parsed = self._validate(ApiAddSongToSetResponse, data)

        if parsed.error:
            raise OnSongApiError({"message": parsed.error})

        logger.info(f"Canción {song_id} añadida al set {set_id}")
        return parsed

    async def import_song(self, content: str) -> ImportResult:
        """
        Crea una canción a partir de su contenido ChordPro/OnSong.

        1. Parsea las directivas del inicio (title, artist, key, tempo)
        2. Crea la canción con esos metadatos
        3. Sube el contenido completo
        """
        metadata = parse_chart_metadata(content)

        created = await self.create_song(metadata)
        song_id = created.success.ID if created.success else None
        if song_id is None:
            raise OnSongApiError({"message": "No song ID returned from create"})

        await self.update_song_content(song_id, content)

        return ImportResult(song_id=song_id, title=metadata.title)
