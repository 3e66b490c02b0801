"""Flujo de import: REST (con target) o URL scheme (local)"""

import base64
import binascii
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from ..client.factory import create_authenticated_client
from ..client.token_store import TokenStore
from ..client.url_scheme import UrlSchemeService
from ..core.config import OnSongConfig, config, validate_host
from ..core.exceptions import (
    ErrorCodes,
    OnSongFileError,
    OnSongHostNotAllowedError,
    OnSongImportDisabledError,
    OnSongInvalidInputError,
    OnSongUrlSchemeUnsupportedError,
)
from ..shared.models import Target

logger = logging.getLogger(__name__)

DEFAULT_IMPORT_FILENAME = "imported.onsong"


class ImportService:
    """Importa partituras en OnSong"""

    def __init__(
        self,
        token_store: TokenStore,
        url_scheme: Optional[UrlSchemeService] = None,
        cfg: Optional[OnSongConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token_store = token_store
        self.url_scheme = url_scheme or UrlSchemeService()
        self.config = cfg or config
        self._transport = transport

    async def import_chart(
        self,
        target: Optional[Target] = None,
        file_path: Optional[str] = None,
        content: Optional[str] = None,
        content_base64: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Importa una partitura desde exactamente una fuente (archivo, texto o base64).

        Con target se usa la API REST (create + update content); sin target,
        el URL scheme ImportData.
        """
        if not self.config.enable_import:
            raise OnSongImportDisabledError(
                {"message": "Import operations are disabled. Set ONSONG_ENABLE_IMPORT=true."}
            )

        text = self._read_source(file_path, content, content_base64)

        if target is not None:
            if not validate_host(target.host, self.config.allowed_hosts):
                raise OnSongHostNotAllowedError({"host": target.host})

            client = await create_authenticated_client(
                target,
                self.token_store,
                device_name=self.config.device_name,
                timeout=self.config.client_timeout,
                transport=self._transport,
            )
            result = await client.import_song(text)
            logger.info(f"Importada '{result.title}' vía REST (ID: {result.song_id})")
            return {"ok": True, "songId": result.song_id, "title": result.title, "method": "rest_api"}

        if not self.url_scheme.is_supported():
            raise OnSongUrlSchemeUnsupportedError(
                {"message": "URL schemes only supported on macOS. Provide target for remote import."}
            )

        name = filename or (Path(file_path).name if file_path else DEFAULT_IMPORT_FILENAME)
        payload = base64.b64encode(text.encode("utf-8")).decode("ascii")
        await self.url_scheme.import_chart(name, payload)

        logger.info(f"Importado '{name}' vía URL scheme")
        return {"ok": True, "method": "url_scheme"}

    @staticmethod
    def _read_source(
        file_path: Optional[str], content: Optional[str], content_base64: Optional[str]
    ) -> str:
        sources = [s for s in (file_path, content, content_base64) if s is not None]
        if len(sources) != 1:
            raise OnSongInvalidInputError(
                {"message": "Exactly one of file_path, content, or content_base64 must be provided"}
            )

        if file_path is not None:
            try:
                return Path(file_path).read_text(encoding="utf-8")
            except OSError as e:
                code = ErrorCodes.FILE_NOT_FOUND if isinstance(e, FileNotFoundError) else ErrorCodes.FILE_READ_ERROR
                raise OnSongFileError({"path": file_path, "message": str(e)}, code=code) from e

        if content is not None:
            return content

        try:
            return base64.b64decode(content_base64, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise OnSongInvalidInputError({"message": f"content_base64 inválido: {e}"}) from e
