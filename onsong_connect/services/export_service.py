"""
Flujo de export: URL scheme + servidor de callbacks.

El servidor debe estar escuchando y la espera registrada ANTES de invocar el
URL scheme que lleva el returnURL; si no, un callback inmediato se perdería.
"""

import base64
import binascii
import logging
import uuid
from pathlib import Path
from typing import List, Optional

from ..callback.server import CallbackServer
from ..client.url_scheme import UrlSchemeService
from ..core.config import config
from ..core.exceptions import (
    ErrorCodes,
    OnSongFileError,
    OnSongInvalidInputError,
    OnSongUrlSchemeUnsupportedError,
)
from ..shared.models import ExportCallbackData, ExportResult
from ..shared.utils import build_collection_string, ensure_extension, sanitize_filename

logger = logging.getLogger(__name__)

EXPORT_SCOPES = ("song", "set", "library")

FORMAT_EXTENSIONS = {
    "onsong": ".onsong",
    "chordpro": ".cho",
    "txt": ".txt",
    "pdf": ".pdf",
}


class ExportService:
    """Exporta canciones/sets/biblioteca de OnSong a archivos locales"""

    def __init__(
        self,
        callback_server: CallbackServer,
        url_scheme: Optional[UrlSchemeService] = None,
        timeout: Optional[float] = None,
    ):
        self.callback_server = callback_server
        self.url_scheme = url_scheme or UrlSchemeService()
        self.timeout = timeout or config.export_timeout

    async def export(
        self, scope: str, identifier: str, format: str, output_dir: str
    ) -> ExportResult:
        if scope not in EXPORT_SCOPES:
            raise OnSongInvalidInputError({"message": f"Scope desconocido: {scope}"})
        if format not in FORMAT_EXTENSIONS:
            raise OnSongInvalidInputError({"message": f"Formato desconocido: {format}"})

        if not self.url_scheme.is_supported():
            raise OnSongUrlSchemeUnsupportedError({"message": "URL schemes only supported on macOS"})

        output_path = Path(output_dir)
        try:
            output_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OnSongFileError(
                {"path": output_dir, "message": str(e)}, code=ErrorCodes.FILE_WRITE_ERROR
            ) from e

        request_id = str(uuid.uuid4())
        collection = build_collection_string(scope, identifier)

        if self.url_scheme.dry_run:
            logger.info(f"[dry-run] Export {collection} ({format}) no ejecutado")
            return ExportResult(warnings=["Dry run: export not executed"])

        await self.callback_server.start()
        return_url = self.callback_server.get_callback_url(request_id)
        waiter = self.callback_server.register_wait(request_id, self.timeout)

        logger.info(f"Iniciando export {request_id}: colección={collection}, formato={format}")

        try:
            await self.url_scheme.export_songs(collection, return_url, format)
            data = await waiter
        except BaseException:
            self.callback_server.cancel_wait(request_id)
            raise

        exported = write_exported_files(data, output_path, format)

        warnings: List[str] = []
        if not data.files:
            warnings.append("No files were returned from OnSong export")

        logger.info(f"Export {request_id} completado: {len(exported)} archivos")
        return ExportResult(exported_files=exported, warnings=warnings)


def write_exported_files(data: ExportCallbackData, output_dir: Path, format: str) -> List[str]:
    """Escribe los archivos recibidos; decodifica base64 si el content type lo indica."""
    default_ext = FORMAT_EXTENSIONS.get(format, ".txt")
    written = []

    for file in data.files:
        filename = sanitize_filename(ensure_extension(file.name, default_ext))
        filepath = output_dir / filename

        try:
            if "base64" in file.content_type:
                filepath.write_bytes(base64.b64decode(file.content))
            else:
                filepath.write_text(file.content, encoding="utf-8")
        except (OSError, binascii.Error) as e:
            raise OnSongFileError(
                {"path": str(filepath), "message": str(e)}, code=ErrorCodes.FILE_WRITE_ERROR
            ) from e

        written.append(str(filepath))

    return written
