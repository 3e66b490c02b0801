"""Invocación del URL scheme onsong:// a través del sistema operativo"""

import asyncio
import logging
import sys
from typing import Any, Awaitable, Callable, Dict, Optional, Union
from urllib.parse import urlencode

from ..core.config import config
from ..core.exceptions import (
    OnSongInvalidInputError,
    OnSongUrlSchemeError,
    OnSongUrlSchemeUnsupportedError,
)
from ..shared.utils import encode_component

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORM = "darwin"

KNOWN_ACTIONS = (
    "ForwardPedalWasPressed",
    "BackwardPedalWasPressed",
    "LeftPedalWasPressed",
    "RightPedalWasPressed",
    "PositionWasAdjusted",
    "SongSectionWasPressed",
    "NextSongWasRequested",
    "PreviousSongWasRequested",
    "AutoScrollWasToggled",
    "MetronomeWasToggled",
)

NAVIGATE_KEYWORDS = ("first", "last", "next", "previous")
EXPORT_FORMATS = ("onsong", "chordpro", "txt", "pdf")

Opener = Callable[[str], Awaitable[None]]


async def open_url(url: str) -> None:
    """Abre la URL con `open` de macOS; un código de salida distinto de 0 es un fallo."""
    process = await asyncio.create_subprocess_exec(
        "open", url,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    _, stderr = await process.communicate()

    if process.returncode != 0:
        message = stderr.decode("utf-8", errors="replace").strip()
        raise RuntimeError(message or f"open terminó con código {process.returncode}")


def _arg_to_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class UrlSchemeService:
    """Construye URLs onsong:// y le pide al SO que las abra."""

    def __init__(
        self,
        opener: Optional[Opener] = None,
        platform: Optional[str] = None,
        dry_run: Optional[bool] = None,
    ):
        self._opener = opener or open_url
        self._platform = platform or sys.platform
        self.dry_run = config.dry_run if dry_run is None else dry_run

    def is_supported(self) -> bool:
        return self._platform == SUPPORTED_PLATFORM

    @staticmethod
    def is_known_action(action: str) -> bool:
        return action in KNOWN_ACTIONS

    @staticmethod
    def get_known_actions():
        return KNOWN_ACTIONS

    # --- Construcción de URLs ---

    @staticmethod
    def build_action_url(action_name: str, args: Optional[Dict[str, Any]] = None) -> str:
        url = f"onsong://action/{encode_component(action_name)}"
        if args:
            params = "&".join(
                f"{encode_component(k)}={encode_component(_arg_to_str(v))}" for k, v in args.items()
            )
            url = f"{url}?{params}"
        return url

    @staticmethod
    def build_import_url(filename: str, base64_content: str) -> str:
        # El payload base64 va tal cual, sin encoding de query
        return f"onsong://ImportData/{encode_component(filename)}?{base64_content}"

    @staticmethod
    def build_open_song_url(song_id_or_title: str) -> str:
        return f"onsong://open/songs?song={encode_component(song_id_or_title)}"

    @staticmethod
    def build_open_set_url(set_name: str) -> str:
        return f"onsong://open/songs?set={encode_component(set_name)}"

    @staticmethod
    def build_navigate_url(index: Union[str, int]) -> str:
        if isinstance(index, bool) or not (isinstance(index, int) or index in NAVIGATE_KEYWORDS):
            raise OnSongInvalidInputError(
                {"message": f"Índice inválido: {index!r}", "allowed": list(NAVIGATE_KEYWORDS)}
            )
        return f"onsong://open/songs?index={encode_component(index)}"

    @staticmethod
    def build_export_url(collection: str, return_url: str, format: Optional[str] = None) -> str:
        if format is not None and format not in EXPORT_FORMATS:
            raise OnSongInvalidInputError(
                {"message": f"Formato desconocido: {format}", "allowed": list(EXPORT_FORMATS)}
            )
        params = {"collection": collection, "returnURL": return_url}
        if format is not None:
            params["format"] = format
        return f"onsong://export/songs?{urlencode(params)}"

    # --- Invocación ---

    async def invoke(self, url: str) -> None:
        """
        Abre la URL a través del SO.

        Raises:
            OnSongUrlSchemeUnsupportedError: fuera de macOS, sin intentar nada
            OnSongUrlSchemeError: si el SO no pudo abrir la URL
        """
        if not self.is_supported():
            raise OnSongUrlSchemeUnsupportedError(
                {"platform": self._platform, "message": "URL schemes only supported on macOS"}
            )

        if self.dry_run:
            logger.info(f"[dry-run] URL scheme no invocado: {url[:120]}")
            return

        logger.info(f"Invocando URL scheme: {url[:120]}")

        try:
            await self._opener(url)
        except Exception as e:
            logger.error(f"Falló la invocación del URL scheme: {e}")
            raise OnSongUrlSchemeError({"url": url, "message": str(e)}) from e

        logger.debug("URL scheme invocado correctamente")

    async def run_action(self, action_name: str, args: Optional[Dict[str, Any]] = None) -> None:
        await self.invoke(self.build_action_url(action_name, args))

    async def import_chart(self, filename: str, base64_content: str) -> None:
        await self.invoke(self.build_import_url(filename, base64_content))

    async def open_song(self, song_id_or_title: str) -> None:
        await self.invoke(self.build_open_song_url(song_id_or_title))

    async def open_set(self, set_name: str) -> None:
        await self.invoke(self.build_open_set_url(set_name))

    async def navigate(self, index: Union[str, int]) -> None:
        await self.invoke(self.build_navigate_url(index))

    async def export_songs(
        self, collection: str, return_url: str, format: Optional[str] = None
    ) -> None:
        await self.invoke(self.build_export_url(collection, return_url, format))
