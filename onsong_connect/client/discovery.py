"""
Descubrimiento de dispositivos OnSong vía mDNS/Bonjour (zeroconf).

OnSong se anuncia como _onsongapp._tcp. El puerto anunciado es el del
protocolo de sync; la API REST escucha en el 80.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from zeroconf import ServiceStateChange
from zeroconf.asyncio import AsyncServiceBrowser, AsyncServiceInfo, AsyncZeroconf

from ..core.config import config
from ..core.exceptions import OnSongDiscoveryError
from ..shared.models import DeviceMetadata, OnSongDevice

logger = logging.getLogger(__name__)

SERVICE_TYPE = "_onsongapp._tcp.local."
DEFAULT_API_PORT = 80
INFO_REQUEST_TIMEOUT_MS = 1000


def _decode_txt(properties: Dict[bytes, Optional[bytes]]) -> Dict[str, str]:
    txt = {}
    for key, value in properties.items():
        if value is None:
            continue
        txt[key.decode("utf-8", errors="replace")] = value.decode("utf-8", errors="replace")
    return txt


def extract_metadata(txt: Dict[str, str]) -> Optional[DeviceMetadata]:
    """Metadatos del registro TXT; None si no hay nada útil"""
    if not txt:
        return None

    fields = {}
    if txt.get("model"):
        fields["model"] = txt["model"]
    device_id = txt.get("deviceId") or txt.get("deviceid")
    if device_id:
        fields["deviceId"] = device_id
    if txt.get("version"):
        fields["version"] = txt["version"]
    if txt.get("role") in ("client", "server"):
        fields["role"] = txt["role"]

    return DeviceMetadata(**fields) if fields else None


def service_to_device(
    name: str, host: str, addresses: List[str], txt: Dict[str, str]
) -> OnSongDevice:
    """Convierte un servicio anunciado en OnSongDevice"""
    instance_name = name[: -len(SERVICE_TYPE) - 1] if name.endswith("." + SERVICE_TYPE) else name
    display_name = txt.get("displayName") or txt.get("_d") or instance_name

    return OnSongDevice(
        name=display_name,
        host=host.rstrip("."),
        port=DEFAULT_API_PORT,
        addresses=addresses,
        metadata=extract_metadata(txt),
    )


class DiscoveryService:
    """Busca dispositivos OnSong en la red local durante un tiempo acotado."""

    async def discover(self, timeout: Optional[float] = None) -> List[OnSongDevice]:
        timeout = timeout or config.discovery_timeout
        found: List[str] = []

        def on_service_change(zeroconf, service_type, name, state_change):
            """Handler de eventos del browser"""
            if state_change is ServiceStateChange.Added:
                found.append(name)

        try:
            aiozc = AsyncZeroconf()
        except OSError as e:
            raise OnSongDiscoveryError({"message": str(e)}) from e

        browser = AsyncServiceBrowser(aiozc.zeroconf, SERVICE_TYPE, handlers=[on_service_change])

        try:
            await asyncio.sleep(timeout)

            devices: List[OnSongDevice] = []
            seen = set()
            for name in found:
                info = AsyncServiceInfo(SERVICE_TYPE, name)
                if not await info.async_request(aiozc.zeroconf, INFO_REQUEST_TIMEOUT_MS):
                    logger.debug(f"Sin info para el servicio {name}")
                    continue
                if not info.server:
                    continue

                device = service_to_device(
                    name, info.server, info.parsed_addresses(), _decode_txt(info.properties)
                )
                # Deduplicar por host: el puerto siempre es el de la API
                if device.host in seen:
                    continue
                seen.add(device.host)
                devices.append(device)
                logger.debug(f"Dispositivo descubierto: {device.name} ({device.host})")
        finally:
            await browser.async_cancel()
            await aiozc.async_close()

        logger.info(f"Descubrimiento completado: {len(devices)} dispositivos en {timeout}s")
        return devices
