"""
Utilidades compartidas para el cliente OnSong
"""
import os
import re
import secrets
from typing import Optional
from urllib.parse import quote

from .models import CreateSongParams

TOKEN_LENGTH = 32

# Caracteres que encodeURIComponent deja sin escapar
_URI_COMPONENT_SAFE = "-_.!~*'()"

_DIRECTIVE_RE = {
    "title": re.compile(r"^\{title:\s*(.+?)\}$", re.IGNORECASE),
    "artist": re.compile(r"^\{artist:\s*(.+?)\}$", re.IGNORECASE),
    "key": re.compile(r"^\{key:\s*(.+?)\}$", re.IGNORECASE),
    "tempo": re.compile(r"^\{tempo:\s*(\d+)\}$", re.IGNORECASE),
}

_UNSAFE_FILENAME_RE = re.compile(r'[<>:"/\\|?*]')
_DOT_RUN_RE = re.compile(r"\.{2,}")


def generate_token() -> str:
    """Genera un token opaco: 16 bytes aleatorios en hex (32 caracteres)"""
    return secrets.token_hex(TOKEN_LENGTH // 2)


def encode_component(value) -> str:
    """Percent-encoding de un componente de URL (path o query)"""
    return quote(str(value), safe=_URI_COMPONENT_SAFE)


def parse_chart_metadata(content: str) -> CreateSongParams:
    """
    Extrae las directivas ChordPro del inicio del contenido.

    Las directivas deben ser contiguas al principio: el parseo se detiene en
    la primera línea que no es directiva reconocida y no empieza por `{`
    (una línea en blanco también corta el parseo).
    """
    title = "Untitled"
    artist: Optional[str] = None
    key: Optional[str] = None
    tempo: Optional[int] = None

    for line in content.split("\n"):
        trimmed = line.strip()

        match = _DIRECTIVE_RE["title"].match(trimmed)
        if match:
            title = match.group(1)
            continue

        match = _DIRECTIVE_RE["artist"].match(trimmed)
        if match:
            artist = match.group(1)
            continue

        match = _DIRECTIVE_RE["key"].match(trimmed)
        if match:
            key = match.group(1)
            continue

        match = _DIRECTIVE_RE["tempo"].match(trimmed)
        if match:
            tempo = int(match.group(1))
            continue

        if not trimmed.startswith("{"):
            break

    return CreateSongParams(title=title, artist=artist, key=key, tempo=tempo)


def sanitize_filename(filename: str) -> str:
    """Reemplaza caracteres no válidos, colapsa puntos y limita a 255 caracteres"""
    cleaned = _UNSAFE_FILENAME_RE.sub("_", filename)
    cleaned = _DOT_RUN_RE.sub(".", cleaned)
    return cleaned[:255]


def ensure_extension(filename: str, default_ext: str) -> str:
    """Añade la extensión por defecto si el nombre no tiene ninguna"""
    _, ext = os.path.splitext(filename)
    if ext in ("", "."):
        return filename + default_ext
    return filename


def build_collection_string(scope: str, identifier: str) -> str:
    """Colección para el URL scheme de export: id de canción, set:{nombre} o all"""
    if scope == "song":
        return identifier
    if scope == "set":
        return f"set:{identifier}"
    if scope == "library":
        return "all"
    raise ValueError(f"Scope desconocido: {scope}")
