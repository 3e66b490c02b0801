"""Modelos de datos compartidos: objetos del protocolo Connect y tipos del cliente"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Objetos del protocolo Connect (nombres de campo tal cual vienen en el wire) ---


class ApiAuthResponse(BaseModel):
    """Response de /auth"""

    success: Optional[Literal["Token Registered", "Token Accepted"]] = None
    error: Optional[Literal["Not Registered", "Invalid Token Length", "Not Accepting Users"]] = None


class ApiPingResponse(BaseModel):
    pong: str


class ApiSongObject(BaseModel):
    """Canción tal como la devuelve OnSong"""

    ID: Optional[str] = None
    title: str
    artist: Optional[str] = None
    key: Optional[str] = None
    transposedKey: Optional[str] = None
    capo: Optional[float] = None
    tempo: Optional[float] = None
    timeSignature: Optional[str] = None
    duration: Optional[float] = None
    favorite: Optional[Literal[0, 1]] = None
    usefile: Optional[bool] = None
    content: Optional[str] = None
    keywords: Optional[str] = None
    copyright: Optional[str] = None
    ccli: Optional[str] = None


class ApiSetObject(BaseModel):
    ID: Optional[str] = None
    name: str
    archived: Optional[bool] = None
    dateCreated: Optional[str] = None
    dateModified: Optional[str] = None
    quantity: Optional[float] = None


class ApiStateObject(BaseModel):
    """Snapshot de canción/set/posición actual"""

    song: Optional[ApiSongObject] = None
    set: Optional[ApiSetObject] = None
    book: Optional[str] = None
    position: Optional[float] = None
    section: Optional[float] = None
    autoScroll: Optional[bool] = None


class ApiSongsSearchResponse(BaseModel):
    count: float
    results: List[ApiSongObject]
    attributes: Optional[Dict[str, Any]] = None


class ApiSetsListResponse(BaseModel):
    count: float
    results: List[ApiSetObject]


class ApiCreatedSong(BaseModel):
    ID: str
    title: str
    artist: Optional[str] = None
    key: Optional[str] = None


class ApiCreateSongResponse(BaseModel):
    success: Optional[ApiCreatedSong] = None
    error: Optional[str] = None


class ApiUpdatedContent(BaseModel):
    ID: str
    title: str


class ApiUpdateContentResponse(BaseModel):
    success: Optional[ApiUpdatedContent] = None
    error: Optional[str] = None


class ApiCreatedSet(BaseModel):
    ID: str
    name: str


class ApiCreateSetResponse(BaseModel):
    success: Optional[ApiCreatedSet] = None
    error: Optional[str] = None


class ApiSetDetailResponse(BaseModel):
    ID: Optional[str] = None
    name: str
    archived: Optional[bool] = None
    dateCreated: Optional[str] = None
    dateModified: Optional[str] = None
    songs: Optional[List[ApiSongObject]] = None


class ApiAddSongToSetResponse(BaseModel):
    success: Optional[str] = None
    error: Optional[str] = None


# --- Tipos del lado del cliente ---


class Target(BaseModel):
    """Endpoint de conexión (host, port) con token opcional"""

    model_config = ConfigDict(frozen=True)

    host: str = Field(..., min_length=1)
    port: int = Field(..., ge=1, le=65535)
    token: Optional[str] = Field(None, min_length=32)


class SearchParams(BaseModel):
    """Parámetros de búsqueda; solo los presentes van al query string"""

    q: Optional[str] = None
    title: Optional[str] = None
    artist: Optional[str] = None
    key: Optional[str] = None
    limit: Optional[int] = None
    start: Optional[int] = None


class CreateSongParams(BaseModel):
    title: str
    artist: Optional[str] = None
    key: Optional[str] = None
    tempo: Optional[int] = None
    timeSignature: Optional[str] = None


class ImportResult(BaseModel):
    song_id: str
    title: str


class ExportFile(BaseModel):
    """Un archivo recibido en un callback de export"""

    name: str
    content: str
    content_type: str


class ExportCallbackData(BaseModel):
    files: List[ExportFile] = Field(default_factory=list)
    metadata: Optional[Any] = None


class ExportResult(BaseModel):
    exported_files: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class DeviceMetadata(BaseModel):
    model: Optional[str] = None
    deviceId: Optional[str] = None
    version: Optional[str] = None
    role: Optional[Literal["client", "server"]] = None


class OnSongDevice(BaseModel):
    """Dispositivo OnSong descubierto vía mDNS"""

    name: str = Field(..., min_length=1)
    host: str = Field(..., min_length=1)
    port: int = Field(..., ge=1, le=65535)
    addresses: List[str] = Field(default_factory=list)
    metadata: Optional[DeviceMetadata] = None
