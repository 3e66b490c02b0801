"""
Módulo compartido con modelos y utilidades para el cliente OnSong
"""

# Modelos
from .models import (
    ApiAuthResponse,
    ApiPingResponse,
    ApiSongObject,
    ApiSetObject,
    ApiStateObject,
    ApiSongsSearchResponse,
    ApiSetsListResponse,
    ApiCreateSongResponse,
    ApiUpdateContentResponse,
    ApiCreateSetResponse,
    ApiSetDetailResponse,
    ApiAddSongToSetResponse,
    Target,
    SearchParams,
    CreateSongParams,
    ImportResult,
    ExportFile,
    ExportCallbackData,
    ExportResult,
    DeviceMetadata,
    OnSongDevice,
)

# Utilidades
from .utils import (
    generate_token,
    encode_component,
    parse_chart_metadata,
    sanitize_filename,
    ensure_extension,
    build_collection_string,
)

__all__ = [
    # Models
    "ApiAuthResponse",
    "ApiPingResponse",
    "ApiSongObject",
    "ApiSetObject",
    "ApiStateObject",
    "ApiSongsSearchResponse",
    "ApiSetsListResponse",
    "ApiCreateSongResponse",
    "ApiUpdateContentResponse",
    "ApiCreateSetResponse",
    "ApiSetDetailResponse",
    "ApiAddSongToSetResponse",
    "Target",
    "SearchParams",
    "CreateSongParams",
    "ImportResult",
    "ExportFile",
    "ExportCallbackData",
    "ExportResult",
    "DeviceMetadata",
    "OnSongDevice",
    # Utils
    "generate_token",
    "encode_component",
    "parse_chart_metadata",
    "sanitize_filename",
    "ensure_extension",
    "build_collection_string",
]
