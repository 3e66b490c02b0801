"""Excepciones personalizadas para el cliente OnSong Connect"""

import json
from typing import Any, Dict, Optional


class ErrorCodes:
    """Códigos legibles por máquina de cada tipo de error"""

    DISCOVERY_TIMEOUT = "DISCOVERY_TIMEOUT"
    DISCOVERY_FAILED = "DISCOVERY_FAILED"

    CONNECTION_REFUSED = "CONNECTION_REFUSED"
    CONNECTION_TIMEOUT = "CONNECTION_TIMEOUT"
    HOST_NOT_ALLOWED = "HOST_NOT_ALLOWED"

    AUTH_FAILED = "AUTH_FAILED"

    API_ERROR = "API_ERROR"
    API_NOT_FOUND = "API_NOT_FOUND"
    API_INVALID_RESPONSE = "API_INVALID_RESPONSE"

    IMPORT_DISABLED = "IMPORT_DISABLED"
    IMPORT_FAILED = "IMPORT_FAILED"
    EXPORT_TIMEOUT = "EXPORT_TIMEOUT"
    EXPORT_FAILED = "EXPORT_FAILED"

    URL_SCHEME_FAILED = "URL_SCHEME_FAILED"
    URL_SCHEME_UNSUPPORTED = "URL_SCHEME_UNSUPPORTED"

    INVALID_INPUT = "INVALID_INPUT"
    INVALID_TARGET = "INVALID_TARGET"
    INVALID_CONFIG = "INVALID_CONFIG"

    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_READ_ERROR = "FILE_READ_ERROR"
    FILE_WRITE_ERROR = "FILE_WRITE_ERROR"

    UNKNOWN_ERROR = "UNKNOWN_ERROR"


ERROR_MESSAGES: Dict[str, str] = {
    ErrorCodes.DISCOVERY_TIMEOUT: "El descubrimiento de dispositivos expiró",
    ErrorCodes.DISCOVERY_FAILED: "Falló el descubrimiento de dispositivos",
    ErrorCodes.CONNECTION_REFUSED: "Conexión rechazada por el host",
    ErrorCodes.CONNECTION_TIMEOUT: "Tiempo de conexión agotado",
    ErrorCodes.HOST_NOT_ALLOWED: "El host no está en la lista de permitidos",
    ErrorCodes.AUTH_FAILED: "Autenticación fallida",
    ErrorCodes.API_ERROR: "La API de OnSong devolvió un error",
    ErrorCodes.API_NOT_FOUND: "Recurso no encontrado",
    ErrorCodes.API_INVALID_RESPONSE: "Respuesta inválida de la API de OnSong",
    ErrorCodes.IMPORT_DISABLED: "Las operaciones de import están deshabilitadas en la configuración",
    ErrorCodes.IMPORT_FAILED: "No se pudo importar la partitura en OnSong",
    ErrorCodes.EXPORT_TIMEOUT: "Tiempo de espera del callback de export agotado",
    ErrorCodes.EXPORT_FAILED: "Falló el export desde OnSong",
    ErrorCodes.URL_SCHEME_FAILED: "No se pudo invocar el URL scheme de OnSong",
    ErrorCodes.URL_SCHEME_UNSUPPORTED: "URL scheme no soportado en esta plataforma",
    ErrorCodes.INVALID_INPUT: "Parámetros de entrada inválidos",
    ErrorCodes.INVALID_TARGET: "Target de conexión inválido",
    ErrorCodes.INVALID_CONFIG: "Configuración inválida",
    ErrorCodes.FILE_NOT_FOUND: "Archivo no encontrado",
    ErrorCodes.FILE_READ_ERROR: "No se pudo leer el archivo",
    ErrorCodes.FILE_WRITE_ERROR: "No se pudo escribir el archivo",
    ErrorCodes.UNKNOWN_ERROR: "Error desconocido",
}


class OnSongError(Exception):
    """Excepción base para todos los errores de OnSong"""

    code: str = ErrorCodes.UNKNOWN_ERROR

    def __init__(self, details: Optional[Dict[str, Any]] = None, code: Optional[str] = None):
        if code is not None:
            self.code = code
        self.details = details
        super().__init__(ERROR_MESSAGES.get(self.code, ERROR_MESSAGES[ErrorCodes.UNKNOWN_ERROR]))

    @property
    def message(self) -> str:
        return self.args[0]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            data["details"] = self.details
        return data

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.code}): {self.details}"
        return f"{self.message} ({self.code})"


class OnSongConnectionRefusedError(OnSongError):
    """Status HTTP no-2xx o fallo de transporte"""

    code = ErrorCodes.CONNECTION_REFUSED


class OnSongConnectionTimeoutError(OnSongError):
    """Se superó el deadline de la petición"""

    code = ErrorCodes.CONNECTION_TIMEOUT


class OnSongHostNotAllowedError(OnSongError):
    code = ErrorCodes.HOST_NOT_ALLOWED


class OnSongAuthError(OnSongError):
    """Error de autenticación"""

    code = ErrorCodes.AUTH_FAILED


class OnSongApiError(OnSongError):
    """Campo `error` en el body de una respuesta 2xx"""

    code = ErrorCodes.API_ERROR


class OnSongNotFoundError(OnSongError):
    code = ErrorCodes.API_NOT_FOUND


class OnSongInvalidResponseError(OnSongError):
    """La respuesta no pasó la validación de esquema"""

    code = ErrorCodes.API_INVALID_RESPONSE


class OnSongImportDisabledError(OnSongError):
    code = ErrorCodes.IMPORT_DISABLED


class OnSongExportTimeoutError(OnSongError):
    code = ErrorCodes.EXPORT_TIMEOUT


class OnSongExportError(OnSongError):
    """Error de parseo, cancelación o apagado del servidor de callbacks"""

    code = ErrorCodes.EXPORT_FAILED


class OnSongUrlSchemeUnsupportedError(OnSongError):
    code = ErrorCodes.URL_SCHEME_UNSUPPORTED


class OnSongUrlSchemeError(OnSongError):
    code = ErrorCodes.URL_SCHEME_FAILED


class OnSongInvalidInputError(OnSongError):
    code = ErrorCodes.INVALID_INPUT


class OnSongInvalidTargetError(OnSongError):
    code = ErrorCodes.INVALID_TARGET


class OnSongConfigurationError(OnSongError):
    """Error de configuración"""

    code = ErrorCodes.INVALID_CONFIG


class OnSongDiscoveryError(OnSongError):
    code = ErrorCodes.DISCOVERY_FAILED


class OnSongFileError(OnSongError):
    """Error de lectura/escritura de archivos; el código se pasa explícitamente"""

    code = ErrorCodes.FILE_READ_ERROR


def format_error(error: BaseException) -> str:
    """Serializa cualquier excepción a JSON {code, message, details?}"""
    if isinstance(error, OnSongError):
        return json.dumps(error.to_dict(), ensure_ascii=False)
    return json.dumps(
        {"code": ErrorCodes.UNKNOWN_ERROR, "message": str(error)},
        ensure_ascii=False,
    )
