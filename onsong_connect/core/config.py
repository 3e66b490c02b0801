import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

from .exceptions import OnSongConfigurationError

load_dotenv()

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_optional(name: str) -> Optional[str]:
    value = os.getenv(name, "")
    return value or None


@dataclass
class OnSongConfig:
    """Configuración centralizada del cliente OnSong Connect"""

    # Target por defecto
    default_host: Optional[str] = field(default_factory=lambda: _env_optional("ONSONG_HOST"))
    default_port: int = field(default_factory=lambda: int(os.getenv("ONSONG_PORT", "80")))
    default_token: Optional[str] = field(default_factory=lambda: _env_optional("ONSONG_TOKEN"))

    # Hosts permitidos (vacío = cualquiera)
    allowed_hosts: List[str] = field(default_factory=lambda: [
        h.strip() for h in os.getenv("ONSONG_ALLOWED_HOSTS", "").split(",") if h.strip()
    ])

    # Import / Export
    enable_import: bool = field(default_factory=lambda: _env_bool("ONSONG_ENABLE_IMPORT"))
    callback_port: int = field(default_factory=lambda: int(os.getenv("ONSONG_CALLBACK_PORT", "9876")))
    dry_run: bool = field(default_factory=lambda: _env_bool("ONSONG_DRY_RUN"))

    # Timeouts (segundos)
    client_timeout: float = field(default_factory=lambda: float(os.getenv("ONSONG_CLIENT_TIMEOUT", "10.0")))
    export_timeout: float = field(default_factory=lambda: float(os.getenv("ONSONG_EXPORT_TIMEOUT", "60.0")))
    discovery_timeout: float = field(default_factory=lambda: float(os.getenv("ONSONG_DISCOVERY_TIMEOUT", "2.0")))

    # Nombre con el que se registra este cliente en OnSong
    device_name: str = field(default_factory=lambda: os.getenv("ONSONG_DEVICE_NAME", "onsong-mcp"))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("ONSONG_LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: os.getenv("ONSONG_LOG_FORMAT", "detailed"))

    def validate(self) -> "OnSongConfig":
        """Valida la configuración, lanza OnSongConfigurationError si algo no cuadra"""
        errors = []

        if not 1024 <= self.callback_port <= 65535:
            errors.append(f"callback_port fuera de rango: {self.callback_port}")
        if not 1 <= self.default_port <= 65535:
            errors.append(f"default_port fuera de rango: {self.default_port}")
        for name in ("client_timeout", "export_timeout", "discovery_timeout"):
            if getattr(self, name) <= 0:
                errors.append(f"{name} debe ser positivo")
        if self.log_level.upper() not in _LOG_LEVELS:
            errors.append(f"log_level desconocido: {self.log_level}")
        if self.log_format not in ("detailed", "simple"):
            errors.append(f"log_format desconocido: {self.log_format}")

        if errors:
            raise OnSongConfigurationError(details={"errors": errors})
        return self

    def default_target(self):
        """Devuelve el Target configurado o None si no hay host"""
        from ..shared.models import Target

        if not self.default_host:
            return None
        return Target(host=self.default_host, port=self.default_port, token=self.default_token)

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.INFO)


def validate_host(host: str, allowed_hosts: List[str]) -> bool:
    """Un allowlist vacío admite cualquier host"""
    if not allowed_hosts:
        return True
    return host in allowed_hosts


# Configuración global
config = OnSongConfig()
