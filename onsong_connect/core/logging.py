"""Configuración centralizada de logging"""

import logging
import logging.config
from typing import Optional

from .config import config, OnSongConfig


def setup_logging(cfg: Optional[OnSongConfig] = None):
    """Configura el logging para toda la aplicación.

    La salida va a stderr; stdout queda libre para la salida de los comandos.
    """
    cfg = cfg or config
    level = cfg.log_level_value

    log_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "simple": {"format": "%(levelname)s - %(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "simple" if cfg.log_format == "simple" else "detailed",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            "onsong_connect": {
                "level": level,
                "handlers": ["console"],
                "propagate": False,
            },
            # Reducir verbosidad de librerías externas
            "uvicorn.access": {"level": "WARNING"},
            "httpx": {"level": "WARNING"},
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
    }

    logging.config.dictConfig(log_config)
