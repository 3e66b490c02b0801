"""
Flujos de import/export que componen el cliente y el servidor de callbacks
"""

from .export_service import ExportService
from .import_service import ImportService

__all__ = [
    "ExportService",
    "ImportService",
]
