"""Export and import feature module"""

from scribo.features.export.api import router
from scribo.features.export.domain import ExportFile, ExportFormat, ImportFormat, ImportResult
from scribo.features.export.service import ExportService

__all__ = [
    "router",
    "ExportFile",
    "ExportFormat",
    "ImportFormat",
    "ImportResult",
    "ExportService",
]
