from .projects import ProjectService, ScrapeOutcome
from .exports import ExportError, ExportService, EXPORT_FORMATS

__all__ = ['ProjectService', 'ScrapeOutcome', 'ExportService', 'ExportError', 'EXPORT_FORMATS']
