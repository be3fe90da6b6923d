"""
Services package for domain business logic.
"""

from .configuration_service import ConfigurationService
from .error_handler import ErrorContext, ErrorHandler
from .redaction_geometry_service import RedactionGeometryService
from .target_matching_service import TargetMatchingService

__all__ = [
    "ConfigurationService",
    "ErrorContext",
    "ErrorHandler",
    "RedactionGeometryService",
    "TargetMatchingService",
]
