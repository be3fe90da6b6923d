"""
Error handler service for scanned PDF redaction.
Centralizes error handling and turns fatal errors into failed results.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from ..entities import RedactionResult
from ..exceptions import (
    FileStorageError,
    PageConversionError,
    RecognitionError,
    RedactionError,
    ValidationError
)

logger = logging.getLogger(__name__)


class ErrorContext:
    """Context information for error handling."""

    def __init__(self, operation: str, **kwargs):
        """
        Initialize error context.

        Args:
            operation: Operation being performed
            **kwargs: Additional context information
        """
        self.operation = operation
        self.context = kwargs

    def add_context(self, **kwargs):
        """Add additional context information."""
        self.context.update(kwargs)

    def get_context(self) -> Dict[str, Any]:
        """Get all context information."""
        return {
            "operation": self.operation,
            **self.context
        }


class ErrorHandler:
    """Centralized error handler for the application."""

    def handle_redaction_error(self, error: Exception, context: ErrorContext) -> RedactionResult:
        """
        Turn a fatal pipeline error into a failed result naming the stage
        and page where processing stopped.

        Args:
            error: The error that occurred
            context: Context information about the operation

        Returns:
            Failed redaction result; no output document is attached
        """
        error_info = self._analyze_error(error, context)
        stage = error_info["stage"]
        page = error_info["page"]

        logger.error(
            "Redaction failed during %s (stage=%s, page=%s): %s",
            context.operation, stage, page, error_info["message"],
            extra={"event": "run.failed", "stage": stage, "page": page, **context.get_context()}
        )

        if stage == "unexpected":
            message = f"Unexpected error during {context.operation}: {error_info['message']}"
        else:
            message = error_info["message"]

        return RedactionResult(
            success=False,
            status=None,
            output_document=None,
            targets=[],
            applied_count=0,
            skipped_count=0,
            message=f"Redaction failed at stage '{stage}'",
            error=message,
            failed_stage=stage,
            failed_page=page
        )

    def classify(self, error: Exception) -> str:
        """Name the stage an error belongs to."""
        if isinstance(error, RedactionError):
            return error.stage
        if isinstance(error, FileStorageError):
            return "storage"
        if isinstance(error, ValidationError):
            return "validation"
        return "unexpected"

    def _analyze_error(self, error: Exception, context: ErrorContext) -> Dict[str, Any]:
        """Extract the relevant information from an error."""
        page: Optional[int] = None
        if isinstance(error, (PageConversionError, RecognitionError)):
            page = error.page_number

        return {
            "type": type(error).__name__,
            "message": str(error),
            "stage": self.classify(error),
            "page": page,
            "context": context.get_context(),
            "timestamp": datetime.now().isoformat()
        }
