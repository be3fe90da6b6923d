"""
Application service for scanned PDF redaction.
Coordinates use cases, configuration, and storage adapters.
"""
import logging
from typing import List, Optional, Sequence

from ..domain.entities import Document, RedactionResult, RedactionRunResult, RedactionTarget, RunStatus
from ..domain.exceptions import InputTooLargeError, InvalidInputError, ValidationError
from ..domain.services.error_handler import ErrorContext
from .dependency_container import DependencyContainer

logger = logging.getLogger(__name__)


class PdfRedactionApplication:
    """Main application service for scanned PDF redaction."""

    def __init__(self, dependency_container: Optional[DependencyContainer] = None):
        """
        Initialize the application with its dependencies.

        Args:
            dependency_container: Container managing all dependencies (default: new instance)
        """
        self._dependency_container = dependency_container or DependencyContainer()

    def redact_document(
        self,
        source_path: str,
        queries: Sequence[str],
        destination_path: Optional[str] = None,
        engine: Optional[str] = None,
        passes: int = 1
    ) -> RedactionResult:
        """
        Redact a PDF on storage and write the result next to it.

        The output file is only written when something was redacted.
        Errors are never raised; they come back as a failed result naming
        the stage (and page, where known) that stopped the run.

        Args:
            source_path: Path to the source document
            queries: Phrases to redact
            destination_path: Destination path (optional)
            engine: Rasterizer to use (default from configuration)
            passes: Maximum number of redaction passes

        Returns:
            RedactionResult: Redaction result
        """
        config_service = self._dependency_container.get_configuration_service()
        dest_path = None
        try:
            if not source_path or not source_path.strip():
                raise InvalidInputError("Source document path cannot be empty")
            dest_path = destination_path or config_service.get_default_output_path(source_path)

            content = self._read_source(source_path)
            pass_results = self.redact_bytes(content, queries, engine=engine, passes=passes)
            return self._build_result(pass_results, dest_path)

        except Exception as e:
            context = ErrorContext(
                operation="redact_document",
                source_path=source_path,
                destination_path=dest_path,
                engine=engine,
                passes=passes
            )
            return self._dependency_container.get_error_handler().handle_redaction_error(e, context)

    def redact_bytes(
        self,
        pdf_bytes: bytes,
        queries: Sequence[str],
        engine: Optional[str] = None,
        passes: int = 1
    ) -> List[RedactionRunResult]:
        """
        Redact an in-memory document.

        Returns:
            List[RedactionRunResult]: One result per pass; the last one holds
            the final document

        Raises:
            RedactionError: Any pipeline failure, unchanged
            ValidationError: If the engine is not supported
        """
        use_case = self._dependency_container.get_redaction_use_case(self._resolve_engine(engine))
        return use_case.execute_passes(pdf_bytes, queries, max_passes=passes)

    def verify_redaction(
        self,
        document_path: str,
        queries: Sequence[str],
        engine: Optional[str] = None
    ) -> List[RedactionTarget]:
        """
        Re-run recognition on a document and report anything still matching.

        Returns:
            List[RedactionTarget]: Residual matches; empty means the document is clean
        """
        content = self._read_source(document_path)
        use_case = self._dependency_container.get_redaction_use_case(self._resolve_engine(engine))
        residual = use_case.find_residual_targets(content, queries)
        logger.info(
            "Verification of %s found %d residual match(es)", document_path, len(residual),
            extra={"event": "verify.done", "residual": len(residual)}
        )
        return residual

    def get_supported_engines(self) -> List[str]:
        """
        Returns the list of supported rasterizers.

        Returns:
            List[str]: List of supported engines
        """
        return self._dependency_container.get_configuration_service().get_supported_rasterizers()

    def get_engine_info(self, engine: str) -> dict:
        """
        Describe a rasterizer without instantiating it.

        Raises:
            ValidationError: If the engine is not supported
        """
        from ..adapters.rasterizer_factory import RasterizerFactory
        return RasterizerFactory().get_engine_info(self._resolve_engine(engine))

    def validate_document(self, document_path: str) -> bool:
        """
        Validates that a document can be processed.

        Args:
            document_path: Path to the document

        Returns:
            bool: True if the document exists, fits the size limit and has pages
        """
        if not document_path or not document_path.lower().endswith('.pdf'):
            return False
        try:
            content = self._read_source(document_path)
            rasterizer = self._dependency_container.get_rasterizer()
            return rasterizer.page_count(content) > 0
        except Exception as e:
            logger.debug("Document %s is not processable: %s", document_path, e)
            return False

    def _resolve_engine(self, engine: Optional[str]) -> Optional[str]:
        if engine is None:
            return None
        config_service = self._dependency_container.get_configuration_service()
        if not config_service.validate_rasterizer(engine):
            supported = ", ".join(config_service.get_supported_rasterizers())
            raise ValidationError(f"Engine {engine} not supported. Available engines: {supported}")
        return engine

    def _read_source(self, source_path: str) -> bytes:
        file_storage = self._dependency_container.get_file_storage()
        if not file_storage.file_exists(source_path):
            raise InvalidInputError(f"Source file {source_path} does not exist")

        # Refuse oversized files before reading them into memory
        limit = self._dependency_container.get_configuration_service().get_max_input_bytes()
        size = file_storage.file_size(source_path)
        if size > limit:
            raise InputTooLargeError(size=size, limit=limit)
        return file_storage.read_file(source_path)

    def _build_result(self, pass_results: List[RedactionRunResult], dest_path: str) -> RedactionResult:
        targets = [target for result in pass_results for target in result.targets]
        applied = sum(result.applied_count for result in pass_results)
        skipped = sum(result.skipped_count for result in pass_results)
        redacted = any(result.status == RunStatus.REDACTED for result in pass_results)

        if not redacted:
            return RedactionResult(
                success=True,
                status=RunStatus.NOTHING_TO_REDACT,
                output_document=None,
                targets=[],
                applied_count=0,
                skipped_count=0,
                message="No instances found to redact",
                passes=len(pass_results)
            )

        file_storage = self._dependency_container.get_file_storage()
        file_storage.write_file(dest_path, pass_results[-1].pdf_bytes)
        logger.info(
            "Wrote redacted document to %s", dest_path,
            extra={"event": "run.written", "applied": applied, "skipped": skipped}
        )
        return RedactionResult(
            success=True,
            status=RunStatus.REDACTED,
            output_document=Document(path=dest_path),
            targets=targets,
            applied_count=applied,
            skipped_count=skipped,
            message=f"Redacted {applied} instance(s), skipped {skipped}",
            passes=len(pass_results)
        )
