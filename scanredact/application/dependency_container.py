"""
Dependency container for the redaction application.
Centralizes the creation of all dependencies to maintain clean architecture.
"""
from typing import Optional

from ..ports.file_storage_port import FileStoragePort
from ..ports.ocr_engine_port import OcrEngineFactoryPort
from ..ports.pdf_document_port import PdfDocumentPort
from ..ports.rasterizer_port import RasterizerPort
from ..domain.services.configuration_service import ConfigurationService
from ..domain.services.error_handler import ErrorHandler
from ..domain.services.redaction_geometry_service import RedactionGeometryService
from ..domain.services.target_matching_service import TargetMatchingService
from ..use_cases.apply_redactions import ApplyRedactionsUseCase
from ..use_cases.rasterize_document import RasterizeDocumentUseCase
from ..use_cases.recognize_pages import RecognizePagesUseCase
from ..use_cases.redact_document import RedactDocumentUseCase


class DependencyContainer:
    """
    Container for managing application dependencies.

    Adapters can be injected (tests do this to avoid a Tesseract install);
    anything not injected is created lazily from configuration.
    """

    def __init__(
        self,
        configuration_service: Optional[ConfigurationService] = None,
        file_storage: Optional[FileStoragePort] = None,
        ocr_engine_factory: Optional[OcrEngineFactoryPort] = None,
        pdf_document: Optional[PdfDocumentPort] = None,
        rasterizer: Optional[RasterizerPort] = None
    ):
        """Initialize the dependency container."""
        self._configuration_service = configuration_service or ConfigurationService()
        self._file_storage = file_storage
        self._ocr_engine_factory = ocr_engine_factory
        self._pdf_document = pdf_document
        self._injected_rasterizer = rasterizer
        self._rasterizers = {}
        self._matching_service: Optional[TargetMatchingService] = None
        self._geometry_service: Optional[RedactionGeometryService] = None
        self._error_handler: Optional[ErrorHandler] = None

    def get_file_storage(self) -> FileStoragePort:
        """Get or create file storage adapter."""
        if self._file_storage is None:
            from ..adapters.local_storage_adapter import LocalStorageAdapter
            self._file_storage = LocalStorageAdapter()
        return self._file_storage

    def get_rasterizer(self, engine: Optional[str] = None) -> RasterizerPort:
        """Get or create the rasterizer for the specified engine."""
        if self._injected_rasterizer is not None:
            return self._injected_rasterizer
        engine = engine or self._configuration_service.get_default_rasterizer()
        if engine not in self._rasterizers:
            from ..adapters.rasterizer_factory import RasterizerFactory
            self._rasterizers[engine] = RasterizerFactory().create_rasterizer(engine)
        return self._rasterizers[engine]

    def get_ocr_engine_factory(self) -> OcrEngineFactoryPort:
        """Get or create the OCR engine factory."""
        if self._ocr_engine_factory is None:
            from ..adapters.tesseract_ocr_engine import TesseractOcrEngineFactory
            config = self._configuration_service
            self._ocr_engine_factory = TesseractOcrEngineFactory(
                language=config.get_ocr_language(),
                config=config.get_tesseract_config(),
                timeout=config.get_ocr_timeout()
            )
        return self._ocr_engine_factory

    def get_pdf_document(self) -> PdfDocumentPort:
        """Get or create the PDF mutation adapter."""
        if self._pdf_document is None:
            from ..adapters.pymupdf_document_adapter import PyMuPdfDocumentAdapter
            self._pdf_document = PyMuPdfDocumentAdapter()
        return self._pdf_document

    def get_matching_service(self) -> TargetMatchingService:
        if self._matching_service is None:
            self._matching_service = TargetMatchingService()
        return self._matching_service

    def get_geometry_service(self) -> RedactionGeometryService:
        if self._geometry_service is None:
            self._geometry_service = RedactionGeometryService()
        return self._geometry_service

    def get_redaction_use_case(self, engine: Optional[str] = None) -> RedactDocumentUseCase:
        """
        Build the full pipeline for one engine.

        A new use case is built per call; the OCR engine itself is only
        acquired when a run recognizes pages.
        """
        return RedactDocumentUseCase(
            rasterize=RasterizeDocumentUseCase(self.get_rasterizer(engine)),
            recognize=RecognizePagesUseCase(self.get_ocr_engine_factory()),
            apply_redactions=ApplyRedactionsUseCase(
                self.get_pdf_document(),
                self.get_geometry_service()
            ),
            matching_service=self.get_matching_service(),
            render_scale=self._configuration_service.get_render_scale(),
            max_input_bytes=self._configuration_service.get_max_input_bytes()
        )

    def get_error_handler(self) -> ErrorHandler:
        """Get or create error handler."""
        if self._error_handler is None:
            self._error_handler = ErrorHandler()
        return self._error_handler

    def get_configuration_service(self) -> ConfigurationService:
        """Get configuration service."""
        return self._configuration_service

    def get_application(self):
        """Create the application service bound to this container."""
        from .pdf_redaction_app import PdfRedactionApplication
        return PdfRedactionApplication(dependency_container=self)

    def reset(self):
        """Reset lazily created dependencies (useful for testing)."""
        self._rasterizers = {}
        self._matching_service = None
        self._geometry_service = None
        self._error_handler = None
