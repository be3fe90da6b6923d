"""
Infrastructure adapters module.
Rasterizers, the Tesseract OCR engine, PDF mutation and storage.
Rasterizers with optional system dependencies are created through
RasterizerFactory rather than imported here.
"""

from .local_storage_adapter import LocalStorageAdapter
from .pymupdf_document_adapter import PyMuPdfDocumentAdapter
from .rasterizer_factory import RasterizerFactory
from .tesseract_ocr_engine import TesseractOcrEngine, TesseractOcrEngineFactory

__all__ = [
    "LocalStorageAdapter",
    "PyMuPdfDocumentAdapter",
    "RasterizerFactory",
    "TesseractOcrEngine",
    "TesseractOcrEngineFactory"
]
