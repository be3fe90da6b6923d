"""
Ports package - interfaces for external systems.
These define the contracts that adapters must implement.
"""

from .rasterizer_port import RasterizerPort
from .ocr_engine_port import OcrEnginePort, OcrEngineFactoryPort
from .pdf_document_port import PdfDocumentPort, PdfDocumentHandle
from .file_storage_port import FileStoragePort

__all__ = [
    "RasterizerPort",
    "OcrEnginePort",
    "OcrEngineFactoryPort",
    "PdfDocumentPort",
    "PdfDocumentHandle",
    "FileStoragePort",
]
