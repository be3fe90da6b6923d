"""
Factory for creating rasterizers.
Maps engine names to concrete rasterizer adapters.
"""
from typing import Dict, Any

from ..ports.rasterizer_port import RasterizerPort
from ..domain.exceptions import ValidationError


class RasterizerFactory:
    """Factory for creating page rasterizers."""

    def __init__(self):
        """Initialize the factory with supported engines."""
        self._supported_engines = {
            "pypdfium2": {
                "name": "PyPDFium2",
                "version": "4.30.0+",
                "description": "Google PDFium-based rendering",
                "requires": ["pypdfium2", "Pillow"]
            },
            "pymupdf": {
                "name": "PyMuPDF",
                "version": "1.26.3+",
                "description": "MuPDF-based rendering",
                "requires": ["PyMuPDF", "Pillow"]
            },
            "pdf2image": {
                "name": "pdf2image",
                "version": "1.17.0+",
                "description": "Poppler-based rendering (needs poppler-utils)",
                "requires": ["pdf2image", "poppler-utils"]
            }
        }

    def create_rasterizer(self, engine: str) -> RasterizerPort:
        """
        Create a rasterizer for the specified engine.

        Args:
            engine: Engine name (pypdfium2, pymupdf, pdf2image)

        Returns:
            Configured rasterizer

        Raises:
            ValidationError: If engine is not supported
        """
        if engine not in self._supported_engines:
            supported = ", ".join(self._supported_engines.keys())
            raise ValidationError(f"Engine '{engine}' not supported. Available engines: {supported}")

        # Imported lazily so a missing optional backend only breaks its own engine
        if engine == "pypdfium2":
            from .pypdfium2_rasterizer import PyPdfium2Rasterizer
            return PyPdfium2Rasterizer()
        if engine == "pymupdf":
            from .pymupdf_rasterizer import PyMuPdfRasterizer
            return PyMuPdfRasterizer()
        from .pdf2image_rasterizer import Pdf2ImageRasterizer
        return Pdf2ImageRasterizer()

    def get_engine_info(self, engine: str) -> Dict[str, Any]:
        """
        Get information about a specific engine.

        Raises:
            ValidationError: If engine is not supported
        """
        if engine not in self._supported_engines:
            supported = ", ".join(self._supported_engines.keys())
            raise ValidationError(f"Engine '{engine}' not supported. Available engines: {supported}")

        return self._supported_engines[engine].copy()
