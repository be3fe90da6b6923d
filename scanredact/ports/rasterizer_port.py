"""
Port for page rasterization.
This is an interface that defines how the pipeline turns PDF pages into images.
"""
from abc import ABC, abstractmethod

from ..domain.entities import PixelBuffer


class RasterizerPort(ABC):
    """Interface for rendering PDF pages to pixel buffers."""

    @abstractmethod
    def page_count(self, pdf_bytes: bytes) -> int:
        """
        Count the pages of a PDF document.

        Args:
            pdf_bytes: The PDF document content

        Returns:
            Number of pages

        Raises:
            Exception: Any library error if the document cannot be opened
        """
        pass

    @abstractmethod
    def render_page(self, pdf_bytes: bytes, page_index: int, scale: float) -> PixelBuffer:
        """
        Render one page at the given scale.

        Args:
            pdf_bytes: The PDF document content
            page_index: 0-based page index
            scale: Render scale (1.0 renders one pixel per PDF point)

        Returns:
            The rendered page

        Raises:
            Exception: Any library error if the page cannot be rendered
        """
        pass

    @abstractmethod
    def get_engine_info(self) -> dict:
        """
        Get information about this rasterization engine.

        Returns:
            Dictionary with engine information (name, version, description)
        """
        pass
