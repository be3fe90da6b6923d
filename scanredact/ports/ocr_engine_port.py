"""
Port for optical character recognition.
Defines the OCR result tree and the engine lifecycle.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

from ..domain.entities import BoundingBox, PixelBuffer


@dataclass(frozen=True)
class OcrLine:
    """A recognized line. ``bbox`` is in the pixel buffer's own space."""
    text: str
    bbox: BoundingBox
    confidence: float
    word_count: int


@dataclass(frozen=True)
class OcrParagraph:
    lines: List[OcrLine] = field(default_factory=list)


@dataclass(frozen=True)
class OcrBlock:
    paragraphs: List[OcrParagraph] = field(default_factory=list)


@dataclass(frozen=True)
class OcrPageResult:
    """Full recognition result for one page."""
    text: str
    blocks: List[OcrBlock] = field(default_factory=list)


class OcrEnginePort(ABC):
    """
    Interface for an OCR engine instance.

    An instance is a scoped resource: ``terminate`` must run on every exit
    path, either explicitly or by using the instance as a context manager. Instances are not safe for
    concurrent ``recognize`` calls.
    """

    @abstractmethod
    def recognize(self, pixel_buffer: PixelBuffer) -> OcrPageResult:
        """
        Recognize the text of one page.

        Args:
            pixel_buffer: The rendered page

        Returns:
            The recognition tree for the page

        Raises:
            Exception: Any engine error
        """
        pass

    @abstractmethod
    def terminate(self) -> None:
        """Release the engine and everything it holds."""
        pass

    def __enter__(self) -> "OcrEnginePort":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.terminate()


class OcrEngineFactoryPort(ABC):
    """Port for acquiring OCR engine instances."""

    @abstractmethod
    def create_engine(self) -> OcrEnginePort:
        """Acquire a fresh engine instance for one recognition run."""
        pass

    @abstractmethod
    def get_engine_info(self) -> dict:
        """Get information about the OCR engine."""
        pass
