"""
Configuration service for scanned PDF redaction.
Centralizes all configuration parameters and default values.
"""
import os
from pathlib import Path
from typing import List
from dataclasses import dataclass

# Hard ceiling on source documents, in bytes.
MAX_INPUT_BYTES = 50 * 1024 * 1024


@dataclass(frozen=True)
class PathConfiguration:
    """Configuration for file paths."""
    input_directory: str
    output_directory: str
    default_output_suffix: str


@dataclass(frozen=True)
class EngineConfiguration:
    """Configuration for rasterization engines."""
    default_rasterizer: str
    supported_rasterizers: List[str]
    render_scale: float
    ocr_timeout: int


@dataclass(frozen=True)
class OcrConfiguration:
    """Configuration for the OCR engine."""
    language: str
    tesseract_config: str


@dataclass(frozen=True)
class LimitConfiguration:
    """Configuration for input limits."""
    max_input_bytes: int


class ConfigurationService:
    """Service for managing application configuration."""

    def __init__(self):
        """Initialize with default configuration."""
        self._path_config = self._create_path_configuration()
        self._engine_config = self._create_engine_configuration()
        self._ocr_config = self._create_ocr_configuration()
        self._limit_config = self._create_limit_configuration()

    def get_default_output_path(self, input_path: str) -> str:
        """
        Generate default output path for an input file.

        Args:
            input_path: Path to input file

        Returns:
            Default output path
        """
        input_path_obj = Path(input_path)
        output_name = f"{input_path_obj.stem}{self._path_config.default_output_suffix}"

        # Files under the input directory go to the output directory
        input_dir = Path(self._path_config.input_directory)
        if input_dir.parts and input_path_obj.parts[:len(input_dir.parts)] == input_dir.parts:
            relative_parent = input_path_obj.parent.relative_to(input_dir)
            return str(Path(self._path_config.output_directory) / relative_parent / output_name)

        return str(input_path_obj.parent / output_name)

    def get_supported_rasterizers(self) -> List[str]:
        """Get list of supported rasterization engines."""
        return self._engine_config.supported_rasterizers.copy()

    def get_default_rasterizer(self) -> str:
        """Get default rasterization engine."""
        return self._engine_config.default_rasterizer

    def get_render_scale(self) -> float:
        """Get the render scale used for every page of a run."""
        return self._engine_config.render_scale

    def get_ocr_timeout(self) -> int:
        """Get the per-page OCR timeout in seconds (0 disables it)."""
        return self._engine_config.ocr_timeout

    def get_ocr_language(self) -> str:
        """Get the Tesseract language code."""
        return self._ocr_config.language

    def get_tesseract_config(self) -> str:
        """Get extra Tesseract command line options."""
        return self._ocr_config.tesseract_config

    def get_max_input_bytes(self) -> int:
        """Get the largest accepted source document size."""
        return self._limit_config.max_input_bytes

    def validate_rasterizer(self, engine: str) -> bool:
        """
        Validate if a rasterization engine is supported.

        Args:
            engine: Engine name to validate

        Returns:
            True if engine is supported
        """
        return engine in self._engine_config.supported_rasterizers

    def _create_path_configuration(self) -> PathConfiguration:
        """Create path configuration with defaults and environment overrides."""
        return PathConfiguration(
            input_directory=os.getenv("PDF_INPUT_DIR", "data/input"),
            output_directory=os.getenv("PDF_OUTPUT_DIR", "data/output"),
            default_output_suffix="_redacted.pdf"
        )

    def _create_engine_configuration(self) -> EngineConfiguration:
        """Create engine configuration with defaults and environment overrides."""
        render_scale = float(os.getenv("PDF_RENDER_SCALE", "2.0"))
        if render_scale <= 0:
            raise ValueError(f"PDF_RENDER_SCALE must be positive, got {render_scale}")
        return EngineConfiguration(
            default_rasterizer=os.getenv("PDF_DEFAULT_RASTERIZER", "pypdfium2"),
            supported_rasterizers=["pypdfium2", "pymupdf", "pdf2image"],
            render_scale=render_scale,
            ocr_timeout=int(os.getenv("PDF_OCR_TIMEOUT", "0"))
        )

    def _create_ocr_configuration(self) -> OcrConfiguration:
        """Create OCR configuration with defaults and environment overrides."""
        return OcrConfiguration(
            language=os.getenv("PDF_OCR_LANGUAGE", "eng"),
            tesseract_config=os.getenv("PDF_TESSERACT_CONFIG", "--oem 3 --psm 3")
        )

    def _create_limit_configuration(self) -> LimitConfiguration:
        """Create limit configuration. The environment can only lower the ceiling."""
        max_mb = float(os.getenv("PDF_MAX_INPUT_MB", "50"))
        return LimitConfiguration(
            max_input_bytes=min(MAX_INPUT_BYTES, int(max_mb * 1024 * 1024))
        )
