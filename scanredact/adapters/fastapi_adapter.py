"""
FastAPI adapter for the scanned PDF redaction service.
"""
import logging
from typing import List, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response

from ..domain.entities import (
    RedactionRequestAPI, RedactionResponse, RedactionTargetResponse,
    RunStatus, VerificationRequestAPI, VerificationResponse
)
from ..domain.exceptions import (
    InputTooLargeError, InvalidInputError, PageConversionError,
    RedactionError, ValidationError
)
from ..application.dependency_container import DependencyContainer

logger = logging.getLogger(__name__)


app = FastAPI(
    title="Scanned PDF Redaction Service",
    description="OCR-based redaction of phrases in image-only PDF documents",
    version="1.0.0"
)

# Global dependency container
container = DependencyContainer()


@app.get("/health")
async def health_check():
    """Service health check."""
    return {"status": "healthy", "service": "scanredact"}


@app.get("/engines")
async def get_engines():
    """Get available rasterizers."""
    application = container.get_application()
    engines = application.get_supported_engines()
    return {
        "available_engines": [{"name": e, **_describe_engine(application, e)} for e in engines],
        "default": container.get_configuration_service().get_default_rasterizer(),
        "count": len(engines)
    }


@app.post("/redact", response_model=RedactionResponse)
async def redact_document(request: RedactionRequestAPI):
    """
    Redact a PDF document on the server's storage via JSON request.

    Failures come back as ``success: false`` with the failed stage and page.
    """
    application = container.get_application()
    result = await run_in_threadpool(
        application.redact_document,
        source_path=request.source_path,
        queries=request.queries,
        destination_path=request.destination_path,
        engine=request.engine,
        passes=request.passes
    )
    return _convert_result_to_response(result)


@app.post("/redact/upload")
async def redact_upload(
    file: UploadFile = File(...),
    queries: List[str] = Form(...),
    engine: Optional[str] = Form(None),
    passes: int = Form(1)
):
    """
    Redact an uploaded PDF and stream the redacted document back.

    When nothing matches, a JSON body with status ``nothing_to_redact`` is
    returned instead of a document.
    """
    limit = container.get_configuration_service().get_max_input_bytes()
    if file.size is not None and file.size > limit:
        raise HTTPException(
            status_code=413,
            detail=f"Upload is {file.size} bytes, larger than the {limit} byte limit"
        )
    # Never buffer more than one byte past the limit
    content = await file.read(limit + 1)
    if len(content) > limit:
        raise HTTPException(status_code=413, detail=f"Upload is larger than the {limit} byte limit")

    application = container.get_application()
    try:
        pass_results = await run_in_threadpool(
            application.redact_bytes, content, queries, engine=engine, passes=passes
        )
    except Exception as e:
        raise _to_http_exception(e) from e

    applied = sum(result.applied_count for result in pass_results)
    skipped = sum(result.skipped_count for result in pass_results)
    if not any(result.status == RunStatus.REDACTED for result in pass_results):
        return JSONResponse({
            "status": RunStatus.NOTHING_TO_REDACT.value,
            "message": "No instances found to redact",
            "passes": len(pass_results)
        })

    filename = (file.filename or "document.pdf").rsplit(".", 1)[0] + "_redacted.pdf"
    return Response(
        content=pass_results[-1].pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Redactions-Applied": str(applied),
            "X-Redactions-Skipped": str(skipped),
            "X-Redaction-Passes": str(len(pass_results))
        }
    )


@app.post("/verify", response_model=VerificationResponse)
async def verify_redaction(request: VerificationRequestAPI):
    """Check whether a document still exposes any of the queries."""
    application = container.get_application()
    try:
        residual = await run_in_threadpool(
            application.verify_redaction, request.source_path, request.queries, engine=request.engine
        )
    except Exception as e:
        raise _to_http_exception(e) from e

    return VerificationResponse(
        clean=not residual,
        residual_targets=[_convert_target(t) for t in residual]
    )


def _describe_engine(application, engine: str) -> dict:
    info = application.get_engine_info(engine)
    return {
        "display_name": info["name"],
        "description": info["description"],
        "requires": info["requires"]
    }


def _to_http_exception(error: Exception) -> HTTPException:
    """Map a pipeline error onto an HTTP status."""
    if isinstance(error, InputTooLargeError):
        return HTTPException(status_code=413, detail=str(error))
    if isinstance(error, (InvalidInputError, ValidationError)):
        return HTTPException(status_code=422, detail=str(error))
    if isinstance(error, PageConversionError):
        return HTTPException(
            status_code=422,
            detail={"error": str(error), "stage": error.stage, "page": error.page_number}
        )
    if isinstance(error, RedactionError):
        return HTTPException(
            status_code=500,
            detail={
                "error": str(error),
                "stage": error.stage,
                "page": getattr(error, "page_number", None)
            }
        )
    logger.exception("Unexpected error while handling request", extra={"event": "http.unexpected"})
    return HTTPException(status_code=500, detail=f"Unexpected error: {error}")


def _convert_target(target) -> RedactionTargetResponse:
    bbox = target.bbox
    return RedactionTargetResponse(
        word=target.word,
        page=target.page,
        bbox=[bbox.x0, bbox.y0, bbox.x1, bbox.y1]
    )


def _convert_result_to_response(result) -> RedactionResponse:
    """Convert a RedactionResult to RedactionResponse."""
    return RedactionResponse(
        success=result.success,
        message=result.message,
        status=result.status.value if result.status else None,
        output_document=result.output_document.path if result.output_document else None,
        applied_count=result.applied_count,
        skipped_count=result.skipped_count,
        passes=result.passes,
        targets=[_convert_target(t) for t in result.targets],
        error=result.error,
        failed_stage=result.failed_stage,
        failed_page=result.failed_page
    )
