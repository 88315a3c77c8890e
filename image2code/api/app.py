"""
FastAPI HTTP surface for the generation pipeline.
"""

from typing import Optional

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.responses import JSONResponse

from image2code.errors import GenerationError, ValidationError
from image2code.io.image_loader import ImageValidator
from image2code.models import (
    GenerationErrorKind,
    ImageAsset,
    ImageCandidate,
    ValidationReason,
)
from image2code.pipeline.generation import CodeGenerator
from image2code.utils.llm_logger import get_logger


GENERATION_STATUS = {
    GenerationErrorKind.MISSING_INPUT: 400,
    GenerationErrorKind.UPSTREAM_FAILURE: 502,
    GenerationErrorKind.MALFORMED_REPLY: 500,
}

VALIDATION_STATUS = {
    ValidationReason.UNSUPPORTED_TYPE: 400,
    ValidationReason.TOO_LARGE: 413,
}


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": f"Failed to generate code: {message}"}
    )


def create_app(generator: Optional[CodeGenerator] = None) -> FastAPI:
    """
    Create the API application.

    Args:
        generator: Generator to serve requests with. When omitted, one is
            built from environment settings on the first request.
    """
    app = FastAPI(title="Image to Code")
    app.state.generator = generator
    validator = ImageValidator()
    logger = get_logger()

    def get_generator() -> CodeGenerator:
        if app.state.generator is None:
            app.state.generator = CodeGenerator.from_settings()
        return app.state.generator

    @app.exception_handler(GenerationError)
    async def generation_error_handler(request: Request, exc: GenerationError):
        logger.log_event("api", f"{exc.kind.value}: {exc.detail}")
        return _error_response(GENERATION_STATUS[exc.kind], exc.message)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.log_event("api", f"{exc.reason.value}: {exc.message}")
        return _error_response(VALIDATION_STATUS[exc.reason], exc.message)

    @app.exception_handler(ValueError)
    async def configuration_error_handler(request: Request, exc: ValueError):
        logger.log_event("api", f"Generator configuration failed: {exc}")
        return _error_response(500, f"Generator is not configured: {exc}")

    @app.get("/health")
    async def health():
        return {"ok": True}

    @app.post("/api/generate-code")
    async def generate_code(image: Optional[UploadFile] = File(None)):
        if image is None:
            raise GenerationError.missing_input()

        candidate = ImageCandidate(
            filename=image.filename or "",
            media_type=image.content_type or "",
            data=await image.read()
        )
        logger.log_event(
            "api",
            f"Image file received: {candidate.filename} Size: {candidate.byte_length} Type: {candidate.media_type}"
        )
        validator.check(candidate.media_type, candidate.byte_length)
        asset = ImageAsset(
            data=candidate.data,
            media_type=candidate.media_type,
            filename=candidate.filename
        )

        pair = await get_generator().agenerate(asset)
        return pair.to_response()

    return app
