from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from app.Core.Exceptions.errors import CRMError


def _error_body(message: str, **extra) -> dict:
    return {"success": False, "error": message, **extra}


async def crm_error_handler(request: Request, exc: CRMError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(
            f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}"
        )
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=_error_body("Request validation failed", details=jsonable_encoder(exc.errors())),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=_error_body("Internal server error"))


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the standard {success, error} envelope to every error path."""
    app.add_exception_handler(CRMError, crm_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
