"""
Exception handlers - map catalog failures to HTTP responses

    ValidationFailure -> 400 with every violated rule
    NotFound          -> 404
    Conflict          -> 409
    StorageFailure    -> 503
"""

from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from movies.core.exceptions import Conflict, NotFound, StorageFailure, ValidationFailure
from movies.core.logging import get_logger
from movies.models import ErrorDetail, ErrorResponse

logger = get_logger(__name__)


def error_response(status_code: int, message: str, errors: Optional[List[ErrorDetail]] = None) -> JSONResponse:
    body = ErrorResponse(message=message, errors=errors or [])
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


async def validation_failure_handler(request: Request, exc: ValidationFailure) -> JSONResponse:
    errors = [ErrorDetail(field=e.field, message=e.message) for e in exc.errors]
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", errors)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters use the same error shape"""
    errors = [
        ErrorDetail(
            field=".".join(str(part) for part in error["loc"] if part not in ("body", "query", "path")),
            message=error["msg"],
        )
        for error in exc.errors()
    ]
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", errors)


async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, exc.message)


async def conflict_handler(request: Request, exc: Conflict) -> JSONResponse:
    errors = [ErrorDetail(field=exc.field, message=exc.message)] if exc.field else []
    return error_response(status.HTTP_409_CONFLICT, exc.message, errors)


async def storage_failure_handler(request: Request, exc: StorageFailure) -> JSONResponse:
    logger.error(f"Storage failure: {exc.message}", path=request.url.path)
    return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Storage unavailable")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationFailure, validation_failure_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(Conflict, conflict_handler)
    app.add_exception_handler(StorageFailure, storage_failure_handler)
