"""Map domain and validation errors onto HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError

from ordering.errors import DomainError, ErrorType
from ordering.utils.logging import get_logger

logger = get_logger(__name__)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.type is ErrorType.INFRASTRUCTURE:
        # Details stay in the logs
        logger.error("request_failed", path=request.url.path, error=repr(exc), context=exc.context)
        body = {
            "code": exc.code,
            "message": "The request could not be completed, please try again later",
            "type": exc.type.value,
            "context": {},
        }
    else:
        body = exc.to_dict()
    return JSONResponse(status_code=exc.status_code, content={"error": body})


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid input",
                "type": ErrorType.VALIDATION.value,
                "context": exc.messages,
            }
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
