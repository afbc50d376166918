"""
Domain errors and their HTTP rendering.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class DailyQuizError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type = "internal_error"

    def __init__(self, message: str = "Server error"):
        super().__init__(message)
        self.message = message


class ValidationFailed(DailyQuizError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "validation_error"


class Unauthenticated(DailyQuizError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_type = "unauthenticated"


class Forbidden(DailyQuizError):
    status_code = status.HTTP_403_FORBIDDEN
    error_type = "forbidden"


class NotFound(DailyQuizError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "not_found"


class Conflict(DailyQuizError):
    status_code = status.HTTP_409_CONFLICT
    error_type = "conflict"


class DuplicateQuestionDate(Conflict):
    error_type = "duplicate_date"


class Internal(DailyQuizError):
    pass


class MessagingError(Internal):
    error_type = "messaging_error"


def _error_body(message, error_type: str, status_code: int) -> dict:
    return {"error": {"message": message, "type": error_type, "status_code": status_code}}


def install_exception_handlers(app: FastAPI) -> None:
    """Render every failure as ``{"error": {...}}``."""

    @app.exception_handler(DailyQuizError)
    async def domain_exception_handler(request: Request, exc: DailyQuizError):
        if exc.status_code >= 500:
            logger.error("%s on %s: %s", exc.error_type, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.message, exc.error_type, exc.status_code),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.detail, "http_error", exc.status_code),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "message": "Invalid request body",
                    "type": "validation_error",
                    "status_code": status.HTTP_400_BAD_REQUEST,
                    "details": jsonable_errors(exc),
                }
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        settings = request.app.state.settings
        message = "An internal error occurred" if settings.is_production() else str(exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(message, "internal_error", status.HTTP_500_INTERNAL_SERVER_ERROR),
        )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx holds the raw exception and input may be undecoded body bytes
    return jsonable_encoder(exc.errors(), exclude={"ctx", "input"})
