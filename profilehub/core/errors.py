from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from profilehub.core.exceptions import ProfileHubError
from profilehub.schemas.response import ErrorResponse
from profilehub.core.config import Settings

logger = logging.getLogger(__name__)


def summarize_validation_errors(errors) -> list:
    """
    Keeps only location, message and type of each pydantic error.
    The offending input is dropped so a submitted secret never comes back.
    """
    return [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": err.get("msg"),
            "type": err.get("type"),
        }
        for err in errors
    ]


def add_exception_handlers(app: FastAPI, settings: Settings):
    """
    Registers exception handlers with the FastAPI app.
    """
    @app.exception_handler(ProfileHubError)
    async def profilehub_exception_handler(request: Request, exc: ProfileHubError):
        error = None
        if exc.status_code >= 500:
            logger.error(
                f"{exc.code}: {exc.message}",
                extra={"method": request.method, "path": request.url.path}
            )
            # Downstream messages pass through outside production
            if not settings.is_production and exc.details is not None:
                error = str(exc.details)
        details = None if exc.status_code >= 500 else exc.details
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                message=exc.message,
                code=exc.code,
                error=error,
                details=details
            ).model_dump(exclude_none=True)
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Handles standard HTTP exceptions (404, 405, etc.)
        """
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                message=str(exc.detail),
                code="HTTP_ERROR"
            ).model_dump(exclude_none=True),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Handles Pydantic validation errors on request bodies and paths.
        """
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(
                message="Input validation failed",
                code="VALIDATION_ERROR",
                details=summarize_validation_errors(exc.errors())
            ).model_dump(exclude_none=True)
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all for unhandled exceptions.
        """
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "client": request.client.host if request.client else "unknown"
            },
            exc_info=True
        )

        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                message="Server error",
                code="INTERNAL_ERROR",
                error=None if settings.is_production else str(exc)
            ).model_dump(exclude_none=True)
        )
