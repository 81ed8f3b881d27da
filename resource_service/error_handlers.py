import logging
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from common.errors import ServiceError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Maps service errors to HTTP responses. Nothing escapes as a crash."""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            logger.error(
                "Internal fault on %s %s: %s %s",
                request.method, request.url.path, exc.message, exc.context,
            )
            # Internal faults are not domain errors: the client gets a generic message
            return JSONResponse(
                status_code=exc.status_code,
                content={"error": {"code": "internal_error", "message": "An unexpected error occurred"}},
            )

        logger.info("%s %s -> %s (%s)", request.method, request.url.path, exc.status_code, exc.code)
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": {"code": "internal_error", "message": "An unexpected error occurred"}},
        )
