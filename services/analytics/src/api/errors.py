from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from src.core.errors import AnalyticsError
from src.core.logger import get_logger

logger = get_logger("analytics.api.errors")


async def analytics_error_handler(
    request: Request, exc: AnalyticsError
) -> JSONResponse:
    """Render service errors as ``{"error": code, "message": ...}``."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "request_failed",
        extra={
            "path": request.url.path,
            "status_code": exc.status_code,
            "error_code": exc.code,
        },
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AnalyticsError, analytics_error_handler)
