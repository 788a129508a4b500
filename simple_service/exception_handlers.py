from fastapi import Request, status
from fastapi.responses import JSONResponse

from simple_service.logger import logger

UNEXPECTED_ERROR = "An unexpected error occurred while processing the request."


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected errors to return a structured 500 response."""
    logger.exception(
        f"Unhandled exception while processing request: {repr(exc)} path={request.url.path} method={request.method}"
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": UNEXPECTED_ERROR},
    )
