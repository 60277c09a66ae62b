from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from utils.logger import get_logger

logger = get_logger("Global_Exception")

class AppException(HTTPException):
    """HTTP error raised from service code, carrying a machine-readable code."""
    def __init__(self, status_code: int, detail: str, code: str = "error"):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code

class ShiftConflict(AppException):
    def __init__(self, detail: str = "Already clocked in"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail, code="shift_open")

async def app_exception_handler(request: Request, exc: AppException):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code}
    )

async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )
