"""
Error response helpers
"""
import traceback

from fastapi.responses import JSONResponse


def server_error(where: str, exc: Exception) -> JSONResponse:
    """Log an unexpected error with its traceback and answer 500"""
    error_msg = str(exc)
    error_type = type(exc).__name__
    print(f"Error in {where}: {error_type}: {error_msg}")
    traceback.print_exc()
    return JSONResponse(
        status_code=500,
        content={"status": "error", "detail": error_msg, "error_type": error_type}
    )
