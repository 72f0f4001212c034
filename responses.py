from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def envelope(status_code: int, data: Any = None, message: str = "", error: Optional[Any] = None) -> JSONResponse:
    """Wrap a payload in the uniform {status, data, message, error} body."""
    return JSONResponse(
        status_code=status_code,
        content={
            "status": status_code,
            "data": jsonable_encoder(data),
            "message": message,
            "error": jsonable_encoder(error),
        },
    )
