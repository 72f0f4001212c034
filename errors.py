from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError

from logger import CustomLogger
from responses import envelope

console = CustomLogger()


class APIError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, error: Optional[Any] = None):
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)


class ValidationError(APIError):
    status_code = 400
    default_message = "Bad Request"


class NotFoundError(APIError):
    status_code = 404
    default_message = "Not found."


class ConflictError(APIError):
    status_code = 409
    default_message = "Resource already exists."


class AuthenticationError(APIError):
    status_code = 401
    default_message = "Unauthorized Access"


class AuthorizationError(APIError):
    status_code = 403
    default_message = "Forbidden Access/Operation not allowed."


class StaleSessionError(APIError):
    # The token checks out but the user behind it was deleted
    status_code = 400
    default_message = "User currently logged in does not exist!"


class InternalError(APIError):
    status_code = 500


async def api_error_handler(request: Request, exc: APIError):
    return envelope(exc.status_code, message=exc.message, error=exc.error)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
        for err in exc.errors()
    ]
    console.debug(f"Rejected {request.method} {request.url.path}: {details}")
    return envelope(400, message="Bad Request", error=details)


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    return envelope(409, message="Resource already exists.", error=str(exc))


async def database_error_handler(request: Request, exc: PyMongoError):
    console.exception(f"Database error on {request.method} {request.url.path}: {exc}")
    return envelope(500, message="Internal server error", error=str(exc))


async def unhandled_error_handler(request: Request, exc: Exception):
    console.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return envelope(500, message="Internal server error", error=str(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(PyMongoError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
