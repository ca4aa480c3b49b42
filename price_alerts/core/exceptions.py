"""HTTP-aware error taxonomy shared by routers, services and the auth gate."""
from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class Unauthorized(HTTPException):
    def __init__(self, detail: str = "Unauthorized: Invalid token"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ValidationError(HTTPException):
    def __init__(self, detail: str = "Missing fields"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Conflict(HTTPException):
    def __init__(self, detail: str = "Already exists"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class UpstreamError(HTTPException):
    """A PriceFeed, Mail or store failure. The cause is logged, never returned."""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


class RateLimited(HTTPException):
    def __init__(self, detail: str = "Too many requests, please try again later."):
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=detail)


def rate_limited_body(message: str) -> dict:
    return {"status": status.HTTP_429_TOO_MANY_REQUESTS, "error": message}


async def rate_limited_handler(request: Request, exc: RateLimited) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=rate_limited_body(exc.detail))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and query params are client errors (400), not 422."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": errors},
    )
