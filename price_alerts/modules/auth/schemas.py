from datetime import datetime

from pydantic import BaseModel


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str


class RefreshRequest(BaseModel):
    token: str


class Identity(BaseModel):
    """Verified caller attached to the request by the auth gate."""
    uid: int
    email: str | None = None


class RefreshTokenAdd(BaseModel):
    user_id: int
    token: str
    expires_at: datetime


class StoredRefreshToken(RefreshTokenAdd):
    id: int
