import logging
import uuid
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from price_alerts.core.config import settings
from price_alerts.core.exceptions import Conflict, Unauthorized
from price_alerts.modules.auth.repository import AuthRepository
from price_alerts.modules.auth.schemas import Identity, RefreshTokenAdd, TokenPair
from price_alerts.modules.users.repository import UserRepository
from price_alerts.modules.users.schemas import User, UserAdd, UserRequestAdd


logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def create_access_token(user_id: int, email: str | None = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    data = {"user_id": user_id, "email": email, "exp": expire}
    return jwt.encode(data, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> Identity:
    """Decode an access token into an identity.

    Any failure (expired, bad signature, malformed, missing claims) is logged
    and reported as a plain `Unauthorized`; the cause never reaches the caller.
    """
    try:
        payload = jwt.decode(token, key=settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        logger.warning("Token verification error: %s", e)
        raise Unauthorized("Unauthorized: Invalid token")

    user_id = payload.get("user_id")
    if not isinstance(user_id, int):
        logger.warning("Token verification error: payload without user_id")
        raise Unauthorized("Unauthorized: Invalid token")

    return Identity(uid=user_id, email=payload.get("email"))


class AuthService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = UserRepository(session)
        self.auth_repo = AuthRepository(session)

    def _hash_password(self, password: str) -> str:
        return pwd_context.hash(password)

    def _verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return pwd_context.verify(plain_password, hashed_password)

    def _create_refresh_token(self, user_id: int) -> tuple[str, datetime]:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES)
        data = {"user_id": user_id, "exp": expire, "jti": uuid.uuid4().hex}
        token = jwt.encode(data, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
        return token, expire

    async def _issue_tokens(self, user_id: int, email: str | None) -> TokenPair:
        access_token = create_access_token(user_id, email)
        refresh_token, expires_at = self._create_refresh_token(user_id)
        await self.auth_repo.replace_for_user(
            RefreshTokenAdd(user_id=user_id, token=refresh_token, expires_at=expires_at)
        )
        await self.session.commit()
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    async def register_user(self, data: UserRequestAdd) -> User:
        existing = await self.repo.get_one_or_none(email=data.email)
        if existing:
            raise Conflict("A user with this email already exists")

        try:
            user = await self.repo.add(
                UserAdd(email=data.email, hashed_password=self._hash_password(data.password))
            )
            await self.session.commit()
            return user
        except IntegrityError:
            await self.session.rollback()
            raise Conflict("A user with this email already exists")

    async def login_user(self, email: str, password: str) -> TokenPair:
        user = await self.repo.get_user_with_hashed_password(email)
        if not user or not self._verify_password(password, user.hashed_password):
            raise Unauthorized("Invalid email or password")

        return await self._issue_tokens(user.id, user.email)

    async def refresh_tokens(self, token: str) -> TokenPair:
        try:
            payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Refresh token expired")
        except jwt.PyJWTError:
            raise Unauthorized("Invalid refresh token")

        user_id = payload.get("user_id")
        if not user_id:
            raise Unauthorized("Invalid refresh token")

        stored = await self.auth_repo.find(token)
        if stored is None or stored.user_id != user_id:
            raise Unauthorized("Refresh token not found or revoked")

        # revocation and the new pair commit together in _issue_tokens
        if not await self.auth_repo.revoke(token):
            raise Unauthorized("Refresh token not found or revoked")

        return await self._issue_tokens(user_id, await self.get_user_email(user_id))

    async def get_user_email(self, user_id: int) -> str | None:
        return await self.repo.get_email(user_id)
