from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from price_alerts.core.database import get_async_session
from price_alerts.core.dependencies import CurrentUserDep
from price_alerts.core.exceptions import NotFound
from price_alerts.modules.auth.schemas import RefreshRequest, TokenPair
from price_alerts.modules.auth.service import AuthService
from price_alerts.modules.users.repository import UserRepository
from price_alerts.modules.users.schemas import User, UserRequestAdd, UserRequestLogin


router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_user(
    data: UserRequestAdd,
    session: AsyncSession = Depends(get_async_session),
):
    auth_service = AuthService(session)
    user = await auth_service.register_user(data)
    return {"status": "OK", "user_id": user.id}


@router.post("/login", response_model=TokenPair)
async def login_user(
    data: UserRequestLogin,
    session: AsyncSession = Depends(get_async_session),
):
    auth_service = AuthService(session)
    return await auth_service.login_user(data.email, data.password)


@router.post("/refresh", response_model=TokenPair)
async def refresh_tokens(
    data: RefreshRequest,
    session: AsyncSession = Depends(get_async_session),
):
    auth_service = AuthService(session)
    return await auth_service.refresh_tokens(data.token)


@router.get("/me", response_model=User)
async def get_me(
    user: CurrentUserDep,
    session: AsyncSession = Depends(get_async_session),
):
    repo = UserRepository(session)
    me = await repo.get_one_or_none(id=user.uid)
    if not me:
        raise NotFound("User not found")
    return me
