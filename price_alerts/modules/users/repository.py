from typing import Optional
from pydantic import EmailStr
from sqlalchemy import select

from price_alerts.core.repository import BaseRepository
from price_alerts.modules.users.models import User as UserModel
from price_alerts.modules.users.schemas import User, UserWithHashedPassword


class UserRepository(BaseRepository):
    model = UserModel
    schema = User  # without the password hash

    async def get_user_with_hashed_password(self, email: EmailStr) -> Optional[UserWithHashedPassword]:
        query = select(self.model).filter_by(email=email)
        result = await self.session.execute(query)

        obj = result.scalars().one_or_none()
        if obj is None:
            return None

        return UserWithHashedPassword.model_validate(obj, from_attributes=True)

    async def get_email(self, user_id: int) -> str | None:
        query = select(self.model.email).where(self.model.id == user_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
