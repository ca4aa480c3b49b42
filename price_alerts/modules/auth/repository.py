from price_alerts.core.repository import BaseRepository
from price_alerts.modules.auth.models import RefreshToken
from price_alerts.modules.auth.schemas import RefreshTokenAdd, StoredRefreshToken


class AuthRepository(BaseRepository):
    """Refresh token store. Writes are left uncommitted; the caller owns the transaction."""
    model = RefreshToken
    schema = StoredRefreshToken

    async def replace_for_user(self, data: RefreshTokenAdd) -> StoredRefreshToken:
        # one live refresh token per user
        await self.delete(user_id=data.user_id)
        return await self.add(data)

    async def find(self, token: str) -> StoredRefreshToken | None:
        return await self.get_one_or_none(token=token)

    async def revoke(self, token: str) -> bool:
        return await self.delete(token=token) > 0
