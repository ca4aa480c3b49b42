from pydantic import BaseModel
from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository:
    model = None
    schema: type[BaseModel] = None

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_schema(self, obj):
        return self.schema.model_validate(obj, from_attributes=True)

    async def get_all_by(self, **filter_by):
        result = await self.session.execute(select(self.model).filter_by(**filter_by))
        return [self._to_schema(obj) for obj in result.scalars().all()]

    async def get_one_or_none(self, **filter_by):
        result = await self.session.execute(select(self.model).filter_by(**filter_by))
        obj = result.scalars().one_or_none()
        return self._to_schema(obj) if obj else None

    async def add(self, add_data: BaseModel):
        stmt = insert(self.model).values(**add_data.model_dump()).returning(self.model)
        result = await self.session.execute(stmt)
        return self._to_schema(result.scalar_one())

    async def delete(self, **filters_by) -> int:
        stmt = delete(self.model).filter_by(**filters_by)
        result = await self.session.execute(stmt)
        return result.rowcount
