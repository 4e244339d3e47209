"""Queries for administrator accounts."""

from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from pelayanan.models.admin import Admin


class AdminRepository:

    async def get_by_login(self, session: AsyncSession, login: str) -> Optional[Admin]:
        """Matches either the username or the email address."""
        result = await session.execute(
            select(Admin).where(or_(Admin.username == login, Admin.email == login))
        )
        return result.scalars().first()

    async def count(self, session: AsyncSession) -> int:
        result = await session.execute(select(func.count(Admin.id)))
        return result.scalar() or 0

    async def create(self, session: AsyncSession, username: str, email: str, password_hash: str) -> Admin:
        admin = Admin(username=username, email=email, password=password_hash)
        session.add(admin)
        await session.flush()
        return admin


admin_repository = AdminRepository()
