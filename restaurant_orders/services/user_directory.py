from typing import Optional

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_orders.models import User, UserRole
from restaurant_orders.services.auth_service import hash_password


async def is_taken(db: AsyncSession, username: str, email: str) -> bool:
    r = await db.execute(
        select(User.id).where(
            or_(func.lower(User.username) == username.lower(), func.lower(User.email) == email.lower())
        )
    )
    return r.first() is not None


async def create_user(
    db: AsyncSession, username: str, email: str, password: str, role: UserRole = UserRole.CUSTOMER
) -> User:
    user = User(
        username=username,
        email=email.lower(),
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    r = await db.execute(select(User).where(func.lower(User.email) == email.strip().lower()))
    return r.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    r = await db.execute(select(User).where(User.id == user_id))
    return r.scalar_one_or_none()
