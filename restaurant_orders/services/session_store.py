"""Сессии входа: выдача токена, поиск по токену, завершение."""
import enum
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_orders.core.database import utcnow
from restaurant_orders.models import UserSession
from restaurant_orders.services.auth_service import new_session_token, session_expiry


class SessionState(str, enum.Enum):
    VALID = "VALID"
    EXPIRED = "EXPIRED"
    MISSING = "MISSING"


@dataclass(frozen=True)
class SessionLookup:
    state: SessionState
    session: Optional[UserSession] = None


async def create_session(db: AsyncSession, user_id: int) -> UserSession:
    row = UserSession(
        user_id=user_id,
        session_token=new_session_token(),
        expires_at=session_expiry(),
    )
    db.add(row)
    await db.flush()
    return row


async def lookup_session(db: AsyncSession, token: str) -> SessionLookup:
    r = await db.execute(select(UserSession).where(UserSession.session_token == token))
    row = r.scalar_one_or_none()
    if row is None:
        return SessionLookup(SessionState.MISSING)
    if row.expires_at <= utcnow():
        return SessionLookup(SessionState.EXPIRED, row)
    return SessionLookup(SessionState.VALID, row)


async def delete_session(db: AsyncSession, token: str) -> bool:
    result = await db.execute(delete(UserSession).where(UserSession.session_token == token))
    return result.rowcount > 0
