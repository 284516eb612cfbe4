"""Регистрация, вход по email+пароль, сессии с токеном, проверка ролей."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_orders.core.database import get_db
from restaurant_orders.core.logging_config import get_logger
from restaurant_orders.models import User, UserRole
from restaurant_orders.schemas.user import (
    LoginBody,
    LoginResponse,
    RegisterBody,
    RegisterResponse,
    UserInfo,
)
from restaurant_orders.services.auth_service import (
    DUMMY_PASSWORD_HASH,
    parse_authorization,
    verify_password,
)
from restaurant_orders.services.session_store import (
    SessionState,
    create_session,
    delete_session,
    lookup_session,
)
from restaurant_orders.services.user_directory import (
    create_user,
    get_user,
    get_user_by_email,
    is_taken,
)

router = APIRouter(prefix="/api", tags=["auth"])
logger = get_logger(__name__)


def _user_info(user: User) -> UserInfo:
    return UserInfo(id=user.id, username=user.username, email=user.email, role=user.role.value)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> User:
    token = parse_authorization(authorization)
    if not token:
        raise _unauthorized("Требуется авторизация")
    found = await lookup_session(db, token)
    if found.state == SessionState.EXPIRED:
        raise _unauthorized("Сессия истекла")
    if found.state == SessionState.MISSING:
        logger.warning("api/user: неизвестный токен сессии")
        raise _unauthorized("Требуется авторизация")
    user = await get_user(db, found.session.user_id)
    if user is None:
        raise _unauthorized("Требуется авторизация")
    return user


def require_roles(allowed_roles: List[UserRole]):
    async def _check(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Недостаточно прав")
        return current_user
    return _check


RequireKitchenStaff = require_roles([UserRole.CHEF, UserRole.MANAGER])


async def _session_user(db: AsyncSession, authorization: Optional[str]) -> Optional[User]:
    """Пользователь действующей сессии или None, без ошибок 401."""
    token = parse_authorization(authorization)
    if not token:
        return None
    found = await lookup_session(db, token)
    if found.state != SessionState.VALID:
        return None
    return await get_user(db, found.session.user_id)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterBody,
    authorization: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Сам себя регистрирует только покупатель; повара и менеджера заводит менеджер."""
    if body.role != UserRole.CUSTOMER:
        creator = await _session_user(db, authorization)
        if creator is None or creator.role != UserRole.MANAGER:
            logger.warning("Регистрация с ролью %s без сессии менеджера отклонена", body.role.value)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Недостаточно прав")
    email = body.email.strip()
    username = body.username.strip()
    if "@" not in email:
        raise HTTPException(status_code=400, detail="Некорректный формат email")
    if not username or not body.password:
        raise HTTPException(status_code=400, detail="Имя пользователя и пароль обязательны")
    if await is_taken(db, username, email):
        raise HTTPException(status_code=400, detail="Имя пользователя или email уже заняты")
    user = await create_user(db, username, email, body.password, body.role)
    await db.commit()
    logger.info("Зарегистрирован пользователь id=%s роль=%s", user.id, user.role.value)
    return RegisterResponse(id=user.id, user=_user_info(user))


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginBody, db: AsyncSession = Depends(get_db)):
    user = await get_user_by_email(db, body.email) if body.email.strip() else None
    password_ok = verify_password(body.password, user.password_hash if user else DUMMY_PASSWORD_HASH)
    if user is None or not password_ok:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Неверный email или пароль")
    session = await create_session(db, user.id)
    await db.commit()
    logger.info("Вход пользователя id=%s", user.id)
    return LoginResponse(
        session_token=session.session_token,
        expires_at=session.expires_at.isoformat(),
    )


@router.get("/user", response_model=UserInfo)
async def user_info(current_user: User = Depends(get_current_user)):
    return _user_info(current_user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    authorization: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
):
    token = parse_authorization(authorization)
    if not token or not await delete_session(db, token):
        raise _unauthorized("Требуется авторизация")
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
