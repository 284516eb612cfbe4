"""Хеширование паролей и токены сессий."""
import secrets
from datetime import datetime, timedelta
from typing import Optional

import bcrypt

from restaurant_orders.config import settings
from restaurant_orders.core.database import utcnow


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Строка в БД не является bcrypt-хешем.
        return False


# Сверяется с паролем при входе по неизвестному email: ответ занимает столько же времени, сколько с реальным хешем.
DUMMY_PASSWORD_HASH = hash_password(secrets.token_urlsafe(16))


def new_session_token() -> str:
    return secrets.token_urlsafe(32)


def session_expiry(now: Optional[datetime] = None) -> datetime:
    return (now or utcnow()) + timedelta(minutes=settings.session_ttl_minutes)


def parse_authorization(header: Optional[str]) -> Optional[str]:
    """Токен из заголовка Authorization: допускается как «Bearer <token>», так и голый токен."""
    if not header:
        return None
    value = header.strip()
    scheme, _, rest = value.partition(" ")
    if rest and scheme.lower() == "bearer":
        value = rest.strip()
    return value or None
