from typing import Optional

from pydantic import BaseModel

from restaurant_orders.models import UserRole


class RegisterBody(BaseModel):
    username: str = ""
    email: str = ""
    password: str = ""
    role: UserRole = UserRole.CUSTOMER


class LoginBody(BaseModel):
    email: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    session_token: str
    token_type: str = "session"
    expires_at: str


class UserInfo(BaseModel):
    id: int
    username: str
    email: str
    role: str


class RegisterResponse(BaseModel):
    id: int
    detail: str = "Пользователь успешно зарегистрирован"
    user: Optional[UserInfo] = None
