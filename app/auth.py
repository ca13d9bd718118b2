# app/auth.py
from __future__ import annotations

import logging
from dataclasses import dataclass

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlmodel import Session, select

from .db import get_session
from .errors import Unauthorized
from .models import Role, User

logger = logging.getLogger(__name__)

_basic = HTTPBasic(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Quem está fazendo a requisição. Passado explicitamente aos serviços."""

    user_id: int
    name: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def hash_password(raw: str) -> str:
    return bcrypt.hashpw(raw.encode(), bcrypt.gensalt()).decode()


def check_password(raw: str, pw_hash: str) -> bool:
    return bcrypt.checkpw(raw.encode(), pw_hash.encode())


def authenticate(session: Session, email: str, password: str) -> AuthContext:
    user = session.exec(select(User).where(User.email == email.strip().lower())).first()
    if user is None or not check_password(password, user.password_hash):
        logger.warning("falha de login para %s", email)
        raise Unauthorized("Credenciais inválidas.")
    return AuthContext(user_id=user.id, name=user.name, role=user.role)


def require_admin(ctx: AuthContext) -> None:
    if not ctx.is_admin:
        raise Unauthorized("Apenas administradores podem executar esta ação.")


def current_user(
    credentials: HTTPBasicCredentials | None = Depends(_basic),
    session: Session = Depends(get_session),
) -> AuthContext:
    """Dependency: resolve e verifica as credenciais da requisição."""
    if credentials is None:
        raise Unauthorized()
    return authenticate(session, credentials.username, credentials.password)


def current_admin(ctx: AuthContext = Depends(current_user)) -> AuthContext:
    require_admin(ctx)
    return ctx
