from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from svyasa.core.errors import AuthenticationError
from svyasa.core.logging import log
from svyasa.core.settings import Settings
from svyasa.models import AdminUser

ph = PasswordHasher()


def hash_password(password: str) -> str:
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHashError):
        return False


@dataclass(frozen=True)
class AdminSession:
    """An authenticated admin, passed explicitly to anything that needs it."""

    admin_id: uuid.UUID
    token_id: str
    issued_at: datetime
    expires_at: datetime

    def is_valid(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now < self.expires_at


class SessionRegistry:
    """Issues and resolves admin tokens; sign-out revokes by token id."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._revoked: set[str] = set()

    def issue(self, admin: AdminUser, now: datetime | None = None) -> tuple[str, AdminSession]:
        now = now or datetime.now(timezone.utc)
        session = AdminSession(
            admin_id=admin.id,
            token_id=uuid.uuid4().hex,
            issued_at=now,
            expires_at=now + timedelta(minutes=self.settings.access_token_minutes),
        )
        payload = {
            "iss": self.settings.jwt_issuer,
            "sub": str(admin.id),
            "jti": session.token_id,
            "iat": int(now.timestamp()),
            "exp": int(session.expires_at.timestamp()),
        }
        return jwt.encode(payload, self.settings.jwt_secret, algorithm="HS256"), session

    def resolve(self, token: str) -> AdminSession:
        try:
            payload = jwt.decode(
                token, self.settings.jwt_secret, algorithms=["HS256"], issuer=self.settings.jwt_issuer
            )
            session = AdminSession(
                admin_id=uuid.UUID(payload["sub"]),
                token_id=payload["jti"],
                issued_at=datetime.fromtimestamp(payload["iat"], timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], timezone.utc),
            )
        except (JWTError, KeyError, ValueError):
            raise AuthenticationError("Invalid token")
        if session.token_id in self._revoked or not session.is_valid():
            raise AuthenticationError("Session expired")
        return session

    def revoke(self, session: AdminSession) -> None:
        self._revoked.add(session.token_id)


async def authenticate(db: AsyncSession, email: str, password: str) -> AdminUser:
    # same error for unknown user and bad password
    res = await db.execute(select(AdminUser).where(AdminUser.email == email.strip().lower()))
    admin = res.scalar_one_or_none()
    if admin is None or not verify_password(password, admin.password_hash):
        log.info("admin sign-in failed")
        raise AuthenticationError()
    return admin


async def ensure_admin(db: AsyncSession, email: str, password: str) -> AdminUser:
    email = email.strip().lower()
    res = await db.execute(select(AdminUser).where(AdminUser.email == email))
    admin = res.scalar_one_or_none()
    if admin is not None:
        return admin
    admin = AdminUser(
        id=uuid.uuid4(),
        email=email,
        password_hash=hash_password(password),
        created_at=datetime.now(timezone.utc),
    )
    db.add(admin)
    await db.commit()
    log.info("bootstrapped admin account")
    return admin
