from __future__ import annotations
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import HTTPConnection

from svyasa.core.errors import AuthenticationError
from svyasa.db.session import get_db
from svyasa.services.auth import AdminSession, SessionRegistry
from svyasa.services.changefeed import ChangeFeed
from svyasa.services.forum import ForumService

bearer = HTTPBearer(auto_error=False)


def get_feed(conn: HTTPConnection) -> ChangeFeed:
    return conn.app.state.feed


def get_registry(conn: HTTPConnection) -> SessionRegistry:
    return conn.app.state.sessions


def get_forum(
    conn: HTTPConnection,
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_feed),
) -> ForumService:
    return ForumService(db, feed, conn.app.state.settings)


async def get_admin_session(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer),
    registry: SessionRegistry = Depends(get_registry),
) -> AdminSession:
    if cred is None:
        raise AuthenticationError("Missing token")
    return registry.resolve(cred.credentials)
