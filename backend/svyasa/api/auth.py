from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from svyasa.api.deps import get_admin_session, get_registry
from svyasa.api.schemas import LoginIn, TokenOut
from svyasa.db.session import get_db
from svyasa.services.auth import AdminSession, SessionRegistry, authenticate

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenOut)
async def login(data: LoginIn, db: AsyncSession = Depends(get_db), registry: SessionRegistry = Depends(get_registry)):
    admin = await authenticate(db, data.email, data.password)
    token, session = registry.issue(admin)
    return TokenOut(access_token=token, expires_at=session.expires_at)


@router.post("/logout")
async def logout(session: AdminSession = Depends(get_admin_session), registry: SessionRegistry = Depends(get_registry)):
    registry.revoke(session)
    return {"ok": True}
