from __future__ import annotations

from fastapi import APIRouter, Depends

from svyasa.api.deps import get_admin_session, get_forum
from svyasa.api.schemas import DashboardOut, PostOut
from svyasa.services.auth import AdminSession
from svyasa.services.forum import ForumService
from svyasa.services.timefmt import utcnow

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/overview", response_model=DashboardOut)
async def overview(session: AdminSession = Depends(get_admin_session), forum: ForumService = Depends(get_forum)):
    now = utcnow()
    stats = await forum.dashboard(now=now)
    # expired posts included: the dashboard is where stale rows get cleaned up
    views = await forum.list_all_posts()
    return DashboardOut(
        total_posts=stats.total_posts,
        total_comments=stats.total_comments,
        active_posts=stats.active_posts,
        posts=[PostOut.build(v.post, v.comment_count, now) for v in views],
    )
