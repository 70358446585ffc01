from __future__ import annotations
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.requests import Request
from starlette.responses import JSONResponse

from svyasa.core.errors import REMOTE_FAILURE_MESSAGE, ForumError, ModerationRejected
from svyasa.core.logging import configure_logging, log
from svyasa.core.middleware import SecurityHeadersMiddleware, TimingMiddleware
from svyasa.core.settings import Settings, settings as default_settings
from svyasa.db.session import create_schema, make_engine, make_sessionmaker
from svyasa.services.auth import SessionRegistry, ensure_admin
from svyasa.services.changefeed import ChangeFeed
from svyasa.api import admin, auth, posts, realtime


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    engine = make_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.auto_create_schema:
            await create_schema(engine)
        if settings.admin_email and settings.admin_password:
            async with app.state.sessionmaker() as db:
                await ensure_admin(db, settings.admin_email, settings.admin_password)
        log.info("svyasa secrets API ready (env=%s)", settings.env)
        yield
        await engine.dispose()

    app = FastAPI(title="Svyasa Secrets API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = make_sessionmaker(engine)
    app.state.feed = ChangeFeed()
    app.state.sessions = SessionRegistry(settings)

    @app.exception_handler(ModerationRejected)
    async def moderation_handler(request: Request, exc: ModerationRejected):
        return JSONResponse({"detail": exc.message, "kind": exc.kind}, status_code=exc.status_code)

    @app.exception_handler(ForumError)
    async def forum_error_handler(request: Request, exc: ForumError):
        return JSONResponse({"detail": exc.message}, status_code=exc.status_code)

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        log.exception("storage operation failed on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse({"detail": REMOTE_FAILURE_MESSAGE}, status_code=503)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(TimingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(posts.router)
    app.include_router(auth.router)
    app.include_router(admin.router)
    app.include_router(realtime.router)

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app


def run() -> None:
    import uvicorn

    configure_logging()
    uvicorn.run("svyasa.main:create_app", factory=True, host="0.0.0.0", port=8000)
