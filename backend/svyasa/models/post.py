from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import CheckConstraint, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from svyasa.db.base import Base

NICKNAME_MAX = 30
POST_CONTENT_MAX = 1000

class Post(Base):
    __tablename__ = "posts"
    __table_args__ = (CheckConstraint("expires_at > created_at", name="ck_posts_expiry_after_creation"),)
    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    nickname: Mapped[str] = mapped_column(String(NICKNAME_MAX), nullable=False)
    avatar_seed: Mapped[str] = mapped_column(String(64), nullable=False)
    content: Mapped[str] = mapped_column(String(POST_CONTENT_MAX), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, index=True)
    # always created_at + post_ttl; listings filter on it, rows are not purged
    expires_at: Mapped[datetime] = mapped_column(nullable=False, index=True)
