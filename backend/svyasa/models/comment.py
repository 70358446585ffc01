from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import String, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from svyasa.db.base import Base
from svyasa.models.post import NICKNAME_MAX

COMMENT_CONTENT_MAX = 500

class Comment(Base):
    __tablename__ = "comments"
    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    post_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    nickname: Mapped[str] = mapped_column(String(NICKNAME_MAX), nullable=False)
    avatar_seed: Mapped[str] = mapped_column(String(64), nullable=False)
    content: Mapped[str] = mapped_column(String(COMMENT_CONTENT_MAX), nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False, index=True)
