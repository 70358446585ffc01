from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from svyasa.db.base import Base

class AdminUser(Base):
    __tablename__ = "admin_users"
    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True)  # stored lower-cased
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False)
