# File: localgov/models/attachment.py
# Project: my-local-gov-backend

from __future__ import annotations
from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import BigInteger, DateTime, String, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from localgov.db.base import Base

if TYPE_CHECKING:
    from localgov.models.issue import Issue

class IssueAttachment(Base):
    __tablename__ = "issue_attachments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    issue_id: Mapped[int] = mapped_column(ForeignKey("issues.id", ondelete="CASCADE"), index=True)
    file_name: Mapped[str] = mapped_column(String(255))
    # relative to the storage root, e.g. uploads/issues/7/photo.jpg
    file_path: Mapped[str] = mapped_column(String(500))
    content_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    size: Mapped[int] = mapped_column(BigInteger)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    issue: Mapped["Issue"] = relationship(back_populates="attachments")
