# File: localgov/models/issue.py
from __future__ import annotations
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING
from sqlalchemy import String, Float, Enum, Integer, DateTime, ForeignKey, func, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from localgov.db.base import Base

if TYPE_CHECKING:
    from localgov.models.attachment import IssueAttachment

class IssueStatus(PyEnum):
    new = "new"
    in_progress = "in_progress"
    resolved = "resolved"
    closed = "closed"

# 1 = high .. 5 = low
DEFAULT_PRIORITY = 3

class Issue(Base):
    __tablename__ = "issues"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    reporter_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    address: Mapped[str] = mapped_column(String(200))
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True)

    category_id: Mapped[int] = mapped_column(Integer, index=True)
    description: Mapped[str] = mapped_column(String(2000))
    status: Mapped[IssueStatus] = mapped_column(Enum(IssueStatus), default=IssueStatus.new, index=True)
    priority: Mapped[int] = mapped_column(Integer, default=DEFAULT_PRIORITY, server_default=str(DEFAULT_PRIORITY))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    attachments: Mapped[list["IssueAttachment"]] = relationship(
        back_populates="issue",
        cascade="all, delete-orphan",
        order_by="IssueAttachment.id",
    )

Index("ix_issues_lat_lng", Issue.lat, Issue.lng)
