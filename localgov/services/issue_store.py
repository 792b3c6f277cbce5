# File: localgov/services/issue_store.py
import logging
from typing import Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from localgov.models.attachment import IssueAttachment
from localgov.models.issue import DEFAULT_PRIORITY, Issue, IssueStatus
from localgov.schemas.issue import IssueCreate
from localgov.services.exceptions import IssueStoreError
from localgov.services.upload_executor import AttachmentRecord

logger = logging.getLogger(__name__)


class IssueStore(Protocol):
    """Persistence the submission pipeline needs; nothing else."""

    def create_issue(self, issue_input: IssueCreate, reporter_id: int) -> int:
        """Durably create the issue and return its id."""
        ...

    def add_attachments(self, issue_id: int, records: Sequence[AttachmentRecord]) -> None:
        """Persist all records in one transaction, or none of them."""
        ...

    def list_existing_attachment_names(self, issue_id: int) -> set[str]:
        ...


class SqlAlchemyIssueStore:
    def __init__(self, db: Session):
        self.db = db

    def create_issue(self, issue_input: IssueCreate, reporter_id: int) -> int:
        obj = Issue(
            reporter_id=reporter_id,
            address=issue_input.address,
            lat=issue_input.lat,
            lng=issue_input.lng,
            category_id=issue_input.category_id,
            description=issue_input.description,
            status=IssueStatus.new,
            priority=DEFAULT_PRIORITY,
        )
        try:
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise IssueStoreError(f"Could not create issue: {e}") from e
        return obj.id

    def add_attachments(self, issue_id: int, records: Sequence[AttachmentRecord]) -> None:
        if not records:
            return
        try:
            self.db.add_all(
                IssueAttachment(
                    issue_id=issue_id,
                    file_name=r.file_name,
                    file_path=r.relative_path,
                    content_type=r.content_type,
                    size=r.size,
                    uploaded_at=r.uploaded_at,
                )
                for r in records
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise IssueStoreError(f"Could not save attachments for issue {issue_id}: {e}") from e

    def list_existing_attachment_names(self, issue_id: int) -> set[str]:
        try:
            rows = self.db.scalars(
                select(IssueAttachment.file_name).where(IssueAttachment.issue_id == issue_id)
            )
            return set(rows)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise IssueStoreError(f"Could not list attachments for issue {issue_id}: {e}") from e

    def get_issue(self, issue_id: int) -> Issue | None:
        return self.db.scalars(
            select(Issue).options(selectinload(Issue.attachments)).where(Issue.id == issue_id)
        ).first()

    def list_by_reporter(self, reporter_id: int) -> list[Issue]:
        return list(
            self.db.scalars(
                select(Issue)
                .options(selectinload(Issue.attachments))
                .where(Issue.reporter_id == reporter_id)
                .order_by(Issue.created_at.desc(), Issue.id.desc())
            )
        )
