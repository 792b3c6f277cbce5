# File: localgov/services/issue_submission.py
"""Issue submission: create the issue, then ingest its attachments.

    1. validate input (nothing is created on failure)
    2. create the issue so attachments always point at a real row
    3. plan uploads against names already stored for the issue
    4. write files with bounded concurrency, one bad file never aborts the rest
    5. persist metadata for the files that landed, in one commit
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from localgov.schemas.issue import IssueCreate
from localgov.services.cancellation import CancellationToken
from localgov.services.exceptions import (
    InvalidSubmissionError,
    IssueCreationError,
    IssueStoreError,
    SubmissionCancelledError,
)
from localgov.services.issue_store import IssueStore, SqlAlchemyIssueStore
from localgov.services.storage import LocalDiskStorage
from localgov.services.upload_executor import BoundedUploadExecutor, ExecutionReport
from localgov.services.upload_planner import IncomingFile, PlanningReport, UploadPlanner

logger = logging.getLogger(__name__)


class CancelPolicy(str, Enum):
    keep_completed = "keep_completed"
    discard_all = "discard_all"


@dataclass
class SubmissionResult:
    success: bool
    issue_id: Optional[int]
    attachment_count: int
    message: str
    files_received: int = 0
    files_rejected: int = 0
    files_failed: int = 0
    cancelled: bool = False


class IssueSubmissionService:
    def __init__(
        self,
        store: IssueStore,
        storage: LocalDiskStorage,
        planner: UploadPlanner | None = None,
        executor: BoundedUploadExecutor | None = None,
        cancel_policy: CancelPolicy = CancelPolicy.keep_completed,
    ) -> None:
        self._store = store
        self._storage = storage
        self._planner = planner or UploadPlanner(storage)
        self._executor = executor or BoundedUploadExecutor(storage)
        self._cancel_policy = CancelPolicy(cancel_policy)

    def submit(
        self,
        issue_input: Optional[IssueCreate],
        reporter_id: Optional[int],
        files: Optional[Sequence[Optional[IncomingFile]]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SubmissionResult:
        """Create an issue and store its attachments.

        Raises InvalidSubmissionError, IssueCreationError or
        SubmissionCancelledError when nothing was created. Once the issue
        exists the caller always gets a SubmissionResult, including when
        the attachment metadata could not be committed.
        """
        self._validate(issue_input, reporter_id)
        token = cancel_token or CancellationToken()
        if token.cancelled:
            raise SubmissionCancelledError("Submission cancelled before the issue was created")

        logger.info(f"Creating issue for reporter {reporter_id}")
        try:
            issue_id = self._store.create_issue(issue_input, reporter_id)
        except IssueStoreError as e:
            logger.error(f"Issue creation failed for reporter {reporter_id}: {e}")
            raise IssueCreationError(str(e)) from e
        logger.info(f"Issue {issue_id} created")

        try:
            existing = self._existing_names(issue_id) if files else set()
        except (IssueStoreError, OSError) as e:
            logger.error(f"Could not read stored attachment names for issue {issue_id}: {e}")
            return SubmissionResult(
                success=False,
                issue_id=issue_id,
                attachment_count=0,
                message=f"Issue #{issue_id} was created but its attachments could not be stored.",
                files_received=len(files),
            )
        planning = self._planner.plan(issue_id, files, existing)
        execution = self._executor.execute(issue_id, planning.plans, token)

        if execution.cancelled and self._cancel_policy is CancelPolicy.discard_all:
            return self._discard(issue_id, planning, execution)

        records = execution.records
        try:
            self._store.add_attachments(issue_id, records)
        except IssueStoreError as e:
            logger.error(
                f"Attachment metadata commit failed for issue {issue_id}; "
                f"{len(records)} stored file(s) left without records: {e}"
            )
            return self._result(
                False,
                issue_id,
                0,
                f"Issue #{issue_id} was created but its attachments could not be saved.",
                planning,
                execution,
            )

        saved = len(records)
        logger.info(f"{saved}/{planning.accepted} attachment(s) saved for issue {issue_id}")
        return self._result(True, issue_id, saved, self._summary(issue_id, saved, planning, execution), planning, execution)

    def _validate(self, issue_input: Optional[IssueCreate], reporter_id: Optional[int]) -> None:
        if issue_input is None:
            raise InvalidSubmissionError("Issue details are required")
        if reporter_id is None or (isinstance(reporter_id, str) and not reporter_id.strip()):
            raise InvalidSubmissionError("Reporter is required")
        has_address = bool((issue_input.address or "").strip())
        has_coords = issue_input.lat is not None and issue_input.lng is not None
        if not (has_address or has_coords):
            raise InvalidSubmissionError("An address or coordinates are required")

    def _existing_names(self, issue_id: int) -> set[str]:
        # read once, before any worker starts
        return self._storage.list_names(issue_id) | self._store.list_existing_attachment_names(issue_id)

    def _discard(self, issue_id: int, planning: PlanningReport, execution: ExecutionReport) -> SubmissionResult:
        for record in execution.records:
            self._storage.delete(record.relative_path)
        logger.warning(f"Submission for issue {issue_id} cancelled; discarded {len(execution.records)} written file(s)")
        return self._result(
            False,
            issue_id,
            0,
            f"Issue #{issue_id} was created but the upload was cancelled; no attachments were kept.",
            planning,
            execution,
        )

    @staticmethod
    def _summary(issue_id: int, saved: int, planning: PlanningReport, execution: ExecutionReport) -> str:
        if execution.cancelled:
            return f"Issue #{issue_id} submitted; upload cancelled after {saved} of {planning.total} attachment(s)."
        if saved == planning.total:
            return f"Issue #{issue_id} submitted with {saved} attachment(s)."
        return f"Issue #{issue_id} submitted; {saved} of {planning.total} attachment(s) saved."

    @staticmethod
    def _result(
        success: bool,
        issue_id: int,
        count: int,
        message: str,
        planning: PlanningReport,
        execution: ExecutionReport,
    ) -> SubmissionResult:
        return SubmissionResult(
            success=success,
            issue_id=issue_id,
            attachment_count=count,
            message=message,
            files_received=planning.total,
            files_rejected=planning.rejected,
            files_failed=execution.failed_count,
            cancelled=execution.cancelled,
        )


def build_submission_service(db, storage: LocalDiskStorage, settings) -> IssueSubmissionService:
    """Wire the submission pipeline for one request-scoped DB session."""
    return IssueSubmissionService(
        store=SqlAlchemyIssueStore(db),
        storage=storage,
        planner=UploadPlanner(storage, max_bytes=settings.max_upload_bytes),
        executor=BoundedUploadExecutor(
            storage,
            max_workers=settings.max_parallel_uploads,
            chunk_size=settings.upload_chunk_size,
        ),
        cancel_policy=CancelPolicy(settings.upload_cancel_policy),
    )
