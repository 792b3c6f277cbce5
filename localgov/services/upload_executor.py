# File: localgov/services/upload_executor.py
"""Bounded-concurrency writer for planned attachment uploads.

A fixed pool of ``min(max_workers, len(plans))`` threads drains one shared FIFO
queue of plans. Each plan is written with exclusive create, streamed in chunks
and fsync'd; a failure only fails that plan, and anything the worker created
for it is removed again. The only shared mutable state is the work queue and
the outcome queue, both thread-safe.
"""
import logging
import queue
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Sequence, Union

from localgov.services.cancellation import CancellationToken
from localgov.services.exceptions import UploadCancelled
from localgov.services.storage import LocalDiskStorage
from localgov.services.upload_planner import UploadPlan

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4
DEFAULT_CHUNK_SIZE = 81920


@dataclass(frozen=True)
class AttachmentRecord:
    """Metadata for one file that is completely on disk."""

    issue_id: int | str
    file_name: str
    relative_path: str
    content_type: Optional[str]
    size: int
    uploaded_at: datetime


@dataclass(frozen=True)
class UploadSucceeded:
    plan: UploadPlan
    record: AttachmentRecord


@dataclass(frozen=True)
class UploadFailed:
    plan: UploadPlan
    error: str
    cancelled: bool = False


UploadOutcome = Union[UploadSucceeded, UploadFailed]


@dataclass
class ExecutionReport:
    outcomes: list[UploadOutcome] = field(default_factory=list)
    # plans still queued when cancellation stopped the workers
    not_started: list[UploadPlan] = field(default_factory=list)
    cancelled: bool = False

    @property
    def records(self) -> list[AttachmentRecord]:
        return [o.record for o in self.outcomes if isinstance(o, UploadSucceeded)]

    @property
    def failures(self) -> list[UploadFailed]:
        return [o for o in self.outcomes if isinstance(o, UploadFailed)]

    @property
    def succeeded_count(self) -> int:
        return len(self.records)

    @property
    def failed_count(self) -> int:
        return len(self.failures)


class BoundedUploadExecutor:
    def __init__(
        self,
        storage: LocalDiskStorage,
        max_workers: int = DEFAULT_MAX_WORKERS,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self._storage = storage
        self._max_workers = max_workers
        self._chunk_size = chunk_size

    def execute(
        self,
        issue_id: int | str,
        plans: Sequence[UploadPlan],
        cancel_token: Optional[CancellationToken] = None,
    ) -> ExecutionReport:
        """Write every plan, at most ``max_workers`` at a time.

        Never raises for per-file problems: each plan ends up as exactly one
        outcome, or in ``not_started`` when cancellation stopped the batch
        before a worker picked it up. Outcomes are returned in plan order.
        """
        token = cancel_token or CancellationToken()
        if not plans:
            return ExecutionReport(cancelled=token.cancelled)

        work: queue.SimpleQueue[tuple[int, UploadPlan]] = queue.SimpleQueue()
        for index, plan in enumerate(plans):
            work.put((index, plan))
        done: queue.SimpleQueue[tuple[int, UploadOutcome]] = queue.SimpleQueue()

        worker_count = min(self._max_workers, len(plans))
        logger.debug(f"Uploading {len(plans)} file(s) for issue {issue_id} with {worker_count} worker(s)")
        with ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix=f"upload-{issue_id}") as pool:
            workers = [
                pool.submit(self._drain, issue_id, work, done, token)
                for _ in range(worker_count)
            ]
        for w in workers:
            # per-file errors never get here; this only surfaces bugs in the loop itself
            w.result()

        finished = []
        while not done.empty():
            finished.append(done.get())
        finished.sort(key=lambda item: item[0])

        leftover = []
        while not work.empty():
            leftover.append(work.get())
        leftover.sort(key=lambda item: item[0])

        report = ExecutionReport(
            outcomes=[outcome for _, outcome in finished],
            not_started=[plan for _, plan in leftover],
            cancelled=token.cancelled,
        )
        if report.cancelled:
            logger.warning(
                f"Upload batch for issue {issue_id} cancelled: {report.succeeded_count} written, "
                f"{report.failed_count} failed, {len(report.not_started)} not started"
            )
        return report

    def _drain(
        self,
        issue_id: int | str,
        work: "queue.SimpleQueue[tuple[int, UploadPlan]]",
        done: "queue.SimpleQueue[tuple[int, UploadOutcome]]",
        token: CancellationToken,
    ) -> None:
        while not token.cancelled:
            try:
                index, plan = work.get_nowait()
            except queue.Empty:
                return
            done.put((index, self._upload_one(issue_id, plan, token)))

    def _upload_one(self, issue_id: int | str, plan: UploadPlan, token: CancellationToken) -> UploadOutcome:
        created = False
        written = 0
        try:
            with self._storage.open_exclusive(plan.relative_path) as dest:
                created = True
                source = plan.file.stream
                while True:
                    if token.cancelled:
                        raise UploadCancelled(f"cancelled after {written} bytes")
                    chunk = source.read(self._chunk_size)
                    if not chunk:
                        break
                    dest.write(chunk)
                    written += len(chunk)
                self._storage.commit(dest)
        except UploadCancelled as e:
            logger.warning(f"Upload of {plan.final_name} for issue {issue_id} {e}")
            if created:
                self._storage.delete(plan.relative_path)
            return UploadFailed(plan=plan, error=str(e), cancelled=True)
        except Exception as e:
            logger.error(f"Failed to save {plan.final_name} for issue {issue_id}: {e}", exc_info=True)
            if created:
                self._storage.delete(plan.relative_path)
            return UploadFailed(plan=plan, error=str(e))

        record = AttachmentRecord(
            issue_id=issue_id,
            file_name=plan.final_name,
            relative_path=plan.relative_path,
            content_type=plan.file.content_type,
            size=written,
            uploaded_at=datetime.now(timezone.utc),
        )
        return UploadSucceeded(plan=plan, record=record)
