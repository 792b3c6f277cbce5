# File: localgov/services/upload_planner.py
"""Sequential planning stage of the attachment upload pipeline.

Turns the raw files of one submission into ordered upload plans with final,
collision-free names. Runs on a single thread so name assignment never races;
workers only ever see names fixed here.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterable, Optional, Sequence

from localgov.services.filenames import NameRegistry, sanitize_filename
from localgov.services.storage import LocalDiskStorage, make_relative_path

logger = logging.getLogger(__name__)


@dataclass
class IncomingFile:
    """One client-supplied file: name, declared type and size, readable stream."""

    filename: Optional[str]
    content_type: Optional[str]
    size: int
    stream: BinaryIO


@dataclass(frozen=True)
class UploadPlan:
    file: IncomingFile
    final_name: str
    full_path: Path
    relative_path: str


@dataclass
class PlanningReport:
    plans: list[UploadPlan] = field(default_factory=list)
    total: int = 0
    skipped_empty: int = 0
    skipped_bad_name: int = 0
    skipped_too_large: int = 0

    @property
    def accepted(self) -> int:
        return len(self.plans)

    @property
    def rejected(self) -> int:
        return self.skipped_empty + self.skipped_bad_name + self.skipped_too_large


class UploadPlanner:
    def __init__(self, storage: LocalDiskStorage, max_bytes: int = 0) -> None:
        self._storage = storage
        self._max_bytes = max_bytes

    def plan(
        self,
        issue_id: int | str,
        files: Optional[Sequence[Optional[IncomingFile]]],
        existing_names: Iterable[str] = (),
    ) -> PlanningReport:
        """Validate, sanitize and uniquify ``files`` in submission order.

        Empty or missing files, names that sanitize to nothing and (when a limit
        is set) oversized files are skipped and counted. Two files whose
        sanitized names collide are both kept; the later one gets a ``(n)``
        suffix.
        """
        report = PlanningReport()
        if not files:
            logger.debug(f"No files provided for issue {issue_id}")
            return report

        used = NameRegistry(existing_names)
        for f in files:
            report.total += 1
            if f is None or f.size <= 0:
                report.skipped_empty += 1
                continue
            if self._max_bytes and f.size > self._max_bytes:
                report.skipped_too_large += 1
                continue

            sanitized = sanitize_filename(f.filename)
            if not sanitized:
                report.skipped_bad_name += 1
                continue

            final_name = used.claim(sanitized)
            relative_path = make_relative_path(issue_id, final_name)
            report.plans.append(
                UploadPlan(
                    file=f,
                    final_name=final_name,
                    full_path=self._storage.full_path(relative_path),
                    relative_path=relative_path,
                )
            )

        logger.debug(
            f"Planned uploads for issue {issue_id}: total={report.total}, "
            f"accepted={report.accepted}, skipped_empty={report.skipped_empty}, "
            f"skipped_bad_name={report.skipped_bad_name}, skipped_too_large={report.skipped_too_large}"
        )
        return report
