# File: localgov/routers/issues.py
import os
from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Request, Form
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from typing import List, Optional
from localgov.db.session import get_db
from localgov.core.config import settings
from localgov.core.ratelimit import limiter
from localgov.core.security import get_current_user, is_staff
from localgov.models.user import User
from localgov.schemas.issue import CATEGORIES, CategoryOut, IssueCreate, IssueOut, SubmissionOut
from localgov.services.cancellation import CancellationToken
from localgov.services.exceptions import InvalidSubmissionError, IssueCreationError, SubmissionCancelledError
from localgov.services.issue_store import SqlAlchemyIssueStore
from localgov.services.issue_submission import IssueSubmissionService, build_submission_service
from localgov.services.storage import LocalDiskStorage
from localgov.services.upload_planner import IncomingFile

router = APIRouter(prefix="/issues", tags=["issues"])


def get_storage() -> LocalDiskStorage:
    return LocalDiskStorage(settings.storage_root)


def get_submission_service(
    db: Session = Depends(get_db),
    storage: LocalDiskStorage = Depends(get_storage),
) -> IssueSubmissionService:
    return build_submission_service(db, storage, settings)


def _incoming(f: UploadFile) -> IncomingFile:
    size = f.size
    if size is None:
        f.file.seek(0, os.SEEK_END)
        size = f.file.tell()
        f.file.seek(0)
    return IncomingFile(filename=f.filename, content_type=f.content_type, size=size, stream=f.file)


@router.get("/categories", response_model=List[CategoryOut])
def list_categories():
    return [{"id": k, "name": v} for k, v in CATEGORIES.items()]


@router.post("", response_model=SubmissionOut, status_code=201)
@limiter.limit(settings.submit_rate_limit)
def create_issue(
    request: Request,
    address: str = Form(...),
    category_id: int = Form(...),
    description: str = Form(...),
    lat: Optional[float] = Form(None),
    lng: Optional[float] = Form(None),
    files: List[UploadFile] | None = File(default=None),
    service: IssueSubmissionService = Depends(get_submission_service),
    user: User = Depends(get_current_user),
):
    if files and len(files) > settings.max_upload_files:
        raise HTTPException(status_code=400, detail=f"Max {settings.max_upload_files} files")

    try:
        issue_input = IssueCreate(
            address=address,
            category_id=category_id,
            description=description,
            lat=lat,
            lng=lng,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    try:
        result = service.submit(
            issue_input,
            user.id,
            [_incoming(f) for f in files or []],
            # sync route: a client disconnect is not observable here, so nothing cancels this token
            CancellationToken(),
        )
    except InvalidSubmissionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except IssueCreationError:
        raise HTTPException(status_code=503, detail="Could not create the issue. Please try again.")
    except SubmissionCancelledError as e:
        raise HTTPException(status_code=409, detail=str(e))

    out = SubmissionOut(**asdict(result))
    if not result.success:
        # the issue exists; tell the client which one
        return JSONResponse(status_code=500, content=out.model_dump())
    return out


@router.get("/mine", response_model=List[IssueOut])
def my_issues(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return SqlAlchemyIssueStore(db).list_by_reporter(user.id)


@router.get("/{issue_id}", response_model=IssueOut)
def get_issue(issue_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    issue = SqlAlchemyIssueStore(db).get_issue(issue_id)
    if not issue:
        raise HTTPException(status_code=404, detail="Issue not found")
    if issue.reporter_id != user.id and not is_staff(user):
        raise HTTPException(status_code=403, detail="forbidden")
    return issue
