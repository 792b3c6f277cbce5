from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal, List
from datetime import datetime

Status = Literal["new", "in_progress", "resolved", "closed"]

CATEGORIES = {
    1: "Sanitation",
    2: "Roads",
    3: "Water",
    4: "Electricity",
    5: "Parks",
    6: "Waste",
    7: "Utilities",
    8: "Other",
}


class IssueCreate(BaseModel):
    address: str = Field(min_length=1, max_length=200)
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)
    category_id: int = Field(ge=1)
    description: str = Field(min_length=1, max_length=2000)

    @field_validator("address", "description", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v


class AttachmentOut(BaseModel):
    id: int
    file_name: str
    file_path: str
    content_type: Optional[str] = None
    size: int
    uploaded_at: datetime

    class Config:
        from_attributes = True


class IssueOut(BaseModel):
    id: int
    reporter_id: int
    address: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    category_id: int
    description: str
    status: Status
    priority: int

    created_at: datetime
    updated_at: Optional[datetime] = None

    attachments: List[AttachmentOut] = []

    class Config:
        from_attributes = True

    @field_validator("status", mode="before")
    @classmethod
    def _status_value(cls, v):
        # ORM rows carry the IssueStatus enum
        return getattr(v, "value", v)


class SubmissionOut(BaseModel):
    success: bool
    issue_id: Optional[int] = None
    attachment_count: int
    message: str
    files_received: int = 0
    files_rejected: int = 0
    files_failed: int = 0
    cancelled: bool = False


class CategoryOut(BaseModel):
    id: int
    name: str
