from localgov.models.user import User, UserRole
from localgov.models.issue import Issue, IssueStatus
from localgov.models.attachment import IssueAttachment

__all__ = ["User", "UserRole", "Issue", "IssueStatus", "IssueAttachment"]
