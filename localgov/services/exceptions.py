# File: localgov/services/exceptions.py


class SubmissionError(Exception):
    """Base exception for issue submission failures that abort the whole submission."""


class InvalidSubmissionError(SubmissionError):
    """Raised when required submission fields are missing, before anything is created."""


class IssueCreationError(SubmissionError):
    """Raised when the issue store cannot create the issue record."""


class SubmissionCancelledError(SubmissionError):
    """Raised when a submission is cancelled before the issue is created."""


class IssueStoreError(Exception):
    """Raised by issue store implementations when a read or write fails."""


class UploadCancelled(Exception):
    """Raised inside an upload worker when the cancellation token fires mid-copy."""


class AddressValidationError(Exception):
    """Raised when the upstream address validation service fails."""


class AddressValidationUnavailable(AddressValidationError):
    """Raised when no maps API key is configured."""


class MapsError(Exception):
    """Raised when a geocoding or places lookup fails upstream."""


class MapsUnavailable(MapsError):
    """Raised when no maps API key is configured."""
