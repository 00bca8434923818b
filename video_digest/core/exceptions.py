"""
Custom exception classes.
"""
from typing import Optional


class AppException(Exception):
    """Base application exception."""

    def __init__(self, title: str, detail: str):
        self.title = title
        self.detail = detail
        super().__init__(detail)


class ConfigurationError(AppException):
    """Invalid or unsupported configuration."""

    def __init__(self, detail: str):
        super().__init__(title="Configuration Error", detail=detail)


class StorageError(AppException):
    """Base class for persistence backend failures."""

    def __init__(self, title: str, detail: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(title=title, detail=detail)


class StorageReadError(StorageError):
    """The backend could not be read."""

    def __init__(self, detail: str, cause: Optional[BaseException] = None):
        super().__init__(title="Storage Read Failure", detail=detail, cause=cause)


class StorageWriteError(StorageError):
    """The backend could not be written."""

    def __init__(self, detail: str, cause: Optional[BaseException] = None):
        super().__init__(title="Storage Write Failure", detail=detail, cause=cause)


class GenerationError(AppException):
    """The text generator collaborator failed to produce a summary."""

    def __init__(self, subject_id: str, style: str, detail: str):
        self.subject_id = subject_id
        self.style = style
        super().__init__(
            title="Generation Failure",
            detail=f"Could not generate '{style}' summary for '{subject_id}': {detail}",
        )


class InvalidSourceError(AppException):
    """The source URL does not identify a video."""

    def __init__(self, source_url: str):
        self.source_url = source_url
        super().__init__(
            title="Invalid Source",
            detail=f"Could not extract a video ID from '{source_url}'.",
        )
