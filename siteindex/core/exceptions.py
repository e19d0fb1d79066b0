"""
Custom Exceptions for SiteIndex
"""


class SiteIndexException(Exception):
    """
    Base exception for all SiteIndex errors

    `stage` is set by the pipeline when the error aborts a reindex stage.
    """

    stage: str | None = None

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    @property
    def details(self) -> dict:
        details = {"code": self.code}
        if self.stage is not None:
            details["stage"] = self.stage
        return details


# Database Exceptions
class DatabaseError(SiteIndexException):
    """Database operation failed"""

    pass


class StoreUnavailableError(DatabaseError):
    """Relational store could not be reached"""

    pass


class RecordNotFoundError(SiteIndexException):
    """Requested record not found in database"""

    pass


class DuplicateRecordError(SiteIndexException):
    """Attempted to create duplicate record"""

    pass


# Validation Exceptions
class ValidationError(SiteIndexException):
    """Input validation failed"""

    pass


class ContentRecordError(ValidationError):
    """A content row is missing a required field or has an unusable value"""

    def __init__(self, message: str, *, kind: str, row_id: str | None = None):
        super().__init__(message)
        self.kind = kind
        self.row_id = row_id

    @property
    def details(self) -> dict:
        return {**super().details, "kind": self.kind, "row_id": self.row_id}


# Embedding Exceptions
class EmbeddingServiceError(SiteIndexException):
    """Embedding service returned a non-success response"""

    pass


# VectorStore Exceptions
class VectorStoreError(SiteIndexException):
    """VectorStore operation failed"""

    pass


class VectorUpsertError(VectorStoreError):
    """Failed to upsert vector records"""

    pass


# Pipeline Exceptions
class PipelineStageError(SiteIndexException):
    """A fatal failure in one stage of a reindex or teardown run"""

    stage: str | None = "unknown"

    def __init__(self, message: str, *, stage: str | None = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class IndexCleanupFailedError(PipelineStageError):
    """Wiping a tenant's vectors failed; nothing may be written on top"""

    stage = "wipe"

    def __init__(self, message: str, *, step: str):
        super().__init__(message)
        self.step = step

    @property
    def details(self) -> dict:
        return {**super().details, "step": self.step}


class RegistryUpdateFailedError(PipelineStageError):
    """Namespace registry bookkeeping could not be persisted"""

    stage = "register"


class ReindexCancelledError(PipelineStageError):
    """Reindex was cancelled before all items were dispatched"""

    stage = "index"


class TeardownFailedError(PipelineStageError):
    """Tenant teardown stopped at a named step"""

    def __init__(self, message: str, *, step: str):
        super().__init__(message, stage=step)
        self.step = step

    @property
    def details(self) -> dict:
        return {"code": self.code, "step": self.step}


class ReindexInProgressError(SiteIndexException):
    """Another reindex for the same tenant is already running"""

    pass


# Auth Exceptions
class AuthenticationError(SiteIndexException):
    """Authentication failed"""

    pass


class AuthorizationError(SiteIndexException):
    """Caller not authorized for this operation"""

    pass


class JWTDecodeError(AuthenticationError):
    """JWT decoding failed"""

    pass
