"""
Indexing pipeline schemas
Stats and HTTP payloads for reindex / teardown
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class IndexItemError(BaseModel):
    id: str
    error: str


class IndexRebuildDetails(BaseModel):
    added: list[str] = Field(default_factory=list)
    errors: list[IndexItemError] = Field(default_factory=list)


class IndexRebuildStats(BaseModel):
    """
    Outcome of one reindex run.

    `added + errors` equals the number of items attempted. Items never
    dispatched because the run was cancelled are counted in `skipped`.
    """

    added: int = 0
    errors: int = 0
    skipped: int = 0
    details: IndexRebuildDetails = Field(default_factory=IndexRebuildDetails)

    def record_added(self, vector_id: str) -> None:
        self.added += 1
        self.details.added.append(vector_id)

    def record_error(self, vector_id: str, error: str) -> None:
        self.errors += 1
        self.details.errors.append(IndexItemError(id=vector_id, error=error))

    @property
    def attempted(self) -> int:
        return self.added + self.errors


class ReindexResponse(BaseModel):
    success: bool = True
    message: str
    stats: IndexRebuildStats
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TeardownResponse(BaseModel):
    success: bool = True
    tenant_id: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: dict = Field(default_factory=dict)
