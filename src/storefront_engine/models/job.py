from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Sequence

from pydantic import BaseModel, Field

from .design import StorefrontDesign


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    queued = "QUEUED"
    in_progress = "IN_PROGRESS"
    completed = "COMPLETED"
    failed = "FAILED"


class GenerationResult(BaseModel):
    success: bool
    vendor_id: str
    strategy: str | None = None
    sections_created: int = 0
    components_created: int = 0
    storefront_url: str = ""
    design: StorefrontDesign | None = None
    logs: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class JobOutputs(BaseModel):
    storefront_url: str | None = None
    strategy: str | None = None
    sections_created: int = 0
    components_created: int = 0
    design: Mapping[str, Any] | None = None
    logs: Sequence[str] = Field(default_factory=list)


class JobRecord(BaseModel):
    id: str
    status: JobStatus
    vendor_id: str
    progress: float = 0.0
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    errors: Sequence[str] = Field(default_factory=list)
    outputs: JobOutputs = Field(default_factory=JobOutputs)


def outputs_from_result(result: GenerationResult) -> JobOutputs:
    return JobOutputs(
        storefront_url=result.storefront_url or None,
        strategy=result.strategy,
        sections_created=result.sections_created,
        components_created=result.components_created,
        design=result.design.model_dump() if result.design else None,
        logs=list(result.logs),
    )


__all__ = ["JobRecord", "JobStatus", "JobOutputs", "GenerationResult", "outputs_from_result"]
