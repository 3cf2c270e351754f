from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, Protocol

from .models.job import JobOutputs, JobRecord, JobStatus


class JobRepository(Protocol):
    def create_job(self, *, vendor_id: str) -> JobRecord:
        ...

    def get_job(self, job_id: str) -> JobRecord | None:
        ...

    def update_job(
        self,
        job_id: str,
        *,
        status: JobStatus | None = None,
        progress: float | None = None,
        outputs: JobOutputs | None = None,
        errors: list[str] | None = None,
    ) -> JobRecord:
        ...


def generate_job_id(vendor_id: str, suffix: str) -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    safe = vendor_id.replace("/", "-")
    return f"job_{safe}_{ts}_{suffix}"


class JobStore:
    def __init__(self) -> None:
        self._jobs: Dict[str, JobRecord] = {}
        self._lock = threading.Lock()

    def create_job(self, *, vendor_id: str) -> JobRecord:
        with self._lock:
            job_id = generate_job_id(vendor_id, uuid.uuid4().hex[:6])
            job = JobRecord(id=job_id, status=JobStatus.queued, vendor_id=vendor_id)
            self._jobs[job_id] = job
            return job

    def get_job(self, job_id: str) -> JobRecord | None:
        with self._lock:
            return self._jobs.get(job_id)

    def update_job(
        self,
        job_id: str,
        *,
        status: JobStatus | None = None,
        progress: float | None = None,
        outputs: JobOutputs | None = None,
        errors: list[str] | None = None,
    ) -> JobRecord:
        with self._lock:
            job = self._jobs[job_id]
            if status is not None:
                job.status = status
            if progress is not None:
                job.progress = progress
            if outputs is not None:
                job.outputs = outputs
            if errors is not None:
                job.errors = list(errors)
            job.updated_at = datetime.now(timezone.utc)
            self._jobs[job_id] = job
            return job


__all__ = ["JobRepository", "JobStore", "generate_job_id"]
