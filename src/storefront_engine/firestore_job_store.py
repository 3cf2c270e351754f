from __future__ import annotations

import logging
from datetime import datetime, timezone

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from .job_store import generate_job_id
from .models.job import JobOutputs, JobRecord, JobStatus

logger = logging.getLogger(__name__)


class FirestoreJobStore:
    """Firestore-backed job store for production use."""

    COLLECTION_NAME = "storefront_jobs"

    def __init__(self, project_id: str | None = None) -> None:
        self._db = firestore.Client(project=project_id)
        self._collection = self._db.collection(self.COLLECTION_NAME)

    def create_job(self, *, vendor_id: str) -> JobRecord:
        """Create a new job record in Firestore."""
        # Firestore auto ids keep concurrent requests apart
        job_id = generate_job_id(vendor_id, self._collection.document().id[:6])
        job = JobRecord(id=job_id, status=JobStatus.queued, vendor_id=vendor_id)

        self._collection.document(job_id).set(self._to_firestore_dict(job))

        logger.info("Created job", extra={"job_id": job_id, "vendor_id": vendor_id})
        return job

    def get_job(self, job_id: str) -> JobRecord | None:
        """Retrieve a job by ID from Firestore."""
        doc = self._collection.document(job_id).get()

        if not doc.exists:
            return None

        return self._from_firestore_dict(doc.id, doc.to_dict())

    def update_job(
        self,
        job_id: str,
        *,
        status: JobStatus | None = None,
        progress: float | None = None,
        outputs: JobOutputs | None = None,
        errors: list[str] | None = None,
    ) -> JobRecord:
        """Update job fields in Firestore."""
        doc_ref = self._collection.document(job_id)

        update_data: dict = {"updated_at": datetime.now(timezone.utc)}

        if status is not None:
            update_data["status"] = status.value

        if progress is not None:
            update_data["progress"] = progress

        if outputs is not None:
            update_data["outputs"] = outputs.model_dump(mode="json")

        if errors is not None:
            update_data["errors"] = errors

        doc_ref.update(update_data)

        logger.info(
            "Updated job",
            extra={
                "job_id": job_id,
                "status": status.value if status else None,
                "progress": progress,
            },
        )

        updated_doc = doc_ref.get()
        return self._from_firestore_dict(updated_doc.id, updated_doc.to_dict())

    def list_jobs(
        self,
        *,
        vendor_id: str | None = None,
        status: JobStatus | None = None,
        limit: int = 100,
    ) -> list[JobRecord]:
        """List jobs with optional filtering."""
        query = self._collection

        if vendor_id is not None:
            query = query.where(filter=FieldFilter("vendor_id", "==", vendor_id))

        if status is not None:
            query = query.where(filter=FieldFilter("status", "==", status.value))

        query = query.order_by("created_at", direction=firestore.Query.DESCENDING).limit(limit)

        return [self._from_firestore_dict(doc.id, doc.to_dict()) for doc in query.stream()]

    def _to_firestore_dict(self, job: JobRecord) -> dict:
        return {
            "status": job.status.value,
            "vendor_id": job.vendor_id,
            "progress": job.progress,
            "created_at": job.created_at,
            "updated_at": job.updated_at,
            "errors": list(job.errors),
            "outputs": job.outputs.model_dump(mode="json"),
        }

    def _from_firestore_dict(self, job_id: str, data: dict) -> JobRecord:
        outputs = JobOutputs()
        if data.get("outputs"):
            outputs = JobOutputs.model_validate(data["outputs"])

        return JobRecord(
            id=job_id,
            status=JobStatus(data["status"]),
            vendor_id=data["vendor_id"],
            progress=data.get("progress", 0.0),
            created_at=data["created_at"],
            updated_at=data["updated_at"],
            outputs=outputs,
            errors=data.get("errors", []),
        )


__all__ = ["FirestoreJobStore"]
