from __future__ import annotations

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from storefront_engine.config import EngineConfig
from storefront_engine.factory import build_job_store, build_pipeline
from storefront_engine.logging_config import setup_logging
from storefront_engine.models.job import JobOutputs, JobRecord, JobStatus, outputs_from_result
from storefront_engine.models.vendor import VendorData
from storefront_engine.pubsub_client import PubSubClient


class GenerateStorefrontRequest(BaseModel):
    vendor_id: str
    vendor: VendorData


class GenerateStorefrontResponse(BaseModel):
    job_id: str
    status: JobStatus


class JobResponse(BaseModel):
    id: str
    vendor_id: str
    status: JobStatus
    progress: float
    outputs: JobOutputs
    errors: list[str]

    @staticmethod
    def from_record(record: JobRecord) -> "JobResponse":
        return JobResponse(
            id=record.id,
            vendor_id=record.vendor_id,
            status=record.status,
            progress=record.progress,
            outputs=record.outputs,
            errors=list(record.errors),
        )


config = EngineConfig.from_env()

setup_logging(environment=config.environment, project_id=config.project_id)

app = FastAPI(title="Storefront Engine API", version="0.1.0")

job_store = build_job_store(config)

# Initialize Pub/Sub client for production
pubsub_client = (
    PubSubClient(
        project_id=config.project_id,
        generation_requests_topic=config.topic_generation_requests,
        storefront_generated_topic=config.topic_storefront_generated,
    )
    if config.project_id
    else None
)

# Dev runs the pipeline in-process
pipeline = build_pipeline(config) if config.is_dev else None


@app.post("/v1/storefronts:generate", response_model=GenerateStorefrontResponse)
async def generate_storefront(
    request: GenerateStorefrontRequest, background_tasks: BackgroundTasks
) -> GenerateStorefrontResponse:
    job = job_store.create_job(vendor_id=request.vendor_id)

    # In production, publish to Pub/Sub; in dev, use background task
    if pubsub_client and not config.is_dev:
        pubsub_client.publish_generation_request(
            job_id=job.id,
            vendor_id=request.vendor_id,
            vendor=request.vendor.model_dump(mode="json"),
        )
    else:
        background_tasks.add_task(_run_job, job.id, request)

    return GenerateStorefrontResponse(job_id=job.id, status=job.status)


@app.get("/v1/jobs/{job_id}", response_model=JobResponse)
async def get_job(job_id: str) -> JobResponse:
    record = job_store.get_job(job_id)
    if not record:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobResponse.from_record(record)


async def _run_job(job_id: str, request: GenerateStorefrontRequest) -> None:
    job_store.update_job(job_id, status=JobStatus.in_progress, progress=0.1)
    if pipeline is None:
        job_store.update_job(
            job_id, status=JobStatus.failed, progress=1.0, errors=["Pipeline not configured"]
        )
        return

    result = await pipeline.generate_storefront(request.vendor_id, request.vendor)
    job_store.update_job(
        job_id,
        status=JobStatus.completed if result.success else JobStatus.failed,
        progress=1.0,
        outputs=outputs_from_result(result),
        errors=list(result.errors),
    )


@app.get("/health")
async def healthcheck() -> JSONResponse:
    return JSONResponse({"status": "ok"})
