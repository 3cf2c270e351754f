from __future__ import annotations

import base64
import json
import logging
import uuid
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from storefront_engine.config import EngineConfig
from storefront_engine.factory import build_pipeline
from storefront_engine.firestore_job_store import FirestoreJobStore
from storefront_engine.logging_config import set_trace_id, setup_logging
from storefront_engine.models.job import JobStatus, outputs_from_result
from storefront_engine.models.vendor import VendorData
from storefront_engine.pubsub_client import PubSubClient

config = EngineConfig.from_env()

setup_logging(environment=config.environment, project_id=config.project_id)
logger = logging.getLogger(__name__)

job_store = FirestoreJobStore(project_id=config.project_id)
pubsub_client = PubSubClient(
    project_id=config.project_id or "storefront-engine",
    generation_requests_topic=config.topic_generation_requests,
    storefront_generated_topic=config.topic_storefront_generated,
)
pipeline = build_pipeline(config)

app = FastAPI(title="Storefront Engine Worker", version="0.1.0")


class PubSubMessage(BaseModel):
    """Pub/Sub push message format."""

    message: dict[str, Any]
    subscription: str


@app.post("/v1/worker/process")
async def process_generation_request(request: Request) -> JSONResponse:
    """Process a storefront generation request from Pub/Sub.

    This endpoint is called by Pub/Sub push subscription.
    """
    trace_id = str(uuid.uuid4())
    set_trace_id(trace_id)

    body = await request.json()
    try:
        pubsub_message = PubSubMessage.model_validate(body)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail="Invalid Pub/Sub envelope") from exc

    message_data = pubsub_message.message.get("data", "")
    if not message_data:
        raise HTTPException(status_code=400, detail="No message data")
    payload = json.loads(base64.b64decode(message_data).decode("utf-8"))

    job_id = payload.get("job_id")
    vendor_id = payload.get("vendor_id")
    if not job_id or not vendor_id or not payload.get("vendor"):
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: job_id, vendor_id, vendor",
        )
    try:
        vendor = VendorData.model_validate(payload["vendor"])
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid vendor data: {exc}") from exc

    logger.info(
        "Processing storefront generation request",
        extra={"job_id": job_id, "vendor_id": vendor_id, "trace_id": trace_id},
    )

    try:
        await _process_job(job_id, vendor_id, vendor)
    except Exception as exc:
        logger.error(
            "Failed to process storefront generation request",
            exc_info=True,
            extra={"trace_id": trace_id, "error": str(exc)},
        )
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return JSONResponse({"status": "success", "job_id": job_id})


async def _process_job(job_id: str, vendor_id: str, vendor: VendorData) -> None:
    """Run the generation pipeline for one job and publish the outcome.

    Args:
        job_id: Job ID
        vendor_id: Vendor the storefront belongs to
        vendor: Base vendor data from the request
    """
    job_store.update_job(job_id, status=JobStatus.in_progress, progress=0.1)

    result = await pipeline.generate_storefront(vendor_id, vendor)
    outputs = outputs_from_result(result)

    job_store.update_job(
        job_id,
        status=JobStatus.completed if result.success else JobStatus.failed,
        progress=1.0,
        outputs=outputs,
        errors=list(result.errors),
    )

    try:
        pubsub_client.publish_storefront_generated(
            job_id=job_id,
            vendor_id=vendor_id,
            success=result.success,
            outputs=outputs.model_dump(mode="json", exclude={"design"}),
        )
    except Exception as exc:
        logger.warning(
            "Failed to publish completion event (non-fatal)",
            exc_info=True,
            extra={"job_id": job_id, "error": str(exc)},
        )

    logger.info(
        "Storefront generation finished",
        extra={
            "job_id": job_id,
            "vendor_id": vendor_id,
            "success": result.success,
            "components_created": result.components_created,
        },
    )


@app.get("/health")
async def healthcheck() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse({"status": "ok"})
