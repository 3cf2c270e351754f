from __future__ import annotations

from .config import EngineConfig
from .enricher import FirestoreVendorDataSource, InMemoryVendorDataSource, VendorDataEnricher
from .firestore_job_store import FirestoreJobStore
from .job_store import JobRepository, JobStore
from .persistence import FirestoreStorefrontStore, InMemoryStorefrontStore, StorefrontStore
from .pipeline import StorefrontPipeline
from .template_store import FirestoreTemplateStore, LocalTemplateStore
from .vertex_ai_adapter import VertexAIAdapter


def build_job_store(config: EngineConfig) -> JobRepository:
    # Use Firestore in production, in-memory for dev
    if config.is_dev:
        return JobStore()
    return FirestoreJobStore(project_id=config.project_id)


def build_storefront_store(config: EngineConfig) -> StorefrontStore:
    if config.is_dev:
        return InMemoryStorefrontStore(batch_size=config.component_batch_size)
    return FirestoreStorefrontStore(
        project_id=config.project_id, batch_size=config.component_batch_size
    )


def build_pipeline(config: EngineConfig, *, store: StorefrontStore | None = None) -> StorefrontPipeline:
    if config.is_dev:
        source = InMemoryVendorDataSource()
        template_store = LocalTemplateStore(base_path=config.template_dir.resolve())
    else:
        source = FirestoreVendorDataSource(project_id=config.project_id)
        template_store = FirestoreTemplateStore(project_id=config.project_id)

    completion_client = None
    if config.project_id:
        completion_client = VertexAIAdapter(
            project_id=config.project_id,
            location=config.vertex_location,
            model_name=config.vertex_model,
        )

    return StorefrontPipeline(
        config=config,
        enricher=VendorDataEnricher(source),
        template_store=template_store,
        store=store or build_storefront_store(config),
        completion_client=completion_client,
    )


__all__ = ["build_job_store", "build_storefront_store", "build_pipeline"]
