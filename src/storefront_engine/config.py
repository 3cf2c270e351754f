from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class EngineConfig:
    """Runtime settings for the generation pipeline and its services."""

    environment: str = "dev"
    project_id: str | None = None
    vertex_location: str = "us-central1"
    vertex_model: str = "gemini-1.5-pro"
    parallel_mode: bool = False
    parallel_group_timeout_seconds: float = 180.0
    parallel_allow_partial: bool = False
    component_batch_size: int = 50
    storefront_base_url: str = "https://yachtclub.com/storefront"
    default_template_id: str = "wilsons"
    template_dir: Path = Path("data/templates")
    topic_generation_requests: str = "storefront-generation-requests"
    topic_storefront_generated: str = "storefront-generated"
    topic_preview: str = "storefront-preview"

    @property
    def is_dev(self) -> bool:
        return self.environment == "dev"

    def storefront_url(self, slug: str) -> str:
        return f"{self.storefront_base_url}?vendor={slug}"

    @classmethod
    def from_env(cls) -> "EngineConfig":
        return cls(
            environment=os.getenv("ENVIRONMENT", "dev"),
            project_id=os.getenv("PROJECT_ID"),
            vertex_location=os.getenv("VERTEX_LOCATION", "us-central1"),
            vertex_model=os.getenv("VERTEX_MODEL", "gemini-1.5-pro"),
            parallel_mode=_env_flag("PARALLEL_MODE"),
            parallel_group_timeout_seconds=float(
                os.getenv("PARALLEL_GROUP_TIMEOUT_SECONDS", "180")
            ),
            parallel_allow_partial=_env_flag("PARALLEL_ALLOW_PARTIAL"),
            component_batch_size=int(os.getenv("COMPONENT_BATCH_SIZE", "50")),
            storefront_base_url=os.getenv(
                "STOREFRONT_BASE_URL", "https://yachtclub.com/storefront"
            ),
            default_template_id=os.getenv("DEFAULT_TEMPLATE_ID", "wilsons"),
            template_dir=Path(os.getenv("TEMPLATE_DIR", "data/templates")),
            topic_generation_requests=os.getenv(
                "PUBSUB_TOPIC_GENERATION_REQUESTS", "storefront-generation-requests"
            ),
            topic_storefront_generated=os.getenv(
                "PUBSUB_TOPIC_STOREFRONT_GENERATED", "storefront-generated"
            ),
            topic_preview=os.getenv("PUBSUB_TOPIC_PREVIEW", "storefront-preview"),
        )


__all__ = ["EngineConfig"]
