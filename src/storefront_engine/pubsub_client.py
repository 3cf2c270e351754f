from __future__ import annotations

import json
import logging
from typing import Any

from google.cloud import pubsub_v1

logger = logging.getLogger(__name__)


class PubSubClient:
    """Wrapper for Google Cloud Pub/Sub operations."""

    def __init__(
        self,
        project_id: str,
        *,
        generation_requests_topic: str = "storefront-generation-requests",
        storefront_generated_topic: str = "storefront-generated",
    ) -> None:
        self.project_id = project_id
        self.generation_requests_topic = generation_requests_topic
        self.storefront_generated_topic = storefront_generated_topic
        self.publisher = pubsub_v1.PublisherClient()

    def publish(
        self,
        topic_id: str,
        message: dict[str, Any],
        *,
        attributes: dict[str, str] | None = None,
    ) -> str:
        """Publish a message to a Pub/Sub topic.

        Args:
            topic_id: The topic ID (e.g., "storefront-generated")
            message: The message payload as a dictionary
            attributes: Optional message attributes

        Returns:
            Message ID from Pub/Sub
        """
        topic_path = self.publisher.topic_path(self.project_id, topic_id)

        data = json.dumps(message, default=str).encode("utf-8")

        future = self.publisher.publish(topic_path, data, **(attributes or {}))

        message_id = future.result()

        logger.info(
            "Published message to Pub/Sub",
            extra={
                "topic_id": topic_id,
                "message_id": message_id,
                "attributes": attributes,
            },
        )

        return message_id

    def publish_generation_request(
        self,
        *,
        job_id: str,
        vendor_id: str,
        vendor: dict[str, Any],
    ) -> str:
        """Queue a storefront generation for the worker.

        Args:
            job_id: Job ID for tracking
            vendor_id: Vendor the storefront belongs to
            vendor: Base vendor data (at least store_name and slug)

        Returns:
            Message ID from Pub/Sub
        """
        message = {"job_id": job_id, "vendor_id": vendor_id, "vendor": vendor}
        attributes = {"job_id": job_id, "vendor_id": vendor_id}
        return self.publish(self.generation_requests_topic, message, attributes=attributes)

    def publish_storefront_generated(
        self,
        *,
        job_id: str,
        vendor_id: str,
        success: bool,
        outputs: dict[str, Any],
    ) -> str:
        message = {
            "job_id": job_id,
            "vendor_id": vendor_id,
            "success": success,
            "outputs": outputs,
        }
        attributes = {
            "job_id": job_id,
            "vendor_id": vendor_id,
            "event_type": "storefront_generated" if success else "storefront_failed",
        }
        return self.publish(self.storefront_generated_topic, message, attributes=attributes)


__all__ = ["PubSubClient"]
