from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import vertexai
from pydantic import ValidationError
from vertexai.generative_models import GenerationConfig, GenerativeModel

from .errors import DesignParseError
from .models.design import StorefrontDesign

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    def complete(self, system_instruction: str, prompt: str) -> str:
        ...


class VertexAIAdapter:
    """Adapter for Vertex AI Gemini models."""

    def __init__(
        self,
        *,
        project_id: str,
        location: str = "us-central1",
        model_name: str = "gemini-1.5-pro",
        temperature: float = 0.7,
        max_output_tokens: int = 8192,
    ) -> None:
        """Initialize Vertex AI adapter.

        Args:
            project_id: GCP project ID
            location: Vertex AI location
            model_name: Model name (e.g., "gemini-1.5-pro")
            temperature: Sampling temperature (0.0 - 1.0)
            max_output_tokens: Maximum output tokens
        """
        self.project_id = project_id
        self.location = location
        self.model_name = model_name
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

        vertexai.init(project=project_id, location=location)

    def complete(self, system_instruction: str, prompt: str) -> str:
        """Run one text completion.

        Args:
            system_instruction: Role and output rules for the model
            prompt: User prompt

        Returns:
            Generated text, possibly wrapped in markdown fences
        """
        model = GenerativeModel(self.model_name, system_instruction=system_instruction)
        generation_config = GenerationConfig(
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
        )

        response = model.generate_content(
            prompt,
            generation_config=generation_config,
        )

        generated_text = response.text

        logger.info(
            "Generated content with Vertex AI",
            extra={
                "model": self.model_name,
                "temperature": self.temperature,
                "input_length": len(prompt),
                "output_length": len(generated_text),
            },
        )

        return generated_text


def strip_code_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse completion output that should hold a single JSON object.

    Raises:
        DesignParseError: The text is not JSON, or not a JSON object.
    """
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.error(
            "Failed to parse JSON response",
            exc_info=True,
            extra={"response": cleaned[:500]},
        )
        raise DesignParseError(f"Invalid JSON response: {exc}") from exc

    if not isinstance(data, dict):
        raise DesignParseError(
            f"Expected a JSON object, got {type(data).__name__}"
        )
    return data


def parse_design(text: str) -> StorefrontDesign:
    data = parse_json_object(text)
    try:
        return StorefrontDesign.model_validate(
            {
                "sections": data.get("sections") or [],
                "components": data.get("components") or [],
            }
        )
    except ValidationError as exc:
        raise DesignParseError(f"Unexpected design shape: {exc}") from exc


__all__ = [
    "CompletionClient",
    "VertexAIAdapter",
    "strip_code_fences",
    "parse_json_object",
    "parse_design",
]
