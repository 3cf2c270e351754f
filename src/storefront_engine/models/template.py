from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ComponentDefinition(BaseModel):
    component_key: str
    props: dict[str, Any] = Field(default_factory=dict)


class SectionDefinition(BaseModel):
    section_key: str
    section_order: int = 0
    page_type: str = "home"
    pattern: str | None = None
    components: list[ComponentDefinition] = Field(default_factory=list)


class Template(BaseModel):
    template_id: str
    name: str | None = None
    description: str | None = None
    design_system: dict[str, Any] = Field(default_factory=dict)
    all_pages: list[SectionDefinition] = Field(default_factory=list)


class ContainerConfig(BaseModel):
    section_key: str
    section_order: int = 0
    page_type: str = "home"


class TemplateRow(BaseModel):
    """One stored template component, as kept in the template collection."""

    template_id: str
    component_key: str
    props: dict[str, Any] = Field(default_factory=dict)
    position_order: int = 0
    container_config: ContainerConfig


__all__ = [
    "ComponentDefinition",
    "SectionDefinition",
    "Template",
    "ContainerConfig",
    "TemplateRow",
]
