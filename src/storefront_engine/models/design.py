from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

PAGE_TYPES: tuple[str, ...] = (
    "home",
    "shop",
    "product",
    "about",
    "contact",
    "faq",
    "lab-results",
    "privacy",
    "terms",
    "cookies",
    "shipping",
    "returns",
    "all",
)

HEADER_KEY = "header"
FOOTER_KEY = "footer"
HEADER_ORDER = -1
FOOTER_ORDER = 999


class Section(BaseModel):
    id: str | None = None
    section_key: str
    section_order: int = 0
    page_type: str = "home"


class ComponentInstance(BaseModel):
    id: str | None = None
    section_key: str | None = None
    section_id: str | None = None
    page_type: str | None = None
    component_key: str
    props: dict[str, Any] = Field(default_factory=dict)
    field_bindings: dict[str, str] = Field(default_factory=dict)
    position_order: int = 0
    is_enabled: bool = True
    is_visible: bool = True


class StorefrontDesign(BaseModel):
    sections: list[Section] = Field(default_factory=list)
    components: list[ComponentInstance] = Field(default_factory=list)

    def section_keys(self) -> set[str]:
        return {section.section_key for section in self.sections}

    def find_section(self, section_key: str) -> Section | None:
        for section in self.sections:
            if section.section_key == section_key:
                return section
        return None

    def components_for(self, section_key: str) -> list[ComponentInstance]:
        return [c for c in self.components if c.section_key == section_key]


class ValidationResult(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


AppliedTemplate = StorefrontDesign


__all__ = [
    "PAGE_TYPES",
    "HEADER_KEY",
    "FOOTER_KEY",
    "HEADER_ORDER",
    "FOOTER_ORDER",
    "Section",
    "ComponentInstance",
    "StorefrontDesign",
    "AppliedTemplate",
    "ValidationResult",
]
