from __future__ import annotations

import logging

from .models.design import (
    FOOTER_KEY,
    FOOTER_ORDER,
    HEADER_KEY,
    HEADER_ORDER,
    ComponentInstance,
    Section,
    StorefrontDesign,
    ValidationResult,
)

logger = logging.getLogger(__name__)

HERO_KEY = "hero"


def _sort_rank(section: Section) -> tuple[int, int]:
    if section.section_key == HEADER_KEY:
        return (0, 0)
    if section.section_key == FOOTER_KEY:
        return (2, 0)
    return (1, section.section_order)


def renumber_positions(components: list[ComponentInstance]) -> None:
    """Make ``position_order`` contiguous from 0 within each section, in place.

    Components are grouped by page type and section key. Within a group the
    existing order wins and emission order breaks ties, so generated designs
    that leave every position at 0 come out numbered as written.
    """
    groups: dict[tuple[str | None, str | None], list[ComponentInstance]] = {}
    for component in components:
        groups.setdefault((component.page_type, component.section_key), []).append(component)
    for members in groups.values():
        for position, component in enumerate(sorted(members, key=lambda c: c.position_order)):
            component.position_order = position


def auto_fix(design: StorefrontDesign, validation: ValidationResult | None = None) -> StorefrontDesign:
    """Repair the structural problems the validator reports.

    The repairs run unconditionally and only look at what is present, so
    ``validation`` is informational. Applying the fixer to its own output
    changes nothing. The input design is left untouched.
    """
    fixed = design.model_copy(deep=True)
    sections = fixed.sections
    components = fixed.components
    repairs: list[str] = []

    keys = {section.section_key for section in sections}

    if HEADER_KEY not in keys:
        sections.insert(
            0, Section(section_key=HEADER_KEY, section_order=HEADER_ORDER, page_type="all")
        )
        components.insert(
            0, ComponentInstance(section_key=HEADER_KEY, component_key="smart_header")
        )
        repairs.append("header")

    if HERO_KEY not in keys:
        index = next((i for i, s in enumerate(sections) if s.section_order >= 0), 1)
        sections.insert(index, Section(section_key=HERO_KEY, section_order=0, page_type="home"))
        components.append(
            ComponentInstance(
                section_key=HERO_KEY,
                component_key="smart_product_showcase",
                props={"featured_count": 4, "show_cta": True},
            )
        )
        repairs.append("hero")

    if FOOTER_KEY not in keys:
        sections.append(
            Section(section_key=FOOTER_KEY, section_order=FOOTER_ORDER, page_type="all")
        )
        components.append(ComponentInstance(section_key=FOOTER_KEY, component_key="smart_footer"))
        repairs.append("footer")

    for component in components:
        if component.component_key == "text":
            component.props["alignment"] = "center"

    sections.sort(key=_sort_rank)
    position = 0
    for section in sections:
        if section.section_key == HEADER_KEY:
            section.section_order = HEADER_ORDER
        elif section.section_key == FOOTER_KEY:
            section.section_order = FOOTER_ORDER
        else:
            section.section_order = position
            position += 1

    surviving = {section.section_key for section in sections}
    kept = [c for c in components if c.section_key in surviving]
    dropped = len(components) - len(kept)
    fixed.components = kept
    renumber_positions(kept)

    logger.info(
        "Auto-fixed design",
        extra={
            "injected": repairs,
            "orphans_removed": dropped,
            "error_count": len(validation.errors) if validation else None,
        },
    )
    return fixed


__all__ = ["auto_fix", "renumber_positions"]
