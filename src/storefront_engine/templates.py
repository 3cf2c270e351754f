from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from enum import Enum

from .dictionaries import (
    ANSWER_COLOR,
    COMPLIANCE_DISCLAIMERS,
    DEFAULT_FAQ_ENTRIES,
    DIVIDER_COLOR,
    HEADING_COLOR,
    QUESTION_COLOR,
    TEMPLATE_VENDOR_MARKERS,
)
from .models.design import (
    FOOTER_KEY,
    FOOTER_ORDER,
    HEADER_KEY,
    HEADER_ORDER,
    ComponentInstance,
    Section,
    StorefrontDesign,
)
from .models.template import Template
from .models.vendor import VendorData
from .placeholders import resolve_props

logger = logging.getLogger(__name__)

FAQ_SECTION_KEY = "faq"
DISCLAIMERS_SECTION_KEY = "disclaimers"


def is_template_vendor(vendor: VendorData) -> bool:
    vendor_type = (vendor.vendor_type or "").lower()
    if vendor_type == "both":
        return True
    return any(marker in vendor_type for marker in TEMPLATE_VENDOR_MARKERS)


def apply_template(template: Template, vendor: VendorData) -> StorefrontDesign:
    """Bind a template to one vendor.

    Sections are emitted once per distinct ``section_key`` in the order they
    first appear; a later definition with the same key only contributes its
    components. ``position_order`` counts from 0 within each section.
    """

    sections: list[Section] = []
    components: list[ComponentInstance] = []
    next_position: dict[str, int] = {}

    for definition in template.all_pages:
        key = definition.section_key
        if key not in next_position:
            sections.append(
                Section(
                    section_key=key,
                    section_order=definition.section_order,
                    page_type=definition.page_type,
                )
            )
            next_position[key] = 0

        for component in definition.components:
            components.append(
                ComponentInstance(
                    section_key=key,
                    component_key=component.component_key,
                    props=copy.deepcopy(resolve_props(component.props, vendor)),
                    position_order=next_position[key],
                )
            )
            next_position[key] += 1

    logger.info(
        "Applied template",
        extra={
            "template_id": template.template_id,
            "vendor_slug": vendor.slug,
            "section_count": len(sections),
            "component_count": len(components),
        },
    )
    return StorefrontDesign(sections=sections, components=components)


class AugmentationStatus(str, Enum):
    applied = "applied"
    skipped = "skipped"


@dataclass(frozen=True)
class AugmentationOutcome:
    design: StorefrontDesign
    status: AugmentationStatus
    reason: str | None = None

    @property
    def applied(self) -> bool:
        return self.status is AugmentationStatus.applied


def _heading(text: str) -> tuple[str, dict]:
    return (
        "text",
        {
            "text": text,
            "size": "medium",
            "color": HEADING_COLOR,
            "alignment": "center",
            "font_weight": "400",
        },
    )


def _title(text: str) -> tuple[str, dict]:
    return (
        "text",
        {
            "text": text,
            "size": "medium",
            "color": QUESTION_COLOR,
            "alignment": "center",
            "font_weight": "400",
        },
    )


def _body(text: str) -> tuple[str, dict]:
    return (
        "text",
        {
            "text": text,
            "size": "small",
            "color": ANSWER_COLOR,
            "alignment": "center",
            "font_weight": "300",
        },
    )


def _titled_blocks(heading: str, entries: list[tuple[str, str]]) -> list[tuple[str, dict]]:
    blocks: list[tuple[str, dict]] = [
        ("spacer", {"height": 80}),
        _heading(heading),
        ("spacer", {"height": 48}),
    ]
    for index, (title, body) in enumerate(entries):
        if index:
            blocks.append(("divider", {"color": DIVIDER_COLOR, "thickness": 1}))
            blocks.append(("spacer", {"height": 32}))
        blocks.append(_title(title))
        blocks.append(("spacer", {"height": 12}))
        blocks.append(_body(body))
        blocks.append(("spacer", {"height": 32}))
    return blocks


def _instances(section_key: str, blocks: list[tuple[str, dict]]) -> list[ComponentInstance]:
    return [
        ComponentInstance(
            section_key=section_key,
            component_key=component_key,
            props=props,
            position_order=position,
        )
        for position, (component_key, props) in enumerate(blocks)
    ]


def _faq_components(vendor: VendorData) -> list[ComponentInstance]:
    entries = [
        (entry.question, entry.answer.format(store_name=vendor.store_name))
        for entry in DEFAULT_FAQ_ENTRIES
    ]
    return _instances(FAQ_SECTION_KEY, _titled_blocks("FREQUENTLY ASKED QUESTIONS", entries))


def _disclaimer_components(vendor: VendorData) -> list[ComponentInstance]:
    entries = [
        (disclaimer.title, disclaimer.text.format(store_name=vendor.store_name))
        for disclaimer in COMPLIANCE_DISCLAIMERS
    ]
    return _instances(
        DISCLAIMERS_SECTION_KEY, _titled_blocks("IMPORTANT INFORMATION", entries)
    )


_COMPLIANCE_BUILDERS = (
    (FAQ_SECTION_KEY, _faq_components),
    (DISCLAIMERS_SECTION_KEY, _disclaimer_components),
)


def add_compliance_sections(design: StorefrontDesign, vendor: VendorData) -> AugmentationOutcome:
    """Insert the standard FAQ and disclaimer sections just before the footer.

    Each section is added only when its key is not already present. Best
    effort: without a footer, or when both are present, the design is
    returned unchanged with a ``skipped`` status.
    """
    footer_index = next(
        (i for i, s in enumerate(design.sections) if s.section_key == FOOTER_KEY),
        None,
    )
    if footer_index is None:
        logger.warning(
            "Skipped compliance sections: no footer",
            extra={"vendor_slug": vendor.slug},
        )
        return AugmentationOutcome(design, AugmentationStatus.skipped, "no footer section")

    missing = [
        (key, build) for key, build in _COMPLIANCE_BUILDERS if design.find_section(key) is None
    ]
    if not missing:
        logger.warning(
            "Skipped compliance sections: already present",
            extra={"vendor_slug": vendor.slug},
        )
        return AugmentationOutcome(
            design, AugmentationStatus.skipped, "compliance sections already present"
        )

    sections = [section.model_copy() for section in design.sections]
    sections[footer_index:footer_index] = [
        Section(section_key=key, page_type="home") for key, _ in missing
    ]
    for index, section in enumerate(sections):
        if section.section_key == HEADER_KEY:
            section.section_order = HEADER_ORDER
        elif section.section_key == FOOTER_KEY:
            section.section_order = FOOTER_ORDER
        else:
            section.section_order = index

    components = [c.model_copy(deep=True) for c in design.components]
    added = 0
    for _, build in missing:
        new_components = build(vendor)
        components.extend(new_components)
        added += len(new_components)

    logger.info(
        "Added compliance sections",
        extra={
            "vendor_slug": vendor.slug,
            "sections": [key for key, _ in missing],
            "component_count": added,
        },
    )
    return AugmentationOutcome(
        StorefrontDesign(sections=sections, components=components),
        AugmentationStatus.applied,
    )


__all__ = [
    "FAQ_SECTION_KEY",
    "DISCLAIMERS_SECTION_KEY",
    "is_template_vendor",
    "apply_template",
    "AugmentationStatus",
    "AugmentationOutcome",
    "add_compliance_sections",
]
