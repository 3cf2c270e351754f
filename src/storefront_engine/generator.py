from __future__ import annotations

import json
import logging
from typing import Sequence

from .auto_fixer import auto_fix
from .dictionaries import SPACING_RHYTHM, PageGroup
from .models.design import StorefrontDesign, ValidationResult
from .models.vendor import VendorData
from .registry import VALID_SECTIONS, registry_for_prompt
from .validator import validate_design
from .vertex_ai_adapter import CompletionClient, parse_design

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = """You are a storefront designer for a multi-vendor cannabis commerce platform.
You assemble pages from a fixed component registry; you never invent component types.

Rules:
- Every design has a "header" section (section_order -1, page_type "all") holding one smart_header,
  and a "footer" section (section_order 999, page_type "all") holding one smart_footer.
- The home page opens with a "hero" section.
- Prefer smart_* components for anything backed by live vendor data (products, locations, reviews).
- Write real, specific copy that names the vendor. Never leave brackets, TODOs, placeholders or lorem ipsum.
- Text is center aligned. Spacer heights come from the spacing rhythm.
- Every component references an existing section through section_key.
- Output raw JSON only: a single object with "sections" and "components" arrays. No markdown, no commentary."""

OUTPUT_FORMAT = """{
  "sections": [
    {"section_key": "header", "section_order": -1, "page_type": "all"},
    {"section_key": "hero", "section_order": 0, "page_type": "home"},
    {"section_key": "footer", "section_order": 999, "page_type": "all"}
  ],
  "components": [
    {"section_key": "header", "component_key": "smart_header", "props": {}, "position_order": 0}
  ]
}"""


def _vendor_block(vendor: VendorData) -> str:
    return json.dumps(vendor.model_dump(mode="json"), indent=2, ensure_ascii=False)


def _shared_context(vendor: VendorData) -> str:
    return (
        f"VENDOR INFORMATION:\n{_vendor_block(vendor)}\n\n"
        f"COMPONENT REGISTRY:\n{json.dumps(registry_for_prompt(), indent=2)}\n\n"
        f"ALLOWED SECTION KEYS:\n{json.dumps(sorted(VALID_SECTIONS))}\n\n"
        f"SPACING RHYTHM (px):\n{json.dumps(sorted(SPACING_RHYTHM))}"
    )


def build_design_prompt(vendor: VendorData) -> str:
    return f"""Design a storefront home page for this vendor.

{_shared_context(vendor)}

REQUIREMENTS:
1. Choose 5 to 8 sections: header, hero, footer, plus the most relevant of
   featured_products, trust_badges, how_it_works, reviews, locations, stats, faq, cta.
2. Use smart_product_grid or smart_product_showcase when the vendor has products.
3. Use smart_location_map only when the vendor has locations.
4. Mention "{vendor.store_name}" in at least one text component.

OUTPUT FORMAT:
{OUTPUT_FORMAT}"""


def build_group_prompt(vendor: VendorData, group: PageGroup) -> str:
    pages = ", ".join(group.page_types)
    return f"""Design ONLY these pages of the storefront: {pages}.
Focus: {group.focus}.

{_shared_context(vendor)}

REQUIREMENTS:
1. Emit sections only for page_type values in: {pages}, plus the shared header and footer.
2. Each page opens with its own hero-style section; keep section keys from the allowed list.
3. Mention "{vendor.store_name}" in at least one text component.

OUTPUT FORMAT:
{OUTPUT_FORMAT}"""


def build_repair_prompt(design: StorefrontDesign, errors: Sequence[str]) -> str:
    error_lines = "\n".join(f"- {error}" for error in errors)
    return f"""Your design has these errors:

{error_lines}

Original design:
{json.dumps(design.model_dump(exclude_none=True), indent=2, ensure_ascii=False)}

Fix these issues and return the corrected design as raw JSON in the same format."""


class SingleShotGenerator:
    """Designs a storefront with one completion call and at most one repair."""

    def __init__(self, client: CompletionClient) -> None:
        self._client = client

    def generate(self, vendor: VendorData) -> StorefrontDesign:
        """Generate, validate, and repair a design.

        Raises:
            DesignParseError: A completion could not be parsed.
        """
        design = parse_design(
            self._client.complete(SYSTEM_INSTRUCTION, build_design_prompt(vendor))
        )
        validation = validate_design(design, vendor)
        logger.info(
            "Generated single-shot design",
            extra={
                "vendor_slug": vendor.slug,
                "section_count": len(design.sections),
                "component_count": len(design.components),
                "valid": validation.valid,
            },
        )
        if validation.valid:
            return design

        design = parse_design(
            self._client.complete(
                SYSTEM_INSTRUCTION, build_repair_prompt(design, validation.errors)
            )
        )
        revalidation: ValidationResult = validate_design(design, vendor)
        logger.info(
            "Repaired single-shot design",
            extra={
                "vendor_slug": vendor.slug,
                "valid": revalidation.valid,
                "error_count": len(revalidation.errors),
            },
        )
        return auto_fix(design, revalidation)


__all__ = [
    "SYSTEM_INSTRUCTION",
    "SingleShotGenerator",
    "build_design_prompt",
    "build_group_prompt",
    "build_repair_prompt",
]
