from __future__ import annotations

import logging
from collections import Counter

from .dictionaries import SPACING_RHYTHM
from .models.design import (
    FOOTER_KEY,
    HEADER_KEY,
    PAGE_TYPES,
    StorefrontDesign,
    ValidationResult,
)
from .models.vendor import VendorData
from .registry import COMPONENT_REGISTRY, VALID_COMPONENTS, VALID_SECTIONS

logger = logging.getLogger(__name__)

MIN_SECTIONS = 4
MAX_TEXT_COLORS = 5
PLACEHOLDER_MARKERS = ("[", "todo", "placeholder", "lorem ipsum")


def _on_rhythm(height: object) -> bool:
    return isinstance(height, int) and not isinstance(height, bool) and height in SPACING_RHYTHM


def validate_design(design: StorefrontDesign, vendor: VendorData) -> ValidationResult:
    """Check a design against the structural rules and the vendor's data.

    Every rule runs; findings are collected, never raised. ``valid`` only
    depends on ``errors``.
    """
    errors: list[str] = []
    warnings: list[str] = []

    section_keys = [section.section_key for section in design.sections]
    key_set = set(section_keys)
    component_keys = {component.component_key for component in design.components}

    if HEADER_KEY not in key_set and "smart_header" not in component_keys:
        errors.append("Missing header: add a 'header' section or a smart_header component")
    if FOOTER_KEY not in key_set and "smart_footer" not in component_keys:
        errors.append("Missing footer: add a 'footer' section or a smart_footer component")
    if len(design.sections) < MIN_SECTIONS:
        errors.append(
            f"Too few sections: {len(design.sections)} found, at least {MIN_SECTIONS} required"
        )
    if "hero" not in key_set:
        errors.append("Missing hero section")
    if not any(key.startswith("smart_") for key in component_keys):
        errors.append("No smart components: at least one smart_* component is required")

    for index, component in enumerate(design.components):
        if component.component_key not in VALID_COMPONENTS:
            errors.append(
                f"Component {index}: invalid component_key '{component.component_key}'"
            )

    for index, section in enumerate(design.sections):
        if section.section_key not in VALID_SECTIONS:
            errors.append(f"Section {index}: invalid section_key '{section.section_key}'")
        if section.page_type not in PAGE_TYPES:
            warnings.append(f"Section {index}: unknown page_type '{section.page_type}'")

    for index, component in enumerate(design.components):
        if component.component_key != "text":
            continue
        text = component.props.get("text")
        if isinstance(text, str) and any(m in text.lower() for m in PLACEHOLDER_MARKERS):
            errors.append(f'Component {index}: text contains placeholder content: "{text}"')

    if "smart_product_grid" in component_keys and vendor.product_count == 0:
        warnings.append(
            "smart_product_grid is used but the vendor has 0 products "
            "(product_count is 0); the grid will show a coming-soon state"
        )
    if "smart_location_map" in component_keys and not vendor.location_count:
        warnings.append("smart_location_map is used but the vendor has 0 locations")

    for index, component in enumerate(design.components):
        if component.section_key not in key_set:
            errors.append(
                f"Component {index}: orphaned, section_key "
                f"'{component.section_key}' does not match any section"
            )

    duplicates = sorted(key for key, count in Counter(section_keys).items() if count > 1)
    if duplicates:
        errors.append(f"Duplicate section_key values: {', '.join(duplicates)}")

    text_components = [c for c in design.components if c.component_key == "text"]
    store_name = vendor.store_name.lower()
    if not any(
        store_name in str(c.props.get("text", "")).lower() for c in text_components
    ):
        warnings.append(f"No text component mentions the store name '{vendor.store_name}'")

    off_rhythm = sorted(
        {
            str(c.props.get("height"))
            for c in design.components
            if c.component_key == "spacer" and not _on_rhythm(c.props.get("height"))
        }
    )
    if off_rhythm:
        warnings.append(
            f"Spacer heights outside the spacing rhythm: {', '.join(off_rhythm)}"
        )

    colors = {str(c.props["color"]) for c in text_components if c.props.get("color")}
    if len(colors) > MAX_TEXT_COLORS:
        warnings.append(
            f"Text uses {len(colors)} distinct colors; keep to {MAX_TEXT_COLORS} or fewer"
        )

    off_center = sum(
        1 for c in text_components if c.props.get("alignment", "center") != "center"
    )
    if off_center:
        warnings.append(f"{off_center} text component(s) are not center aligned")

    for index, component in enumerate(design.components):
        spec = COMPONENT_REGISTRY.get(component.component_key)
        if spec is None:
            continue
        for prop in spec.required_props:
            if prop not in component.props and prop not in component.field_bindings:
                warnings.append(
                    f"Component {index} ({component.component_key}): missing required prop '{prop}'"
                )

    result = ValidationResult(valid=not errors, errors=errors, warnings=warnings)
    logger.info(
        "Validated design",
        extra={
            "valid": result.valid,
            "error_count": len(errors),
            "warning_count": len(warnings),
        },
    )
    return result


__all__ = ["validate_design", "MIN_SECTIONS", "PLACEHOLDER_MARKERS"]
