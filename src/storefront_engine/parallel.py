from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Sequence

from .dictionaries import PAGE_GROUPS, PageGroup
from .generator import SYSTEM_INSTRUCTION, build_group_prompt
from .models.design import FOOTER_KEY, HEADER_KEY, ComponentInstance, Section
from .models.vendor import VendorData
from .vertex_ai_adapter import CompletionClient, parse_design

logger = logging.getLogger(__name__)

TIMEOUT_ERROR = "timeout"
SINGLETON_SECTIONS = frozenset({HEADER_KEY, FOOTER_KEY})
SINGLETON_COMPONENTS = frozenset({"smart_header", "smart_footer"})


@dataclass
class GroupResult:
    group: str
    sections: list[Section] = field(default_factory=list)
    components: list[ComponentInstance] = field(default_factory=list)
    success: bool = True
    error: str | None = None

    @classmethod
    def failed(cls, group: str, error: str) -> "GroupResult":
        return cls(group=group, success=False, error=error)


@dataclass
class ParallelResult:
    sections: list[Section]
    components: list[ComponentInstance]
    success: bool
    errors: list[str] = field(default_factory=list)
    groups: list[GroupResult] = field(default_factory=list)
    logs: list[str] = field(default_factory=list)


def merge_group_results(results: Sequence[GroupResult]) -> ParallelResult:
    """Combine per-group output into one design.

    ``header``/``footer`` sections and ``smart_header``/``smart_footer``
    components are kept only the first time they appear across all groups,
    regardless of page type. Everything else is kept as emitted, with each
    untagged component given the page type of its own group's section so
    keys shared across groups stay apart. Failed groups contribute nothing
    but their error.
    """
    sections: list[Section] = []
    components: list[ComponentInstance] = []
    errors: list[str] = []
    logs: list[str] = []
    seen_sections: set[str] = set()
    seen_components: set[str] = set()

    for result in results:
        if not result.success:
            errors.append(f"Group {result.group} failed: {result.error}")
            logs.append(f"Group {result.group} failed: {result.error}")
            continue
        logs.append(
            f"Group {result.group}: {len(result.sections)} sections, "
            f"{len(result.components)} components"
        )
        page_types: dict[str, str] = {}
        for section in result.sections:
            page_types.setdefault(section.section_key, section.page_type)
        for section in result.sections:
            if section.section_key in SINGLETON_SECTIONS:
                if section.section_key in seen_sections:
                    continue
                seen_sections.add(section.section_key)
            sections.append(section)
        for component in result.components:
            if component.component_key in SINGLETON_COMPONENTS:
                if component.component_key in seen_components:
                    continue
                seen_components.add(component.component_key)
            if component.page_type is None and component.section_key in page_types:
                component = component.model_copy(
                    update={"page_type": page_types[component.section_key]}
                )
            components.append(component)

    return ParallelResult(
        sections=sections,
        components=components,
        success=not errors,
        errors=errors,
        groups=list(results),
        logs=logs,
    )


class ParallelGenerator:
    """Generates each page group with its own concurrent completion call."""

    def __init__(
        self,
        client: CompletionClient,
        *,
        timeout_seconds: float = 180.0,
        groups: Sequence[PageGroup] = PAGE_GROUPS,
    ) -> None:
        self._client = client
        self._timeout_seconds = timeout_seconds
        self._groups = tuple(groups)

    async def generate(self, vendor_id: str, vendor: VendorData) -> ParallelResult:
        """Run every group to completion and merge what succeeded.

        A group that raises or exceeds the timeout becomes a failed
        ``GroupResult``; its siblings are never cancelled.
        """
        outcomes = await asyncio.gather(
            *(self._run_group(group, vendor) for group in self._groups),
            return_exceptions=True,
        )

        results: list[GroupResult] = []
        for group, outcome in zip(self._groups, outcomes):
            if isinstance(outcome, GroupResult):
                results.append(outcome)
                continue
            if isinstance(outcome, asyncio.TimeoutError):
                error = TIMEOUT_ERROR
            else:
                error = str(outcome) or type(outcome).__name__
            logger.warning(
                "Page group generation failed",
                extra={"vendor_id": vendor_id, "group": group.name, "error": error},
            )
            results.append(GroupResult.failed(group.name, error))

        merged = merge_group_results(results)
        logger.info(
            "Merged parallel generation",
            extra={
                "vendor_id": vendor_id,
                "success": merged.success,
                "failed_groups": [r.group for r in results if not r.success],
                "section_count": len(merged.sections),
                "component_count": len(merged.components),
            },
        )
        return merged

    async def _run_group(self, group: PageGroup, vendor: VendorData) -> GroupResult:
        text = await asyncio.wait_for(
            asyncio.to_thread(
                self._client.complete, SYSTEM_INSTRUCTION, build_group_prompt(vendor, group)
            ),
            timeout=self._timeout_seconds,
        )
        design = parse_design(text)
        return GroupResult(
            group=group.name,
            sections=design.sections,
            components=design.components,
        )


__all__ = [
    "GroupResult",
    "ParallelResult",
    "ParallelGenerator",
    "merge_group_results",
    "TIMEOUT_ERROR",
]
