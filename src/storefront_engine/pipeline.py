from __future__ import annotations

import asyncio
import logging

from .auto_fixer import auto_fix, renumber_positions
from .config import EngineConfig
from .enricher import VendorDataEnricher
from .errors import GenerationFailedError, StorefrontError
from .generator import SingleShotGenerator
from .models.design import StorefrontDesign
from .models.job import GenerationResult
from .models.vendor import VendorData
from .parallel import ParallelGenerator
from .persistence import StorefrontStore, section_id_map
from .template_store import TemplateStore
from .templates import add_compliance_sections, apply_template, is_template_vendor
from .validator import validate_design
from .vertex_ai_adapter import CompletionClient

logger = logging.getLogger(__name__)

STRATEGY_TEMPLATE = "template"
STRATEGY_PARALLEL = "parallel"
STRATEGY_SINGLE_SHOT = "single_shot"


class StorefrontPipeline:
    """Turns one generation request into a persisted storefront."""

    def __init__(
        self,
        *,
        config: EngineConfig,
        enricher: VendorDataEnricher,
        template_store: TemplateStore,
        store: StorefrontStore,
        completion_client: CompletionClient | None = None,
    ) -> None:
        self._config = config
        self._enricher = enricher
        self._template_store = template_store
        self._store = store
        self._client = completion_client

    def choose_strategy(self, vendor: VendorData) -> str:
        if is_template_vendor(vendor):
            return STRATEGY_TEMPLATE
        if self._config.parallel_mode:
            return STRATEGY_PARALLEL
        return STRATEGY_SINGLE_SHOT

    async def generate_storefront(self, vendor_id: str, vendor: VendorData) -> GenerationResult:
        """Generate, validate and persist a storefront for one vendor.

        Never raises: failures come back as ``success=False`` with the logs
        and errors collected up to that point.
        """
        logs: list[str] = []
        errors: list[str] = []
        strategy: str | None = None

        try:
            logs.append(f"Starting storefront generation for {vendor.store_name}")
            base = vendor if vendor.id else vendor.model_copy(update={"id": vendor_id})
            enrichment = await self._enricher.enrich(vendor_id, base)
            enriched = enrichment.vendor
            if enrichment.degraded:
                logs.append(f"Vendor data unavailable, using base data: {enrichment.error}")
            logs.append(
                f"Vendor data enriched: {enriched.product_count} products, "
                f"{enriched.location_count} locations"
            )

            strategy = self.choose_strategy(enriched)
            design = await self._design(vendor_id, enriched, strategy, logs, errors)
            renumber_positions(design.components)

            validation = validate_design(design, enriched)
            if not validation.valid:
                logs.append(f"Design has {len(validation.errors)} errors, auto-fixing")
                design = auto_fix(design, validation)
                revalidation = validate_design(design, enriched)
                if not revalidation.valid:
                    logs.append(
                        f"Accepting design with {len(revalidation.errors)} unresolved errors: "
                        + "; ".join(revalidation.errors)
                    )
                validation = revalidation
            if validation.warnings:
                logs.append(f"Warnings: {'; '.join(validation.warnings)}")

            inserted_sections = await asyncio.to_thread(
                self._store.insert_sections, vendor_id, design.sections
            )
            logs.append(f"Created {len(inserted_sections)} sections")

            inserted_components = await asyncio.to_thread(
                self._store.insert_components,
                vendor_id,
                section_id_map(inserted_sections),
                design.components,
                design.sections,
            )
            logs.append(f"Created {len(inserted_components)} components")

            missing = len(design.components) - len(inserted_components)
            if missing:
                errors.append(
                    f"{missing} of {len(design.components)} components were not persisted"
                )
                logs.append("Storefront not marked as generated: some components are missing")
            else:
                await self._mark_generated(vendor_id, logs)

            storefront_url = self._config.storefront_url(enriched.slug)
            logs.append(f"Storefront live at: {storefront_url}")
            logger.info(
                "Generated storefront",
                extra={
                    "vendor_id": vendor_id,
                    "strategy": strategy,
                    "sections_created": len(inserted_sections),
                    "components_created": len(inserted_components),
                },
            )
            return GenerationResult(
                success=True,
                vendor_id=vendor_id,
                strategy=strategy,
                sections_created=len(inserted_sections),
                components_created=len(inserted_components),
                storefront_url=storefront_url,
                design=design,
                logs=logs,
                errors=errors,
            )
        except Exception as exc:
            logger.error(
                "Storefront generation failed",
                exc_info=True,
                extra={"vendor_id": vendor_id, "strategy": strategy},
            )
            errors.append(str(exc) or type(exc).__name__)
            return GenerationResult(
                success=False,
                vendor_id=vendor_id,
                strategy=strategy,
                logs=logs,
                errors=errors,
            )

    async def _design(
        self,
        vendor_id: str,
        vendor: VendorData,
        strategy: str,
        logs: list[str],
        errors: list[str],
    ) -> StorefrontDesign:
        if strategy == STRATEGY_TEMPLATE:
            template_id = self._config.default_template_id
            logs.append(f"Applying template '{template_id}'")
            template = await asyncio.to_thread(self._template_store.get, template_id)
            design = apply_template(template, vendor)
            logs.append(
                f"Template applied: {len(design.sections)} sections, "
                f"{len(design.components)} components"
            )
            augmentation = add_compliance_sections(design, vendor)
            if augmentation.applied:
                logs.append("Added compliance sections (FAQ, disclaimers)")
            else:
                logs.append(f"Compliance sections skipped: {augmentation.reason}")
            return augmentation.design

        client = self._require_client()
        if strategy == STRATEGY_PARALLEL:
            logs.append("Parallel mode: generating page groups concurrently")
            generator = ParallelGenerator(
                client, timeout_seconds=self._config.parallel_group_timeout_seconds
            )
            result = await generator.generate(vendor_id, vendor)
            logs.extend(result.logs)
            errors.extend(result.errors)
            if not result.success and not self._config.parallel_allow_partial:
                raise GenerationFailedError("Parallel generation failed", result.errors)
            logs.append(
                f"Parallel generation complete: {len(result.sections)} sections, "
                f"{len(result.components)} components"
            )
            return StorefrontDesign(sections=result.sections, components=result.components)

        logs.append("Generating design with a single completion")
        design = await asyncio.to_thread(SingleShotGenerator(client).generate, vendor)
        logs.append(
            f"Generated {len(design.sections)} sections, {len(design.components)} components"
        )
        return design

    async def _mark_generated(self, vendor_id: str, logs: list[str]) -> None:
        try:
            await asyncio.to_thread(self._store.mark_storefront_generated, vendor_id)
        except Exception:
            logger.warning(
                "Could not update vendor status",
                exc_info=True,
                extra={"vendor_id": vendor_id},
            )
            logs.append("Could not update vendor status (non-critical)")
            return
        logs.append("Vendor storefront marked as generated")

    def _require_client(self) -> CompletionClient:
        if self._client is None:
            raise StorefrontError("No completion client configured for AI generation")
        return self._client


__all__ = [
    "StorefrontPipeline",
    "STRATEGY_TEMPLATE",
    "STRATEGY_PARALLEL",
    "STRATEGY_SINGLE_SHOT",
]
