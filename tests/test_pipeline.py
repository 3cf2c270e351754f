import asyncio
import json

from storefront_engine.config import EngineConfig
from storefront_engine.enricher import InMemoryVendorDataSource, VendorDataEnricher
from storefront_engine.errors import SectionInsertError
from storefront_engine.models.design import ComponentInstance
from storefront_engine.persistence import InMemoryStorefrontStore
from storefront_engine.pipeline import (
    STRATEGY_PARALLEL,
    STRATEGY_SINGLE_SHOT,
    STRATEGY_TEMPLATE,
    StorefrontPipeline,
)
from storefront_engine.template_store import LocalTemplateStore

PAGE_SECTIONS = {
    "home, shop": ("hero", "home"),
    "product, about, contact": ("about_hero", "about"),
    "faq, lab-results": ("faq_hero", "faq"),
    "privacy, terms, cookies": ("privacy_hero", "privacy"),
    "shipping, returns": ("shipping_hero", "shipping"),
}


class DesignClient:
    """Answers single-shot prompts with ``design`` and group prompts per page group."""

    def __init__(
        self, design: str = "", *, broken_pages: str | None = None, page_sections=PAGE_SECTIONS
    ) -> None:
        self.design = design
        self.broken_pages = broken_pages
        self.page_sections = page_sections
        self.calls = 0

    def complete(self, system_instruction: str, prompt: str) -> str:
        self.calls += 1
        for pages, (section_key, page_type) in self.page_sections.items():
            if f"storefront: {pages}." not in prompt:
                continue
            if pages == self.broken_pages:
                raise RuntimeError("model overloaded")
            return json.dumps(
                {
                    "sections": [
                        {"section_key": "header", "section_order": -1, "page_type": "all"},
                        {"section_key": section_key, "page_type": page_type},
                        {"section_key": "footer", "section_order": 999, "page_type": "all"},
                    ],
                    "components": [
                        {"section_key": "header", "component_key": "smart_header"},
                        {
                            "section_key": section_key,
                            "component_key": "text",
                            "props": {"text": "Wilson's"},
                        },
                        {"section_key": "footer", "component_key": "smart_footer"},
                    ],
                }
            )
        return self.design


class BrokenSectionStore(InMemoryStorefrontStore):
    def insert_sections(self, vendor_id, sections):
        raise SectionInsertError("Failed to insert sections: permission denied")


class SecondBatchFails(InMemoryStorefrontStore):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.batches = 0

    def _write_component_batch(self, vendor_id, components):
        self.batches += 1
        if self.batches == 2:
            raise RuntimeError("write quota exceeded")
        return super()._write_component_batch(vendor_id, components)


def make_pipeline(template_dir, *, vendor_type="cannabis", store=None, client=None, **config):
    source = InMemoryVendorDataSource(
        products={"vendor-1": [{"id": "p1", "category": "Flower"}]},
        locations={"vendor-1": [{"id": "l1"}]},
        vendors={"vendor-1": {"id": "vendor-1", "vendor_type": vendor_type}},
    )
    store = store or InMemoryStorefrontStore()
    pipeline = StorefrontPipeline(
        config=EngineConfig(template_dir=template_dir, **config),
        enricher=VendorDataEnricher(source),
        template_store=LocalTemplateStore(base_path=template_dir),
        store=store,
        completion_client=client,
    )
    return pipeline, store


def run(pipeline, vendor):
    return asyncio.run(pipeline.generate_storefront("vendor-1", vendor))


def test_template_vendor_gets_a_persisted_storefront(template_dir, vendor):
    pipeline, store = make_pipeline(template_dir)
    result = run(pipeline, vendor)

    assert result.success, result.errors
    assert result.strategy == STRATEGY_TEMPLATE
    assert result.storefront_url == "https://yachtclub.com/storefront?vendor=wilsons"
    assert result.errors == []
    assert result.sections_created == len(result.design.sections)
    assert result.components_created == len(result.design.components)
    assert store.is_generated("vendor-1")

    keys = [s.section_key for s in result.design.sections]
    assert keys[-3:] == ["faq", "disclaimers", "footer"]
    assert any("Storefront live at" in line for line in result.logs)

    sections, components = store.load_design("vendor-1")
    assert len(sections) == result.sections_created
    assert len(components) == result.components_created


def test_retail_vendor_uses_single_shot(template_dir, vendor, minimal_design):
    client = DesignClient(minimal_design.model_dump_json())
    pipeline, store = make_pipeline(template_dir, vendor_type="retail", client=client)
    result = run(pipeline, vendor)

    assert result.success, result.errors
    assert result.strategy == STRATEGY_SINGLE_SHOT
    assert client.calls == 1
    assert result.sections_created == 4
    assert store.is_generated("vendor-1")


def test_generated_positions_are_persisted_in_order(template_dir, vendor, minimal_design):
    for text in ("Fresh drops weekly", "Open daily"):
        minimal_design.components.append(
            ComponentInstance(section_key="hero", component_key="text", props={"text": text})
        )
    client = DesignClient(minimal_design.model_dump_json())
    pipeline, store = make_pipeline(template_dir, vendor_type="retail", client=client)
    result = run(pipeline, vendor)

    assert result.success, result.errors
    sections, components = store.load_design("vendor-1")
    hero_id = next(s.id for s in sections if s.section_key == "hero")
    hero = sorted(
        (c for c in components if c.section_id == hero_id), key=lambda c: c.position_order
    )
    assert [c.props["text"] for c in hero] == [
        "Welcome to Wilson's",
        "Fresh drops weekly",
        "Open daily",
    ]
    assert [c.position_order for c in hero] == [0, 1, 2]


def test_parallel_groups_sharing_a_key_stay_on_their_own_pages(template_dir, vendor):
    client = DesignClient(
        page_sections={**PAGE_SECTIONS, "product, about, contact": ("hero", "about")}
    )
    pipeline, store = make_pipeline(
        template_dir, vendor_type="retail", client=client, parallel_mode=True
    )
    result = run(pipeline, vendor)

    assert result.success, result.errors
    sections, components = store.load_design("vendor-1")
    hero_ids = {s.page_type: s.id for s in sections if s.section_key == "hero"}
    assert set(hero_ids) == {"home", "about"}
    for section_id in hero_ids.values():
        bound = [c for c in components if c.section_id == section_id]
        assert len(bound) == 1
        assert bound[0].position_order == 0
    assert result.components_created == len(components)


def test_parallel_failure_fails_the_run(template_dir, vendor):
    client = DesignClient(broken_pages="privacy, terms, cookies")
    pipeline, store = make_pipeline(
        template_dir, vendor_type="retail", client=client, parallel_mode=True
    )
    result = run(pipeline, vendor)

    assert not result.success
    assert result.strategy == STRATEGY_PARALLEL
    assert any(e.startswith("Group legal failed:") for e in result.errors)
    assert not store.is_generated("vendor-1")
    assert store.load_design("vendor-1") == ([], [])


def test_parallel_partial_results_can_be_accepted(template_dir, vendor):
    client = DesignClient(broken_pages="privacy, terms, cookies")
    pipeline, store = make_pipeline(
        template_dir,
        vendor_type="retail",
        client=client,
        parallel_mode=True,
        parallel_allow_partial=True,
    )
    result = run(pipeline, vendor)

    assert result.success
    assert client.calls == 5
    assert any(e.startswith("Group legal failed:") for e in result.errors)
    keys = [s.section_key for s in result.design.sections]
    assert "privacy_hero" not in keys
    assert keys.count("header") == 1


def test_section_insert_failure_is_reported(template_dir, vendor):
    pipeline, store = make_pipeline(template_dir, store=BrokenSectionStore())
    result = run(pipeline, vendor)

    assert not result.success
    assert result.errors == ["Failed to insert sections: permission denied"]
    assert not store.is_generated("vendor-1")


def test_partial_component_write_does_not_mark_generated(template_dir, vendor):
    pipeline, store = make_pipeline(template_dir, store=SecondBatchFails(batch_size=10))
    result = run(pipeline, vendor)

    assert result.components_created == len(result.design.components) - 10
    assert any("were not persisted" in e for e in result.errors)
    assert not store.is_generated("vendor-1")


def test_ai_strategy_without_client_fails(template_dir, vendor):
    pipeline, _ = make_pipeline(template_dir, vendor_type="retail")
    result = run(pipeline, vendor)

    assert not result.success
    assert result.strategy == STRATEGY_SINGLE_SHOT
    assert "No completion client configured" in result.errors[0]
