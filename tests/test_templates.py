from storefront_engine.dictionaries import COMPLIANCE_DISCLAIMERS, DEFAULT_FAQ_ENTRIES
from storefront_engine.models.design import ComponentInstance, Section, StorefrontDesign
from storefront_engine.models.template import ComponentDefinition, SectionDefinition, Template
from storefront_engine.models.vendor import VendorData
from storefront_engine.template_store import LocalTemplateStore
from storefront_engine.templates import (
    AugmentationStatus,
    add_compliance_sections,
    apply_template,
    is_template_vendor,
)
from storefront_engine.validator import validate_design


def small_template() -> Template:
    return Template(
        template_id="test",
        all_pages=[
            SectionDefinition(
                section_key="header",
                section_order=-1,
                page_type="all",
                components=[ComponentDefinition(component_key="smart_header")],
            ),
            SectionDefinition(
                section_key="hero",
                section_order=0,
                components=[
                    ComponentDefinition(
                        component_key="text", props={"text": "{{vendor.store_name}}"}
                    ),
                    ComponentDefinition(
                        component_key="text", props={"text": "{{vendor.store_tagline}}"}
                    ),
                ],
            ),
            SectionDefinition(
                section_key="header",
                section_order=7,
                page_type="shop",
                components=[
                    ComponentDefinition(component_key="spacer", props={"height": 24})
                ],
            ),
            SectionDefinition(
                section_key="footer",
                section_order=999,
                page_type="all",
                components=[ComponentDefinition(component_key="smart_footer")],
            ),
        ],
    )


def test_wilsons_scenario_resolves_name_and_default_tagline(vendor):
    design = apply_template(small_template(), vendor)
    hero_texts = [c.props["text"] for c in design.components_for("hero")]
    assert hero_texts == ["Wilson's", "Premium cannabis delivered with care"]


def test_repeated_section_key_contributes_components_only(vendor):
    design = apply_template(small_template(), vendor)

    assert [s.section_key for s in design.sections] == ["header", "hero", "footer"]
    header = design.find_section("header")
    assert header.section_order == -1
    assert header.page_type == "all"

    header_components = design.components_for("header")
    assert [c.component_key for c in header_components] == ["smart_header", "spacer"]
    assert [c.position_order for c in header_components] == [0, 1]


def test_position_order_is_per_section(vendor):
    design = apply_template(small_template(), vendor)
    for section in design.sections:
        positions = [c.position_order for c in design.components_for(section.section_key)]
        assert positions == list(range(len(positions)))


def test_apply_is_deterministic_and_leaves_template_alone(vendor):
    template = small_template()
    first = apply_template(template, vendor)
    second = apply_template(template, vendor)

    assert first.model_dump_json() == second.model_dump_json()
    assert template.all_pages[1].components[0].props["text"] == "{{vendor.store_name}}"


def test_wilsons_template_applies_cleanly(vendor, template_dir):
    template = LocalTemplateStore(base_path=template_dir).get("wilsons")
    design = apply_template(template, vendor)

    keys = [s.section_key for s in design.sections]
    assert keys[0] == "header"
    assert keys[-1] == "footer"
    assert len(keys) == len(set(keys))
    assert not any("{{vendor." in str(c.props) for c in design.components)


def test_compliance_inserts_faq_and_disclaimers_before_footer(vendor, template_dir):
    template = LocalTemplateStore(base_path=template_dir).get("wilsons")
    applied = apply_template(template, vendor)
    outcome = add_compliance_sections(applied, vendor)

    assert outcome.status is AugmentationStatus.applied
    sections = outcome.design.sections
    assert [s.section_key for s in sections[-3:]] == ["faq", "disclaimers", "footer"]
    assert len(sections) == len(applied.sections) + 2

    for index, section in enumerate(sections):
        if section.section_key == "header":
            assert section.section_order == -1
        elif section.section_key == "footer":
            assert section.section_order == 999
        else:
            assert section.section_order == index

    for key in ("faq", "disclaimers"):
        added = outcome.design.components_for(key)
        assert {c.component_key for c in added} <= {"text", "spacer", "divider"}
        assert [c.position_order for c in added] == list(range(len(added)))

    # original design is not modified
    assert applied.find_section("faq") is None


def test_faq_and_disclaimer_copy(vendor, minimal_design):
    design = add_compliance_sections(minimal_design, vendor).design

    faq_texts = [c.props["text"] for c in design.components_for("faq") if c.component_key == "text"]
    questions = faq_texts[1::2]
    assert len(questions) == len(DEFAULT_FAQ_ENTRIES) == 12
    assert questions[0] == "What forms of payment do you accept?"
    assert any(text.startswith("Wilson's partners exclusively") for text in faq_texts)

    disclaimer_texts = [
        c.props["text"] for c in design.components_for("disclaimers") if c.component_key == "text"
    ]
    titles = disclaimer_texts[1::2]
    assert titles == [d.title for d in COMPLIANCE_DISCLAIMERS]
    assert "Medical Disclaimer" in titles
    assert any(text.startswith("Wilson's operates in full compliance") for text in disclaimer_texts)
    assert not any("{store_name}" in text for text in faq_texts + disclaimer_texts)


def test_compliance_result_passes_validation(vendor, template_dir):
    template = LocalTemplateStore(base_path=template_dir).get("wilsons")
    design = add_compliance_sections(apply_template(template, vendor), vendor).design

    result = validate_design(design, vendor)
    assert result.valid, result.errors


def test_compliance_without_footer_is_skipped(vendor):
    design = StorefrontDesign(
        sections=[Section(section_key="header", section_order=-1), Section(section_key="hero")],
        components=[ComponentInstance(section_key="hero", component_key="text", props={"text": "x"})],
    )
    outcome = add_compliance_sections(design, vendor)

    assert outcome.status is AugmentationStatus.skipped
    assert outcome.reason == "no footer section"
    assert outcome.design is design


def test_existing_faq_only_gains_disclaimers(vendor, minimal_design):
    minimal_design.sections.insert(3, Section(section_key="faq", section_order=2))
    outcome = add_compliance_sections(minimal_design, vendor)

    assert outcome.applied
    keys = [s.section_key for s in outcome.design.sections]
    assert keys.count("faq") == 1
    assert keys[-2:] == ["disclaimers", "footer"]
    assert outcome.design.components_for("faq") == []


def test_compliance_is_skipped_when_already_present(vendor, minimal_design):
    once = add_compliance_sections(minimal_design, vendor).design
    outcome = add_compliance_sections(once, vendor)

    assert not outcome.applied
    assert outcome.reason == "compliance sections already present"
    assert outcome.design is once


def test_template_vendor_types():
    def vendor_of(vendor_type):
        return VendorData(store_name="X", slug="x", vendor_type=vendor_type)

    assert is_template_vendor(vendor_of("Cannabis Dispensary"))
    assert is_template_vendor(vendor_of("thc_retail"))
    assert is_template_vendor(vendor_of("cbd"))
    assert is_template_vendor(vendor_of("both"))
    assert not is_template_vendor(vendor_of("retail"))
    assert not is_template_vendor(vendor_of(None))
