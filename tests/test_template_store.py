import pytest

from storefront_engine.errors import TemplateNotFoundError
from storefront_engine.models.template import ContainerConfig, TemplateRow
from storefront_engine.template_store import LocalTemplateStore, template_from_rows


def row(key, component_key, position, *, order=0, page_type="home", **props):
    return TemplateRow(
        template_id="wilsons",
        component_key=component_key,
        props=props,
        position_order=position,
        container_config=ContainerConfig(
            section_key=key, section_order=order, page_type=page_type
        ),
    )


def test_rows_are_grouped_by_section_key():
    rows = [
        row("header", "smart_header", 0, order=-1, page_type="all"),
        row("hero", "text", 1, text="{{vendor.store_name}}"),
        row("hero", "spacer", 2, height=24),
        row("header", "spacer", 3, order=50, page_type="shop", height=8),
        row("footer", "smart_footer", 4, order=999, page_type="all"),
    ]
    template = template_from_rows("wilsons", rows)

    assert template.template_id == "wilsons"
    assert [s.section_key for s in template.all_pages] == ["header", "hero", "footer"]

    header = template.all_pages[0]
    assert header.section_order == -1
    assert header.page_type == "all"
    assert [c.component_key for c in header.components] == ["smart_header", "spacer"]

    hero = template.all_pages[1]
    assert hero.components[0].props == {"text": "{{vendor.store_name}}"}


def test_no_rows_gives_empty_template():
    assert template_from_rows("empty", []).all_pages == []


def test_local_store_loads_wilsons(template_dir):
    template = LocalTemplateStore(base_path=template_dir).get("wilsons")

    assert template.template_id == "wilsons"
    assert template.design_system["colors"]["background"] == "#000000"
    assert template.all_pages[0].section_key == "header"
    assert template.all_pages[-1].section_key == "footer"


def test_local_store_missing_template(tmp_path):
    store = LocalTemplateStore(base_path=tmp_path)
    with pytest.raises(TemplateNotFoundError):
        store.get("nope")
