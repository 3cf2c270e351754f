from pathlib import Path

import pytest

from storefront_engine.models.design import ComponentInstance, Section, StorefrontDesign
from storefront_engine.models.vendor import VendorData

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "data" / "templates"


@pytest.fixture
def template_dir() -> Path:
    return TEMPLATE_DIR


@pytest.fixture
def vendor() -> VendorData:
    return VendorData(
        id="vendor-1",
        store_name="Wilson's",
        slug="wilsons",
        vendor_type="cannabis",
        store_tagline=None,
        logo_url=None,
        product_count=12,
        location_count=2,
    )


@pytest.fixture
def minimal_design() -> StorefrontDesign:
    return StorefrontDesign(
        sections=[
            Section(section_key="header", section_order=-1, page_type="all"),
            Section(section_key="hero", section_order=0, page_type="home"),
            Section(section_key="featured_products", section_order=1, page_type="home"),
            Section(section_key="footer", section_order=999, page_type="all"),
        ],
        components=[
            ComponentInstance(section_key="header", component_key="smart_header"),
            ComponentInstance(
                section_key="hero",
                component_key="text",
                props={"text": "Welcome to Wilson's", "alignment": "center", "color": "#ffffff"},
            ),
            ComponentInstance(section_key="featured_products", component_key="smart_product_grid"),
            ComponentInstance(section_key="footer", component_key="smart_footer"),
        ],
    )
