from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from .dictionaries import DEFAULT_LOGO_URL
from .models.vendor import VendorData


@dataclass(frozen=True)
class ComponentSpec:
    key: str
    category: str  # atomic | composite | smart
    description: str
    props: Mapping[str, str]
    use_when: str
    required_props: Sequence[str] = ()
    auto_wires: Sequence[str] = ()
    page_types: Sequence[str] = ()
    defaults: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_smart(self) -> bool:
        return self.category == "smart"


_SPECS: Sequence[ComponentSpec] = (
    # Atomic
    ComponentSpec(
        key="text",
        category="atomic",
        description="Display text content",
        props={
            "text": "string (the actual text content)",
            "size": '"small" | "medium" | "large" | "xlarge"',
            "color": "string (hex or rgba color)",
            "alignment": '"left" | "center" | "right"',
            "font_weight": '"300" | "400" | "500" | "600"',
        },
        required_props=("text",),
        use_when="Headings, taglines, descriptions, any text",
        defaults={"text": "New text", "size": "medium", "color": "#ffffff", "alignment": "center"},
    ),
    ComponentSpec(
        key="image",
        category="atomic",
        description="Display images or logos",
        props={
            "src": "string (URL or path)",
            "alt": "string (alt text)",
            "width": "number (pixels)",
            "height": "number (pixels)",
            "object_fit": '"contain" | "cover"',
        },
        required_props=("src",),
        use_when="Logos, hero images, banners",
        defaults={"src": DEFAULT_LOGO_URL, "alt": "Logo", "object_fit": "contain"},
    ),
    ComponentSpec(
        key="button",
        category="atomic",
        description="Call-to-action button",
        props={
            "text": "string (button label)",
            "link": "string (URL)",
            "style": '"primary" | "secondary" | "outline"',
            "size": '"small" | "medium" | "large"',
        },
        required_props=("text", "link"),
        use_when="Shop now, Contact us, Order",
        defaults={"text": "Shop Now", "link": "/shop", "style": "primary", "size": "medium"},
    ),
    ComponentSpec(
        key="spacer",
        category="atomic",
        description="Vertical spacing",
        props={"height": "number (pixels, from the spacing rhythm)"},
        required_props=("height",),
        use_when="Breathing room between blocks",
        defaults={"height": 40},
    ),
    ComponentSpec(
        key="icon",
        category="atomic",
        description="Icon from the icon library",
        props={"name": "string (icon name)", "size": "number (pixels)", "color": "string"},
        required_props=("name",),
        use_when="Decorative icons, feature highlights",
        defaults={"name": "star", "size": 32},
    ),
    ComponentSpec(
        key="divider",
        category="atomic",
        description="Horizontal line separator",
        props={"color": "string", "thickness": "number (pixels)"},
        use_when="Separating content blocks",
        defaults={"color": "rgba(255,255,255,0.1)", "thickness": 1},
    ),
    ComponentSpec(
        key="badge",
        category="atomic",
        description="Small label for tags and steps",
        props={
            "text": "string",
            "variant": '"success" | "warning" | "info" | "default"',
            "size": '"small" | "medium"',
        },
        required_props=("text",),
        use_when="Tags, labels, numbered steps",
        defaults={"text": "New", "variant": "default", "size": "small"},
    ),
    # Composite
    ComponentSpec(
        key="product_card",
        category="composite",
        description="Single product card with image, title, price",
        props={"product_id": "string", "show_price": "boolean", "show_stock": "boolean"},
        required_props=("product_id",),
        use_when="Hand-picked single product",
    ),
    ComponentSpec(
        key="product_grid",
        category="composite",
        description="Grid of hand-picked product cards",
        props={"product_ids": "array of product IDs", "columns": "number (2-4)", "show_prices": "boolean"},
        required_props=("product_ids",),
        use_when="Manual product grids",
    ),
    # Smart
    ComponentSpec(
        key="smart_header",
        category="smart",
        description="Navigation header with vendor branding, categories, cart and search",
        props={
            "show_logo": "boolean",
            "show_search": "boolean",
            "show_cart": "boolean",
            "sticky": "boolean",
            "navLinks": "array of {label, href, showDropdown?}",
        },
        auto_wires=("vendorId", "vendorSlug", "vendorName", "vendorLogo"),
        page_types=("all",),
        use_when="Top of every page (section header, section_order -1)",
        defaults={"show_logo": True, "show_search": True, "show_cart": True},
    ),
    ComponentSpec(
        key="smart_footer",
        category="smart",
        description="Footer with links, social, legal compliance and copyright",
        props={
            "show_social": "boolean",
            "show_hours": "boolean",
            "show_newsletter": "boolean",
            "showLegalCompliance": "boolean",
        },
        auto_wires=("vendorId", "vendorSlug", "vendorName", "vendorLogo"),
        page_types=("all",),
        use_when="Bottom of every page (section footer, section_order 999)",
        defaults={"show_social": True, "show_hours": True, "show_newsletter": False},
    ),
    ComponentSpec(
        key="smart_product_grid",
        category="smart",
        description="Fetches and displays the vendor's products",
        props={
            "maxProducts": "number (default 12)",
            "columns": "number (default 3)",
            "showPrice": "boolean",
            "showQuickAdd": "boolean",
            "cardStyle": '"minimal" | "bordered" | "elevated"',
        },
        auto_wires=("vendorId",),
        page_types=("home", "shop"),
        use_when="Vendor has products; renders a coming-soon state with none",
        defaults={"maxProducts": 12, "columns": 3, "showPrice": True},
    ),
    ComponentSpec(
        key="smart_product_showcase",
        category="smart",
        description="Hero-style showcase of featured products",
        props={"featured_count": "number (3-6)", "show_cta": "boolean", "layout": '"carousel" | "grid"'},
        auto_wires=("vendorId",),
        page_types=("home", "product"),
        use_when="Hero section or prominent product display",
        defaults={"featured_count": 4, "show_cta": True, "layout": "carousel"},
    ),
    ComponentSpec(
        key="smart_location_map",
        category="smart",
        description="Vendor's physical locations with a map",
        props={"show_hours": "boolean", "show_directions": "boolean", "show_phone": "boolean"},
        auto_wires=("vendorId",),
        page_types=("home", "contact"),
        use_when="Vendor has one or more locations",
        defaults={"show_hours": True, "show_directions": True},
    ),
    ComponentSpec(
        key="smart_testimonials",
        category="smart",
        description="Customer reviews and testimonials",
        props={"limit": "number (3-6)", "show_rating": "boolean", "layout": '"grid" | "carousel"'},
        auto_wires=("vendorId",),
        page_types=("home",),
        use_when="Social proof; handles zero reviews gracefully",
        defaults={"limit": 6, "show_rating": True, "layout": "grid"},
    ),
    ComponentSpec(
        key="smart_category_nav",
        category="smart",
        description="Category navigation built from product categories",
        props={"layout": '"horizontal" | "vertical" | "grid"', "show_icons": "boolean", "show_count": "boolean"},
        auto_wires=("vendorId",),
        page_types=("home", "shop"),
        use_when="Vendors with several product categories",
        defaults={"layout": "horizontal", "show_count": True},
    ),
    ComponentSpec(
        key="smart_stats_counter",
        category="smart",
        description="Animated credibility stats",
        props={"stats": "array of {label, value, suffix}", "animate": "boolean"},
        auto_wires=("vendorId",),
        page_types=("home", "about"),
        use_when="Build credibility with numbers",
        defaults={"animate": True},
    ),
    ComponentSpec(
        key="smart_features",
        category="smart",
        description="Why-choose-us cards with icons",
        props={"headline": "string", "features": "array of {icon, title, description}"},
        page_types=("home",),
        use_when="Trust building on the homepage",
    ),
    ComponentSpec(
        key="smart_shop_controls",
        category="smart",
        description="Category, location and sort filters for the shop page",
        props={"showSort": "boolean", "showCategories": "boolean"},
        auto_wires=("vendorId",),
        page_types=("shop",),
        use_when="Required on the shop page",
        defaults={"showSort": True, "showCategories": True},
    ),
    ComponentSpec(
        key="smart_product_detail",
        category="smart",
        description="Full product page with gallery, pricing, fields, COA and add to cart",
        props={"showGallery": "boolean", "showPricingTiers": "boolean", "showFields": "boolean"},
        auto_wires=("vendorId", "vendorSlug"),
        page_types=("product",),
        use_when="Product detail page",
        defaults={"showGallery": True},
    ),
    ComponentSpec(
        key="smart_faq",
        category="smart",
        description="Accordion FAQ with vendor branding",
        props={"headline": "string", "faqs": "array of {question, answer}"},
        auto_wires=("vendorId", "vendorName", "vendorLogo"),
        page_types=("home", "faq"),
        use_when="FAQ page and homepage trust block",
    ),
    ComponentSpec(
        key="smart_legal_page",
        category="smart",
        description="Legal page content for privacy, terms or cookies",
        props={"pageType": '"privacy" | "terms" | "cookies"'},
        required_props=("pageType",),
        auto_wires=("vendorName",),
        page_types=("privacy", "terms", "cookies"),
        use_when="Legal pages",
    ),
    ComponentSpec(
        key="smart_about",
        category="smart",
        description="About page with story and values",
        props={"headline": "string", "story": "string"},
        auto_wires=("vendorName", "vendorLogo"),
        page_types=("about",),
        use_when="About page",
    ),
    ComponentSpec(
        key="smart_contact",
        category="smart",
        description="Contact page with form and locations",
        props={"show_form": "boolean", "show_locations": "boolean"},
        auto_wires=("vendorId",),
        page_types=("contact",),
        use_when="Contact page",
    ),
    ComponentSpec(
        key="smart_shipping",
        category="smart",
        description="Shipping and delivery information",
        props={"headline": "string"},
        auto_wires=("vendorId",),
        page_types=("shipping",),
        use_when="Shipping page",
    ),
    ComponentSpec(
        key="smart_returns",
        category="smart",
        description="Returns policy",
        props={"headline": "string"},
        auto_wires=("vendorName",),
        page_types=("returns",),
        use_when="Returns page",
    ),
    ComponentSpec(
        key="smart_lab_results",
        category="smart",
        description="Lab results with COA PDFs",
        props={"show_search": "boolean"},
        auto_wires=("vendorId",),
        page_types=("lab-results",),
        use_when="Lab results page",
    ),
)

COMPONENT_REGISTRY: Mapping[str, ComponentSpec] = {spec.key: spec for spec in _SPECS}

VALID_COMPONENTS: frozenset[str] = frozenset(COMPONENT_REGISTRY)

VALID_SECTIONS: frozenset[str] = frozenset(
    {
        # layout
        "header",
        "footer",
        # home
        "hero",
        "process",
        "how_it_works",
        "trust_badges",
        "featured_products",
        "locations",
        "reviews",
        "about_story",
        "shipping_badges",
        "differentiators",
        "stats",
        "cta",
        "faq",
        "disclaimers",
        # shop / product
        "shop_hero",
        "shop_config",
        "shop_controls",
        "shop_grid",
        "product_detail",
        # about / contact
        "about",
        "about_hero",
        "about_values",
        "contact_info",
        "contact_hero",
        # faq / lab results
        "faq_hero",
        "faq_items",
        "lab_results",
        "lab_results_hero",
        "lab_results_content",
        # legal
        "legal",
        "privacy_hero",
        "privacy_content",
        "terms_hero",
        "terms_content",
        "cookies_hero",
        "cookies_content",
        # shipping / returns
        "shipping",
        "shipping_hero",
        "shipping_content",
        "returns",
        "returns_hero",
        "returns_content",
    }
)


def get_spec(component_key: str) -> ComponentSpec | None:
    return COMPONENT_REGISTRY.get(component_key)


def is_smart(component_key: str) -> bool:
    return component_key.startswith("smart_")


def default_props(component_key: str, vendor: VendorData | None = None) -> dict[str, Any]:
    """Starting props for a component added by hand in the editor."""
    spec = COMPONENT_REGISTRY.get(component_key)
    props: dict[str, Any] = dict(spec.defaults) if spec else {}
    if vendor is None or spec is None:
        return props
    if "vendorId" in spec.auto_wires and vendor.id:
        props["vendorId"] = vendor.id
    if "vendorSlug" in spec.auto_wires:
        props["vendorSlug"] = vendor.slug
    if "vendorName" in spec.auto_wires:
        props["vendorName"] = vendor.store_name
    if "vendorLogo" in spec.auto_wires:
        props["logoUrl"] = vendor.logo_url or DEFAULT_LOGO_URL
    return props


def registry_for_prompt() -> dict[str, dict[str, Any]]:
    return {
        spec.key: {
            "category": spec.category,
            "description": spec.description,
            "props": dict(spec.props),
            "required_props": list(spec.required_props),
            "auto_wires": list(spec.auto_wires),
            "page_types": list(spec.page_types),
            "use_when": spec.use_when,
        }
        for spec in _SPECS
    }


__all__ = [
    "ComponentSpec",
    "COMPONENT_REGISTRY",
    "VALID_COMPONENTS",
    "VALID_SECTIONS",
    "get_spec",
    "is_smart",
    "default_props",
    "registry_for_prompt",
]
