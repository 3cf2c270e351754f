from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

DEFAULT_TAGLINE = "Premium cannabis delivered with care"
DEFAULT_LOGO_URL = "/yacht-club-logo.png"

SPACING_RHYTHM: frozenset[int] = frozenset({8, 12, 16, 20, 24, 32, 40, 48, 60, 80, 100})

TEMPLATE_VENDOR_MARKERS: Sequence[str] = ("cannabis", "thc", "dispensary", "cbd")

HEADING_COLOR = "rgba(255,255,255,0.6)"
QUESTION_COLOR = "#ffffff"
ANSWER_COLOR = "rgba(255,255,255,0.5)"
DIVIDER_COLOR = "rgba(255,255,255,0.1)"


@dataclass(frozen=True)
class FaqEntry:
    question: str
    answer: str


# "{store_name}" is filled with str.format; the rest is shared by every vendor.
DEFAULT_FAQ_ENTRIES: Sequence[FaqEntry] = (
    FaqEntry(
        question="What forms of payment do you accept?",
        answer="We accept all major credit cards, debit cards, and approved digital payment "
        "methods. All transactions are encrypted and processed through our secure payment "
        "gateway for your protection.",
    ),
    FaqEntry(
        question="How long does delivery take?",
        answer="Same-day delivery is available for orders placed before 2 PM. Standard "
        "delivery takes 1-2 business days. You can track your order in real-time through "
        "your account dashboard.",
    ),
    FaqEntry(
        question="Is my delivery discreet?",
        answer="Absolutely. All orders arrive in plain, unmarked packaging with no logos or "
        "identifying information. Packaging is also odor-proof to ensure complete discretion.",
    ),
    FaqEntry(
        question="Are your products lab tested?",
        answer="Yes. Every product is third-party tested by independent laboratories. We "
        "provide Certificates of Analysis (COA) showing potency, terpene profiles, and test "
        "results for pesticides, heavy metals, and residual solvents.",
    ),
    FaqEntry(
        question="What is your return policy?",
        answer="Unopened products can be returned within 30 days of delivery for a full "
        "refund. Due to health and safety regulations, opened cannabis products cannot be "
        "returned. See our Returns page for complete details.",
    ),
    FaqEntry(
        question="Do I need a medical card?",
        answer="Requirements vary by state. Some locations require a valid medical marijuana "
        "card, while others allow recreational purchases for adults 21+. We'll verify "
        "eligibility during checkout based on your delivery location.",
    ),
    FaqEntry(
        question="How do you ensure product quality?",
        answer="{store_name} partners exclusively with licensed, compliant cultivators. All "
        "products undergo rigorous quality control and third-party testing before reaching "
        "our customers. We stand behind every item we sell.",
    ),
    FaqEntry(
        question="Can I track my order?",
        answer="Yes. You'll receive tracking information via email and SMS as soon as your "
        "order ships. Track your delivery in real-time through your account dashboard or "
        "tracking link.",
    ),
    FaqEntry(
        question="What if I'm not satisfied?",
        answer="Your satisfaction is our priority. If you're not happy with your purchase, "
        "contact our support team within 30 days and we'll make it right.",
    ),
    FaqEntry(
        question="Are there any delivery fees?",
        answer="Delivery fees vary by location and order size. Orders over a minimum amount "
        "may qualify for free delivery. Exact fees are shown at checkout before you confirm "
        "your order.",
    ),
    FaqEntry(
        question="How is cannabis stored and shipped?",
        answer="All products are stored in climate-controlled facilities to preserve "
        "freshness and potency. During shipping, items are packaged to prevent damage and "
        "maintain optimal conditions.",
    ),
    FaqEntry(
        question="Can I cancel or modify my order?",
        answer="Orders can be cancelled or modified within 30 minutes of placement. After "
        "that, orders enter our fulfillment process and cannot be changed. Contact support "
        "immediately if you need assistance.",
    ),
)


@dataclass(frozen=True)
class Disclaimer:
    title: str
    text: str


# Rendered in this order; "{store_name}" as above.
COMPLIANCE_DISCLAIMERS: Sequence[Disclaimer] = (
    Disclaimer(
        title="Age Requirement (21+)",
        text="You must be 21 years or older to purchase cannabis products. By entering this "
        "site, you confirm that you are of legal age in your jurisdiction. We require age "
        "verification at checkout and upon delivery.",
    ),
    Disclaimer(
        title="Medical Disclaimer",
        text="The statements made regarding cannabis products have not been evaluated by the "
        "Food and Drug Administration. These products are not intended to diagnose, treat, "
        "cure or prevent any disease. Consult with a physician before use if you have a "
        "serious medical condition or use prescription medications. A Doctor's advice should "
        "be sought before using this and any supplemental dietary product.",
    ),
    Disclaimer(
        title="Legal Compliance",
        text="{store_name} operates in full compliance with state and local cannabis "
        "regulations. We only ship to locations where cannabis delivery is legal. Customers "
        "are responsible for knowing and complying with their local laws.",
    ),
    Disclaimer(
        title="Limitation of Liability",
        text="{store_name} is not liable for misuse of products, adverse reactions, or any "
        "consequences of use. Use cannabis responsibly and in accordance with local laws. If "
        "you experience adverse effects, discontinue use and consult a healthcare professional.",
    ),
)


@dataclass(frozen=True)
class PageGroup:
    name: str
    page_types: Sequence[str]
    focus: str


PAGE_GROUPS: Sequence[PageGroup] = (
    PageGroup(
        name="home_shop",
        page_types=("home", "shop"),
        focus="hero, featured products, trust badges, reviews, shop controls and the full product grid",
    ),
    PageGroup(
        name="product_about_contact",
        page_types=("product", "about", "contact"),
        focus="product detail, brand story and values, contact information",
    ),
    PageGroup(
        name="faq_lab_results",
        page_types=("faq", "lab-results"),
        focus="frequently asked questions and lab results with certificates of analysis",
    ),
    PageGroup(
        name="legal",
        page_types=("privacy", "terms", "cookies"),
        focus="privacy policy, terms of service and cookie policy",
    ),
    PageGroup(
        name="shipping_returns",
        page_types=("shipping", "returns"),
        focus="shipping and delivery details and the return policy",
    ),
)


__all__ = [
    "DEFAULT_TAGLINE",
    "DEFAULT_LOGO_URL",
    "SPACING_RHYTHM",
    "TEMPLATE_VENDOR_MARKERS",
    "HEADING_COLOR",
    "QUESTION_COLOR",
    "ANSWER_COLOR",
    "DIVIDER_COLOR",
    "FaqEntry",
    "DEFAULT_FAQ_ENTRIES",
    "Disclaimer",
    "COMPLIANCE_DISCLAIMERS",
    "PageGroup",
    "PAGE_GROUPS",
]
