from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class VendorData(BaseModel):
    """Vendor attributes merged with live aggregates for one generation request.

    Never persisted on its own; rebuilt by the enricher every time.
    """

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "id": "7f1c0a4e-vendor",
                "store_name": "Wilson's",
                "slug": "wilsons",
                "vendor_type": "cannabis",
                "store_tagline": None,
                "logo_url": None,
                "brand_colors": {"primary": "#000000"},
                "contact_email": "hello@wilsons.com",
            }
        },
    )

    id: str | None = None
    store_name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    vendor_type: str | None = None
    store_tagline: str | None = None
    logo_url: str | None = None
    brand_colors: dict[str, str] = Field(default_factory=dict)
    wholesale_enabled: bool = False
    contact_email: EmailStr | None = None
    product_count: int | None = None
    product_categories: Sequence[str] = Field(default_factory=list)
    location_count: int | None = None
    has_products: bool = False


__all__ = ["VendorData"]
