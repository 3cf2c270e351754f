from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Protocol, Sequence

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from .models.vendor import VendorData

logger = logging.getLogger(__name__)

DEFAULT_VENDOR_TYPE = "retail"


class VendorDataSource(Protocol):
    def list_active_products(self, vendor_id: str) -> Sequence[Mapping[str, Any]]:
        ...

    def list_locations(self, vendor_id: str) -> Sequence[Mapping[str, Any]]:
        ...

    def get_vendor(self, vendor_id: str) -> Mapping[str, Any] | None:
        ...


class FirestoreVendorDataSource:
    """Read-only vendor queries against Firestore."""

    PRODUCTS_COLLECTION = "products"
    LOCATIONS_COLLECTION = "vendor_locations"
    VENDORS_COLLECTION = "vendors"

    def __init__(self, project_id: str | None = None) -> None:
        self._db = firestore.Client(project=project_id)

    def list_active_products(self, vendor_id: str) -> Sequence[Mapping[str, Any]]:
        query = (
            self._db.collection(self.PRODUCTS_COLLECTION)
            .where(filter=FieldFilter("vendor_id", "==", vendor_id))
            .where(filter=FieldFilter("status", "==", "active"))
            .select(["category"])
        )
        return [{"id": doc.id, **(doc.to_dict() or {})} for doc in query.stream()]

    def list_locations(self, vendor_id: str) -> Sequence[Mapping[str, Any]]:
        query = self._db.collection(self.LOCATIONS_COLLECTION).where(
            filter=FieldFilter("vendor_id", "==", vendor_id)
        )
        return [{"id": doc.id, **(doc.to_dict() or {})} for doc in query.stream()]

    def get_vendor(self, vendor_id: str) -> Mapping[str, Any] | None:
        doc = self._db.collection(self.VENDORS_COLLECTION).document(vendor_id).get()
        if not doc.exists:
            return None
        return {"id": doc.id, **(doc.to_dict() or {})}


class InMemoryVendorDataSource:
    def __init__(
        self,
        *,
        products: Mapping[str, Sequence[Mapping[str, Any]]] | None = None,
        locations: Mapping[str, Sequence[Mapping[str, Any]]] | None = None,
        vendors: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> None:
        self._products = dict(products or {})
        self._locations = dict(locations or {})
        self._vendors = dict(vendors or {})

    def list_active_products(self, vendor_id: str) -> Sequence[Mapping[str, Any]]:
        return [
            p for p in self._products.get(vendor_id, []) if p.get("status", "active") == "active"
        ]

    def list_locations(self, vendor_id: str) -> Sequence[Mapping[str, Any]]:
        return list(self._locations.get(vendor_id, []))

    def get_vendor(self, vendor_id: str) -> Mapping[str, Any] | None:
        return self._vendors.get(vendor_id)


class EnrichmentStatus(str, Enum):
    fresh = "fresh"
    degraded = "degraded"


@dataclass(frozen=True)
class EnrichmentOutcome:
    vendor: VendorData
    status: EnrichmentStatus
    error: str | None = None

    @property
    def degraded(self) -> bool:
        return self.status is EnrichmentStatus.degraded


def _distinct_categories(products: Sequence[Mapping[str, Any]]) -> list[str]:
    seen: dict[str, None] = {}
    for product in products:
        category = product.get("category")
        if category:
            seen.setdefault(str(category), None)
    return list(seen)


def merge_vendor_data(
    base: VendorData,
    products: Sequence[Mapping[str, Any]],
    locations: Sequence[Mapping[str, Any]],
    row: Mapping[str, Any] | None,
) -> VendorData:
    row = row or {}
    product_count = len(products)
    return base.model_copy(
        update={
            "id": base.id or row.get("id"),
            "product_count": product_count,
            "product_categories": _distinct_categories(products),
            "has_products": product_count > 0,
            "location_count": len(locations),
            "logo_url": row.get("logo_url") or base.logo_url,
            "brand_colors": row.get("brand_colors") or base.brand_colors,
            "wholesale_enabled": bool(row.get("wholesale_enabled", base.wholesale_enabled)),
            "vendor_type": row.get("vendor_type") or base.vendor_type or DEFAULT_VENDOR_TYPE,
        }
    )


def degraded_vendor_data(base: VendorData) -> VendorData:
    return base.model_copy(
        update={"product_count": 0, "has_products": False, "location_count": 0}
    )


class VendorDataEnricher:
    def __init__(self, source: VendorDataSource) -> None:
        self._source = source

    async def enrich(self, vendor_id: str, base: VendorData) -> EnrichmentOutcome:
        """Merge live vendor aggregates onto ``base``.

        The three reads run concurrently. If any of them fails the outcome is
        ``degraded`` with zeroed aggregates; the error is logged and reported
        on the outcome but never raised.
        """
        try:
            products, locations, row = await asyncio.gather(
                asyncio.to_thread(self._source.list_active_products, vendor_id),
                asyncio.to_thread(self._source.list_locations, vendor_id),
                asyncio.to_thread(self._source.get_vendor, vendor_id),
            )
        except Exception as exc:
            logger.warning(
                "Vendor enrichment failed, using base data",
                extra={"vendor_id": vendor_id, "error": str(exc)},
            )
            return EnrichmentOutcome(
                vendor=degraded_vendor_data(base),
                status=EnrichmentStatus.degraded,
                error=str(exc),
            )

        vendor = merge_vendor_data(base, products, locations, row)
        logger.info(
            "Enriched vendor data",
            extra={
                "vendor_id": vendor_id,
                "product_count": vendor.product_count,
                "category_count": len(vendor.product_categories),
                "location_count": vendor.location_count,
            },
        )
        return EnrichmentOutcome(vendor=vendor, status=EnrichmentStatus.fresh)


__all__ = [
    "VendorDataSource",
    "FirestoreVendorDataSource",
    "InMemoryVendorDataSource",
    "EnrichmentStatus",
    "EnrichmentOutcome",
    "VendorDataEnricher",
    "merge_vendor_data",
    "degraded_vendor_data",
]
