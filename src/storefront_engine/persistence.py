from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Protocol, Sequence

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from .errors import SectionInsertError
from .models.design import ComponentInstance, Section

logger = logging.getLogger(__name__)

SectionIdMap = Mapping[tuple[str, str], str]

DEFAULT_BATCH_SIZE = 50


class StorefrontStore(Protocol):
    def insert_sections(self, vendor_id: str, sections: Sequence[Section]) -> list[Section]:
        ...

    def insert_components(
        self,
        vendor_id: str,
        section_ids: SectionIdMap,
        components: Sequence[ComponentInstance],
        sections: Sequence[Section],
    ) -> list[ComponentInstance]:
        ...

    def mark_storefront_generated(self, vendor_id: str) -> None:
        ...

    def load_design(self, vendor_id: str) -> tuple[list[Section], list[ComponentInstance]]:
        ...

    def save_section_orders(self, vendor_id: str, sections: Sequence[Section]) -> None:
        ...

    def save_components(self, vendor_id: str, components: Sequence[ComponentInstance]) -> None:
        ...

    def delete_components(self, vendor_id: str, component_ids: Iterable[str]) -> None:
        ...


def section_id_map(sections: Iterable[Section]) -> dict[tuple[str, str], str]:
    """Map ``(page_type, section_key)`` to the persisted section id."""
    return {
        (section.page_type, section.section_key): section.id
        for section in sections
        if section.id
    }


def bind_components(
    section_ids: SectionIdMap,
    components: Sequence[ComponentInstance],
    sections: Sequence[Section],
) -> list[ComponentInstance]:
    """Attach persisted section ids to components.

    A component tagged with a page type binds to that page's section;
    an untagged one takes the page type of the first section sharing its key.
    Components whose section was not persisted are dropped with a warning.
    """
    page_types: dict[str, str] = {}
    for section in sections:
        page_types.setdefault(section.section_key, section.page_type)

    bound: list[ComponentInstance] = []
    for component in components:
        key = component.section_key or ""
        page_type = page_types.get(key, "home")
        if component.page_type and (component.page_type, key) in section_ids:
            page_type = component.page_type
        section_id = section_ids.get((page_type, key))
        if section_id is None:
            logger.warning(
                "No section id for component",
                extra={
                    "section_key": key,
                    "page_type": page_type,
                    "component_key": component.component_key,
                },
            )
            continue
        bound.append(component.model_copy(update={"section_id": section_id}))
    return bound


def insert_in_batches(
    vendor_id: str,
    components: Sequence[ComponentInstance],
    batch_size: int,
    write_batch: Callable[[str, list[ComponentInstance]], list[ComponentInstance]],
) -> list[ComponentInstance]:
    """Write components ``batch_size`` at a time; a failed batch is skipped."""
    inserted: list[ComponentInstance] = []
    for start in range(0, len(components), batch_size):
        batch = list(components[start : start + batch_size])
        batch_number = start // batch_size + 1
        try:
            inserted.extend(write_batch(vendor_id, batch))
        except Exception:
            logger.error(
                "Failed to insert component batch",
                exc_info=True,
                extra={"vendor_id": vendor_id, "batch": batch_number, "size": len(batch)},
            )
            continue
    return inserted


def _section_doc_id(vendor_id: str, section: Section) -> str:
    return f"{vendor_id}_{section.page_type}_{section.section_key}"


def _component_doc(vendor_id: str, component: ComponentInstance) -> dict[str, Any]:
    return {
        "vendor_id": vendor_id,
        "section_id": component.section_id,
        "component_key": component.component_key,
        "props": component.props,
        "field_bindings": component.field_bindings,
        "position_order": component.position_order,
        "is_enabled": component.is_enabled,
        "is_visible": component.is_visible,
    }


class FirestoreStorefrontStore:
    """Firestore-backed storefront sections and component instances."""

    SECTIONS_COLLECTION = "vendor_storefront_sections"
    COMPONENTS_COLLECTION = "vendor_component_instances"
    VENDORS_COLLECTION = "vendors"

    def __init__(self, project_id: str | None = None, *, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        self._db = firestore.Client(project=project_id)
        self._sections = self._db.collection(self.SECTIONS_COLLECTION)
        self._components = self._db.collection(self.COMPONENTS_COLLECTION)
        self._vendors = self._db.collection(self.VENDORS_COLLECTION)
        self._batch_size = batch_size

    def insert_sections(self, vendor_id: str, sections: Sequence[Section]) -> list[Section]:
        """Upsert sections keyed by vendor, page type and section key.

        Raises:
            SectionInsertError: The write failed; no section ids are usable.
        """
        batch = self._db.batch()
        inserted: list[Section] = []
        for section in sections:
            doc_id = _section_doc_id(vendor_id, section)
            batch.set(
                self._sections.document(doc_id),
                {
                    "vendor_id": vendor_id,
                    "section_key": section.section_key,
                    "section_order": section.section_order,
                    "page_type": section.page_type,
                    "is_enabled": True,
                    "content_data": {},
                },
                merge=True,
            )
            inserted.append(section.model_copy(update={"id": doc_id}))
        try:
            batch.commit()
        except Exception as exc:
            raise SectionInsertError(f"Failed to insert sections: {exc}") from exc

        logger.info(
            "Inserted sections",
            extra={"vendor_id": vendor_id, "section_count": len(inserted)},
        )
        return inserted

    def insert_components(
        self,
        vendor_id: str,
        section_ids: SectionIdMap,
        components: Sequence[ComponentInstance],
        sections: Sequence[Section],
    ) -> list[ComponentInstance]:
        bound = bind_components(section_ids, components, sections)
        inserted = insert_in_batches(vendor_id, bound, self._batch_size, self._write_component_batch)
        logger.info(
            "Inserted components",
            extra={
                "vendor_id": vendor_id,
                "requested": len(components),
                "inserted": len(inserted),
            },
        )
        return inserted

    def _write_component_batch(
        self, vendor_id: str, components: list[ComponentInstance]
    ) -> list[ComponentInstance]:
        batch = self._db.batch()
        written: list[ComponentInstance] = []
        for component in components:
            ref = self._components.document()
            batch.set(ref, _component_doc(vendor_id, component))
            written.append(component.model_copy(update={"id": ref.id}))
        batch.commit()
        return written

    def mark_storefront_generated(self, vendor_id: str) -> None:
        self._vendors.document(vendor_id).update(
            {
                "status": "active",
                "storefront_generated": True,
                "storefront_generated_at": firestore.SERVER_TIMESTAMP,
            }
        )
        logger.info("Marked storefront generated", extra={"vendor_id": vendor_id})

    def load_design(self, vendor_id: str) -> tuple[list[Section], list[ComponentInstance]]:
        section_docs = self._sections.where(
            filter=FieldFilter("vendor_id", "==", vendor_id)
        ).stream()
        sections = [
            Section.model_validate({**doc.to_dict(), "id": doc.id}) for doc in section_docs
        ]
        component_docs = self._components.where(
            filter=FieldFilter("vendor_id", "==", vendor_id)
        ).stream()
        components = [
            ComponentInstance.model_validate({**doc.to_dict(), "id": doc.id})
            for doc in component_docs
        ]
        return sections, components

    def save_section_orders(self, vendor_id: str, sections: Sequence[Section]) -> None:
        batch = self._db.batch()
        for section in sections:
            if section.id:
                batch.update(
                    self._sections.document(section.id),
                    {"section_order": section.section_order},
                )
        batch.commit()
        logger.info(
            "Saved section order",
            extra={"vendor_id": vendor_id, "section_count": len(sections)},
        )

    def save_components(self, vendor_id: str, components: Sequence[ComponentInstance]) -> None:
        batch = self._db.batch()
        for component in components:
            ref = (
                self._components.document(component.id)
                if component.id
                else self._components.document()
            )
            batch.set(ref, _component_doc(vendor_id, component), merge=True)
        batch.commit()
        logger.info(
            "Saved components",
            extra={"vendor_id": vendor_id, "component_count": len(components)},
        )

    def delete_components(self, vendor_id: str, component_ids: Iterable[str]) -> None:
        batch = self._db.batch()
        ids = list(component_ids)
        for component_id in ids:
            batch.delete(self._components.document(component_id))
        batch.commit()
        logger.info(
            "Deleted components",
            extra={"vendor_id": vendor_id, "component_count": len(ids)},
        )


class InMemoryStorefrontStore:
    def __init__(self, *, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        self._sections: dict[str, dict[str, Section]] = {}
        self._components: dict[str, dict[str, ComponentInstance]] = {}
        self._generated: dict[str, datetime] = {}
        self._lock = threading.Lock()
        self._batch_size = batch_size

    def insert_sections(self, vendor_id: str, sections: Sequence[Section]) -> list[Section]:
        with self._lock:
            stored = self._sections.setdefault(vendor_id, {})
            inserted: list[Section] = []
            for section in sections:
                doc_id = _section_doc_id(vendor_id, section)
                record = section.model_copy(update={"id": doc_id})
                stored[doc_id] = record
                inserted.append(record.model_copy())
            return inserted

    def insert_components(
        self,
        vendor_id: str,
        section_ids: SectionIdMap,
        components: Sequence[ComponentInstance],
        sections: Sequence[Section],
    ) -> list[ComponentInstance]:
        bound = bind_components(section_ids, components, sections)
        return insert_in_batches(vendor_id, bound, self._batch_size, self._write_component_batch)

    def _write_component_batch(
        self, vendor_id: str, components: list[ComponentInstance]
    ) -> list[ComponentInstance]:
        with self._lock:
            stored = self._components.setdefault(vendor_id, {})
            written = []
            for component in components:
                record = component.model_copy(update={"id": uuid.uuid4().hex}, deep=True)
                stored[record.id] = record
                written.append(record.model_copy(deep=True))
            return written

    def mark_storefront_generated(self, vendor_id: str) -> None:
        with self._lock:
            self._generated[vendor_id] = datetime.now(timezone.utc)

    def is_generated(self, vendor_id: str) -> bool:
        with self._lock:
            return vendor_id in self._generated

    def load_design(self, vendor_id: str) -> tuple[list[Section], list[ComponentInstance]]:
        with self._lock:
            sections = [s.model_copy() for s in self._sections.get(vendor_id, {}).values()]
            components = [
                c.model_copy(deep=True) for c in self._components.get(vendor_id, {}).values()
            ]
            return sections, components

    def save_section_orders(self, vendor_id: str, sections: Sequence[Section]) -> None:
        with self._lock:
            stored = self._sections.setdefault(vendor_id, {})
            for section in sections:
                if section.id in stored:
                    stored[section.id].section_order = section.section_order

    def save_components(self, vendor_id: str, components: Sequence[ComponentInstance]) -> None:
        with self._lock:
            stored = self._components.setdefault(vendor_id, {})
            for component in components:
                component_id = component.id or uuid.uuid4().hex
                stored[component_id] = component.model_copy(update={"id": component_id}, deep=True)

    def delete_components(self, vendor_id: str, component_ids: Iterable[str]) -> None:
        with self._lock:
            stored = self._components.setdefault(vendor_id, {})
            for component_id in component_ids:
                stored.pop(component_id, None)


__all__ = [
    "StorefrontStore",
    "FirestoreStorefrontStore",
    "InMemoryStorefrontStore",
    "SectionIdMap",
    "section_id_map",
    "bind_components",
    "insert_in_batches",
]
