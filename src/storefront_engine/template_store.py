from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Protocol

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from .errors import TemplateNotFoundError
from .models.template import (
    ComponentDefinition,
    SectionDefinition,
    Template,
    TemplateRow,
)

logger = logging.getLogger(__name__)


class TemplateStore(Protocol):
    def get(self, template_id: str) -> Template:
        ...


class LocalTemplateStore:
    def __init__(self, *, base_path: Path) -> None:
        self._base_path = base_path

    def get(self, template_id: str) -> Template:
        file_path = self._base_path / f"{template_id}.json"
        if not file_path.exists():
            raise TemplateNotFoundError(f"Template not found: {file_path}")
        with file_path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
        return Template.model_validate(data)


def template_from_rows(template_id: str, rows: Iterable[TemplateRow]) -> Template:
    """Rebuild a template from its stored component rows.

    Rows are grouped on ``container_config.section_key``. The first row seen
    for a key decides that section's order and page type, and sections keep
    the order in which their keys first appear.
    """

    sections: dict[str, SectionDefinition] = {}
    for row in rows:
        config = row.container_config
        section = sections.get(config.section_key)
        if section is None:
            section = SectionDefinition(
                section_key=config.section_key,
                section_order=config.section_order,
                page_type=config.page_type,
            )
            sections[config.section_key] = section
        section.components.append(
            ComponentDefinition(component_key=row.component_key, props=dict(row.props))
        )

    return Template(template_id=template_id, all_pages=list(sections.values()))


class FirestoreTemplateStore:
    """Firestore-backed template catalog, one document per template component."""

    COLLECTION_NAME = "component_templates"

    def __init__(self, project_id: str | None = None) -> None:
        self._db = firestore.Client(project=project_id)
        self._collection = self._db.collection(self.COLLECTION_NAME)

    def get(self, template_id: str) -> Template:
        query = self._collection.where(
            filter=FieldFilter("template_id", "==", template_id)
        ).order_by("position_order")

        rows = [TemplateRow.model_validate(doc.to_dict()) for doc in query.stream()]
        if not rows:
            raise TemplateNotFoundError(f"Template not found: {template_id}")

        logger.info(
            "Loaded template rows",
            extra={"template_id": template_id, "row_count": len(rows)},
        )
        return template_from_rows(template_id, rows)


__all__ = [
    "TemplateStore",
    "LocalTemplateStore",
    "FirestoreTemplateStore",
    "template_from_rows",
]
