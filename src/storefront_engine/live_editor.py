from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Protocol

from .models.design import ComponentInstance, Section
from .models.vendor import VendorData
from .persistence import StorefrontStore
from .pubsub_client import PubSubClient
from .registry import default_props

logger = logging.getLogger(__name__)

UPDATE_SECTIONS = "UPDATE_SECTIONS"
UPDATE_COMPONENTS = "UPDATE_COMPONENTS"
COMPONENT_SELECTED = "COMPONENT_SELECTED"
INLINE_EDIT = "INLINE_EDIT"

EDITABLE_FIELDS = frozenset({"component_key", "is_enabled", "is_visible"})


class ItemType(str, Enum):
    section = "section"
    component = "component"


class EditState(str, Enum):
    idle = "idle"
    editing = "editing"
    saved = "saved"
    discarded = "discarded"


@dataclass(frozen=True)
class DragState:
    item_id: str
    item_type: ItemType


@dataclass(frozen=True)
class PreviewMessage:
    type: str
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}


class PreviewChannel(Protocol):
    def publish(self, vendor_id: str, message: PreviewMessage) -> None:
        ...


class PubSubPreviewChannel:
    """Pushes editor snapshots to the preview topic."""

    def __init__(self, client: PubSubClient, *, topic_id: str) -> None:
        self._client = client
        self._topic_id = topic_id

    def publish(self, vendor_id: str, message: PreviewMessage) -> None:
        self._client.publish(
            self._topic_id,
            {"vendor_id": vendor_id, **message.to_dict()},
            attributes={"vendor_id": vendor_id, "type": message.type},
        )


def _move(items: list, old_index: int, new_index: int) -> list:
    moved = list(items)
    moved.insert(new_index, moved.pop(old_index))
    return moved


def _dump(items: Iterable[Section | ComponentInstance]) -> list[dict[str, Any]]:
    return [item.model_dump(mode="json") for item in items]


class EditorSession:
    """In-memory editing state for one vendor's persisted storefront.

    Reorders rewrite ``section_order``/``position_order`` from list
    positions and push a full snapshot to the preview channel. Edits stay
    in memory until :meth:`save`. One editor per vendor is assumed.
    """

    def __init__(
        self,
        vendor_id: str,
        sections: Iterable[Section],
        components: Iterable[ComponentInstance],
        *,
        preview: PreviewChannel | None = None,
        vendor: VendorData | None = None,
    ) -> None:
        self.vendor_id = vendor_id
        self._preview = preview
        self._vendor = vendor
        self._sections = sorted(
            (s.model_copy() for s in sections), key=lambda s: s.section_order
        )
        self._components = self._normalize(c.model_copy(deep=True) for c in components)
        self._drag: DragState | None = None
        self._selected_id: str | None = None
        self._edit_state = EditState.idle
        self._dirty = False
        self._deleted_ids: set[str] = set()
        self._snapshot = self._take_snapshot()

    @classmethod
    def from_store(
        cls,
        store: StorefrontStore,
        vendor_id: str,
        *,
        preview: PreviewChannel | None = None,
        vendor: VendorData | None = None,
    ) -> "EditorSession":
        sections, components = store.load_design(vendor_id)
        return cls(vendor_id, sections, components, preview=preview, vendor=vendor)

    @staticmethod
    def _normalize(components: Iterable[ComponentInstance]) -> list[ComponentInstance]:
        ordered = sorted(
            enumerate(components), key=lambda pair: (pair[1].position_order, pair[0])
        )
        counters: dict[str | None, int] = {}
        result: list[ComponentInstance] = []
        for _, component in ordered:
            owner = component.section_id
            component.position_order = counters.get(owner, 0)
            counters[owner] = component.position_order + 1
            result.append(component)
        return result

    def _take_snapshot(self) -> tuple[list[Section], list[ComponentInstance]]:
        return (
            [s.model_copy() for s in self._sections],
            [c.model_copy(deep=True) for c in self._components],
        )

    @property
    def sections(self) -> list[Section]:
        return list(self._sections)

    @property
    def components(self) -> list[ComponentInstance]:
        return list(self._components)

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def edit_state(self) -> EditState:
        return self._edit_state

    @property
    def drag(self) -> DragState | None:
        return self._drag

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    def components_for(self, section_id: str) -> list[ComponentInstance]:
        return sorted(
            (c for c in self._components if c.section_id == section_id),
            key=lambda c: c.position_order,
        )

    def get_component(self, component_id: str) -> ComponentInstance | None:
        return next((c for c in self._components if c.id == component_id), None)

    # Drag and drop

    def start_drag(self, item_id: str, item_type: ItemType | str) -> bool:
        item_type = ItemType(item_type)
        if self._drag is not None and self._drag.item_type is not item_type:
            return False
        self._drag = DragState(item_id=item_id, item_type=item_type)
        return True

    def is_drag_enabled(self, item_type: ItemType | str) -> bool:
        return self._drag is None or self._drag.item_type is ItemType(item_type)

    def cancel_drag(self) -> None:
        self._drag = None

    def drop(self, target_id: str | None) -> bool:
        """Finish the current drag onto ``target_id``.

        Returns True when something moved. A missing target, a drop onto
        itself, unknown ids and component drops across sections are no-ops.
        """
        drag, self._drag = self._drag, None
        if drag is None or target_id is None or drag.item_id == target_id:
            return False
        if drag.item_type is ItemType.section:
            return self._move_section(drag.item_id, target_id)
        return self._move_component(drag.item_id, target_id)

    def _move_section(self, source_id: str, target_id: str) -> bool:
        ids = [s.id for s in self._sections]
        if source_id not in ids or target_id not in ids:
            return False
        self._sections = _move(self._sections, ids.index(source_id), ids.index(target_id))
        for index, section in enumerate(self._sections):
            section.section_order = index
        self._mark_dirty()
        self._publish(UPDATE_SECTIONS, {"sections": _dump(self._sections)})
        return True

    def _move_component(self, source_id: str, target_id: str) -> bool:
        source = self.get_component(source_id)
        target = self.get_component(target_id)
        if source is None or target is None:
            return False
        if source.section_id != target.section_id:
            logger.debug(
                "Ignored cross-section component drop",
                extra={"vendor_id": self.vendor_id, "component_id": source_id},
            )
            return False

        siblings = self.components_for(source.section_id)
        ids = [c.id for c in siblings]
        for position, component in enumerate(
            _move(siblings, ids.index(source_id), ids.index(target_id))
        ):
            component.position_order = position
        self._mark_dirty()
        self._publish_components()
        return True

    # Property edits

    def begin_edit(self, component_id: str) -> bool:
        if self.get_component(component_id) is None:
            return False
        self._selected_id = component_id
        self._edit_state = EditState.editing
        return True

    def update_component(
        self,
        component_id: str,
        *,
        props: Mapping[str, Any] | None = None,
        field_bindings: Mapping[str, str] | None = None,
        **fields: Any,
    ) -> ComponentInstance:
        """Shallow-merge new values into a component.

        Raises:
            KeyError: No component has ``component_id``.
            ValueError: ``fields`` names something that cannot be edited.
        """
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        component = self.get_component(component_id)
        if component is None:
            raise KeyError(component_id)

        if props:
            component.props = {**component.props, **props}
        if field_bindings:
            component.field_bindings = {**component.field_bindings, **field_bindings}
        for name, value in fields.items():
            setattr(component, name, value)

        self._edit_state = EditState.editing
        self._mark_dirty()
        self._publish_components(updated_id=component_id)
        return component

    def add_component(self, section_id: str, component_key: str) -> ComponentInstance:
        if not any(s.id == section_id for s in self._sections):
            raise KeyError(section_id)
        component = ComponentInstance(
            id=uuid.uuid4().hex,
            section_id=section_id,
            section_key=next(s.section_key for s in self._sections if s.id == section_id),
            component_key=component_key,
            props=default_props(component_key, self._vendor),
            position_order=len(self.components_for(section_id)),
        )
        self._components.append(component)
        self._selected_id = component.id
        self._edit_state = EditState.editing
        self._mark_dirty()
        self._publish_components(updated_id=component.id)
        return component

    def delete_component(self, component_id: str) -> bool:
        component = self.get_component(component_id)
        if component is None:
            return False
        self._components.remove(component)
        for position, sibling in enumerate(self.components_for(component.section_id)):
            sibling.position_order = position
        if any(c.id == component_id for c in self._snapshot[1]):
            self._deleted_ids.add(component_id)
        if self._selected_id == component_id:
            self._selected_id = None
        self._mark_dirty()
        self._publish_components()
        return True

    def save(self, store: StorefrontStore) -> None:
        store.save_section_orders(self.vendor_id, self._sections)
        store.save_components(self.vendor_id, self._components)
        if self._deleted_ids:
            store.delete_components(self.vendor_id, sorted(self._deleted_ids))
        logger.info(
            "Saved editor changes",
            extra={
                "vendor_id": self.vendor_id,
                "section_count": len(self._sections),
                "component_count": len(self._components),
                "deleted_count": len(self._deleted_ids),
            },
        )
        self._deleted_ids.clear()
        self._snapshot = self._take_snapshot()
        self._dirty = False
        self._edit_state = EditState.saved

    def discard(self) -> None:
        sections, components = self._snapshot
        self._sections = [s.model_copy() for s in sections]
        self._components = [c.model_copy(deep=True) for c in components]
        self._deleted_ids.clear()
        self._dirty = False
        self._edit_state = EditState.discarded
        if self._selected_id and self.get_component(self._selected_id) is None:
            self._selected_id = None
        self._publish(UPDATE_SECTIONS, {"sections": _dump(self._sections)})
        self._publish_components()

    # Messages from the preview frame

    def handle_preview_message(self, message: Mapping[str, Any]) -> bool:
        message_type = message.get("type")
        payload = message.get("payload") or {}
        component_id = payload.get("componentId")

        if message_type == COMPONENT_SELECTED and component_id:
            return self.begin_edit(component_id)

        if message_type == INLINE_EDIT and component_id:
            if self.get_component(component_id) is None:
                return False
            updates = dict(payload.get("updates") or {})
            props = updates.pop("props", None)
            bindings = updates.pop("field_bindings", None)
            fields = {k: v for k, v in updates.items() if k in EDITABLE_FIELDS}
            self.update_component(component_id, props=props, field_bindings=bindings, **fields)
            return True

        return False

    def _mark_dirty(self) -> None:
        self._dirty = True

    def _publish_components(self, *, updated_id: str | None = None) -> None:
        payload: dict[str, Any] = {"components": _dump(self._components)}
        if updated_id:
            payload["updatedId"] = updated_id
        self._publish(UPDATE_COMPONENTS, payload)

    def _publish(self, message_type: str, payload: dict[str, Any]) -> None:
        if self._preview is None:
            return
        self._preview.publish(self.vendor_id, PreviewMessage(type=message_type, payload=payload))


__all__ = [
    "ItemType",
    "EditState",
    "DragState",
    "PreviewMessage",
    "PreviewChannel",
    "PubSubPreviewChannel",
    "EditorSession",
    "UPDATE_SECTIONS",
    "UPDATE_COMPONENTS",
    "COMPONENT_SELECTED",
    "INLINE_EDIT",
]
