import pytest

from storefront_engine.live_editor import (
    COMPONENT_SELECTED,
    INLINE_EDIT,
    UPDATE_COMPONENTS,
    UPDATE_SECTIONS,
    EditorSession,
    EditState,
    ItemType,
    PreviewMessage,
    PubSubPreviewChannel,
)
from storefront_engine.models.design import ComponentInstance, Section
from storefront_engine.persistence import InMemoryStorefrontStore, section_id_map


class RecordingChannel:
    def __init__(self) -> None:
        self.messages: list[tuple[str, PreviewMessage]] = []

    def publish(self, vendor_id, message):
        self.messages.append((vendor_id, message))

    @property
    def types(self):
        return [message.type for _, message in self.messages]


def make_session(vendor=None):
    sections = [
        Section(id=f"s{i}", section_key=key, section_order=i)
        for i, key in enumerate(["hero", "featured_products", "reviews", "stats", "cta"])
    ]
    components = [
        ComponentInstance(id="c0", section_id="s0", section_key="hero", component_key="text", position_order=0),
        ComponentInstance(id="c1", section_id="s0", section_key="hero", component_key="spacer", position_order=1),
        ComponentInstance(id="c2", section_id="s0", section_key="hero", component_key="button", position_order=2),
        ComponentInstance(
            id="c3",
            section_id="s1",
            section_key="featured_products",
            component_key="smart_product_grid",
            position_order=0,
        ),
    ]
    channel = RecordingChannel()
    session = EditorSession("v1", sections, components, preview=channel, vendor=vendor)
    return session, channel


def test_dragging_a_section_renumbers_every_section():
    session, channel = make_session()
    assert session.start_drag("s3", ItemType.section)
    assert session.drop("s0")

    assert [s.id for s in session.sections] == ["s3", "s0", "s1", "s2", "s4"]
    assert [s.section_order for s in session.sections] == [0, 1, 2, 3, 4]
    assert session.dirty
    assert channel.types == [UPDATE_SECTIONS]
    payload = channel.messages[0][1].payload
    assert [s["id"] for s in payload["sections"]] == ["s3", "s0", "s1", "s2", "s4"]


def test_only_one_item_type_can_be_dragged_at_a_time():
    session, _ = make_session()
    assert session.start_drag("c0", "component")
    assert not session.is_drag_enabled(ItemType.section)
    assert not session.start_drag("s1", ItemType.section)
    session.cancel_drag()
    assert session.is_drag_enabled("section")


def test_drops_that_change_nothing():
    session, channel = make_session()
    assert not session.drop("s1")

    session.start_drag("s1", "section")
    assert not session.drop(None)
    assert session.drag is None

    session.start_drag("s1", "section")
    assert not session.drop("s1")

    session.start_drag("s1", "section")
    assert not session.drop("missing")

    assert channel.messages == []
    assert not session.dirty


def test_component_move_within_a_section():
    session, channel = make_session()
    session.start_drag("c2", ItemType.component)
    assert session.drop("c0")

    hero = session.components_for("s0")
    assert [c.id for c in hero] == ["c2", "c0", "c1"]
    assert [c.position_order for c in hero] == [0, 1, 2]
    assert channel.types == [UPDATE_COMPONENTS]


def test_component_move_across_sections_is_ignored():
    session, channel = make_session()
    session.start_drag("c3", ItemType.component)
    assert not session.drop("c0")
    assert session.get_component("c3").section_id == "s1"
    assert channel.messages == []


def test_update_merges_props_and_publishes():
    session, channel = make_session()
    session.update_component("c0", props={"text": "Wilson's"})
    session.update_component("c0", props={"color": "#ffffff"}, is_visible=False)

    component = session.get_component("c0")
    assert component.props == {"text": "Wilson's", "color": "#ffffff"}
    assert component.is_visible is False
    assert session.edit_state is EditState.editing
    assert channel.types == [UPDATE_COMPONENTS, UPDATE_COMPONENTS]
    assert channel.messages[-1][1].payload["updatedId"] == "c0"


def test_update_rejects_unknown_component_and_fields():
    session, _ = make_session()
    with pytest.raises(KeyError):
        session.update_component("nope", props={"text": "x"})
    with pytest.raises(ValueError):
        session.update_component("c0", section_id="s1")


def test_add_and_delete_components(vendor):
    session, _ = make_session(vendor)
    added = session.add_component("s1", "smart_header")

    assert added.position_order == 1
    assert added.props["vendorSlug"] == "wilsons"
    assert session.selected_id == added.id

    assert session.delete_component("c1")
    assert [c.position_order for c in session.components_for("s0")] == [0, 1]
    assert not session.delete_component("c1")

    with pytest.raises(KeyError):
        session.add_component("missing", "text")


def test_save_writes_to_the_store(minimal_design):
    store = InMemoryStorefrontStore()
    sections = store.insert_sections("v1", minimal_design.sections)
    store.insert_components("v1", section_id_map(sections), minimal_design.components, sections)

    session = EditorSession.from_store(store, "v1")
    body = [s for s in session.sections if s.section_key in {"hero", "featured_products"}]
    session.start_drag(body[1].id, "section")
    session.drop(body[0].id)
    grid = next(c for c in session.components if c.component_key == "smart_product_grid")
    session.delete_component(grid.id)
    session.save(store)

    assert session.edit_state is EditState.saved
    assert not session.dirty
    saved_sections, saved_components = store.load_design("v1")
    orders = {s.section_key: s.section_order for s in saved_sections}
    assert orders["featured_products"] < orders["hero"]
    assert "smart_product_grid" not in {c.component_key for c in saved_components}


def test_discard_restores_the_loaded_state():
    session, channel = make_session()
    session.update_component("c0", props={"text": "changed"})
    session.start_drag("s4", "section")
    session.drop("s0")
    session.discard()

    assert session.edit_state is EditState.discarded
    assert not session.dirty
    assert session.get_component("c0").props == {}
    assert [s.id for s in session.sections] == ["s0", "s1", "s2", "s3", "s4"]
    assert channel.types[-2:] == [UPDATE_SECTIONS, UPDATE_COMPONENTS]


def test_messages_from_the_preview():
    session, _ = make_session()

    assert session.handle_preview_message(
        {"type": COMPONENT_SELECTED, "payload": {"componentId": "c2"}}
    )
    assert session.selected_id == "c2"

    assert session.handle_preview_message(
        {
            "type": INLINE_EDIT,
            "payload": {"componentId": "c0", "updates": {"props": {"text": "Hello"}}},
        }
    )
    assert session.get_component("c0").props["text"] == "Hello"

    assert not session.handle_preview_message({"type": "RESIZE", "payload": {}})
    assert not session.handle_preview_message(
        {"type": INLINE_EDIT, "payload": {"componentId": "ghost", "updates": {}}}
    )


def test_pubsub_preview_channel_envelope():
    class FakePubSub:
        def __init__(self):
            self.published = []

        def publish(self, topic_id, message, *, attributes=None):
            self.published.append((topic_id, message, attributes))
            return "msg-1"

    client = FakePubSub()
    channel = PubSubPreviewChannel(client, topic_id="storefront-preview")
    channel.publish("v1", PreviewMessage(type=UPDATE_SECTIONS, payload={"sections": []}))

    assert client.published == [
        (
            "storefront-preview",
            {"vendor_id": "v1", "type": UPDATE_SECTIONS, "payload": {"sections": []}},
            {"vendor_id": "v1", "type": UPDATE_SECTIONS},
        )
    ]
