import json

import pytest

from storefront_engine.errors import DesignParseError
from storefront_engine.generator import (
    SYSTEM_INSTRUCTION,
    SingleShotGenerator,
    build_design_prompt,
    build_repair_prompt,
)
from storefront_engine.vertex_ai_adapter import parse_json_object, strip_code_fences


class ScriptedClient:
    def __init__(self, *responses: str) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, str]] = []

    def complete(self, system_instruction: str, prompt: str) -> str:
        self.calls.append((system_instruction, prompt))
        return self.responses.pop(0)


def fenced(payload: str) -> str:
    return f"```json\n{payload}\n```"


def test_valid_first_response_is_returned(minimal_design, vendor):
    client = ScriptedClient(fenced(minimal_design.model_dump_json()))
    design = SingleShotGenerator(client).generate(vendor)

    assert len(client.calls) == 1
    assert client.calls[0][0] == SYSTEM_INSTRUCTION
    assert "Wilson's" in client.calls[0][1]
    assert [s.section_key for s in design.sections] == [
        "header",
        "hero",
        "featured_products",
        "footer",
    ]


def test_invalid_response_gets_one_repair(minimal_design, vendor):
    broken = minimal_design.model_copy(deep=True)
    broken.components[1].props["text"] = "[TODO: add copy]"
    client = ScriptedClient(broken.model_dump_json(), minimal_design.model_dump_json())

    design = SingleShotGenerator(client).generate(vendor)

    assert len(client.calls) == 2
    repair_prompt = client.calls[1][1]
    assert "Your design has these errors:" in repair_prompt
    assert "placeholder" in repair_prompt
    assert design.components[1].props["text"] == "Welcome to Wilson's"


def test_still_invalid_after_repair_is_auto_fixed(vendor):
    response = json.dumps(
        {
            "sections": [{"section_key": "hero", "section_order": 0}],
            "components": [
                {"section_key": "hero", "component_key": "text", "props": {"text": "Wilson's"}}
            ],
        }
    )
    client = ScriptedClient(response, response)
    design = SingleShotGenerator(client).generate(vendor)

    assert len(client.calls) == 2
    keys = [s.section_key for s in design.sections]
    assert keys[0] == "header"
    assert keys[-1] == "footer"
    assert "hero" in keys


def test_unparseable_response_raises(vendor):
    client = ScriptedClient("I could not design that, sorry.")
    with pytest.raises(DesignParseError):
        SingleShotGenerator(client).generate(vendor)


def test_parse_json_object_rejects_arrays():
    with pytest.raises(DesignParseError):
        parse_json_object("[1, 2, 3]")


def test_strip_code_fences():
    assert strip_code_fences("```json\n{}\n```") == "{}"
    assert strip_code_fences("```\n{}\n```") == "{}"
    assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'


def test_design_prompt_lists_registry_and_vendor(vendor):
    prompt = build_design_prompt(vendor)
    assert "smart_product_grid" in prompt
    assert '"slug": "wilsons"' in prompt


def test_repair_prompt_lists_every_error(minimal_design):
    prompt = build_repair_prompt(minimal_design, ["Missing hero section", "Too few sections"])
    assert "- Missing hero section" in prompt
    assert "- Too few sections" in prompt
    assert '"section_key": "footer"' in prompt
