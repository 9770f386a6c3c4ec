"""Tests for runtime prompts, input validation and rendering."""

import json

from conftest import SUMMARY_SCHEMA
from promptqa.spec import RenderOptions, RuntimePrompt, render_prompt, validate_inputs, validate_structure
from promptqa.spec.prompt import PromptInput, extract_placeholders
from promptqa.spec.renderer import replace_placeholders

RENDERED_AT = "2024-05-01T12:00:00Z"


def make_prompt(inputs, type="prompt"):
    return RuntimePrompt(id="p1", type=type, inputs=[PromptInput.from_dict(i) for i in inputs])


class TestRuntimePrompt:
    """Test loading runtime prompt documents."""

    def test_from_dict(self, workflow_doc):
        prompt = RuntimePrompt.from_dict(workflow_doc)
        assert prompt.is_workflow
        assert [i.key for i in prompt.inputs] == ['product', 'audience']
        assert prompt.inputs[0].validation.min == 3
        assert prompt.outputs.is_json
        assert prompt.quality.fallback.repair_enabled
        assert prompt.quality.fallback.max_retries == 2
        assert prompt.execution.config() == {
            "provider": None, "model": "claude-test", "temperature": 0.5, "max_tokens": 500}
        assert prompt.content.block("QC", "QUALITY_CHECKS").content == "- Mentions the product"

    def test_defaults(self):
        prompt = RuntimePrompt.from_dict({"id": "x"})
        assert prompt.type == "prompt"
        assert prompt.version == "1.0"
        assert prompt.tags == []
        assert prompt.outputs is None
        assert prompt.quality.fallback is None


class TestValidateStructure:
    """Test required blocks and placeholder coverage."""

    def test_complete_workflow(self, workflow_doc):
        result = validate_structure(RuntimePrompt.from_dict(workflow_doc))
        assert result.valid
        assert result.errors == []

    def test_prompt_needs_output_format(self):
        result = validate_structure(RuntimePrompt(id="p"))
        assert [e.code for e in result.errors] == ['MISSING_BLOCK_OUTPUT_FORMAT']

    def test_undeclared_placeholder(self, workflow_doc):
        workflow_doc["content"]["text"] += " Tone: {{tone}}"
        result = validate_structure(RuntimePrompt.from_dict(workflow_doc))
        assert [(e.code, e.message) for e in result.errors] == [
            ('PLACEHOLDER_MISMATCH', 'Placeholder {{tone}} not defined in inputs')]

    def test_workflow_without_inputs(self, workflow_doc):
        workflow_doc["inputs"] = []
        codes = [e.code for e in validate_structure(RuntimePrompt.from_dict(workflow_doc)).errors]
        assert 'MISSING_INPUTS' in codes

    def test_extract_placeholders(self):
        assert extract_placeholders("{{ a }} {{b}} {{a}} {{  }}") == ['a', 'b']


class TestValidateInputs:
    """Test default resolution and per-input rules."""

    def test_defaults_fill_blanks(self):
        prompt = make_prompt([{"key": "tone", "default": "friendly"}])
        assert validate_inputs(prompt, {"tone": ""}).resolved_inputs == {"tone": "friendly"}
        assert validate_inputs(prompt, {"tone": None}).resolved_inputs == {"tone": "friendly"}

    def test_required(self):
        result = validate_inputs(make_prompt([{"key": "topic", "required": True}]), {})
        assert not result.valid
        assert result.errors[0].code == 'REQUIRED_FIELD'
        assert result.errors[0].message == 'Input "topic" is required'

    def test_optional_blank_is_skipped(self):
        result = validate_inputs(make_prompt([{"key": "notes"}]), {})
        assert result.valid
        assert result.resolved_inputs == {}

    def test_text_type(self):
        result = validate_inputs(make_prompt([{"key": "topic"}]), {"topic": 5})
        assert result.errors[0].code == 'INVALID_TYPE'
        assert result.errors[0].message == 'Input "topic" must be a string'

    def test_number_type(self):
        prompt = make_prompt([{"key": "n", "type": "number"}])
        assert validate_inputs(prompt, {"n": "5"}).errors[0].code == 'INVALID_TYPE'
        assert validate_inputs(prompt, {"n": True}).errors[0].code == 'INVALID_TYPE'
        assert validate_inputs(prompt, {"n": float('nan')}).errors[0].code == 'INVALID_TYPE'
        assert validate_inputs(prompt, {"n": 2.5}).resolved_inputs == {"n": 2.5}

    def test_boolean_type(self):
        prompt = make_prompt([{"key": "flag", "type": "boolean"}])
        assert validate_inputs(prompt, {"flag": False}).valid
        assert validate_inputs(prompt, {"flag": "yes"}).errors[0].message == 'Input "flag" must be a boolean'

    def test_select_option(self):
        prompt = make_prompt([{"key": "audience", "type": "select", "options": ["buyers", "sellers"]}])
        error = validate_inputs(prompt, {"audience": "bots"}).errors[0]
        assert error.code == 'INVALID_OPTION'
        assert error.message == '"bots" is not a valid option. Must be one of: buyers, sellers'

    def test_numeric_range(self):
        prompt = make_prompt([{"key": "n", "type": "number", "validation": {"min": 1, "max": 100}}])
        assert validate_inputs(prompt, {"n": 0}).errors[0].message == 'Input "n" must be at least 1'
        assert validate_inputs(prompt, {"n": 150}).errors[0].code == 'VALUE_TOO_LARGE'
        assert validate_inputs(prompt, {"n": 100}).valid

    def test_string_length(self):
        prompt = make_prompt([{"key": "code", "validation": {"min": 2, "max": 4}}])
        assert validate_inputs(prompt, {"code": "a"}).errors[0].code == 'STRING_TOO_SHORT'
        error = validate_inputs(prompt, {"code": "abcde"}).errors[0]
        assert error.message == 'Input "code" must be at most 4 characters'

    def test_pattern(self):
        prompt = make_prompt([{"key": "slug", "validation": {"pattern": "^[a-z-]+$", "max": 3}}])
        error = validate_inputs(prompt, {"slug": "Not A Slug"}).errors
        assert [e.code for e in error] == ['INVALID_FORMAT']

    def test_broken_pattern_is_an_input_error(self):
        prompt = make_prompt([{"key": "slug", "validation": {"pattern": "([a-z"}}])
        result = validate_inputs(prompt, {"slug": "abc"})
        assert not result.valid
        assert result.errors[0].code == 'INVALID_FORMAT'
        assert result.errors[0].message == 'Input "slug" has an invalid format pattern'

    def test_one_error_per_input_and_only_valid_values_resolved(self):
        prompt = make_prompt([
            {"key": "a", "required": True},
            {"key": "b", "type": "number"},
            {"key": "c"},
        ])
        result = validate_inputs(prompt, {"b": "x", "c": "ok"})
        assert [(e.field, e.code) for e in result.errors] == [('a', 'REQUIRED_FIELD'), ('b', 'INVALID_TYPE')]
        assert result.resolved_inputs == {"c": "ok"}

    def test_workflow_without_inputs(self):
        result = validate_inputs(RuntimePrompt(id="w", type="workflow"), {"x": 1})
        assert not result.valid
        assert result.errors[0].field == '_workflow'
        assert result.errors[0].code == 'NO_INPUTS_DEFINED'

    def test_prompt_without_inputs(self):
        result = validate_inputs(RuntimePrompt(id="p"), {"x": 1})
        assert result.valid
        assert result.resolved_inputs == {}


class TestRenderPrompt:
    """Test message assembly."""

    def test_render(self, workflow_doc):
        prompt = RuntimePrompt.from_dict(workflow_doc)
        rendered = render_prompt(prompt, {"product": "Kettle"}, rendered_at=RENDERED_AT)
        assert rendered.ok
        assert rendered.messages[0] == {"role": "system", "content": "You are concise."}
        assert rendered.messages[1]["role"] == "user"
        assert rendered.messages[1]["content"] == (
            "Summarise Kettle for buyers.\n\nReturn JSON matching:\n"
            + json.dumps(SUMMARY_SCHEMA, indent=2)
            + "\n\nChecks:\n- Mentions the product"
        )
        assert rendered.resolved_inputs == {"product": "Kettle", "audience": "buyers"}
        assert rendered.metadata == {
            "prompt_id": "wf-product-summary",
            "prompt_version": "2.0",
            "rendered_at": RENDERED_AT,
            "input_keys": ["product", "audience"],
            "render_targets": None,
        }
        assert rendered.execution_config["model"] == "claude-test"

    def test_reserved_keys_can_be_disabled(self, workflow_doc):
        prompt = RuntimePrompt.from_dict(workflow_doc)
        options = RenderOptions(include_quality_checks=False, include_output_schema=False)
        content = render_prompt(prompt, {"product": "Kettle"}, options).messages[1]["content"]
        assert "{{output_schema}}" in content
        assert "{{quality_checks}}" in content

    def test_no_system_prompt(self, workflow_doc):
        workflow_doc["execution"] = {}
        rendered = render_prompt(RuntimePrompt.from_dict(workflow_doc), {"product": "Kettle"})
        assert [m["role"] for m in rendered.messages] == ["user"]
        assert rendered.metadata["rendered_at"].endswith("Z")

    def test_fails_closed(self, workflow_doc):
        prompt = RuntimePrompt.from_dict(workflow_doc)
        rendered = render_prompt(prompt, {"product": "Ke"}, rendered_at=RENDERED_AT)
        assert not rendered.ok
        assert rendered.messages == []
        assert rendered.metadata["input_keys"] == []
        assert rendered.input_validation.errors[0].message == 'Input "product" must be at least 3 characters'
        assert rendered.execution_config["temperature"] == 0.5
        assert rendered.fallback.max_retries == 2

    def test_broken_pattern_fails_closed(self, workflow_doc):
        workflow_doc["inputs"][0]["validation"] = {"pattern": "([a-z"}
        rendered = render_prompt(RuntimePrompt.from_dict(workflow_doc), {"product": "Kettle"})
        assert not rendered.ok
        assert rendered.messages == []
        assert rendered.input_validation.errors[0].code == 'INVALID_FORMAT'

    def test_to_dict(self, workflow_doc):
        rendered = render_prompt(RuntimePrompt.from_dict(workflow_doc), {"product": "Kettle"},
                                 rendered_at=RENDERED_AT)
        data = rendered.to_dict()
        assert data["outputs"] == {"format": "json", "schema": SUMMARY_SCHEMA}
        assert data["fallback"] == {"on_schema_fail": "repair_json", "max_retries": 2}
        assert data["input_validation"]["valid"] is True


class TestReplacePlaceholders:
    """Test placeholder substitution."""

    def test_substitution(self):
        assert replace_placeholders("{{ a }}-{{b}}", {"a": 1, "b": "x"}) == "1-x"

    def test_unknown_and_none_stay(self):
        assert replace_placeholders("{{a}} {{b}}", {"b": None}) == "{{a}} {{b}}"
