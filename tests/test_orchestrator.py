"""Tests for the render/validate/repair loop and the automation payloads."""

import asyncio

import pytest

from promptqa.spec import (
    RepairOrchestrator, RepairState, RuntimePrompt, render_prompt, run_prompt_with_qa,
    to_execution_payload, to_run_contract,
)

GOOD = '{"summary": "A fast, quiet kettle"}'
BAD = 'Sure! Here is the summary.'
WRONG_SHAPE = '{"title": "Kettle"}'


class FakeInvoker:
    """Replays canned responses and records every call."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    async def __call__(self, messages, execution_config):
        self.calls.append((messages, execution_config))
        return {"raw_text": self.responses.pop(0)}


class CancellingInvoker:
    def __init__(self):
        self.calls = 0

    async def __call__(self, messages, execution_config):
        self.calls += 1
        raise asyncio.CancelledError()


@pytest.fixture
def rendered(workflow_doc):
    return render_prompt(RuntimePrompt.from_dict(workflow_doc), {"product": "Kettle"},
                         rendered_at="2024-05-01T12:00:00Z")


def run(orchestrator):
    return asyncio.run(orchestrator.run())


class TestRepairOrchestrator:
    """Test state transitions and model calls."""

    def test_first_try_success(self, rendered):
        invoker = FakeInvoker(GOOD)
        orchestrator = RepairOrchestrator(rendered, invoker)
        result = run(orchestrator)
        assert result.ok
        assert not result.repaired
        assert result.parsed == {"summary": "A fast, quiet kettle"}
        assert orchestrator.state is RepairState.SUCCEEDED
        assert orchestrator.transitions == [RepairState.INITIAL, RepairState.SUCCEEDED]
        assert orchestrator.calls == 1
        assert invoker.calls[0] == (rendered.messages, rendered.execution_config)

    def test_repair_succeeds(self, rendered):
        invoker = FakeInvoker(BAD, GOOD)
        orchestrator = RepairOrchestrator(rendered, invoker)
        result = run(orchestrator)
        assert result.ok
        assert result.repaired
        assert orchestrator.attempts == 1
        assert orchestrator.transitions == [
            RepairState.INITIAL, RepairState.INVALID, RepairState.REPAIRING, RepairState.SUCCEEDED]

        messages, config = invoker.calls[1]
        assert config["temperature"] == 0
        assert config["model"] == "claude-test"
        assert messages[:2] == rendered.messages
        assert messages[2]["role"] == "system"
        assert "FAILED OUTPUT:\n" + BAD in messages[3]["content"]
        # the initial call keeps the prompt's own temperature
        assert invoker.calls[0][1]["temperature"] == 0.5

    def test_retries_exhausted(self, rendered):
        invoker = FakeInvoker(BAD, WRONG_SHAPE, BAD)
        orchestrator = RepairOrchestrator(rendered, invoker)
        result = run(orchestrator)
        assert not result.ok
        assert result.repaired
        assert len(invoker.calls) == 3
        assert orchestrator.attempts == 2
        assert orchestrator.state is RepairState.EXHAUSTED
        assert orchestrator.transitions.count(RepairState.REPAIRING) == 2

    def test_repair_sees_latest_failure(self, rendered):
        invoker = FakeInvoker(BAD, WRONG_SHAPE, GOOD)
        result = run(RepairOrchestrator(rendered, invoker))
        assert result.ok
        last_repair_prompt = invoker.calls[2][0][-1]["content"]
        assert "FAILED OUTPUT:\n" + WRONG_SHAPE in last_repair_prompt
        assert "[mps.schema.match]" in last_repair_prompt

    def test_repair_disabled_stops_at_invalid(self, workflow_doc):
        del workflow_doc["quality"]
        rendered = render_prompt(RuntimePrompt.from_dict(workflow_doc), {"product": "Kettle"})
        invoker = FakeInvoker(BAD)
        orchestrator = RepairOrchestrator(rendered, invoker)
        result = run(orchestrator)
        assert not result.ok
        assert not result.repaired
        assert len(invoker.calls) == 1
        assert orchestrator.state is RepairState.INVALID

    def test_text_output_is_never_repaired(self, workflow_doc):
        workflow_doc["outputs"] = {"format": "text"}
        rendered = render_prompt(RuntimePrompt.from_dict(workflow_doc), {"product": "Kettle"})
        result = run(RepairOrchestrator(rendered, FakeInvoker(BAD)))
        assert result.ok
        assert result.parsed == BAD

    def test_invalid_inputs_skip_the_model(self, workflow_doc):
        rendered = render_prompt(RuntimePrompt.from_dict(workflow_doc), {})
        invoker = FakeInvoker(GOOD)
        orchestrator = RepairOrchestrator(rendered, invoker)
        result = run(orchestrator)
        assert not result.ok
        assert invoker.calls == []
        assert orchestrator.state is RepairState.INVALID
        assert [(i.id, i.path) for i in result.issues] == [('mps.inputs.valid', 'product')]

    def test_cancellation(self, rendered):
        invoker = CancellingInvoker()
        orchestrator = RepairOrchestrator(rendered, invoker)
        with pytest.raises(asyncio.CancelledError):
            run(orchestrator)
        assert orchestrator.state is RepairState.CANCELLED
        assert invoker.calls == 1

    def test_runs_once(self, rendered):
        orchestrator = RepairOrchestrator(rendered, FakeInvoker(GOOD))
        run(orchestrator)
        with pytest.raises(RuntimeError):
            run(orchestrator)

    def test_run_prompt_with_qa(self, rendered):
        result = asyncio.run(run_prompt_with_qa(rendered, FakeInvoker(BAD, GOOD)))
        assert result.ok
        assert result.repaired


class TestPayloads:
    """Test execution payloads and run contracts."""

    def test_execution_payload(self, rendered):
        payload = to_execution_payload(rendered)
        assert payload["messages"] == rendered.messages
        assert payload["execution_config"]["max_tokens"] == 500
        assert payload["metadata"] == {
            "prompt_id": "wf-product-summary",
            "prompt_version": "2.0",
            "rendered_at": "2024-05-01T12:00:00Z",
        }

    def test_run_contract_success(self, rendered):
        qa = asyncio.run(run_prompt_with_qa(rendered, FakeInvoker(GOOD)))
        contract = to_run_contract(rendered, qa)
        assert contract == {
            "prompt_id": "wf-product-summary",
            "version": "2.0",
            "resolved_inputs": {"product": "Kettle", "audience": "buyers"},
            "output_ok": True,
            "repaired": False,
            "issues": [],
            "raw_output": GOOD,
            "output": {"summary": "A fast, quiet kettle"},
        }

    def test_run_contract_failure_has_no_output(self, rendered):
        qa = asyncio.run(run_prompt_with_qa(rendered, FakeInvoker(BAD, BAD, BAD)))
        contract = to_run_contract(rendered, qa)
        assert contract["output_ok"] is False
        assert contract["repaired"] is True
        assert "output" not in contract
        assert contract["issues"][0]["id"] == 'mps.json.valid'
