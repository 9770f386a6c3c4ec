"""Prompt asset specification: validation, asset QA, rendering, output QA and repair."""

from .blocks import ParsedBlocks, parse_blocks, render_blocks
from .models import (
    PromptAsset, OutputBlockSpec, QaCheckSpec, AdapterSpec, ValidationResult,
    CheckResult, QaRunResult, OutputPatchResult, OutputIssue, OutputQaResult,
    InputError, InputValidationResult,
)
from .asset import validate_prompt_asset
from .checks import run_qa
from .patcher import patch_output
from .prompt import RuntimePrompt, PromptInput, validate_structure
from .inputs import validate_inputs
from .renderer import RenderOptions, RenderedPrompt, render_prompt
from .output_qa import validate_model_output, parse_json_strict
from .visual import run_visual_pack_checks, is_visual_pack
from .repair import build_repair_messages, should_attempt_repair
from .orchestrator import RepairState, RepairOrchestrator, run_prompt_with_qa
from .payload import to_execution_payload, to_run_contract
from .converters import snippet_to_prompt, prompt_to_snippet

__all__ = [
    "ParsedBlocks", "parse_blocks", "render_blocks",
    "PromptAsset", "OutputBlockSpec", "QaCheckSpec", "AdapterSpec", "ValidationResult",
    "CheckResult", "QaRunResult", "OutputPatchResult", "OutputIssue", "OutputQaResult",
    "InputError", "InputValidationResult",
    "validate_prompt_asset", "run_qa", "patch_output",
    "RuntimePrompt", "PromptInput", "validate_structure", "validate_inputs",
    "RenderOptions", "RenderedPrompt", "render_prompt",
    "validate_model_output", "parse_json_strict",
    "run_visual_pack_checks", "is_visual_pack",
    "build_repair_messages", "should_attempt_repair",
    "RepairState", "RepairOrchestrator", "run_prompt_with_qa",
    "to_execution_payload", "to_run_contract",
    "snippet_to_prompt", "prompt_to_snippet",
]
