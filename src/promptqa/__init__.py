"""PromptQA - prompt quality assurance for a prompt library.

Scores prompts per modality, patches missing sections, validates prompt
assets, renders runtime prompts, validates model output and repairs it.
"""

__version__ = "0.1.0"

from .qa import qa_evaluate, patch_snippet, Snippet, QaResult
from .spec import render_prompt, validate_model_output, run_prompt_with_qa, validate_prompt_asset
from .contrib import submit_prompt

__all__ = [
    "qa_evaluate", "patch_snippet", "Snippet", "QaResult",
    "render_prompt", "validate_model_output", "run_prompt_with_qa", "validate_prompt_asset",
    "submit_prompt",
]
