"""Single entry point that routes a content record to its modality evaluator."""

from typing import Dict, Optional

from .audio_qa import evaluate_audio_prompt
from .detection import interpolate
from .email_qa import evaluate_email_prompt
from .i2v_qa import evaluate_i2v_prompt
from .image_qa import evaluate_image_prompt
from .modality import infer_modality, infer_video_subtype
from .models import Modality, QaResult, Snippet, VideoSubtype
from .text_qa import evaluate_text_prompt
from .video_qa import evaluate_video_prompt
from ..logger import get_logger

logger = get_logger(__name__)


def effective_text(snippet: Snippet, input_values: Optional[Dict[str, str]] = None) -> str:
    """Template (or code) text, interpolated when a workflow is given input values."""
    text = snippet.template or snippet.code or ''
    if snippet.is_workflow and input_values:
        text = interpolate(text, input_values)
    return text


def qa_evaluate(snippet: Snippet, input_values: Optional[Dict[str, str]] = None) -> QaResult:
    """Evaluate *snippet* with the evaluator for its inferred modality.

    Args:
        snippet: The content record.
        input_values: Optional workflow input values. Placeholders are
            substituted before evaluation and unfilled ones become errors.

    Returns:
        A QaResult whose ``modality`` is always the routed modality.
    """
    modality = infer_modality(snippet)

    if modality is Modality.TEXT:
        result = evaluate_text_prompt(snippet)
    else:
        text = effective_text(snippet, input_values)
        if modality is Modality.IMAGE:
            result = evaluate_image_prompt(text, input_values, snippet.is_workflow)
        elif modality is Modality.VIDEO:
            subtype = infer_video_subtype(snippet)
            if subtype is VideoSubtype.IMAGE_TO_VIDEO:
                result = evaluate_i2v_prompt(text, input_values, snippet.is_workflow)
            else:
                result = evaluate_video_prompt(text, input_values, snippet.is_workflow, subtype)
        elif modality is Modality.EMAIL:
            result = evaluate_email_prompt(text, input_values, snippet)
        else:
            result = evaluate_audio_prompt(text, input_values, snippet)

    result.modality = modality.value
    logger.debug("routed %s to %s (subtype=%s): %s %d",
                 snippet.id or '<anonymous>', modality.value, result.subtype,
                 result.level, result.score)
    return result
