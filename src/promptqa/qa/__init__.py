"""Prompt QA: modality evaluators, routing, compliance and patches."""

from .models import (
    Modality, VideoSubtype, AudioSubtype, QaLevel, QaIssue, QaResult, Snippet,
    PatchChange, PatchResult, StoredPatch,
)
from .router import qa_evaluate
from .modality import infer_modality, infer_video_subtype, infer_email_type, infer_audio_subtype
from .compliance import evaluate_compliance, is_official_ready, compliance_status
from .patches import generate_patch, patch_snippet

__all__ = [
    "Modality", "VideoSubtype", "AudioSubtype", "QaLevel",
    "QaIssue", "QaResult", "Snippet",
    "PatchChange", "PatchResult", "StoredPatch",
    "qa_evaluate",
    "infer_modality", "infer_video_subtype", "infer_email_type", "infer_audio_subtype",
    "evaluate_compliance", "is_official_ready", "compliance_status",
    "generate_patch", "patch_snippet",
]
