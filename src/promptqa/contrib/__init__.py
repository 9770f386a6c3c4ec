"""Contributor submissions: scoring, classification and storage."""

from .models import PromptScore, PromptSubmission, QaReport, SubmissionResponse, SubmissionStatus
from .scoring import score_prompt, classify
from .store import SubmissionStore, InMemorySubmissionStore, JsonSubmissionStore
from .submission import SubmissionScorer, submit_prompt, synthetic_inputs

__all__ = [
    "PromptScore", "PromptSubmission", "QaReport", "SubmissionResponse", "SubmissionStatus",
    "score_prompt", "classify",
    "SubmissionStore", "InMemorySubmissionStore", "JsonSubmissionStore",
    "SubmissionScorer", "submit_prompt", "synthetic_inputs",
]
