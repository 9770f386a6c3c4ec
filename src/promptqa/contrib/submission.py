"""Submit a prompt asset: validate, dry-run QA, score, classify, store."""

import random
import string
import time
from typing import Any, Callable, Dict, List, Optional

from ..logger import get_logger
from ..qa.compliance import evaluate_compliance
from ..qa.text_qa import evaluate_text_prompt
from ..spec.asset import validate_prompt_asset
from ..spec.models import PromptAsset
from ..spec.renderer import now_iso
from .models import (
    PromptScore, PromptSubmission, QaReport, SubmissionResponse, SubmissionStatus,
)
from .scoring import asset_to_snippet, classify, combine_score
from .store import InMemorySubmissionStore, SubmissionStore

logger = get_logger(__name__)

VALIDATION_NEXT_STEPS = [
    "Fix validation errors",
    "Ensure template variables exist in inputSchema",
    "Verify block keys use UPPERCASE_UNDERSCORE",
    "Check version follows semver (MAJOR.MINOR.PATCH)",
]

STRING_FORMAT_SAMPLES = {
    "email": "test@example.com",
    "url": "https://example.com",
    "date": "2025-01-01",
}


def new_submission_id() -> str:
    """``sub_<epoch ms>_<9 random base-36 chars>``."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"sub_{int(time.time() * 1000)}_{suffix}"


def synthetic_value(prop: Any) -> Any:
    """A plausible test value for one JSON Schema property."""
    if not isinstance(prop, dict):
        return "test_value"
    if isinstance(prop.get("enum"), list) and prop["enum"]:
        return prop["enum"][0]

    kind = prop.get("type")
    if kind == "string":
        return STRING_FORMAT_SAMPLES.get(prop.get("format"), "test_value")
    if kind in ("number", "integer"):
        return prop["minimum"] if prop.get("minimum") is not None else 42
    if kind == "boolean":
        return True
    if kind == "array":
        return [synthetic_value(prop["items"]) if prop.get("items") else "test_item"]
    if kind == "object":
        return synthetic_inputs(prop.get("properties") or {})
    return "test_value"


def synthetic_inputs(properties: Dict[str, Any]) -> Dict[str, Any]:
    return {key: synthetic_value(prop) for key, prop in properties.items()}


def next_steps(status: SubmissionStatus, report: QaReport, score: PromptScore) -> List[str]:
    """Guidance for the contributor; rejections list the blocking issues."""
    if status is SubmissionStatus.VERIFIED:
        return [
            "✓ Submission auto-approved!",
            "Your prompt meets all quality standards",
            "Ready for publication to the library",
        ]

    if status is SubmissionStatus.SUBMITTED:
        steps = [
            "Submission pending review",
            f"Score: {score.score}/100 (good, minor improvements needed)",
        ]
        if report.issues:
            steps.append("Review QA warnings for higher score")
        if report.compliance_issues:
            steps.append("Address compliance warnings for higher score")
        steps.append("Your submission will be reviewed by the team")
        return steps

    steps = [
        "Submission requires significant improvements",
        f"Score: {score.score}/100 (below threshold of 70)",
    ]
    blocking = report.blocking_issues
    if blocking:
        steps.append("Fix critical errors:")
        steps.extend(f"  - {issue.message}" for issue in blocking)
    steps.append("Revise and resubmit after addressing issues")
    return steps


class SubmissionScorer:
    """Scores and records submissions.

    Args:
        store: Where submissions go; defaults to a fresh in-memory store.
        clock: Returns the ISO timestamp for ``created_at``.
        id_factory: Returns a fresh submission id.
    """

    def __init__(self, store: Optional[SubmissionStore] = None,
                 clock: Callable[[], str] = now_iso,
                 id_factory: Callable[[], str] = new_submission_id):
        self.store = store if store is not None else InMemorySubmissionStore()
        self.clock = clock
        self.id_factory = id_factory

    def submit(self, asset_data: Dict[str, Any], submitter_id: str) -> SubmissionResponse:
        """Validate and score a raw asset document, then store the submission.

        Invalid assets are not stored; the response carries the errors.
        """
        validation = validate_prompt_asset(asset_data)
        if not validation.ok:
            logger.info("submission by %s rejected at validation: %d error(s)",
                        submitter_id, len(validation.errors))
            return SubmissionResponse(
                success=False,
                error=f"Validation failed: {', '.join(validation.errors)}",
                next_steps=list(VALIDATION_NEXT_STEPS),
            )

        asset = PromptAsset.from_dict(asset_data)
        snippet = asset_to_snippet(asset)
        qa = evaluate_text_prompt(snippet)
        compliance = evaluate_compliance(snippet)

        report = QaReport(
            level=qa.level,
            score=qa.score,
            issues=list(qa.issues),
            compliance_issues=compliance,
            synthetic_inputs=synthetic_inputs(asset.input_properties),
            validation=validation,
        )
        score = combine_score(qa, compliance)
        status = classify(score.score)

        submission = PromptSubmission(
            id=self.id_factory(),
            asset=asset,
            submitter_id=submitter_id,
            status=status,
            score=score,
            qa_report=report,
            created_at=self.clock(),
        )
        self.store.insert(submission)
        logger.info("submission %s by %s: %s (score %d)",
                    submission.id, submitter_id, status.value, score.score)

        return SubmissionResponse(
            success=True,
            submission=submission,
            next_steps=next_steps(status, report, score),
        )

    def get(self, submission_id: str) -> Optional[PromptSubmission]:
        return self.store.get(submission_id)

    def all(self) -> List[PromptSubmission]:
        return self.store.list()


def submit_prompt(asset_data: Dict[str, Any], submitter_id: str,
                  store: Optional[SubmissionStore] = None) -> SubmissionResponse:
    return SubmissionScorer(store=store).submit(asset_data, submitter_id)
