"""Score a prompt asset: base text-QA score minus compliance penalties."""

from typing import List

from ..config import Config
from ..qa.compliance import evaluate_compliance
from ..qa.models import QaIssue, QaResult, Snippet, clamp_score
from ..qa.text_qa import evaluate_text_prompt
from ..spec.models import PromptAsset
from .models import PromptScore, SubmissionStatus


def asset_to_snippet(asset: PromptAsset) -> Snippet:
    """View an asset as a public workflow snippet so the QA rules apply to it."""
    return Snippet(
        id=asset.id,
        title=asset.name,
        description=asset.description,
        tags=list(asset.tags),
        language="prompt",
        code=asset.user_prompt_template,
        template=asset.user_prompt_template,
        provider=None,
        scope="public",
        type="workflow",
        version=asset.version,
        category="Uncategorized",
        inputs_schema=dict(asset.input_properties),
        created_at=asset.created_at,
        updated_at=asset.updated_at,
    )


def compliance_penalty(issues: List[QaIssue]) -> int:
    return sum(
        Config.COMPLIANCE_ERROR_PENALTY if i.is_error else Config.COMPLIANCE_WARNING_PENALTY
        for i in issues
    )


def _counts(label: str, issues: List[QaIssue]) -> List[str]:
    lines = []
    errors = sum(1 for i in issues if i.is_error)
    warnings = len(issues) - errors
    if errors:
        lines.append(f"{label} errors found: {errors}")
    if warnings:
        lines.append(f"{label} warnings found: {warnings}")
    return lines


def combine_score(qa: QaResult, compliance: List[QaIssue]) -> PromptScore:
    penalty = compliance_penalty(compliance)
    final = clamp_score(qa.score - penalty)

    reasons = [f"Base QA score: {qa.score}/100"]
    if penalty:
        reasons.append(f"Compliance penalty: -{penalty} points")
    reasons += _counts("QA", qa.issues)
    reasons += _counts("Compliance", compliance)
    reasons.append(f"Final score: {final}/100")

    return PromptScore(score=final, qa_score=qa.score, compliance_penalty=penalty, reasons=reasons)


def score_prompt(asset: PromptAsset) -> PromptScore:
    snippet = asset_to_snippet(asset)
    return combine_score(evaluate_text_prompt(snippet), evaluate_compliance(snippet))


def classify(score: int) -> SubmissionStatus:
    if score >= Config.VERIFIED_THRESHOLD:
        return SubmissionStatus.VERIFIED
    if score >= Config.SUBMITTED_THRESHOLD:
        return SubmissionStatus.SUBMITTED
    return SubmissionStatus.REJECTED
