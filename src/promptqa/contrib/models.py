"""Submission records for community-contributed prompt assets."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..qa.models import QaIssue
from ..spec.models import PromptAsset, ValidationResult


class SubmissionStatus(Enum):
    VERIFIED = "verified"      # auto-approved
    SUBMITTED = "submitted"    # pending review
    REJECTED = "rejected"


@dataclass
class PromptScore:
    """Final score and how it was reached."""
    score: int
    qa_score: int
    compliance_penalty: int
    reasons: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "qa_score": self.qa_score,
            "compliance_penalty": self.compliance_penalty,
            "reasons": list(self.reasons),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PromptScore":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass
class QaReport:
    """Dry-run evaluation kept with the submission."""
    level: str
    score: int
    issues: List[QaIssue] = field(default_factory=list)
    compliance_issues: List[QaIssue] = field(default_factory=list)
    synthetic_inputs: Dict[str, Any] = field(default_factory=dict)
    validation: ValidationResult = field(default_factory=lambda: ValidationResult(ok=True))

    @property
    def blocking_issues(self) -> List[QaIssue]:
        return [i for i in self.issues + self.compliance_issues if i.is_error]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "score": self.score,
            "issues": [i.to_dict() for i in self.issues],
            "compliance_issues": [i.to_dict() for i in self.compliance_issues],
            "synthetic_inputs": dict(self.synthetic_inputs),
            "validation": self.validation.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QaReport":
        return cls(
            level=data.get("level", "draft"),
            score=data.get("score", 0),
            issues=[QaIssue(**i) for i in data.get("issues", [])],
            compliance_issues=[QaIssue(**i) for i in data.get("compliance_issues", [])],
            synthetic_inputs=data.get("synthetic_inputs", {}),
            validation=ValidationResult(**data.get("validation", {"ok": True})),
        )


@dataclass(frozen=True)
class PromptSubmission:
    """Created once by the scorer; never updated."""
    id: str
    asset: PromptAsset
    submitter_id: str
    status: SubmissionStatus
    score: PromptScore
    qa_report: QaReport
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "asset": self.asset.to_dict(),
            "submitter_id": self.submitter_id,
            "status": self.status.value,
            "score": self.score.to_dict(),
            "qa_report": self.qa_report.to_dict(),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PromptSubmission":
        return cls(
            id=data["id"],
            asset=PromptAsset.from_dict(data["asset"]),
            submitter_id=data.get("submitter_id", ""),
            status=SubmissionStatus(data.get("status", "rejected")),
            score=PromptScore.from_dict(data.get("score", {})),
            qa_report=QaReport.from_dict(data.get("qa_report", {})),
            created_at=data.get("created_at", ""),
        )


@dataclass
class SubmissionResponse:
    """What the contributor sees."""
    success: bool
    next_steps: List[str] = field(default_factory=list)
    submission: Optional[PromptSubmission] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {"success": self.success, "next_steps": list(self.next_steps)}
        if self.submission is not None:
            d["submission"] = self.submission.to_dict()
        if self.error is not None:
            d["error"] = self.error
        return d
