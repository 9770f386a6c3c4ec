"""Data models shared by the modality evaluators, router and patch generator."""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional

from ..config import Config


class Modality(Enum):
    """Output medium a prompt targets."""
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    EMAIL = "email"
    AUDIO = "audio"
    MANUAL = "manual"

    @property
    def label(self) -> str:
        return MODALITY_LABELS[self]


MODALITY_LABELS = {
    Modality.TEXT: "Text",
    Modality.IMAGE: "Image",
    Modality.VIDEO: "Video",
    Modality.EMAIL: "Email",
    Modality.AUDIO: "Audio",
    Modality.MANUAL: "Manual",
}


class VideoSubtype(Enum):
    TEXT_TO_VIDEO = "text_to_video"
    IMAGE_TO_VIDEO = "image_to_video"
    GENERIC = "generic"

    @property
    def label(self) -> str:
        return {
            VideoSubtype.TEXT_TO_VIDEO: "Text-to-Video",
            VideoSubtype.IMAGE_TO_VIDEO: "Image-to-Video",
            VideoSubtype.GENERIC: "Video",
        }[self]


class AudioSubtype(Enum):
    VOICE = "voice"
    MUSIC = "music"
    GENERIC = "generic"


class QaLevel(Enum):
    DRAFT = "draft"
    VERIFIED = "verified"


@dataclass
class QaIssue:
    """A single finding. Errors block the verified level; warnings are advisory."""
    level: str  # "error" or "warning"
    code: str
    message: str

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def error(code: str, message: str) -> QaIssue:
    return QaIssue(level="error", code=code, message=message)


def warning(code: str, message: str) -> QaIssue:
    return QaIssue(level="warning", code=code, message=message)


@dataclass
class QaResult:
    """Unified evaluation result for every modality.

    ``checks`` holds the modality-specific presence checks; ``breakdown`` holds
    the rubric points earned per part, with penalties recorded as negatives.
    """
    level: str
    score: int
    issues: List[QaIssue] = field(default_factory=list)
    checks: Dict[str, bool] = field(default_factory=dict)
    modality: str = Modality.TEXT.value
    subtype: Optional[str] = None
    email_type: Optional[str] = None
    breakdown: Dict[str, int] = field(default_factory=dict)

    @property
    def verified(self) -> bool:
        return self.level == QaLevel.VERIFIED.value

    @property
    def errors(self) -> List[QaIssue]:
        return [i for i in self.issues if i.is_error]

    @property
    def warnings(self) -> List[QaIssue]:
        return [i for i in self.issues if not i.is_error]

    def to_dict(self) -> Dict[str, Any]:
        d = {
            'level': self.level,
            'score': self.score,
            'issues': [i.to_dict() for i in self.issues],
            'checks': dict(self.checks),
            'modality': self.modality,
            'breakdown': dict(self.breakdown),
        }
        if self.subtype is not None:
            d['subtype'] = self.subtype
        if self.email_type is not None:
            d['email_type'] = self.email_type
        return d


def clamp_score(value: float) -> int:
    """Round and clamp a raw rubric total to [0, 100]."""
    return int(max(0, min(100, round(value))))


def decide_level(score: int, issues: List[QaIssue]) -> str:
    """verified iff score >= threshold and no error-level issue."""
    if score >= Config.VERIFIED_THRESHOLD and not any(i.is_error for i in issues):
        return QaLevel.VERIFIED.value
    return QaLevel.DRAFT.value


def build_result(
    score: float,
    issues: List[QaIssue],
    checks: Dict[str, bool],
    modality: Modality,
    breakdown: Optional[Dict[str, int]] = None,
    subtype: Optional[str] = None,
    email_type: Optional[str] = None,
) -> QaResult:
    """Clamp the score, apply the level rule, and wrap everything in a QaResult."""
    final = clamp_score(score)
    return QaResult(
        level=decide_level(final, issues),
        score=final,
        issues=list(issues),
        checks=dict(checks),
        modality=modality.value,
        subtype=subtype,
        email_type=email_type,
        breakdown=dict(breakdown or {}),
    )


def empty_prompt_result(checks: Dict[str, bool], modality: Modality,
                        subtype: Optional[str] = None,
                        email_type: Optional[str] = None) -> QaResult:
    """Result for blank text: score 0, draft, one EMPTY_PROMPT warning."""
    return build_result(
        0,
        [warning('EMPTY_PROMPT', 'Prompt text is empty')],
        {name: False for name in checks},
        modality,
        subtype=subtype,
        email_type=email_type,
    )


@dataclass
class Snippet:
    """Read-only content record as supplied by the content store."""
    id: str = ""
    title: str = ""
    description: str = ""
    tags: List[str] = field(default_factory=list)
    category: Optional[str] = None
    type: str = "prompt"  # "prompt" or "workflow"
    template: Optional[str] = None
    code: str = ""
    inputs_schema: Optional[Dict[str, Any]] = None
    version: Optional[str] = None
    audience: Optional[str] = None
    scope: str = "public"  # "official", "private" or "public"
    provider: Optional[str] = None
    language: str = "prompt"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    outputs_schema: Optional[Dict[str, Any]] = None
    is_agent_ready: bool = False

    @property
    def is_workflow(self) -> bool:
        return self.type == "workflow"

    @property
    def content_text(self) -> str:
        """Template first for workflows, code first for prompts."""
        if self.is_workflow:
            return self.template or self.code or ""
        return self.code or self.template or ""

    @property
    def normalized_version(self) -> str:
        return self.version or "1.0"

    @property
    def schema_keys(self) -> List[str]:
        if not isinstance(self.inputs_schema, dict):
            return []
        return list(self.inputs_schema.keys())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Snippet':
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if known.get('tags') is None:
            known['tags'] = []
        if known.get('code') is None:
            known['code'] = ""
        return cls(**known)


@dataclass
class PatchChange:
    """One appended section."""
    code: str
    title: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass
class PatchResult:
    """Outcome of patching a prompt. ``patched`` always starts with ``original``."""
    original: str
    patched: str
    changes: List[PatchChange] = field(default_factory=list)
    issues_addressed: List[str] = field(default_factory=list)
    qa_score_before: Optional[int] = None
    qa_score_after: Optional[int] = None

    @property
    def changed(self) -> bool:
        return bool(self.changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'original': self.original,
            'patched': self.patched,
            'changes': [c.to_dict() for c in self.changes],
            'issues_addressed': list(self.issues_addressed),
            'qa_score_before': self.qa_score_before,
            'qa_score_after': self.qa_score_after,
        }


@dataclass
class StoredPatch:
    """Shape of a patch override persisted by the surrounding application."""
    snippet_id: str
    original: str
    patched: str
    enabled: bool = True
    created_at: str = ""
    changes: List[PatchChange] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'snippet_id': self.snippet_id,
            'original': self.original,
            'patched': self.patched,
            'enabled': self.enabled,
            'created_at': self.created_at,
            'changes': [c.to_dict() for c in self.changes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StoredPatch':
        changes = [PatchChange(**c) for c in data.get('changes', [])]
        known = {k: v for k, v in data.items()
                 if k in cls.__dataclass_fields__ and k != 'changes'}
        return cls(changes=changes, **known)

    @classmethod
    def from_patch(cls, snippet_id: str, patch: PatchResult, created_at: str) -> 'StoredPatch':
        return cls(
            snippet_id=snippet_id,
            original=patch.original,
            patched=patch.patched,
            created_at=created_at,
            changes=list(patch.changes),
        )
