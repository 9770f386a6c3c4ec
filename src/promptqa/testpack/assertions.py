"""Output assertions for prompt test packs."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..qa.models import Modality


class AssertionKind(Enum):
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    REGEX_MATCH = "regex_match"
    MAX_WORDS = "max_words"


ASSERTION_KINDS = [k.value for k in AssertionKind]


class AssertionTarget(Enum):
    OUTPUT = "output"
    GENERATED_PROMPT = "generated_prompt"


@dataclass
class Assertion:
    kind: str
    value: Union[str, int, float]
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {"kind": self.kind, "value": self.value}
        if self.description:
            d["description"] = self.description
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Assertion":
        """Accepts the legacy ``type`` key in place of ``kind``."""
        return cls(
            kind=data.get("kind") or data.get("type"),
            value=data.get("value"),
            description=data.get("description"),
        )


@dataclass
class AssertionResult:
    assertion: Assertion
    passed: bool
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"assertion": self.assertion.to_dict(), "passed": self.passed, "message": self.message}


@dataclass
class ChecksSummary:
    total: int = 0
    passed: int = 0
    failed: int = 0
    results: List[AssertionResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "results": [r.to_dict() for r in self.results],
        }


def word_count(text: str) -> int:
    return len((text or "").split())


def _number(value) -> str:
    return str(int(value)) if isinstance(value, float) and value.is_integer() else str(value)


def run_assertion(output_text: str, assertion: Assertion) -> AssertionResult:
    """Evaluate one assertion. Matching is case-insensitive; a bad regex fails the assertion."""
    output_text = output_text or ""
    lower = output_text.lower()
    kind, value = assertion.kind, assertion.value

    if kind == AssertionKind.CONTAINS.value:
        passed = str(value).lower() in lower
        message = (f'✓ Output contains "{value}"' if passed
                   else f'✗ Output does not contain "{value}"')
    elif kind == AssertionKind.NOT_CONTAINS.value:
        passed = str(value).lower() not in lower
        message = (f'✓ Output does not contain "{value}"' if passed
                   else f'✗ Output incorrectly contains "{value}"')
    elif kind == AssertionKind.REGEX_MATCH.value:
        try:
            passed = re.search(str(value), output_text, re.IGNORECASE) is not None
        except re.error as e:
            return AssertionResult(assertion, False, f"✗ Invalid regex pattern: {e}")
        message = (f"✓ Output matches pattern /{value}/" if passed
                   else f"✗ Output does not match pattern /{value}/")
    elif kind == AssertionKind.MAX_WORDS.value:
        count = word_count(output_text)
        try:
            limit = float(value)
        except (TypeError, ValueError):
            return AssertionResult(assertion, False, f"✗ Invalid word limit: {value}")
        passed = count <= limit
        message = (f"✓ Word count ({count}) is within limit ({_number(limit)})" if passed
                   else f"✗ Word count ({count}) exceeds limit ({_number(limit)})")
    else:
        passed = False
        message = f"✗ Unknown assertion type: {kind}"

    return AssertionResult(assertion, passed, message)


def run_assertions(target_text: str, assertions: List[Assertion]) -> ChecksSummary:
    results = [run_assertion(target_text, a) for a in assertions or []]
    passed = sum(1 for r in results if r.passed)
    return ChecksSummary(total=len(results), passed=passed, failed=len(results) - passed, results=results)


def assertion_target(modality: Modality) -> AssertionTarget:
    """Image and video tests check the generated prompt; everything else checks output."""
    if modality in (Modality.IMAGE, Modality.VIDEO):
        return AssertionTarget.GENERATED_PROMPT
    return AssertionTarget.OUTPUT
