"""Build, validate and load prompt test packs.

A test pack is the exchange format for regression checks on a prompt::

    {"version": "0.1", "prompt_id": "...", "prompt_version": "1.0",
     "modality": "text", "description": "...",
     "test_cases": [{"id": "test_01", "description": "...", "inputs": {...},
                     "assertions": [{"kind": "contains", "value": "HOOK"}]}]}

Files may be JSON or YAML. Older packs use ``type`` instead of ``kind``.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..errors import TestPackError
from ..logger import get_logger
from ..qa.models import Modality, Snippet
from ..spec.models import ValidationResult
from ..utils.file_handler import FileHandler
from .assertions import ASSERTION_KINDS, Assertion

logger = get_logger(__name__)

PACK_VERSION = "0.1"


@dataclass
class TestCase:
    __test__ = False

    id: str
    description: str = ""
    inputs: Dict[str, Any] = field(default_factory=dict)
    assertions: List[Assertion] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "inputs": dict(self.inputs),
            "assertions": [a.to_dict() for a in self.assertions],
        }


@dataclass
class TestPack:
    __test__ = False

    version: str
    prompt_id: str
    prompt_version: str = "1.0"
    description: str = ""
    test_cases: List[TestCase] = field(default_factory=list)
    modality: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "version": self.version,
            "prompt_id": self.prompt_id,
            "prompt_version": self.prompt_version,
            "description": self.description,
            "test_cases": [tc.to_dict() for tc in self.test_cases],
        }
        if self.modality:
            d["modality"] = self.modality
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TestPack":
        """Build from an already-validated document."""
        cases = [
            TestCase(
                id=tc["id"],
                description=tc.get("description", ""),
                inputs=dict(tc.get("inputs") or {}),
                assertions=[Assertion.from_dict(a) for a in tc.get("assertions", [])],
            )
            for tc in data["test_cases"]
        ]
        return cls(
            version=data["version"],
            prompt_id=data["prompt_id"],
            prompt_version=data.get("prompt_version", "1.0"),
            description=data.get("description", ""),
            test_cases=cases,
            modality=data.get("modality"),
        )


def build_test_pack(snippet: Snippet, test_case_name: str, inputs: Dict[str, Any],
                    assertions: List[Assertion], modality: Optional[Modality] = None) -> TestPack:
    case = TestCase(
        id=test_case_name or "test_01",
        description=f"Test case for {snippet.title}",
        inputs=dict(inputs),
        assertions=list(assertions),
    )
    return TestPack(
        version=PACK_VERSION,
        prompt_id=snippet.id,
        prompt_version=snippet.normalized_version,
        description=f"Test pack for {snippet.title} - {snippet.description or 'No description'}",
        test_cases=[case],
        modality=modality.value if modality else None,
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _assertion_errors(assertion: Any, prefix: str) -> List[str]:
    if not isinstance(assertion, dict):
        return [f"{prefix}: Assertion must be an object"]

    errors = []
    kind = assertion.get("kind") or assertion.get("type")
    if not kind or not isinstance(kind, str):
        errors.append(f'{prefix}: Missing or invalid "kind" or "type" field')
    elif kind not in ASSERTION_KINDS:
        errors.append(f'{prefix}: Invalid assertion kind "{kind}" '
                      f'(must be one of: {", ".join(ASSERTION_KINDS)})')

    value = assertion.get("value")
    if value is None:
        errors.append(f'{prefix}: Missing "value" field')
    if kind == "max_words":
        if not _is_number(value):
            errors.append(f'{prefix}: "max_words" assertion requires numeric value')
    elif not (isinstance(value, str) or _is_number(value)):
        errors.append(f"{prefix}: Invalid value type (must be string or number)")
    return errors


def validate_test_pack(data: Any) -> ValidationResult:
    """Enumerate every structural problem; never raises."""
    if not isinstance(data, dict):
        return ValidationResult(ok=False, errors=["Test pack must be a valid JSON object"])

    errors = []
    if not data.get("version") or not isinstance(data.get("version"), str):
        errors.append('Missing or invalid "version" field')
    if not data.get("prompt_id") or not isinstance(data.get("prompt_id"), str):
        errors.append('Missing or invalid "prompt_id" field')

    cases = data.get("test_cases")
    if not isinstance(cases, list):
        errors.append('Missing or invalid "test_cases" field (must be an array)')
        return ValidationResult(ok=False, errors=errors)
    if not cases:
        errors.append("Test pack must contain at least one test case")

    for index, case in enumerate(cases, start=1):
        prefix = f"Test case {index}"
        if not isinstance(case, dict):
            errors.append(f"{prefix}: Test case must be an object")
            continue
        if not case.get("id") or not isinstance(case.get("id"), str):
            errors.append(f'{prefix}: Missing or invalid "id" field')
        if not isinstance(case.get("inputs"), dict):
            errors.append(f'{prefix}: Missing or invalid "inputs" field (must be an object)')
        assertions = case.get("assertions")
        if not isinstance(assertions, list):
            errors.append(f'{prefix}: Missing or invalid "assertions" field (must be an array)')
            continue
        for a_index, assertion in enumerate(assertions, start=1):
            errors.extend(_assertion_errors(assertion, f"{prefix}, assertion {a_index}"))

    return ValidationResult(ok=not errors, errors=errors)


def parse_test_pack(data: Any) -> TestPack:
    """Validate a loaded document and normalise it into a ``TestPack``.

    Raises:
        TestPackError: with every validation error attached.
    """
    result = validate_test_pack(data)
    if not result.ok:
        raise TestPackError(f"Invalid test pack: {', '.join(result.errors)}", result.errors)
    return TestPack.from_dict(data)


def load_test_pack(path: Path) -> TestPack:
    """Read a JSON or YAML test pack from disk.

    Raises:
        TestPackError: unreadable file, bad syntax, or invalid structure.
    """
    path = Path(path)
    try:
        data = FileHandler.load_document(path)
    except OSError as e:
        raise TestPackError(f"Failed to read file: {e}") from e
    except (ValueError, yaml.YAMLError) as e:
        raise TestPackError(f"Failed to parse test pack: {e}") from e

    pack = parse_test_pack(data)
    logger.debug("loaded test pack for %s with %d case(s)", pack.prompt_id, len(pack.test_cases))
    return pack
