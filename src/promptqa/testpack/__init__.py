"""Prompt test packs: assertions, heuristic defaults and file loading."""

from .assertions import (
    Assertion, AssertionKind, AssertionResult, AssertionTarget, ChecksSummary,
    run_assertion, run_assertions, assertion_target, word_count,
)
from .defaults import generate_default_assertions
from .loader import TestCase, TestPack, build_test_pack, validate_test_pack, parse_test_pack, load_test_pack

__all__ = [
    "Assertion", "AssertionKind", "AssertionResult", "AssertionTarget", "ChecksSummary",
    "run_assertion", "run_assertions", "assertion_target", "word_count",
    "generate_default_assertions",
    "TestCase", "TestPack", "build_test_pack", "validate_test_pack", "parse_test_pack", "load_test_pack",
]
