"""Exception types for PromptQA.

Expected problems with prompt content are reported as data (issues, check
results, validation results). These exceptions cover the cases that cannot be:
unreadable files and schemas that do not compile.
"""

from typing import List, Optional


class PromptQaError(Exception):
    """Base class for PromptQA errors."""


class SchemaCompilationError(PromptQaError):
    """A JSON Schema supplied by the caller is itself invalid."""


class TestPackError(PromptQaError):
    """A test pack file could not be read or failed validation."""

    __test__ = False  # keep pytest from collecting this as a test class

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []

