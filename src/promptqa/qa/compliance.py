"""Content-record compliance rules used when scoring submissions."""

import re
from typing import List

from .models import QaIssue, Snippet, error, warning

REQUIRED_WORKFLOW_BLOCKS = ['ROLE', 'OBJECTIVE', 'OUTPUT FORMAT', 'QC']

VERSION_PATTERN = re.compile(r'^\d+\.\d+$')


def has_block(template: str, name: str) -> bool:
    """``## NAME``, ``# NAME`` at a line start, or ``**NAME**`` anywhere."""
    escaped = re.escape(name)
    patterns = (
        re.compile(r'^##\s*' + escaped, re.IGNORECASE | re.MULTILINE),
        re.compile(r'^#\s*' + escaped, re.IGNORECASE | re.MULTILINE),
        re.compile(r'\*\*' + escaped + r'\*\*', re.IGNORECASE),
    )
    return any(p.search(template) for p in patterns)


def evaluate_compliance(snippet: Snippet) -> List[QaIssue]:
    """Return every compliance issue for *snippet*; an empty list means compliant."""
    issues = []

    if not (snippet.title or '').strip():
        issues.append(error('MISSING_TITLE', 'Title is required'))
    if not (snippet.description or '').strip():
        issues.append(error('MISSING_DESCRIPTION', 'Description is required'))
    if not (snippet.category or '').strip():
        issues.append(error('MISSING_CATEGORY', 'Category is required'))

    if not snippet.version or not VERSION_PATTERN.match(snippet.version):
        issues.append(warning('INVALID_VERSION', 'Version should follow MAJOR.MINOR format (e.g., 1.0)'))
    if not snippet.audience:
        issues.append(warning('MISSING_AUDIENCE',
                              'Audience should be specified (creator, developer, or both)'))

    if snippet.is_workflow:
        template = snippet.template or ''
        if not template.strip():
            issues.append(error('WORKFLOW_MISSING_TEMPLATE', 'Workflows require a template'))
        else:
            for block in REQUIRED_WORKFLOW_BLOCKS:
                if not has_block(template, block):
                    issues.append(error('WORKFLOW_MISSING_' + block.replace(' ', '_'),
                                        f'Workflows require a {block} block'))
        if not snippet.schema_keys:
            issues.append(error('WORKFLOW_MISSING_INPUTS_SCHEMA',
                                'Workflows require inputs_schema with at least one input'))
    else:
        content = snippet.template or snippet.code or ''
        if not content.strip():
            issues.append(error('PROMPT_MISSING_CONTENT', 'Prompts require code or template content'))
        elif not has_block(content, 'OUTPUT FORMAT'):
            issues.append(warning('PROMPT_MISSING_OUTPUT_FORMAT',
                                  'OUTPUT FORMAT block is recommended for prompts'))

    return issues


def is_official_ready(issues: List[QaIssue]) -> bool:
    return not any(i.is_error for i in issues)


def compliance_status(issues: List[QaIssue]) -> str:
    """'error', 'warning' or 'pass'."""
    if any(i.is_error for i in issues):
        return 'error'
    if issues:
        return 'warning'
    return 'pass'
