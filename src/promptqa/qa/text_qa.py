"""QA evaluation for text prompts and workflows.

Scores the classic prompt contract (objective, inputs, constraints, output
format, quality checks, uncertainty policy) on a 0-100 rubric and checks
workflow template/schema integrity.
"""

import re
from typing import Dict, List, Tuple

from .detection import detect_sections, extract_placeholders, section
from .models import Modality, QaIssue, QaResult, Snippet, build_result, error, warning
from ..logger import get_logger

logger = get_logger(__name__)


TEXT_SECTIONS = (
    section('OBJECTIVE', r'task'),
    section('INPUTS', r'input', r'user\s+inputs?'),
    section('CONSTRAINTS'),
    section('OUTPUT FORMAT'),
    section('QC', r'quality\s+checks?', r'quality\s+assurance', r'quality\s+control'),
    section(
        'UNCERTAINTY POLICY', r'uncertainty',
        phrases=('do not guess', 'if uncertain', 'when uncertain', 'ask up to',
                 'label as unverified', 'mark as unverified'),
    ),
)

# ============================================================================
# Scoring rubric: 100 points total
# ============================================================================

RUBRIC = {
    'structure': {
        'has_objective': ('OBJECTIVE / TASK section present', 10),
        'has_inputs': ('INPUTS section present', 10),
        'has_constraints': ('CONSTRAINTS section present', 10),
        'has_output_format': ('OUTPUT FORMAT section present', 20),
    },
    'reliability': {
        'has_uncertainty_policy': ('Uncertainty policy stated', 15),
        'has_qc': ('Quality check section present', 15),
    },
    'workflow': {
        'has_template': ('Workflow has a template', 7),
        'has_schema': ('Workflow has an inputs schema', 7),
        'placeholders_aligned': ('Every placeholder is in the schema', 6),
    },
}

PROMPT_QC_PARTIAL_CREDIT = 5

JSON_ONLY = re.compile(r'return\s+only\s+valid\s+json', re.IGNORECASE)
NO_MARKDOWN = re.compile(r'no\s+(markdown|commentary|extra|additional\s+text)', re.IGNORECASE)
UNKNOWN_HANDLING = re.compile(r'(\bnull\b|\[\]|empty\s+string|"unknown"|not\s+available)', re.IGNORECASE)
VERSION_MAJOR_MINOR = re.compile(r'^\d+\.\d+$')


def scan_text(text: str) -> Tuple[List[QaIssue], Dict[str, bool]]:
    """Section presence checks plus JSON-only contract warnings."""
    checks = detect_sections(text, TEXT_SECTIONS)
    issues: List[QaIssue] = []

    if JSON_ONLY.search(text):
        if not NO_MARKDOWN.search(text):
            issues.append(warning(
                'JSON_NO_MARKDOWN_WARNING',
                'JSON-only responses should explicitly state "no markdown" or "no commentary"',
            ))
        if not UNKNOWN_HANDLING.search(text):
            issues.append(warning(
                'JSON_UNKNOWN_HANDLING',
                'JSON-only responses should specify how to handle unknown values (null, [], empty string)',
            ))

    return issues, checks


def _metadata_issues(snippet: Snippet) -> List[QaIssue]:
    issues = []
    if snippet.scope == 'official':
        for attr, code in (('title', 'MISSING_TITLE'),
                           ('description', 'MISSING_DESCRIPTION'),
                           ('category', 'MISSING_CATEGORY')):
            if not (getattr(snippet, attr) or '').strip():
                issues.append(error(code, f'{attr.capitalize()} is required for official content'))

    version = snippet.normalized_version
    if not VERSION_MAJOR_MINOR.match(version):
        issues.append(warning(
            'VERSION_FORMAT',
            f'Version should follow MAJOR.MINOR format (e.g., "1.0"), got "{version}"',
        ))

    if not snippet.audience:
        issues.append(warning('MISSING_AUDIENCE', 'Audience field (creator/developer/both) is recommended'))
    return issues


def _workflow_integrity(snippet: Snippet) -> Dict[str, bool]:
    template = snippet.template or ''
    schema_keys = snippet.schema_keys
    placeholders = extract_placeholders(template)
    return {
        'has_template': bool(template.strip()),
        'has_schema': bool(schema_keys),
        'placeholders_aligned': all(p in schema_keys for p in placeholders),
    }


def _workflow_issues(snippet: Snippet, checks: Dict[str, bool]) -> List[QaIssue]:
    issues = []
    if not (snippet.template or '').strip():
        issues.append(error('WORKFLOW_MISSING_TEMPLATE', 'Workflows must have a template'))

    schema_keys = snippet.schema_keys
    if not schema_keys:
        issues.append(error('WORKFLOW_MISSING_SCHEMA',
                            'Workflows must have inputs_schema with at least one input'))

    if snippet.template:
        placeholders = extract_placeholders(snippet.template)
        missing = [p for p in placeholders if p not in schema_keys]
        unused = [k for k in schema_keys if k not in placeholders]
        if missing:
            issues.append(error('PLACEHOLDER_SCHEMA_MISMATCH',
                                f'Placeholders not in schema: {", ".join(missing)}'))
        if unused:
            issues.append(warning('UNUSED_SCHEMA_KEYS',
                                  f'Schema keys not used in template: {", ".join(unused)}'))

    if not checks['has_qc']:
        issues.append(error('WORKFLOW_MISSING_QC',
                            'Workflows must include a QC (Quality Check) section'))
    return issues


def score_text(checks: Dict[str, bool], snippet: Snippet) -> Tuple[int, Dict[str, int]]:
    """Apply RUBRIC; returns (score, breakdown)."""
    breakdown = {}
    breakdown['structure'] = sum(
        pts for key, (_, pts) in RUBRIC['structure'].items() if checks.get(key))

    reliability = 0
    if checks.get('has_uncertainty_policy'):
        reliability += RUBRIC['reliability']['has_uncertainty_policy'][1]
    if checks.get('has_qc'):
        reliability += RUBRIC['reliability']['has_qc'][1]
    elif not snippet.is_workflow:
        reliability += PROMPT_QC_PARTIAL_CREDIT
    breakdown['reliability'] = reliability

    if snippet.is_workflow:
        integrity = _workflow_integrity(snippet)
        breakdown['workflow'] = sum(
            pts for key, (_, pts) in RUBRIC['workflow'].items() if integrity[key])

    return min(100, sum(breakdown.values())), breakdown


def evaluate_text_prompt(snippet: Snippet) -> QaResult:
    """Full text-modality evaluation of a content record."""
    content = snippet.content_text
    issues = _metadata_issues(snippet)

    scan_issues, checks = scan_text(content)
    issues.extend(scan_issues)

    if snippet.is_workflow:
        issues.extend(_workflow_issues(snippet, checks))

    if not content.strip():
        issues.append(error('MISSING_CONTENT', 'Content (code or template) is required'))

    if not checks['has_output_format']:
        issues.append(warning('MISSING_OUTPUT_FORMAT',
                              'OUTPUT FORMAT section is recommended for clear results'))

    score, breakdown = score_text(checks, snippet)
    logger.debug("text QA %s: score=%d issues=%d", snippet.id or '<anonymous>', score, len(issues))
    return build_result(score, issues, checks, Modality.TEXT, breakdown=breakdown)
