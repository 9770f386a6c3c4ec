"""QA evaluation for email prompts.

The email type (inferred from record metadata) selects a group, and the group
decides which conditional blocks are required on top of the six universal
ones. Unlike the other modalities, every issue found also costs points.
"""

from typing import Dict, List, Optional, Tuple

from .detection import (
    detect_sections, extract_section, find_keywords, missing_sections, section,
    unfilled_placeholder_issues,
)
from .models import (
    Modality, QaIssue, QaResult, Snippet, build_result, empty_prompt_result,
    error, warning,
)
from .modality import EMAIL_TYPE_GROUPS, email_type_group, infer_email_type
from ..logger import get_logger

logger = get_logger(__name__)

GOAL = section('GOAL', r'purpose')
AUDIENCE = section('AUDIENCE', r'recipient', r"who\s+it'?s\s+for")
TONE = section('TONE', r'voice')
CONTENT = section('CONTENT', r'message', r'body')
CTA = section('CTA', r'call\s+to\s+action', r'next\s+step')
OUTPUT_FORMAT = section('OUTPUT FORMAT', r'format', r'deliverable')

UNIVERSAL_SECTIONS = (GOAL, AUDIENCE, TONE, CONTENT, CTA, OUTPUT_FORMAT)

OFFER = section('OFFER', r'deal', r'promotion')
URGENCY = section('URGENCY', r'timing', r'deadline', r'dates', r'limited\s+time',
                  phrases=('limited time',))
TRANSACTION_CONTEXT = section('TRANSACTION CONTEXT', r'order\s+details', r'cart\s+details',
                              r'purchase\s+context')
NEXT_STEPS = section('NEXT STEPS', r'what\s+happens\s+next', r'action\s+steps')
SEQUENCE_CONTEXT = section('SEQUENCE CONTEXT', r'email\s+#\s*\d*', r'step', r'series\s+context')
VALUE_PROMISE = section('VALUE PROMISE', r"what\s+you'?ll\s+get", r'why\s+read')

CONDITIONAL_SECTIONS = (OFFER, URGENCY, TRANSACTION_CONTEXT, NEXT_STEPS,
                        SEQUENCE_CONTEXT, VALUE_PROMISE)

MISSING_HINTS = {
    'GOAL': 'Define what this email aims to achieve',
    'AUDIENCE': 'Define the target recipient',
    'TONE': 'Define the communication style',
    'CONTENT': 'Define the main message structure',
    'OUTPUT FORMAT': 'Define the expected email structure',
}

# group -> (required sections, issue level)
GROUP_REQUIREMENTS = {
    'promotional': ((OFFER, URGENCY), 'error'),
    'transactional': ((TRANSACTION_CONTEXT, NEXT_STEPS), 'error'),
    'sequence': ((SEQUENCE_CONTEXT,), 'error'),
    'content': ((VALUE_PROMISE,), 'warning'),
}

ALIAS_HINTS = {
    'OFFER': 'DEAL, PROMOTION',
    'URGENCY': 'TIMING, DEADLINE, DATES, LIMITED TIME',
    'TRANSACTION CONTEXT': 'ORDER DETAILS, CART DETAILS, PURCHASE CONTEXT',
    'NEXT STEPS': 'WHAT HAPPENS NEXT, ACTION STEPS',
    'SEQUENCE CONTEXT': 'EMAIL #, STEP, SERIES CONTEXT',
    'VALUE PROMISE': "WHAT YOU'LL GET, WHY READ",
}

CTA_KEYWORDS = [
    'buy', 'shop', 'order', 'subscribe', 'read more', 'learn more',
    'book', 'register', 'download', 'get started', 'sign up', 'claim',
]

PROMO_KEYWORDS = [
    'sale', 'discount', 'limited time', '% off', 'deal', 'offer',
    'save', 'clearance', 'exclusive', 'special price',
]

GOAL_INTENT_KEYWORDS = ['inform', 'request', 'offer', 'announce', 'remind', 'invite', 'confirm']

# ----------------------------------------------------------------------------
# Rubric: structure 40, goal/CTA 25, tone 15, audience 10, compliance 10
# ----------------------------------------------------------------------------

UNIVERSAL_POINTS = 4
CONDITIONAL_POINTS = {
    'promotional': {'has_offer': 8, 'has_urgency': 8},
    'transactional': {'has_transaction_context': 8, 'has_next_steps': 8},
    'sequence': {'has_sequence_context': 16},
    'content': {'has_value_promise': 10},
}
CONTENT_GROUP_BASE = 6
NO_CONDITIONAL_CREDIT = 16

ERROR_PENALTY, ERROR_PENALTY_CAP = 10, 30
WARNING_PENALTY, WARNING_PENALTY_CAP = 5, 15


def detect_email_blocks(text: str) -> Dict[str, bool]:
    """Universal and conditional block presence."""
    return detect_sections(text or '', UNIVERSAL_SECTIONS + CONDITIONAL_SECTIONS)


def required_blocks(email_type: str) -> Tuple[List[str], str]:
    """Conditional block names required for *email_type*, and their issue level."""
    sections, level = GROUP_REQUIREMENTS.get(email_type_group(email_type), ((), 'error'))
    return [s.name for s in sections], level


def cta_consistency_check(text: str, checks: Dict[str, bool]) -> List[QaIssue]:
    if not checks['has_cta']:
        return [error('MISSING_CTA', 'Missing CTA block: Define a clear call-to-action for the recipient')]

    block = extract_section(text, CTA)
    if block and 'no cta' in ' '.join(block.lower().split()):
        return []

    found = find_keywords(text, CTA_KEYWORDS)
    if len(found) >= 3:
        shown = '", "'.join(found[:3])
        return [warning('MULTIPLE_CONFLICTING_CTAS',
                        f'Multiple conflicting CTAs detected: "{shown}" - '
                        'Consider focusing on a single primary action')]
    return []


def tone_conflict_check(text: str) -> List[QaIssue]:
    lower = text.lower()
    issues = []
    if 'urgent' in lower and 'relaxed' in lower:
        issues.append(warning('TONE_CONFLICT',
                              'Tone conflict detected: "urgent" and "relaxed" are contradictory'))
    if 'formal' in lower and ('casual' in lower or 'slang' in lower):
        issues.append(warning('TONE_CONFLICT',
                              'Tone conflict detected: "formal" and "casual/slang" are contradictory'))
    return issues


def audience_alignment_check(text: str) -> List[QaIssue]:
    lower = text.lower()
    issues = []
    if 'new subscriber' in lower and 'purchase' in lower:
        issues.append(warning(
            'AUDIENCE_MISMATCH',
            'Audience mismatch: "new subscriber" and "purchase" signals may be contradictory'))
    if 'inactive' in lower and 'welcome' in lower:
        issues.append(warning(
            'AUDIENCE_MISMATCH',
            'Audience mismatch: "inactive" and "welcome" signals may be contradictory'))
    return issues


def compliance_scaffold_check(text: str) -> List[QaIssue]:
    lower = text.lower()
    if 'unsubscribe' in lower or 'preferences' in lower:
        return []
    return [warning('MISSING_COMPLIANCE_MENTION',
                    'Missing compliance mention: Consider including "unsubscribe" or "preferences" language')]


def promo_in_transactional_check(text: str, email_type: str) -> List[QaIssue]:
    if email_type not in EMAIL_TYPE_GROUPS['transactional']:
        return []
    found = find_keywords(text, PROMO_KEYWORDS)
    if not found:
        return []
    shown = '", "'.join(found[:3])
    return [warning('PROMO_IN_TRANSACTIONAL',
                    f'Promotional language detected in {email_type} email: "{shown}" - '
                    'May reduce trust/deliverability')]


def validate_conditional_blocks(email_type: str, checks: Dict[str, bool]) -> List[QaIssue]:
    group = email_type_group(email_type)
    if group not in GROUP_REQUIREMENTS:
        return []
    sections, level = GROUP_REQUIREMENTS[group]
    issues = []
    for sec in missing_sections(checks, sections):
        code = 'MISSING_' + sec.name.replace(' ', '_')
        if group == 'content':
            message = (f'{email_type} emails should include {sec.name} block '
                       f'(or aliases: {ALIAS_HINTS[sec.name]})')
        else:
            message = (f'{email_type} emails require {sec.name} block '
                       f'(or aliases: {ALIAS_HINTS[sec.name]})')
        issues.append(QaIssue(level=level, code=code, message=message))
    return issues


def score_email_prompt(text: str, email_type: str, checks: Dict[str, bool],
                       issues: List[QaIssue]) -> Tuple[int, Dict[str, int]]:
    breakdown = {}
    group = email_type_group(email_type)

    structural = UNIVERSAL_POINTS * sum(1 for s in UNIVERSAL_SECTIONS if checks.get(s.check_name))
    if group in CONDITIONAL_POINTS:
        structural += sum(p for k, p in CONDITIONAL_POINTS[group].items() if checks.get(k))
        if group == 'content':
            structural += CONTENT_GROUP_BASE
    else:
        structural += NO_CONDITIONAL_CREDIT
    breakdown['structural'] = structural

    goal_cta = 0
    if checks['has_goal']:
        goal_cta += 12 if find_keywords(text, GOAL_INTENT_KEYWORDS) else 6
    ctas = find_keywords(text, CTA_KEYWORDS)
    if checks['has_cta'] and ctas:
        goal_cta += 13
        if len(ctas) >= 3:
            goal_cta -= 5
    breakdown['goal_cta'] = goal_cta

    tone = 8 if checks['has_tone'] else 0
    tone += -7 if tone_conflict_check(text) else 7
    breakdown['tone'] = max(0, tone)

    audience = 5 if checks['has_audience'] else 0
    audience += -5 if audience_alignment_check(text) else 5
    breakdown['audience'] = max(0, audience)

    breakdown['compliance'] = 0 if compliance_scaffold_check(text) else 10

    errors = sum(1 for i in issues if i.is_error)
    warnings = len(issues) - errors
    breakdown['error_penalty'] = -min(ERROR_PENALTY_CAP, errors * ERROR_PENALTY)
    breakdown['warning_penalty'] = -min(WARNING_PENALTY_CAP, warnings * WARNING_PENALTY)

    return sum(breakdown.values()), breakdown


def evaluate_email_prompt(text: str, inputs: Optional[Dict[str, str]] = None,
                          snippet: Optional[Snippet] = None) -> QaResult:
    """Evaluate an email prompt. *snippet* supplies the metadata for the email type."""
    if not text or not text.strip():
        return empty_prompt_result(
            {s.check_name: False for s in UNIVERSAL_SECTIONS}, Modality.EMAIL,
            email_type='generic')

    email_type = infer_email_type(snippet) if snippet is not None else 'generic'
    checks = detect_email_blocks(text)

    issues = [
        warning('MISSING_' + sec.name.replace(' ', '_'),
                f'Missing {sec.name} block: {MISSING_HINTS[sec.name]}')
        for sec in missing_sections(checks, UNIVERSAL_SECTIONS)
        if sec is not CTA
    ]
    issues.extend(validate_conditional_blocks(email_type, checks))
    issues.extend(cta_consistency_check(text, checks))
    issues.extend(tone_conflict_check(text))
    issues.extend(audience_alignment_check(text))
    issues.extend(compliance_scaffold_check(text))
    issues.extend(promo_in_transactional_check(text, email_type))
    if snippet is not None and snippet.is_workflow:
        issues.extend(unfilled_placeholder_issues(text, inputs))

    score, breakdown = score_email_prompt(text, email_type, checks, issues)
    logger.debug("email QA type=%s score=%d issues=%d", email_type, score, len(issues))
    return build_result(score, issues, checks, Modality.EMAIL,
                        breakdown=breakdown, email_type=email_type)
