"""QA evaluation for image-generation prompts.

Six structural blocks, parameter explicitness (camera, lighting, color),
style locking, and constraint clarity make up the 100-point rubric.
Contradictory style/framing instructions are errors and cost 10 points each.
"""

import re
from typing import Dict, List, Optional, Tuple

from .detection import (
    capped_penalty, contradiction, detect_sections, find_keywords,
    missing_sections, scan_contradictions, section, unfilled_placeholder_issues,
)
from .models import (
    Modality, QaIssue, QaResult, build_result, empty_prompt_result, error, warning,
)
from ..config import Config

IMAGE_SECTIONS = (
    section('SUBJECT'),
    section('STYLE'),
    section('COMPOSITION'),
    section('DETAILS'),
    section('CONSTRAINTS', r'what\s+to\s+avoid', phrases=('what to avoid',)),
    section('OUTPUT SETTINGS', r'settings', r'parameters'),
)

MISSING_HINTS = {
    'SUBJECT': 'Define what to generate',
    'STYLE': 'Specify visual style/medium',
    'COMPOSITION': 'Describe framing/layout',
    'DETAILS': 'Add specific elements',
    'CONSTRAINTS': 'Specify what to avoid',
    'OUTPUT SETTINGS': 'Define technical parameters',
}

STRUCTURAL_POINTS = {
    'has_subject': 7,
    'has_style': 7,
    'has_composition': 7,
    'has_details': 6,
    'has_constraints': 6,
    'has_output_settings': 7,
}

CAMERA_KEYWORDS = [
    'close-up', 'wide shot', 'top-down', "bird's eye", 'low angle',
    'eye level', 'dutch angle', 'aerial view', 'overhead', 'extreme close-up',
]

LIGHTING_KEYWORDS = [
    'soft light', 'rim light', 'golden hour', 'backlighting',
    'studio lighting', 'natural light', 'dramatic lighting', 'ambient light',
]

COLOR_KEYWORDS = [
    'monochrome', 'pastel', 'neon', 'vibrant', 'muted',
    'desaturated', 'warm tones', 'cool tones', 'sepia', 'black and white',
]

STYLE_KEYWORDS = [
    'cinematic photo', 'film still', '3d render', 'watercolor',
    'oil painting', 'digital art', 'concept art', 'photorealistic',
    'anime', 'line art', 'pencil sketch', 'vector illustration',
]

# keyword list, points per match, cap
EXPLICITNESS = {
    'camera': (CAMERA_KEYWORDS, 2, 8),
    'lighting': (LIGHTING_KEYWORDS, 2, 8),
    'color': (COLOR_KEYWORDS, 2, 9),
    'style_locking': (STYLE_KEYWORDS, 5, 20),
}

IMAGE_CONTRADICTIONS = (
    contradiction(('flat', '2d'), ('hyperrealistic', 'photorealistic'),
                  'CONTRADICTION_FLAT_HYPERREALISTIC',
                  'Contradiction detected: "flat/2D" AND "hyperrealistic/photorealistic" both present'),
    contradiction('photorealistic', 'cartoon', 'CONTRADICTION_PHOTOREALISTIC_CARTOON'),
    contradiction('vector', ('photorealistic', 'photo-realistic'), 'CONTRADICTION_VECTOR_PHOTOREALISTIC'),
    contradiction('wide-angle', 'close-up', 'CONTRADICTION_WIDE_CLOSEUP'),
    contradiction('macro', 'wide shot', 'CONTRADICTION_MACRO_WIDE'),
)

NEGATION_WORDS = re.compile(r"\b(no|avoid|don't|without)\b", re.IGNORECASE)
RATIO = re.compile(r'\b\d+:\d+\b')
DIMENSIONS = re.compile(r'\d+x\d+')


def detect_image_blocks(text: str) -> Dict[str, bool]:
    return detect_sections(text, IMAGE_SECTIONS)


def scan_image_contradictions(text: str) -> List[QaIssue]:
    return scan_contradictions(text, IMAGE_CONTRADICTIONS)


def validate_output_settings(text: str, has_output_settings: bool) -> List[QaIssue]:
    """A present OUTPUT SETTINGS block must name an aspect ratio or a resolution."""
    if not has_output_settings:
        return []
    lower = text.lower()
    has_ratio = '--ar' in lower or 'aspect ratio' in lower or bool(RATIO.search(text))
    has_resolution = (bool(DIMENSIONS.search(text)) or 'resolution' in lower
                      or 'width' in lower or 'height' in lower)
    if has_ratio or has_resolution:
        return []
    return [error('MISSING_REQUIRED_PARAMETER', 'OUTPUT SETTINGS must include aspect ratio or resolution')]


def score_image_prompt(text: str, checks: Dict[str, bool]) -> Tuple[int, Dict[str, int]]:
    """Rubric: structure 40, camera 8, lighting 8, color 9, style 20, constraints 15."""
    breakdown = {'structural': sum(p for k, p in STRUCTURAL_POINTS.items() if checks.get(k))}

    for part, (keywords, per_match, cap) in EXPLICITNESS.items():
        breakdown[part] = min(cap, len(find_keywords(text, keywords)) * per_match)

    constraints = 0
    if checks.get('has_constraints'):
        negations = len(NEGATION_WORDS.findall(text))
        if negations >= 2:
            constraints = 15
        elif negations == 1:
            constraints = 8
    breakdown['constraints'] = constraints

    breakdown['contradiction_penalty'] = -capped_penalty(
        len(scan_image_contradictions(text)),
        Config.CONTRADICTION_PENALTY, Config.CONTRADICTION_PENALTY_CAP)

    return sum(breakdown.values()), breakdown


def evaluate_image_prompt(text: str, inputs: Optional[Dict[str, str]] = None,
                          is_workflow: bool = False) -> QaResult:
    """Evaluate an image prompt.

    Args:
        text: Prompt text, already interpolated with any input values.
        inputs: Input values supplied for a workflow; enables the unfilled
            placeholder check.
        is_workflow: Whether the source record is a workflow.
    """
    if not text or not text.strip():
        return empty_prompt_result(STRUCTURAL_POINTS, Modality.IMAGE)

    checks = detect_image_blocks(text)
    issues = [
        warning('MISSING_' + sec.name.replace(' ', '_'),
                f'Missing {sec.name} block: {MISSING_HINTS[sec.name]}')
        for sec in missing_sections(checks, IMAGE_SECTIONS)
    ]
    issues.extend(scan_image_contradictions(text))
    issues.extend(validate_output_settings(text, checks['has_output_settings']))
    if is_workflow:
        issues.extend(unfilled_placeholder_issues(text, inputs))

    score, breakdown = score_image_prompt(text, checks)
    return build_result(score, issues, checks, Modality.IMAGE, breakdown=breakdown)
