"""QA evaluation for text-to-video prompts.

Missing sections are warnings here. The stricter checks are about
explicitness: a MOTION block must name a motion, a TIMING block must carry a
duration, pacing, or beat structure. Instability phrases cost 5 points each.
"""

import re
from typing import Dict, List, Optional, Tuple

from .detection import (
    capped_penalty, contains_any, contradiction, detect_sections, extract_section,
    find_keywords, missing_sections, scan_contradictions, section,
    unfilled_placeholder_issues,
)
from .models import (
    Modality, QaIssue, QaResult, VideoSubtype, build_result, empty_prompt_result,
    error, warning,
)
from ..config import Config

VIDEO_SECTIONS = (
    section('SCENE'),
    section('SUBJECT'),
    section('MOTION', r'camera\s+movement', r'movement'),
    section('TIMING', r'duration', r'video\s+length', r'pacing'),
    section('STYLE'),
    section('CONSTRAINTS', r'what\s+to\s+avoid', phrases=('what to avoid',)),
    section('OUTPUT SETTINGS', r'settings', r'parameters'),
)

MISSING_HINTS = {
    'SCENE': 'Define what happens in the video',
    'SUBJECT': 'Define the main subject/character',
    'MOTION': 'Describe camera and subject movement',
    'TIMING': 'Specify duration and pacing',
    'STYLE': 'Define visual aesthetic',
    'CONSTRAINTS': 'Specify what to avoid',
    'OUTPUT SETTINGS': 'Define technical parameters',
}

CAMERA_MOTION_KEYWORDS = [
    'pan', 'tilt', 'dolly', 'zoom', 'tracking shot', 'handheld', 'static camera',
    'crane shot', 'orbit', 'aerial view', 'dutch angle', 'tracking', 'static',
    'crane', 'aerial',
]

SUBJECT_MOTION_KEYWORDS = [
    'walking', 'running', 'turning', 'speaking', 'flying', 'rotating',
    'drifting', 'slow motion', 'jumping', 'dancing', 'gesturing',
]

STYLE_KEYWORDS = [
    'cinematic', 'documentary', 'handheld realism', 'drone footage',
    'time-lapse', 'slow motion', 'film noir', 'vlog style',
]

INSTABILITY_PHRASES = [
    'random movement', 'constantly changing', 'rapidly morphing',
    'chaotic transitions', 'unpredictable',
]

PACING_KEYWORDS = ['slow', 'smooth', 'real-time', 'fast', 'gradual']

VIDEO_CONTRADICTIONS = (
    contradiction('cinematic realism', ('cartoon', 'animation'), 'CONTRADICTION_CINEMATIC_CARTOON',
                  'Contradiction detected: "cinematic realism" AND "cartoon/animation" both present'),
    contradiction('static camera', 'handheld', 'CONTRADICTION_STATIC_HANDHELD'),
    contradiction('locked shot', 'rapid cuts', 'CONTRADICTION_LOCKED_RAPID'),
    contradiction('locked shot', 'quick cuts', 'CONTRADICTION_LOCKED_QUICK'),
    contradiction('slow motion', 'time-lapse', 'CONTRADICTION_SLOW_TIMELAPSE'),
    contradiction('single continuous shot', 'multiple scene changes', 'CONTRADICTION_CONTINUOUS_MULTIPLE'),
    contradiction('single continuous shot', 'scene changes', 'CONTRADICTION_CONTINUOUS_CHANGES'),
)

STRUCTURAL_POINTS_EACH = 5

DURATION_SECONDS = re.compile(r'\d+\s*(seconds?|secs?|s\b)', re.IGNORECASE)
BEATS = re.compile(r'\d+\s*beats?', re.IGNORECASE)
INTRO_MIDDLE_OUTRO = re.compile(r'intro.*middle.*outro', re.IGNORECASE)
OPENING_CLIMAX_END = re.compile(r'opening.*climax.*end', re.IGNORECASE)
NEGATION_WORDS = re.compile(r"\b(no|avoid|don't|without|not)\b", re.IGNORECASE)
RATIO = re.compile(r'\b\d+:\d+\b')
DIMENSIONS = re.compile(r'\d+x\d+')
PROGRESSIVE = re.compile(r'\d+p\b')
FOUR_K = re.compile(r'4k\b', re.IGNORECASE)
FPS = re.compile(r'\d+\s*fps', re.IGNORECASE)


# ---------------------------------------------------------------------------
# Signals shared with the image-to-video evaluator
# ---------------------------------------------------------------------------

def has_aspect_ratio(text: str) -> bool:
    lower = text.lower()
    return '--ar' in lower or 'aspect ratio' in lower or bool(RATIO.search(text))


def has_resolution(text: str) -> bool:
    return bool(DIMENSIONS.search(text) or PROGRESSIVE.search(text) or FOUR_K.search(text)
                or 'resolution' in text.lower())


def has_fps(text: str) -> bool:
    lower = text.lower()
    return bool(FPS.search(text)) or 'frame rate' in lower or 'frames per second' in lower


def has_duration(text: str) -> bool:
    return bool(DURATION_SECONDS.search(text))


def has_motion_signal(text: str) -> bool:
    return contains_any(text, CAMERA_MOTION_KEYWORDS) or contains_any(text, SUBJECT_MOTION_KEYWORDS)


def has_timing_signal(text: str) -> bool:
    has_beats = bool(BEATS.search(text) or INTRO_MIDDLE_OUTRO.search(text)
                     or OPENING_CLIMAX_END.search(text))
    return has_duration(text) or contains_any(text, PACING_KEYWORDS) or has_beats


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def detect_video_blocks(text: str) -> Dict[str, bool]:
    return detect_sections(text, VIDEO_SECTIONS)


def scan_video_contradictions(text: str) -> List[QaIssue]:
    return scan_contradictions(text, VIDEO_CONTRADICTIONS)


def check_instability(text: str) -> List[QaIssue]:
    return [
        warning('INSTABILITY_' + re.sub(r'\s+', '_', phrase.upper()),
                f'Instability phrase detected: "{phrase}" may lead to unpredictable results')
        for phrase in find_keywords(text, INSTABILITY_PHRASES)
    ]


def validate_video_output_settings(text: str, has_output_settings: bool) -> List[QaIssue]:
    if not has_output_settings:
        return []
    if has_aspect_ratio(text) or has_resolution(text) or has_fps(text):
        return []
    return [error('MISSING_REQUIRED_PARAMETER',
                  'OUTPUT SETTINGS must include aspect ratio, resolution, or fps')]


def _explicitness_issues(text: str, checks: Dict[str, bool]) -> List[QaIssue]:
    issues = []
    if checks['has_motion']:
        block = extract_section(text, VIDEO_SECTIONS[2]) or text
        if not has_motion_signal(block):
            issues.append(error(
                'MISSING_MOTION_SIGNAL',
                'MOTION block exists but no motion keywords found (e.g., pan, tilt, walking, running)'))
    if checks['has_timing']:
        block = extract_section(text, VIDEO_SECTIONS[3]) or text
        if not has_timing_signal(block):
            issues.append(error(
                'MISSING_TIMING_SIGNAL',
                'TIMING block exists but no timing indicators found (e.g., "5 seconds", "slow", "3 beats")'))
    return issues


def _tiered(count: int, full: int, partial: int) -> int:
    if count >= 2:
        return full
    return partial if count == 1 else 0


def score_video_prompt(text: str, checks: Dict[str, bool]) -> Tuple[int, Dict[str, int]]:
    """Rubric: structure 35, motion 25, timing 20, style 10, constraints 10."""
    breakdown = {'structural': STRUCTURAL_POINTS_EACH * sum(1 for v in checks.values() if v)}
    breakdown['camera_motion'] = _tiered(len(find_keywords(text, CAMERA_MOTION_KEYWORDS)), 12, 6)
    breakdown['subject_motion'] = _tiered(len(find_keywords(text, SUBJECT_MOTION_KEYWORDS)), 13, 7)

    timing = 10 if has_duration(text) else 0
    if contains_any(text, PACING_KEYWORDS):
        timing += 5
    if BEATS.search(text) or INTRO_MIDDLE_OUTRO.search(text):
        timing += 5
    breakdown['timing'] = timing

    breakdown['style_locking'] = min(10, len(find_keywords(text, STYLE_KEYWORDS)) * 3)

    constraints = 0
    if checks.get('has_constraints'):
        constraints = _tiered(len(NEGATION_WORDS.findall(text)), 10, 5)
    breakdown['constraints'] = constraints

    breakdown['contradiction_penalty'] = -capped_penalty(
        len(scan_video_contradictions(text)),
        Config.CONTRADICTION_PENALTY, Config.CONTRADICTION_PENALTY_CAP)
    breakdown['instability_penalty'] = -capped_penalty(
        len(check_instability(text)),
        Config.INSTABILITY_PENALTY, Config.INSTABILITY_PENALTY_CAP)

    return sum(breakdown.values()), breakdown


def evaluate_video_prompt(text: str, inputs: Optional[Dict[str, str]] = None,
                          is_workflow: bool = False,
                          subtype: VideoSubtype = VideoSubtype.GENERIC) -> QaResult:
    """Evaluate a text-to-video (or unclassified video) prompt."""
    checks_template = {sec.check_name: False for sec in VIDEO_SECTIONS}
    if not text or not text.strip():
        return empty_prompt_result(checks_template, Modality.VIDEO, subtype=subtype.value)

    checks = detect_video_blocks(text)
    issues = [
        warning('MISSING_' + sec.name.replace(' ', '_'),
                f'Missing {sec.name} block: {MISSING_HINTS[sec.name]}')
        for sec in missing_sections(checks, VIDEO_SECTIONS)
    ]
    issues.extend(_explicitness_issues(text, checks))
    issues.extend(scan_video_contradictions(text))
    issues.extend(validate_video_output_settings(text, checks['has_output_settings']))
    issues.extend(check_instability(text))
    if is_workflow:
        issues.extend(unfilled_placeholder_issues(text, inputs))

    score, breakdown = score_video_prompt(text, checks)
    return build_result(score, issues, checks, Modality.VIDEO,
                        breakdown=breakdown, subtype=subtype.value)
