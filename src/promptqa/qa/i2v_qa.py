"""QA evaluation for image-to-video prompts.

Animating a source image is only repeatable when the prompt says what must
not change, so every one of the seven sections is required (error level) and
the preservation block must name at least three anchor categories.
"""

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
from .video_qa import has_aspect_ratio, has_duration, has_fps, has_resolution
from ..config import Config

SOURCE_IMAGE = section('SOURCE IMAGE', r'reference\s+image', r'input\s+image')
PRESERVATION_RULES = section('PRESERVATION RULES', r'lock', r'keep', r'do\s+not\s+change', r'what\s+to\s+keep')
MOTION = section('MOTION', r'movement', r'camera\s+movement')
TIMING = section('TIMING', r'duration', r'video\s+length')
STYLE_CONTINUITY = section('STYLE CONTINUITY', r'match\s+style', r'keep\s+style', r'maintain\s+style')
CONSTRAINTS = section('CONSTRAINTS', r'what\s+to\s+avoid', r'negative\s+prompt', phrases=('what to avoid',))
OUTPUT_SETTINGS = section('OUTPUT SETTINGS', r'settings', r'parameters', r'export\s+settings')

I2V_SECTIONS = (
    SOURCE_IMAGE, PRESERVATION_RULES, MOTION, TIMING,
    STYLE_CONTINUITY, CONSTRAINTS, OUTPUT_SETTINGS,
)

MISSING_HINTS = {
    'SOURCE IMAGE': 'Specify the reference/input image',
    'PRESERVATION RULES': 'Define what to keep from the source image',
    'MOTION': 'Describe desired movement',
    'TIMING': 'Specify video duration',
    'STYLE CONTINUITY': 'Ensure style consistency',
    'CONSTRAINTS': 'Specify what to avoid',
    'OUTPUT SETTINGS': 'Define technical parameters',
}

STRUCTURAL_POINTS = {
    'has_source_image': 4,
    'has_preservation_rules': 5,
    'has_motion': 4,
    'has_timing': 4,
    'has_style_continuity': 5,
    'has_constraints': 4,
    'has_output_settings': 4,
}

PRESERVATION_ANCHORS = {
    'identity': ['same person', 'same face', 'identity', 'no identity change',
                 'maintain identity', 'preserve face'],
    'outfit': ['outfit', 'clothing', 'wardrobe', 'costume', 'attire', 'same outfit'],
    'objects': ['object', 'prop', 'logo', 'product', 'same object', 'maintain object'],
    'background': ['background', 'composition', 'scene stays the same', 'maintain background',
                   'preserve background', 'same setting'],
    'lighting': ['lighting', 'exposure', 'same lighting', 'maintain lighting',
                 'preserve lighting', 'consistent lighting'],
    'color_palette': ['color palette', 'colors remain', 'same colors', 'maintain colors',
                      'preserve colors', 'color consistency'],
    'style': ['style', 'rendering', 'same style', 'maintain style', 'preserve style',
              'style consistency', 'visual style'],
}

MIN_PRESERVATION_ANCHORS = 3
POINTS_PER_ANCHOR = 4.3

STABILITY_KEYWORDS = [
    'no flicker', 'no morphing', 'no warping', 'no jitter', 'no sudden scene change',
    'no identity change', 'no extra limbs', 'no deformation', 'no artifacts',
    'stable', 'consistent', 'smooth',
]

CAMERA_MOTION_KEYWORDS = [
    'pan', 'tilt', 'dolly', 'zoom', 'tracking shot', 'handheld', 'static camera',
    'crane shot', 'orbit', 'aerial view', 'tracking', 'static', 'crane', 'aerial',
    'push in', 'pull out',
]

SUBJECT_MOTION_KEYWORDS = [
    'blink', 'breathe', 'hair sway', 'subtle movement', 'turn head', 'wave', 'walk',
    'cloth flutter', 'slight motion', 'gentle movement', 'running', 'turning',
    'speaking', 'gesturing',
]

I2V_CONTRADICTIONS = (
    contradiction('keep exactly the same', 'dramatic transformation', 'CONTRADICTION_PRESERVE_TRANSFORM'),
    contradiction('no changes', 'completely change', 'CONTRADICTION_NO_CHANGE_COMPLETELY'),
    contradiction('no camera movement', 'handheld', 'CONTRADICTION_STATIC_HANDHELD'),
    contradiction('static camera', 'dynamic camera', 'CONTRADICTION_STATIC_DYNAMIC'),
    contradiction('single continuous shot', 'multiple scene changes', 'CONTRADICTION_CONTINUOUS_MULTIPLE'),
    contradiction('single continuous shot', 'scene changes', 'CONTRADICTION_CONTINUOUS_CHANGES'),
    contradiction(('maintain exact style', 'match style'),
                  ('switch to cartoon', 'switch to anime', 'animation style'),
                  'CONTRADICTION_MAINTAIN_SWITCH_STYLE',
                  'Contradiction detected: style preservation AND style switch both present'),
)


def detect_i2v_blocks(text: str) -> Dict[str, bool]:
    return detect_sections(text, I2V_SECTIONS)


def count_preservation_anchors(text: str) -> int:
    """Number of anchor categories with at least one keyword present."""
    return sum(1 for keywords in PRESERVATION_ANCHORS.values() if contains_any(text, keywords))


def has_stability_constraint(text: str) -> bool:
    return contains_any(text, STABILITY_KEYWORDS)


def has_i2v_motion_signal(text: str) -> bool:
    return contains_any(text, CAMERA_MOTION_KEYWORDS) or contains_any(text, SUBJECT_MOTION_KEYWORDS)


def scan_i2v_contradictions(text: str) -> List[QaIssue]:
    return scan_contradictions(text, I2V_CONTRADICTIONS)


def validate_i2v_output_settings(text: str, has_output_settings: bool) -> List[QaIssue]:
    if not has_output_settings:
        return []
    ratio, resolution, fps = has_aspect_ratio(text), has_resolution(text), has_fps(text)
    issues = []
    if not (ratio or resolution or fps):
        issues.append(error('OUTPUT_SETTINGS_INCOMPLETE',
                            'OUTPUT SETTINGS must include aspect ratio, resolution, or fps'))
    if not fps and (ratio or resolution):
        issues.append(warning('FPS_NOT_SPECIFIED',
                              'FPS not specified - recommended for smooth I2V output'))
    return issues


def score_i2v_prompt(text: str, checks: Dict[str, bool], anchor_count: int,
                     stability: bool) -> Tuple[float, Dict[str, int]]:
    """Rubric: structure 30, preservation 30, motion 15, timing 10, stability 10, output 5."""
    breakdown = {'structural': sum(p for k, p in STRUCTURAL_POINTS.items() if checks.get(k))}
    preservation = min(30, anchor_count * POINTS_PER_ANCHOR)
    breakdown['preservation_anchors'] = int(round(preservation))

    motion = 0
    if checks.get('has_motion'):
        if find_keywords(text, CAMERA_MOTION_KEYWORDS):
            motion += 8
        if find_keywords(text, SUBJECT_MOTION_KEYWORDS):
            motion += 7
    breakdown['motion'] = motion

    if has_duration(text):
        breakdown['timing'] = 10
    else:
        breakdown['timing'] = 3 if checks.get('has_timing') else 0

    breakdown['stability_constraints'] = 10 if stability else 0

    output = 0
    if checks.get('has_output_settings'):
        if has_aspect_ratio(text) or has_resolution(text):
            output += 3
        if has_fps(text):
            output += 2
    breakdown['output_settings'] = output

    breakdown['contradiction_penalty'] = -capped_penalty(
        len(scan_i2v_contradictions(text)),
        Config.CONTRADICTION_PENALTY, Config.CONTRADICTION_PENALTY_CAP)

    total = preservation + sum(v for k, v in breakdown.items() if k != 'preservation_anchors')
    return total, breakdown


def evaluate_i2v_prompt(text: str, inputs: Optional[Dict[str, str]] = None,
                        is_workflow: bool = False) -> QaResult:
    """Evaluate an image-to-video prompt; all seven sections are errors when missing."""
    subtype = VideoSubtype.IMAGE_TO_VIDEO.value
    if not text or not text.strip():
        return empty_prompt_result(STRUCTURAL_POINTS, Modality.VIDEO, subtype=subtype)

    checks = detect_i2v_blocks(text)
    issues = [
        error('MISSING_' + sec.name.replace(' ', '_'),
              f'Missing {sec.name} block: {MISSING_HINTS[sec.name]}')
        for sec in missing_sections(checks, I2V_SECTIONS)
    ]

    preservation_block = extract_section(text, PRESERVATION_RULES)
    anchors = count_preservation_anchors(preservation_block) if preservation_block else 0
    if checks['has_preservation_rules'] and anchors < MIN_PRESERVATION_ANCHORS:
        issues.append(error(
            'INSUFFICIENT_PRESERVATION_ANCHORS',
            f'PRESERVATION RULES must include at least {MIN_PRESERVATION_ANCHORS} anchor categories '
            f'(found {anchors}). Examples: identity, outfit, objects, background, lighting, colors, style.'))

    constraints_block = extract_section(text, CONSTRAINTS)
    stability = bool(constraints_block) and has_stability_constraint(constraints_block)
    if checks['has_constraints'] and not stability:
        issues.append(error(
            'MISSING_STABILITY_CONSTRAINT',
            'CONSTRAINTS must include at least one stability keyword '
            '(e.g., "no flicker", "no morphing", "no warping", "no jitter")'))

    if checks['has_motion'] and not has_i2v_motion_signal(extract_section(text, MOTION) or text):
        issues.append(error(
            'MOTION_NOT_EXPLICIT',
            'MOTION block exists but no motion keywords found (e.g., pan, tilt, blink, subtle movement)'))

    if checks['has_timing'] and not has_duration(extract_section(text, TIMING) or text):
        issues.append(error(
            'TIMING_NOT_EXPLICIT',
            'TIMING block exists but no duration found (e.g., "5 seconds", "3s")'))

    issues.extend(validate_i2v_output_settings(text, checks['has_output_settings']))
    issues.extend(scan_i2v_contradictions(text))
    if is_workflow:
        issues.extend(unfilled_placeholder_issues(text, inputs))

    score, breakdown = score_i2v_prompt(text, checks, anchors, stability)
    return build_result(score, issues, checks, Modality.VIDEO,
                        breakdown=breakdown, subtype=subtype)
