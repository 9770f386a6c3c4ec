"""QA evaluation for audio prompts (voice, music, or generic audio)."""

import re
from typing import Dict, List, Optional, Tuple

from .detection import (
    capped_penalty, contradiction, detect_sections, find_keywords, missing_sections,
    scan_contradictions, section, unfilled_placeholder_issues,
)
from .models import (
    AudioSubtype, Modality, QaIssue, QaResult, Snippet, build_result,
    empty_prompt_result, error, warning,
)
from .modality import infer_audio_subtype
from ..config import Config

UNIVERSAL_SECTIONS = (
    section('GOAL', r'objective', r'purpose'),
    section('STYLE', r'aesthetic', r'mood'),
    section('TIMING', r'duration', r'length'),
    section('STRUCTURE', r'format', r'arrangement'),
    section('CONSTRAINTS', r'avoid', r'exclude', phrases=('what to avoid',)),
    section('OUTPUT SETTINGS', r'output\s+format', r'specs', r'settings'),
)

VOICE_SECTIONS = (
    section('VOICE SPEC', r'voice\s+characteristics', r'speaker'),
    section('SCRIPT', r'dialogue', r'narration', r'text'),
)

MUSIC_SECTIONS = (
    section('INSTRUMENTATION', r'instruments', r'sounds'),
    section('TEMPO', r'bpm', r'rhythm', r'pace'),
)

MISSING_HINTS = {
    'GOAL': 'Define what this audio should achieve',
    'STYLE': 'Define mood and aesthetic',
    'TIMING': 'Specify duration',
    'STRUCTURE': 'Define format and arrangement',
    'CONSTRAINTS': 'Specify what to avoid',
    'OUTPUT SETTINGS': 'Define technical specs',
    'VOICE SPEC': 'Define voice characteristics',
    'SCRIPT': 'Provide dialogue or narration text',
    'INSTRUMENTATION': 'Define instruments and sounds',
    'TEMPO': 'Specify BPM or rhythm',
}

STYLE_KEYWORDS = [
    'warm', 'bright', 'dark', 'ambient', 'energetic', 'calm', 'dramatic', 'upbeat',
    'melancholic', 'cinematic', 'lo-fi', 'professional', 'casual', 'authoritative',
    'friendly',
]

VOICE_CONTRADICTIONS = (
    contradiction('whisper', 'shout', 'CONTRADICTION_WHISPER_SHOUT'),
    contradiction('monotone', 'expressive', 'CONTRADICTION_MONOTONE_EXPRESSIVE'),
    contradiction('fast pace', 'slow pace', 'CONTRADICTION_FAST_SLOW_PACE'),
    contradiction('robotic', 'natural', 'CONTRADICTION_ROBOTIC_NATURAL'),
)

MUSIC_CONTRADICTIONS = (
    contradiction('acoustic', 'electronic', 'CONTRADICTION_ACOUSTIC_ELECTRONIC'),
    contradiction('major key', 'minor key', 'CONTRADICTION_MAJOR_MINOR'),
    contradiction('upbeat', 'melancholic', 'CONTRADICTION_UPBEAT_MELANCHOLIC'),
    contradiction('silence', 'loud', 'CONTRADICTION_SILENCE_LOUD'),
)

UNIVERSAL_POINTS = {
    'has_goal': 6,
    'has_style': 6,
    'has_timing': 6,
    'has_structure': 6,
    'has_constraints': 6,
    'has_output_settings': 5,
}

EXPLICIT_DURATION = re.compile(r'\d+\s*(seconds?|minutes?|s|m|sec|min)\b', re.IGNORECASE)
NEGATION_WORDS = re.compile(r"\b(no|avoid|don't|without|not)\b", re.IGNORECASE)


def detect_audio_blocks(text: str) -> Dict[str, bool]:
    return detect_sections(text, UNIVERSAL_SECTIONS + VOICE_SECTIONS + MUSIC_SECTIONS)


def has_explicit_duration(text: str) -> bool:
    return bool(text) and bool(EXPLICIT_DURATION.search(text))


def contradiction_table(subtype: AudioSubtype):
    if subtype is AudioSubtype.VOICE:
        return VOICE_CONTRADICTIONS
    if subtype is AudioSubtype.MUSIC:
        return MUSIC_CONTRADICTIONS
    return VOICE_CONTRADICTIONS + MUSIC_CONTRADICTIONS


def scan_audio_contradictions(text: str, subtype: AudioSubtype) -> List[QaIssue]:
    return scan_contradictions(text, contradiction_table(subtype))


def subtype_sections(subtype: AudioSubtype):
    if subtype is AudioSubtype.VOICE:
        return VOICE_SECTIONS
    if subtype is AudioSubtype.MUSIC:
        return MUSIC_SECTIONS
    return ()


def score_audio_prompt(text: str, checks: Dict[str, bool],
                       subtype: AudioSubtype) -> Tuple[int, Dict[str, int]]:
    """Rubric: structure 35, timing 20, style 20, subtype blocks 15, constraints 10."""
    breakdown = {'structural': sum(p for k, p in UNIVERSAL_POINTS.items() if checks.get(k))}

    if has_explicit_duration(text):
        breakdown['timing'] = 20
    else:
        breakdown['timing'] = 5 if checks.get('has_timing') else 0

    breakdown['style'] = min(20, len(find_keywords(text, STYLE_KEYWORDS)) * 5)

    subtype_points = 0
    if subtype is AudioSubtype.VOICE:
        subtype_points += 8 if checks.get('has_voice_spec') else 0
        subtype_points += 7 if checks.get('has_script') else 0
    elif subtype is AudioSubtype.MUSIC:
        subtype_points += 8 if checks.get('has_instrumentation') else 0
        subtype_points += 7 if checks.get('has_tempo') else 0
    else:
        if checks.get('has_voice_spec') or checks.get('has_script'):
            subtype_points += 7
        if checks.get('has_instrumentation') or checks.get('has_tempo'):
            subtype_points += 8
    breakdown['subtype_blocks'] = subtype_points

    constraints = 0
    if checks.get('has_constraints'):
        negations = len(NEGATION_WORDS.findall(text))
        if negations >= 2:
            constraints = 10
        elif negations == 1:
            constraints = 5
    breakdown['constraints'] = constraints

    breakdown['contradiction_penalty'] = -capped_penalty(
        len(scan_audio_contradictions(text, subtype)),
        Config.CONTRADICTION_PENALTY, Config.CONTRADICTION_PENALTY_CAP)

    return sum(breakdown.values()), breakdown


def evaluate_audio_prompt(text: str, inputs: Optional[Dict[str, str]] = None,
                          snippet: Optional[Snippet] = None) -> QaResult:
    """Evaluate an audio prompt; the subtype is inferred from the text."""
    if not text or not text.strip():
        return empty_prompt_result(UNIVERSAL_POINTS, Modality.AUDIO,
                                   subtype=AudioSubtype.GENERIC.value)

    subtype = infer_audio_subtype(text)
    checks = detect_audio_blocks(text)

    issues = [
        warning('MISSING_' + sec.name.replace(' ', '_'),
                f'Missing {sec.name} block: {MISSING_HINTS[sec.name]}')
        for sec in missing_sections(checks, UNIVERSAL_SECTIONS + subtype_sections(subtype))
    ]

    if checks['has_timing'] and not has_explicit_duration(text):
        issues.append(error(
            'TIMING_NOT_EXPLICIT',
            'TIMING block exists but no explicit duration found (e.g., "30 seconds", "2 minutes")'))

    issues.extend(scan_audio_contradictions(text, subtype))
    if snippet is not None and snippet.is_workflow:
        issues.extend(unfilled_placeholder_issues(text, inputs))

    score, breakdown = score_audio_prompt(text, checks, subtype)
    return build_result(score, issues, checks, Modality.AUDIO,
                        breakdown=breakdown, subtype=subtype.value)
