"""Heuristic default assertions for a snippet."""

import re
from typing import List

from ..qa.models import Modality, Snippet
from .assertions import Assertion

DEFAULT_MAX_WORDS = 2000
WORDS_PER_MINUTE = 150

SETTINGS_PATTERN = r'OUTPUT\s+SETTINGS|SETTINGS|PARAMETERS'

OUTPUT_FORMAT_HEADING = re.compile(r'##?\s*OUTPUT\s+FORMAT[\s:]', re.IGNORECASE)
NUMBERED_SECTION = re.compile(r'(?:^|\n)\s*\d+\.\s*([A-Z][A-Z\s]+?)(?:\s*[-:]|$)', re.MULTILINE)
CREATOR_TOPIC = re.compile(r'youtube|video|script|thumbnail|hook|vlog|content creator', re.IGNORECASE)
AVOID_PHRASE = re.compile(
    r'''(?:do not|avoid|never|don't)\s+(?:include|mention|use)\s+["']?([^"'\n.]{3,30})["']?''',
    re.IGNORECASE)
QUOTED = re.compile(r'''["']([^"']+)["']''')
LAST_WORD = re.compile(r'\s+([a-z]+)\s*$', re.IGNORECASE)
LEADING_INT = re.compile(r'^\s*[+-]?\d+')


def expected_sections(template: str) -> List[str]:
    """Numbered upper-case items following the OUTPUT FORMAT heading."""
    heading = OUTPUT_FORMAT_HEADING.search(template)
    if not heading:
        return []
    rest = template[heading.end():]
    sections = []
    for match in NUMBERED_SECTION.finditer(rest):
        name = match.group(1).strip()
        if 2 < len(name) < 50:
            sections.append(name)
    return sections


def is_creator_content(snippet: Snippet) -> bool:
    text = f"{snippet.title} {snippet.description} {snippet.category or ''}"
    return bool(CREATOR_TOPIC.search(text))


def _visual_assertions(snippet: Snippet, modality: Modality, template: str) -> List[Assertion]:
    assertions = []
    if modality == Modality.IMAGE:
        assertions += [
            Assertion('contains', 'SUBJECT', 'Should include SUBJECT block defining what to generate'),
            Assertion('contains', 'STYLE', 'Should include STYLE block defining visual aesthetic'),
            Assertion('regex_match', SETTINGS_PATTERN, 'Should include output settings or parameters'),
        ]
    else:
        assertions += [
            Assertion('contains', 'SCENE', 'Should include SCENE block defining video content'),
            Assertion('contains', 'MOTION', 'Should include MOTION block defining movement'),
            Assertion('contains', 'TIMING', 'Should include TIMING block with duration/pacing'),
            Assertion('regex_match', SETTINGS_PATTERN, 'Should include output settings or parameters'),
        ]

    if re.search(r'\{\{[^}]+\}\}', template):
        assertions.append(Assertion('not_contains', '{{', 'All placeholders should be filled'))

    tags = snippet.tags or []
    wants_ar = '--ar' in template
    if modality == Modality.IMAGE and (wants_ar or 'midjourney' in tags):
        assertions.append(Assertion('contains', '--ar', 'Should include aspect ratio parameter'))
    if modality == Modality.VIDEO and (wants_ar or any(t in ('runway', 'pika') for t in tags)):
        assertions.append(Assertion('contains', '--ar', 'Should include aspect ratio parameter'))

    assertions.append(Assertion('regex_match', '.{10,}', 'Generated prompt should be at least 10 characters'))
    return assertions


def max_words_for(snippet: Snippet) -> int:
    """150 words per minute of a duration/length input's default, else 2000."""
    for config in (snippet.inputs_schema or {}).values():
        if not isinstance(config, dict):
            continue
        label = str(config.get('label') or '').lower()
        if 'duration' in label or 'length' in label:
            match = LEADING_INT.match(str(config.get('default') or ''))
            if match:
                return int(match.group(0)) * WORDS_PER_MINUTE
            break
    return DEFAULT_MAX_WORDS


def forbidden_term(template: str):
    match = AVOID_PHRASE.search(template)
    if not match:
        return None
    phrase = match.group(0)
    found = QUOTED.search(phrase) or LAST_WORD.search(phrase)
    return found.group(1) if found else None


def generate_default_assertions(snippet: Snippet, modality: Modality = Modality.TEXT) -> List[Assertion]:
    template = snippet.template or snippet.code or ''

    if modality in (Modality.IMAGE, Modality.VIDEO):
        return _visual_assertions(snippet, modality, template)

    assertions = []
    category = (snippet.category or '').lower()
    if is_creator_content(snippet) or 'youtube' in category or 'video' in category:
        for section in ('HOOK', 'INTRO', 'CALL TO ACTION'):
            assertions.append(Assertion('contains', section, f'Output should include {section} section'))
        if 'title' in template.lower():
            assertions.append(Assertion('contains', 'TITLE', 'Output should include title ideas or suggestions'))

    for section in expected_sections(template):
        assertions.append(Assertion('contains', section, f'Output should include {section} section'))

    if not assertions and snippet.title:
        topic = ' '.join(snippet.title.split()[:3])
        assertions.append(Assertion('contains', topic, f'Output should reference the topic: "{topic}"'))

    limit = max_words_for(snippet)
    assertions.append(Assertion('max_words', limit, f'Output should not exceed {limit} words'))

    term = forbidden_term(template)
    if term:
        assertions.append(Assertion('not_contains', term, f'Output should not contain "{term}"'))

    return assertions
