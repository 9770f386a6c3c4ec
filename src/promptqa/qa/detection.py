"""Table-driven section detection and contradiction scanning.

Every modality describes its sections as a ``Section`` table and its
conflicting instructions as a ``Contradiction`` table; the functions here are
the only code that interprets those tables.

A section heading is a line that starts (after optional ``#`` markers and
``**`` bold) with one of the section's aliases, followed by ``:``, closing
bold, or the end of the line. Matching is case-insensitive. Some sections also
accept free phrases that count wherever they occur.
"""

import re
from functools import lru_cache
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import QaIssue, error

_HEADING_PREFIX = r'^[ \t]*(?:#{1,6}[ \t]*)?(?:\*\*)?[ \t]*'
_HEADING_SUFFIX = r'[ \t]*(?:\*\*)?[ \t]*(?::|\*\*|$)'

# Start of the next section: a markdown heading or an upper-case label with a colon.
NEXT_HEADING = re.compile(
    r"^[ \t]*(?:#{1,6}[ \t]+\S|(?:\*\*)?[A-Z][A-Z0-9 _&/'#()-]*(?:\*\*)?[ \t]*:)",
    re.MULTILINE,
)

PLACEHOLDER_PATTERN = re.compile(r'\{\{([^}]+)\}\}')


@dataclass(frozen=True)
class Section:
    """A structural section and the ways a prompt may label it."""
    name: str
    aliases: Tuple[str, ...]
    phrases: Tuple[str, ...] = ()

    @property
    def check_name(self) -> str:
        return 'has_' + re.sub(r'[^a-z0-9]+', '_', self.name.lower()).strip('_')

    @property
    def pattern(self) -> 're.Pattern':
        return _heading_pattern(self.aliases)


@lru_cache(maxsize=None)
def _heading_pattern(aliases: Tuple[str, ...]) -> 're.Pattern':
    alternatives = '|'.join(aliases)
    return re.compile(
        _HEADING_PREFIX + '(?:' + alternatives + ')' + _HEADING_SUFFIX,
        re.IGNORECASE | re.MULTILINE,
    )


def section(name: str, *aliases: str, phrases: Sequence[str] = ()) -> Section:
    """Build a Section; the name itself is always the first alias."""
    own = r'\s+'.join(re.escape(word) for word in name.split())
    return Section(name=name, aliases=(own,) + tuple(aliases), phrases=tuple(phrases))


def has_section(text: str, sec: Section) -> bool:
    if sec.pattern.search(text):
        return True
    lower = text.lower()
    return any(phrase in lower for phrase in sec.phrases)


def detect_sections(text: str, table: Iterable[Section]) -> Dict[str, bool]:
    """Presence map ``{check_name: bool}`` for every section in *table*."""
    return {sec.check_name: has_section(text, sec) for sec in table}


def missing_sections(checks: Dict[str, bool], table: Iterable[Section]) -> List[Section]:
    return [sec for sec in table if not checks.get(sec.check_name)]


def extract_section(text: str, sec: Section) -> Optional[str]:
    """Content of the first heading for *sec*, up to the next heading.

    Text after the colon on the heading line is part of the content. Returns
    None when the heading is absent or the section is empty.
    """
    match = sec.pattern.search(text)
    if not match:
        return None
    start = match.end()
    rest = text[start:]
    # The heading line itself never ends the block.
    first_newline = rest.find('\n')
    search_from = len(rest) if first_newline == -1 else first_newline + 1
    following = NEXT_HEADING.search(rest, search_from)
    end = start + following.start() if following else len(text)
    content = text[start:end].strip().lstrip('*').strip()
    return content or None


def find_keywords(text: str, keywords: Iterable[str]) -> List[str]:
    """Keywords occurring in *text* as case-insensitive substrings."""
    lower = text.lower()
    return [kw for kw in keywords if kw.lower() in lower]


def contains_any(text: str, phrases: Iterable[str]) -> bool:
    lower = text.lower()
    return any(p.lower() in lower for p in phrases)


@dataclass(frozen=True)
class Contradiction:
    """Fires when any left term and any right term both occur."""
    left: Tuple[str, ...]
    right: Tuple[str, ...]
    code: str
    message: str

    def found_in(self, lower_text: str) -> bool:
        return (any(t in lower_text for t in self.left)
                and any(t in lower_text for t in self.right))


def contradiction(left, right, code: str, message: Optional[str] = None) -> Contradiction:
    """Build a Contradiction from single terms or tuples of alternatives."""
    left = (left,) if isinstance(left, str) else tuple(left)
    right = (right,) if isinstance(right, str) else tuple(right)
    if message is None:
        message = 'Contradiction detected: "{}" AND "{}" both present'.format(
            '/'.join(left), '/'.join(right))
    return Contradiction(left=left, right=right, code=code, message=message)


def scan_contradictions(text: str, table: Iterable[Contradiction]) -> List[QaIssue]:
    """One error issue per table entry whose terms co-occur."""
    lower = text.lower()
    return [error(c.code, c.message) for c in table if c.found_in(lower)]


def capped_penalty(count: int, per_item: int, cap: int) -> int:
    return min(cap, count * per_item)


# ---------------------------------------------------------------------------
# Placeholders
# ---------------------------------------------------------------------------

def extract_placeholders(text: str) -> List[str]:
    """Unique ``{{key}}`` names in order of first appearance, trimmed."""
    keys: List[str] = []
    for match in PLACEHOLDER_PATTERN.finditer(text or ''):
        key = match.group(1).strip()
        if key and key not in keys:
            keys.append(key)
    return keys


def interpolate(template: str, values: Dict[str, object]) -> str:
    """Replace ``{{key}}`` for every supplied non-blank value; other placeholders stay."""
    result = template
    for key, value in values.items():
        if value is None or str(value).strip() == '':
            continue
        result = result.replace('{{' + key + '}}', str(value))
    return result


def unfilled_placeholder_issues(text: str, inputs: Optional[Dict[str, object]]) -> List[QaIssue]:
    """MISSING_REQUIRED_INPUT errors for placeholders left after interpolation.

    Only applies when the caller supplied input values at all.
    """
    if inputs is None:
        return []
    return [
        error(f'MISSING_REQUIRED_INPUT:{key}', f'Placeholder {{{{{key}}}}} is not filled')
        for key in extract_placeholders(text)
    ]
