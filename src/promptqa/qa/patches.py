"""Append-only patch generation for prompts that are missing sections.

Each modality has a scaffold table: the section it fills, the bracketed
placeholder body, and a short description of what the section is for. Only
sections the modality's detector reports as missing are appended; existing
text is never removed or reordered, so ``patched`` always starts with
``original``.
"""

from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Sequence

from . import audio_qa, email_qa, i2v_qa, image_qa, text_qa, video_qa
from .detection import Section, detect_sections, extract_placeholders
from .modality import (
    email_type_group, infer_audio_subtype, infer_email_type, infer_modality,
    infer_video_subtype,
)
from .models import (
    AudioSubtype, Modality, PatchChange, PatchResult, Snippet, VideoSubtype,
)
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Scaffold:
    """Placeholder content appended for one missing section."""
    section: Section
    body: str
    description: str
    heading: Optional[str] = None

    @property
    def title(self) -> str:
        return self.heading or self.section.name

    @property
    def code_suffix(self) -> str:
        return self.section.name.replace(' ', '_')

    def render(self, marker: str = '##') -> str:
        return f'{marker} {self.title}\n{self.body}'


def _by_name(table: Sequence[Section]) -> Dict[str, Section]:
    return {sec.name: sec for sec in table}


# ============================================================================
# Scaffold tables
# ============================================================================

_IMAGE = _by_name(image_qa.IMAGE_SECTIONS)
IMAGE_SCAFFOLDS = (
    Scaffold(_IMAGE['SUBJECT'], '[Describe the main subject or focal point of the image]',
             'Defines what the image should generate'),
    Scaffold(_IMAGE['STYLE'], '[Specify visual style: photorealistic, cinematic, watercolor, 3D render, etc.]',
             'Locks the visual medium and aesthetic'),
    Scaffold(_IMAGE['COMPOSITION'],
             '[Describe framing, camera angle, perspective: close-up, wide shot, top-down, etc.]',
             'Controls layout and framing'),
    Scaffold(_IMAGE['DETAILS'], '[Specific elements, textures, lighting: soft light, rim light, golden hour, etc.]',
             'Refines specific visual elements'),
    Scaffold(_IMAGE['CONSTRAINTS'], '- No watermarks\n- No text overlays\n- Avoid [specify unwanted elements]',
             'Specifies what to avoid in generation'),
    Scaffold(_IMAGE['OUTPUT SETTINGS'],
             '- Aspect ratio: --ar 16:9\n- Resolution: 1024x1024\n- [Add other technical parameters]',
             'Defines technical generation parameters'),
)

_VIDEO = _by_name(video_qa.VIDEO_SECTIONS)
VIDEO_SCAFFOLDS = (
    Scaffold(_VIDEO['SCENE'], '[Describe what happens in the video - setting, action, narrative]',
             'Defines the video content and narrative'),
    Scaffold(_VIDEO['SUBJECT'], '[Main subject or character - appearance, role, actions]',
             'Defines the main subject/character'),
    Scaffold(_VIDEO['MOTION'],
             '[Camera movement: pan/tilt/dolly/zoom/tracking/static]\n'
             '[Subject movement: walking/running/turning/gesturing]',
             'Specifies camera and subject movement'),
    Scaffold(_VIDEO['TIMING'],
             '[Duration: 5 seconds, 10s, etc.]\n[Pacing: slow, smooth, real-time, fast]\n'
             '[Beats: intro/middle/outro, 3-beat structure]',
             'Defines duration and pacing'),
    Scaffold(_VIDEO['STYLE'], '[Visual aesthetic: cinematic, documentary, handheld realism, time-lapse, etc.]',
             'Defines visual aesthetic and mood'),
    Scaffold(_VIDEO['CONSTRAINTS'],
             '- No jump cuts\n- Avoid shaky footage\n- No artificial transitions\n'
             '- [Specify other unwanted elements]',
             'Specifies what to avoid in generation'),
    Scaffold(_VIDEO['OUTPUT SETTINGS'],
             '- Aspect ratio: 16:9\n- Resolution: 1080p or 4K\n- FPS: 24fps or 30fps\n'
             '- Duration: [specify in seconds]',
             'Defines technical generation parameters'),
)

I2V_SCAFFOLDS = (
    Scaffold(i2v_qa.SOURCE_IMAGE, '[Reference the input image and describe what it shows]',
             'Identifies the image being animated'),
    Scaffold(i2v_qa.PRESERVATION_RULES,
             '- Same person and face, no identity change\n- Same outfit and clothing\n'
             '- Maintain background and composition\n- Preserve lighting and color palette',
             'Locks what must not change from the source image'),
    Scaffold(i2v_qa.MOTION, '[Camera: slow push in, pan, static]\n[Subject: subtle movement, blink, hair sway]',
             'Specifies camera and subject movement'),
    Scaffold(i2v_qa.TIMING, '[Duration: 5 seconds]', 'Specifies video duration'),
    Scaffold(i2v_qa.STYLE_CONTINUITY, '[Match style of the source image; keep rendering consistent]',
             'Keeps the source style consistent across frames'),
    Scaffold(i2v_qa.CONSTRAINTS, '- No flicker\n- No morphing\n- No warping\n- [Specify other unwanted elements]',
             'Specifies stability constraints'),
    Scaffold(i2v_qa.OUTPUT_SETTINGS, '- Aspect ratio: 16:9\n- Resolution: 1080p\n- FPS: 24fps',
             'Defines technical generation parameters'),
)

EMAIL_UNIVERSAL_SCAFFOLDS = (
    Scaffold(email_qa.GOAL,
             '[Define the primary purpose of this email - what action or response do you want '
             'from the recipient?]',
             'Defines what this email aims to achieve'),
    Scaffold(email_qa.AUDIENCE,
             '[Define the target recipient - their relationship to the brand, interests, and stage '
             'in customer journey]',
             'Defines the target recipient'),
    Scaffold(email_qa.TONE,
             '[Specify the communication style - e.g., friendly, professional, urgent, casual, inspirational]',
             'Defines the communication style'),
    Scaffold(email_qa.CONTENT,
             '[Outline the main message structure - key points, value proposition, supporting details]',
             'Defines the main message structure'),
    Scaffold(email_qa.CTA,
             '[Define the primary call-to-action - one clear action you want the recipient to take]',
             'Defines the call-to-action'),
    Scaffold(email_qa.OUTPUT_FORMAT,
             '[Specify the expected email structure - subject line, preheader, body sections, footer elements]',
             'Defines the expected email structure'),
)

EMAIL_GROUP_SCAFFOLDS = {
    'promotional': (
        Scaffold(email_qa.OFFER,
                 '[Describe the promotion or deal - discount amount, product details, bundle offer]',
                 'Required for promotional emails - defines the deal'),
        Scaffold(email_qa.URGENCY,
                 '[Specify timing and scarcity - deadline, limited quantities, expiration date]',
                 'Required for promotional emails - creates time pressure'),
    ),
    'transactional': (
        Scaffold(email_qa.TRANSACTION_CONTEXT,
                 '[Provide order/transaction details - order number, items, amounts, shipping info]',
                 'Required for transactional emails - provides order details'),
        Scaffold(email_qa.NEXT_STEPS,
                 '[Explain what happens next - delivery timeline, tracking info, action required]',
                 'Required for transactional emails - guides recipient actions'),
    ),
    'sequence': (
        Scaffold(email_qa.SEQUENCE_CONTEXT,
                 '[Specify email position in series - Email # of #, what was covered before, what comes next]',
                 'Required for sequence emails - provides series context'),
    ),
    'content': (
        Scaffold(email_qa.VALUE_PROMISE,
                 "[Explain why the recipient should read - what they'll learn, gain, or discover]",
                 'Recommended for content emails - explains the benefit'),
    ),
}

_AUDIO = _by_name(audio_qa.UNIVERSAL_SECTIONS + audio_qa.VOICE_SECTIONS + audio_qa.MUSIC_SECTIONS)
AUDIO_UNIVERSAL_SCAFFOLDS = (
    Scaffold(_AUDIO['GOAL'], '[What this audio should achieve - purpose, intended effect on listener]',
             'Defines the purpose of this audio'),
    Scaffold(_AUDIO['STYLE'], '[Mood and aesthetic - e.g., warm, bright, dark, ambient, energetic, cinematic]',
             'Defines the mood and aesthetic'),
    Scaffold(_AUDIO['TIMING'], '[Duration: e.g., 30 seconds, 2 minutes]',
             'Specifies explicit duration with units'),
    Scaffold(_AUDIO['STRUCTURE'],
             '[Format and arrangement - e.g., intro/main/outro, verse/chorus, continuous flow]',
             'Defines format and arrangement'),
    Scaffold(_AUDIO['CONSTRAINTS'], '- Avoid [specify unwanted elements]\n- No [specify restrictions]',
             'Specifies what to avoid'),
    Scaffold(_AUDIO['OUTPUT SETTINGS'], '[Format: MP3, WAV, etc.]\n[Quality: bit rate, sample rate]',
             'Defines technical output specs'),
)

AUDIO_SUBTYPE_SCAFFOLDS = {
    AudioSubtype.VOICE: (
        Scaffold(_AUDIO['VOICE SPEC'], '[Voice characteristics - gender, age, accent, tone quality]',
                 'Defines voice characteristics for voice audio'),
        Scaffold(_AUDIO['SCRIPT'], '[Dialogue or narration text to be spoken]',
                 'Provides the text to be spoken'),
    ),
    AudioSubtype.MUSIC: (
        Scaffold(_AUDIO['INSTRUMENTATION'], '[Instruments and sounds - piano, guitar, synth, drums, etc.]',
                 'Defines instruments and sounds for music'),
        Scaffold(_AUDIO['TEMPO'], '[BPM and rhythm - e.g., 120 BPM, upbeat, slow]',
                 'Specifies tempo and rhythm for music'),
    ),
}


# ============================================================================
# Text prompt blocks
# ============================================================================

_TEXT = _by_name(text_qa.TEXT_SECTIONS)

CONSTRAINTS_BODY = """- Follow the OUTPUT FORMAT exactly as specified
- Do not invent facts or make assumptions beyond the inputs provided
- If key information is missing, refer to the UNCERTAINTY POLICY
- Keep tone consistent and appropriate for the audience
- Be specific and actionable; avoid filler or vague statements
- Maintain clarity and structure throughout"""

CREATOR_OUTPUT_FORMAT_BODY = """Return your response with these sections:
1. TITLE/HOOK: [Opening statement or title]
2. MAIN CONTENT: [Core content structured for the platform]
3. CALL TO ACTION: [Closing statement or engagement prompt]"""

GENERIC_OUTPUT_FORMAT_BODY = """Structure your output with:
1. Summary: [Brief overview of the response]
2. Steps/Details: [Main content with specific steps or details]
3. Examples: [Concrete examples if applicable]
4. Final Output: [The final deliverable or conclusion]"""

QUALITY_CHECK_BODY = """Before finalizing, verify:
- Output format matches the specified structure
- All constraints have been followed
- Response is complete and addresses all inputs
- No facts or details have been invented
- Tone and style are appropriate"""

UNCERTAINTY_POLICY_BODY = """If key information is missing or unclear:
- Ask up to 3 clarifying questions before proceeding
- If questions go unanswered, proceed with clearly labeled assumptions
- Include an "Assumptions" section listing any assumptions made
- Do not present assumptions as facts"""

CREATOR_CATEGORIES = ('youtube', 'content', 'video', 'script')


def _is_creator_workflow(snippet: Snippet) -> bool:
    category = (snippet.category or '').lower()
    return snippet.is_workflow and any(c in category for c in CREATOR_CATEGORIES)


def _inputs_body(text: str, snippet: Snippet) -> str:
    keys = extract_placeholders(text)
    keys += [k for k in snippet.schema_keys if k not in keys]
    if not keys:
        return 'The following inputs will be provided:\n- (No structured inputs detected)'
    lines = '\n'.join(f'- {{{{{key}}}}}: Description of {key}' for key in keys)
    return f'The following inputs will be provided:\n{lines}'


def text_scaffolds(text: str, snippet: Snippet) -> List[Scaffold]:
    """Scaffolds for a text prompt, built from the record's title, category and inputs."""
    category = snippet.category or 'prompt engineering'
    role = Section(name='ROLE', aliases=('role',))
    output_body = CREATOR_OUTPUT_FORMAT_BODY if _is_creator_workflow(snippet) else GENERIC_OUTPUT_FORMAT_BODY
    return [
        Scaffold(role, f'You are an AI assistant specialized in {category}.',
                 "Provides context about the AI assistant's specialization"),
        Scaffold(_TEXT['OBJECTIVE'], snippet.title or 'Complete the task as specified',
                 'Defines the primary task or goal of the prompt'),
        Scaffold(_TEXT['INPUTS'], _inputs_body(text, snippet),
                 'Lists expected input parameters and their purposes'),
        Scaffold(_TEXT['CONSTRAINTS'], CONSTRAINTS_BODY,
                 'Defines boundaries and rules for the AI response'),
        Scaffold(_TEXT['OUTPUT FORMAT'], output_body,
                 'Specifies the expected structure of the response'),
        Scaffold(_TEXT['QC'], QUALITY_CHECK_BODY,
                 'Defines validation criteria before finalizing response', heading='QUALITY CHECK'),
        Scaffold(_TEXT['UNCERTAINTY POLICY'], UNCERTAINTY_POLICY_BODY,
                 'Guides how to handle missing or ambiguous information'),
    ]


# ============================================================================
# Patch assembly
# ============================================================================

def append_blocks(text: str, blocks: Sequence[str]) -> str:
    """Append *blocks* after *text*, separated by blank lines. *text* is kept verbatim."""
    if not blocks:
        return text
    if text.endswith('\n\n'):
        separator = ''
    elif text.endswith('\n'):
        separator = '\n'
    else:
        separator = '\n\n'
    return text + separator + '\n\n'.join(blocks) + '\n'


def _apply(text: str, scaffolds: Sequence[Scaffold], checks: Dict[str, bool],
           score: Callable[[str], int], marker: str = '##') -> PatchResult:
    missing = [s for s in scaffolds if not checks.get(s.section.check_name)]
    before = score(text)
    if not missing:
        return PatchResult(original=text, patched=text,
                           qa_score_before=before, qa_score_after=before)

    patched = append_blocks(text, [s.render(marker) for s in missing])
    changes = [
        PatchChange(code='ADDED_' + s.code_suffix, title=f'Added {s.title} block',
                    description=s.description)
        for s in missing
    ]
    result = PatchResult(
        original=text,
        patched=patched,
        changes=changes,
        issues_addressed=['MISSING_' + s.code_suffix for s in missing],
        qa_score_before=before,
        qa_score_after=score(patched),
    )
    logger.debug("patched %d sections: %s", len(changes), [c.code for c in changes])
    return result


def _with_content(snippet: Snippet, text: str) -> Snippet:
    if snippet.is_workflow or not snippet.code:
        return replace(snippet, template=text)
    return replace(snippet, code=text)


def generate_patch(text: str, modality: Modality = Modality.TEXT,
                   snippet: Optional[Snippet] = None,
                   video_subtype: VideoSubtype = VideoSubtype.GENERIC) -> PatchResult:
    """Append scaffolding for every section *text* is missing.

    Args:
        text: The prompt text to patch.
        modality: Which modality's sections and scaffolds apply.
        snippet: Source record; supplies title, category, inputs schema and
            type for text patches, and the email type for email patches.
        video_subtype: Image-to-video prompts get the image-to-video scaffold.

    Returns:
        A PatchResult. Blank text, or text with nothing missing, is returned
        unchanged with an empty change list.
    """
    snippet = snippet or Snippet()
    if not text or not text.strip():
        return PatchResult(original=text, patched=text, qa_score_before=0, qa_score_after=0)

    if modality is Modality.IMAGE:
        return _apply(text, IMAGE_SCAFFOLDS, image_qa.detect_image_blocks(text),
                      lambda t: image_qa.evaluate_image_prompt(t).score)

    if modality is Modality.VIDEO:
        if video_subtype is VideoSubtype.IMAGE_TO_VIDEO:
            return _apply(text, I2V_SCAFFOLDS, i2v_qa.detect_i2v_blocks(text),
                          lambda t: i2v_qa.evaluate_i2v_prompt(t).score)
        return _apply(text, VIDEO_SCAFFOLDS, video_qa.detect_video_blocks(text),
                      lambda t: video_qa.evaluate_video_prompt(t, subtype=video_subtype).score)

    if modality is Modality.EMAIL:
        group = email_type_group(infer_email_type(snippet))
        scaffolds = EMAIL_UNIVERSAL_SCAFFOLDS + EMAIL_GROUP_SCAFFOLDS.get(group, ())
        return _apply(text, scaffolds, email_qa.detect_email_blocks(text),
                      lambda t: email_qa.evaluate_email_prompt(t, snippet=snippet).score)

    if modality is Modality.AUDIO:
        subtype = infer_audio_subtype(text)
        scaffolds = AUDIO_UNIVERSAL_SCAFFOLDS + AUDIO_SUBTYPE_SCAFFOLDS.get(subtype, ())
        return _apply(text, scaffolds, audio_qa.detect_audio_blocks(text),
                      lambda t: audio_qa.evaluate_audio_prompt(t).score)

    return _patch_text(text, snippet)


def _patch_text(text: str, snippet: Snippet) -> PatchResult:
    checks = detect_sections(text, text_qa.TEXT_SECTIONS)
    # ROLE is only added alongside a missing OBJECTIVE.
    checks['has_role'] = checks['has_objective']
    return _apply(text, text_scaffolds(text, snippet), checks,
                  lambda t: text_qa.evaluate_text_prompt(_with_content(snippet, t)).score,
                  marker='#')


def patch_snippet(snippet: Snippet) -> PatchResult:
    """Patch a record's content using its inferred modality and video subtype."""
    modality = infer_modality(snippet)
    subtype = infer_video_subtype(snippet) if modality is Modality.VIDEO else VideoSubtype.GENERIC
    return generate_patch(snippet.content_text, modality, snippet, subtype)
