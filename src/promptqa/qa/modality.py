"""Modality, video subtype, email type and audio subtype inference.

All inference is keyword matching over record metadata (and, for subtypes,
the prompt text). Tables are checked in order and the first match wins.
"""

import re
from typing import Dict, List, Tuple

from .models import AudioSubtype, Modality, Snippet, VideoSubtype

# ============================================================================
# Modality
# ============================================================================

IMAGE_TAGS = {'midjourney', 'image', 'sdxl', 'stable-diffusion', 'dall-e', 'imagen'}
VIDEO_TAGS = {'video', 'image-to-video', 'runway', 'pika', 'gen-2'}
AUDIO_TAGS = {
    'audio', 'voice', 'music', 'tts', 'narration', 'voiceover', 'podcast',
    'jingle', 'suno', 'elevenlabs', 'soundtrack', 'beat', 'loop',
}


def infer_modality(snippet: Snippet) -> Modality:
    """Image, then video, then email, then audio; text otherwise."""
    tags = {t.lower() for t in snippet.tags or []}
    category = (snippet.category or '').lower()

    if tags & IMAGE_TAGS:
        return Modality.IMAGE
    if tags & VIDEO_TAGS:
        return Modality.VIDEO
    if 'email' in category or 'email' in tags:
        return Modality.EMAIL
    if tags & AUDIO_TAGS or 'audio' in category:
        return Modality.AUDIO
    return Modality.TEXT


# ============================================================================
# Video subtype
# ============================================================================

I2V_KEYWORDS = [
    'image-to-video', 'img2vid', 'i2v', 'reference image',
    'input image', 'animate image', 'source image',
]

T2V_KEYWORDS = ['text-to-video', 't2v', 'generate video', 'create video', 'video generation']

I2V_HEADING = re.compile(
    r'^[ \t]*(?:#{1,6}[ \t]*)?(?:\*\*)?[ \t]*(?:source|reference|input)\s+image[ \t]*(?:\*\*)?[ \t]*(?::|$)',
    re.IGNORECASE | re.MULTILINE,
)


def infer_video_subtype(snippet: Snippet) -> VideoSubtype:
    """Image-to-video signals beat text-to-video signals; generic otherwise."""
    tags = [t.lower() for t in snippet.tags or []]
    title_category = f"{(snippet.title or '').lower()} {(snippet.category or '').lower()}"

    if any(kw in tag for tag in tags for kw in I2V_KEYWORDS):
        return VideoSubtype.IMAGE_TO_VIDEO
    if any(kw in title_category for kw in I2V_KEYWORDS):
        return VideoSubtype.IMAGE_TO_VIDEO
    if I2V_HEADING.search(snippet.template or snippet.code or ''):
        return VideoSubtype.IMAGE_TO_VIDEO

    if any(kw in tag for tag in tags for kw in T2V_KEYWORDS):
        return VideoSubtype.TEXT_TO_VIDEO
    if any(kw in title_category for kw in T2V_KEYWORDS):
        return VideoSubtype.TEXT_TO_VIDEO
    return VideoSubtype.GENERIC


# ============================================================================
# Email type
# ============================================================================

# Checked top to bottom; the most specific business function comes first.
EMAIL_TYPE_PRIORITY: List[Tuple[str, List[str]]] = [
    ('transactional', ['order', 'shipping', 'receipt', 'confirmation', 'invoice',
                       'payment', 'transaction']),
    ('event', ['event', 'webinar', 'invite', 'rsvp', 'registration']),
    ('abandoned_cart', ['abandoned', 'cart', 'left behind', 'forgot']),
    ('loyalty', ['loyalty', 'reward', 'vip', 'points', 'member']),
    ('review_request', ['review', 'feedback', 'survey', 'rating', 'testimonial']),
    ('winback', ['win-back', 're-engagement', 'inactive', 'miss you', 'come back']),
    ('promo', ['promo', 'sale', 'discount', 'offer', 'deal', '% off', 'coupon']),
    ('seasonal', ['black friday', 'holiday', 'seasonal', 'cyber monday', 'christmas', 'valentine']),
    ('launch', ['launch', 'new product', 'introducing', 'just dropped', 'announce']),
    ('welcome', ['welcome', 'hello', 'thanks for joining', 'glad you']),
    ('onboarding', ['onboarding', 'getting started', 'next steps', 'setup']),
    ('nurture', ['drip', 'nurture', 'series']),
    ('newsletter', ['newsletter', 'weekly', 'monthly', 'digest', 'roundup']),
    ('content_announcement', ['new post', 'guide', 'video', 'content', 'article', 'blog']),
    ('brand_story', ['mission', 'values', 'story', 'about us', 'our story']),
]

EMAIL_TYPE_GROUPS: Dict[str, List[str]] = {
    'promotional': ['promo', 'launch', 'seasonal'],
    'transactional': ['transactional', 'abandoned_cart', 'review_request', 'loyalty'],
    'sequence': ['welcome', 'onboarding', 'nurture'],
    'content': ['newsletter', 'content_announcement', 'brand_story'],
    'event': ['event'],
    'winback': ['winback'],
    'generic': ['generic'],
}

EMAIL_TYPE_LABELS = {
    'welcome': 'Welcome',
    'onboarding': 'Onboarding',
    'promo': 'Promo',
    'launch': 'Launch',
    'seasonal': 'Seasonal',
    'newsletter': 'Newsletter',
    'nurture': 'Nurture',
    'brand_story': 'Brand Story',
    'abandoned_cart': 'Abandoned Cart',
    'transactional': 'Transactional',
    'review_request': 'Review Request',
    'loyalty': 'Loyalty',
    'winback': 'Win-back',
    'event': 'Event',
    'content_announcement': 'Content',
    'generic': 'Email',
}


def infer_email_type(snippet: Snippet) -> str:
    """Search category, title and tags for the first matching keyword group."""
    search = ' '.join([
        (snippet.category or '').lower(),
        (snippet.title or '').lower(),
        ' '.join(t.lower() for t in snippet.tags or []),
    ])
    if not search.strip():
        return 'generic'
    for email_type, keywords in EMAIL_TYPE_PRIORITY:
        if any(kw in search for kw in keywords):
            return email_type
    return 'generic'


def email_type_group(email_type: str) -> str:
    for group, types in EMAIL_TYPE_GROUPS.items():
        if email_type in types:
            return group
    return 'generic'


def email_type_label(email_type: str) -> str:
    return EMAIL_TYPE_LABELS.get(email_type, 'Email')


# ============================================================================
# Audio subtype
# ============================================================================

VOICE_KEYWORDS = [
    'voice', 'narrat', 'speak', 'tts', 'speech', 'voiceover',
    'podcast', 'dialogue', 'monologue', 'announcer', 'narrator',
]

MUSIC_KEYWORDS = [
    'music', 'song', 'melody', 'beat', 'track', 'instrumental', 'tempo', 'bpm',
    'chord', 'rhythm', 'harmony', 'composition', 'jingle', 'soundtrack', 'loop',
]


def infer_audio_subtype(text: str) -> AudioSubtype:
    """Voice or music only when the text signals one and not the other."""
    if not text:
        return AudioSubtype.GENERIC
    lower = text.lower()
    voice = any(k in lower for k in VOICE_KEYWORDS)
    music = any(k in lower for k in MUSIC_KEYWORDS)
    if voice and not music:
        return AudioSubtype.VOICE
    if music and not voice:
        return AudioSubtype.MUSIC
    return AudioSubtype.GENERIC
