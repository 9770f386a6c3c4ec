"""Tests for the image, video, image-to-video, email and audio evaluators."""

from promptqa.qa.audio_qa import evaluate_audio_prompt
from promptqa.qa.email_qa import evaluate_email_prompt, required_blocks
from promptqa.qa.i2v_qa import count_preservation_anchors, evaluate_i2v_prompt
from promptqa.qa.image_qa import evaluate_image_prompt
from promptqa.qa.models import Snippet
from promptqa.qa.video_qa import evaluate_video_prompt

IMAGE_PROMPT = """SUBJECT: A red fox sitting in fresh snow
STYLE: watercolor with soft edges
COMPOSITION: close-up at eye level
DETAILS: golden hour light, pastel and muted palette
CONSTRAINTS: no text, avoid watermarks
OUTPUT SETTINGS: --ar 3:2, 1024x768
"""

VIDEO_PROMPT = """SCENE: A cyclist rides through a city at dawn
SUBJECT: A woman in a yellow jacket
MOTION: slow tracking shot, she is turning her head
TIMING: 8 seconds, smooth pacing
STYLE: cinematic, documentary
CONSTRAINTS: no text overlays, avoid flicker
OUTPUT SETTINGS: 16:9, 1080p, 24 fps
"""

I2V_PROMPT = """SOURCE IMAGE: portrait photo of a woman
PRESERVATION RULES: same face, same outfit, maintain background and lighting
MOTION: slow push in, subtle movement of hair
TIMING: 5 seconds
STYLE CONTINUITY: match style of the source photo
CONSTRAINTS: no flicker, no morphing
OUTPUT SETTINGS: 16:9, 1080p, 24fps
"""

EMAIL_PROMPT = """GOAL: Announce our spring sale
AUDIENCE: Existing customers
TONE: Friendly
CONTENT: Highlight best sellers
CTA: Shop now
OUTPUT FORMAT: Subject line and body
OFFER: 20% off everything
URGENCY: Ends Sunday
Include an unsubscribe link.
"""

VOICE_PROMPT = """GOAL: Narrate a product intro
STYLE: warm and friendly
TIMING: 30 seconds
STRUCTURE: intro, main, outro
CONSTRAINTS: no background noise, avoid filler
OUTPUT SETTINGS: WAV, 48kHz
VOICE SPEC: calm female narrator
SCRIPT: Welcome to our app.
"""

PROMO_SNIPPET = Snippet(title="Spring Sale", category="Promo email")


class TestImagePrompt:
    """Test the image rubric."""

    def test_complete_prompt(self):
        result = evaluate_image_prompt(IMAGE_PROMPT)
        assert result.issues == []
        assert result.breakdown == {
            'structural': 40, 'camera': 4, 'lighting': 2, 'color': 4,
            'style_locking': 5, 'constraints': 15, 'contradiction_penalty': 0,
        }
        assert result.score == 70
        assert result.level == 'draft'
        assert result.modality == 'image'

    def test_output_settings_need_ratio_or_resolution(self):
        result = evaluate_image_prompt("SUBJECT: a fox\nOUTPUT SETTINGS: high quality")
        assert 'MISSING_REQUIRED_PARAMETER' in [i.code for i in result.errors]

    def test_missing_blocks_are_warnings(self):
        result = evaluate_image_prompt("SUBJECT: a fox")
        assert result.errors == []
        assert 'MISSING_STYLE' in [i.code for i in result.warnings]

    def test_contradiction_costs_points(self):
        result = evaluate_image_prompt("SUBJECT: photorealistic cartoon fox")
        assert [i.code for i in result.errors] == ['CONTRADICTION_PHOTOREALISTIC_CARTOON']
        assert result.breakdown['contradiction_penalty'] == -10
        assert result.score == 2

    def test_empty_prompt(self):
        result = evaluate_image_prompt("   ")
        assert result.score == 0
        assert result.level == 'draft'
        assert [i.code for i in result.issues] == ['EMPTY_PROMPT']
        assert not any(result.checks.values())

    def test_unfilled_placeholder_in_workflow(self):
        result = evaluate_image_prompt("SUBJECT: {{subject}}", inputs={}, is_workflow=True)
        assert 'MISSING_REQUIRED_INPUT:subject' in [i.code for i in result.errors]


class TestVideoPrompt:
    """Test the text-to-video rubric."""

    def test_complete_prompt(self):
        result = evaluate_video_prompt(VIDEO_PROMPT)
        assert result.issues == []
        assert result.breakdown['structural'] == 35
        assert result.breakdown['camera_motion'] == 12
        assert result.breakdown['subject_motion'] == 7
        assert result.breakdown['timing'] == 15
        assert result.score == 85
        assert result.level == 'verified'

    def test_missing_sections_are_warnings(self):
        result = evaluate_video_prompt("SCENE: a beach at sunset")
        assert result.errors == []
        assert 'MISSING_MOTION' in [i.code for i in result.warnings]

    def test_blocks_without_signals(self):
        result = evaluate_video_prompt("MOTION: gentle\nTIMING: eventually\n")
        codes = [i.code for i in result.errors]
        assert 'MISSING_MOTION_SIGNAL' in codes
        assert 'MISSING_TIMING_SIGNAL' in codes

    def test_instability_phrase(self):
        result = evaluate_video_prompt("SCENE: birds with random movement")
        assert 'INSTABILITY_RANDOM_MOVEMENT' in [i.code for i in result.warnings]
        assert result.breakdown['instability_penalty'] == -5

    def test_contradiction(self):
        result = evaluate_video_prompt("SCENE: static camera, handheld feel")
        assert 'CONTRADICTION_STATIC_HANDHELD' in [i.code for i in result.errors]

    def test_subtype_recorded(self):
        result = evaluate_video_prompt("")
        assert result.subtype == 'generic'
        assert result.modality == 'video'


class TestImageToVideoPrompt:
    """Test the image-to-video rubric."""

    def test_complete_prompt(self):
        result = evaluate_i2v_prompt(I2V_PROMPT)
        assert result.issues == []
        assert result.breakdown['structural'] == 30
        assert result.breakdown['preservation_anchors'] == 17
        assert result.score == 87
        assert result.level == 'verified'
        assert result.subtype == 'image_to_video'

    def test_missing_sections_are_errors(self):
        result = evaluate_i2v_prompt("MOTION: slow push in")
        missing = [i.code for i in result.errors if i.code.startswith('MISSING_')]
        assert len(missing) == 6
        assert 'MISSING_PRESERVATION_RULES' in missing

    def test_too_few_anchors(self):
        result = evaluate_i2v_prompt("PRESERVATION RULES: same face\nMOTION: pan")
        assert 'INSUFFICIENT_PRESERVATION_ANCHORS' in [i.code for i in result.errors]

    def test_constraints_need_stability_keyword(self):
        result = evaluate_i2v_prompt("CONSTRAINTS: no text\nMOTION: pan")
        assert 'MISSING_STABILITY_CONSTRAINT' in [i.code for i in result.errors]

    def test_fps_recommended(self):
        result = evaluate_i2v_prompt("OUTPUT SETTINGS: 16:9")
        assert 'FPS_NOT_SPECIFIED' in [i.code for i in result.warnings]

    def test_count_anchors(self):
        assert count_preservation_anchors("same outfit, same lighting, keep the logo") == 3


class TestEmailPrompt:
    """Test the email rubric and email type rules."""

    def test_complete_promo_email(self):
        result = evaluate_email_prompt(EMAIL_PROMPT, snippet=PROMO_SNIPPET)
        assert result.email_type == 'promo'
        assert result.issues == []
        assert result.score == 100
        assert result.level == 'verified'

    def test_promo_requires_offer(self):
        text = EMAIL_PROMPT.replace("OFFER: 20% off everything\n", "")
        result = evaluate_email_prompt(text, snippet=PROMO_SNIPPET)
        offer = [i for i in result.errors if i.code == 'MISSING_OFFER']
        assert offer[0].message == 'promo emails require OFFER block (or aliases: DEAL, PROMOTION)'
        assert result.score == 82

    def test_missing_cta_is_an_error(self):
        text = EMAIL_PROMPT.replace("CTA: Shop now\n", "")
        result = evaluate_email_prompt(text, snippet=PROMO_SNIPPET)
        assert 'MISSING_CTA' in [i.code for i in result.errors]

    def test_compliance_mention(self):
        text = EMAIL_PROMPT.replace("Include an unsubscribe link.\n", "")
        result = evaluate_email_prompt(text, snippet=PROMO_SNIPPET)
        assert 'MISSING_COMPLIANCE_MENTION' in [i.code for i in result.warnings]

    def test_promo_language_in_transactional(self):
        snippet = Snippet(title="Order confirmation", category="Email")
        result = evaluate_email_prompt("CONTENT: Save 10% on your next deal", snippet=snippet)
        assert result.email_type == 'transactional'
        assert 'PROMO_IN_TRANSACTIONAL' in [i.code for i in result.warnings]

    def test_content_group_blocks_are_warnings(self):
        assert required_blocks('newsletter') == (['VALUE PROMISE'], 'warning')
        assert required_blocks('promo') == (['OFFER', 'URGENCY'], 'error')
        assert required_blocks('generic') == ([], 'error')

    def test_empty_email(self):
        result = evaluate_email_prompt("")
        assert result.email_type == 'generic'
        assert result.score == 0


class TestAudioPrompt:
    """Test the audio rubric."""

    def test_complete_voice_prompt(self):
        result = evaluate_audio_prompt(VOICE_PROMPT)
        assert result.subtype == 'voice'
        assert result.issues == []
        assert result.breakdown['subtype_blocks'] == 15
        assert result.score == 95
        assert result.level == 'verified'

    def test_timing_must_be_explicit(self):
        result = evaluate_audio_prompt("GOAL: background music loop\nTIMING: short")
        assert result.subtype == 'music'
        assert 'TIMING_NOT_EXPLICIT' in [i.code for i in result.errors]

    def test_voice_prompt_requires_voice_blocks(self):
        result = evaluate_audio_prompt("GOAL: narrate a story")
        codes = [i.code for i in result.warnings]
        assert 'MISSING_VOICE_SPEC' in codes
        assert 'MISSING_SCRIPT' in codes

    def test_music_contradiction(self):
        result = evaluate_audio_prompt("STYLE: acoustic and electronic song")
        assert 'CONTRADICTION_ACOUSTIC_ELECTRONIC' in [i.code for i in result.errors]
