"""Tests for append-only patch generation."""

from promptqa.qa import generate_patch, patch_snippet
from promptqa.qa.models import Modality, Snippet, StoredPatch, VideoSubtype
from promptqa.qa.patches import append_blocks

COMPLETE_TEXT = """# OBJECTIVE
Summarize.

## INPUTS
{{article}}

## CONSTRAINTS
Short.

## OUTPUT FORMAT
Bullets.

## QC
Verify.

## UNCERTAINTY POLICY
Do not guess.
"""


class TestAppendBlocks:
    """Test block separators."""

    def test_no_trailing_newline(self):
        assert append_blocks("a", ["## B\nb"]) == "a\n\n## B\nb\n"

    def test_single_trailing_newline(self):
        assert append_blocks("a\n", ["## B\nb"]) == "a\n\n## B\nb\n"

    def test_nothing_to_append(self):
        assert append_blocks("a", []) == "a"


class TestGeneratePatch:
    """Test patches per modality."""

    def test_image_patch_appends_missing_blocks(self):
        original = "SUBJECT: a fox"
        result = generate_patch(original, Modality.IMAGE)
        assert result.patched.startswith(original)
        assert [c.code for c in result.changes] == [
            'ADDED_STYLE', 'ADDED_COMPOSITION', 'ADDED_DETAILS',
            'ADDED_CONSTRAINTS', 'ADDED_OUTPUT_SETTINGS',
        ]
        assert result.issues_addressed[0] == 'MISSING_STYLE'
        assert "## OUTPUT SETTINGS\n- Aspect ratio: --ar 16:9" in result.patched
        assert result.qa_score_after > result.qa_score_before

    def test_text_patch_uses_single_hash_headings(self):
        snippet = Snippet(title="Sea haiku", code="Write a haiku about the sea.")
        result = generate_patch(snippet.code, Modality.TEXT, snippet)
        codes = [c.code for c in result.changes]
        assert codes == [
            'ADDED_ROLE', 'ADDED_OBJECTIVE', 'ADDED_INPUTS', 'ADDED_CONSTRAINTS',
            'ADDED_OUTPUT_FORMAT', 'ADDED_QC', 'ADDED_UNCERTAINTY_POLICY',
        ]
        assert "# ROLE\nYou are an AI assistant specialized in prompt engineering." in result.patched
        assert "# QUALITY CHECK\n" in result.patched
        assert "- (No structured inputs detected)" in result.patched
        assert result.qa_score_after > result.qa_score_before

    def test_text_inputs_list_placeholders(self):
        snippet = Snippet(title="Post", code="Write about {{topic}}")
        result = generate_patch(snippet.code, Modality.TEXT, snippet)
        assert "- {{topic}}: Description of topic" in result.patched

    def test_complete_text_is_unchanged(self):
        result = generate_patch(COMPLETE_TEXT, Modality.TEXT, Snippet(code=COMPLETE_TEXT))
        assert not result.changed
        assert result.patched == COMPLETE_TEXT

    def test_blank_text(self):
        result = generate_patch("   ", Modality.IMAGE)
        assert result.patched == "   "
        assert result.qa_score_before == 0
        assert result.changes == []

    def test_i2v_scaffolds(self):
        result = generate_patch("MOTION: pan", Modality.VIDEO,
                                video_subtype=VideoSubtype.IMAGE_TO_VIDEO)
        codes = [c.code for c in result.changes]
        assert 'ADDED_PRESERVATION_RULES' in codes
        assert 'ADDED_MOTION' not in codes

    def test_email_group_scaffolds(self):
        snippet = Snippet(title="Spring Sale", category="Promo email")
        result = generate_patch("GOAL: announce the sale", Modality.EMAIL, snippet)
        codes = [c.code for c in result.changes]
        assert 'ADDED_OFFER' in codes
        assert 'ADDED_URGENCY' in codes
        assert 'ADDED_GOAL' not in codes

    def test_audio_subtype_scaffolds(self):
        result = generate_patch("GOAL: narrate a story", Modality.AUDIO)
        codes = [c.code for c in result.changes]
        assert 'ADDED_VOICE_SPEC' in codes
        assert 'ADDED_INSTRUMENTATION' not in codes


class TestPatchSnippet:
    """Test patching a whole record."""

    def test_routes_by_inferred_modality(self):
        snippet = Snippet(tags=["image-to-video"], code="MOTION: pan")
        result = patch_snippet(snippet)
        assert 'ADDED_SOURCE_IMAGE' in [c.code for c in result.changes]

    def test_workflow_template_is_patched(self):
        snippet = Snippet(type="workflow", title="Post", template="Write about {{topic}}",
                          inputs_schema={"topic": {"label": "Topic"}})
        result = patch_snippet(snippet)
        assert result.original == snippet.template
        assert result.patched.startswith(snippet.template)


class TestStoredPatch:
    """Test the persisted patch override shape."""

    def test_from_patch_round_trip(self):
        result = generate_patch("A red apple", Modality.IMAGE)
        stored = StoredPatch.from_patch("apple", result, "2024-02-01T00:00:00Z")
        assert stored.enabled
        assert stored.patched == result.patched
        data = stored.to_dict()
        assert data["changes"][0]["code"] == result.changes[0].code
        assert StoredPatch.from_dict(data) == stored
