"""Tests for PromptSynthesizer (live preview and generation contexts)."""
import pytest

from backend.services.composer.synthesizer import PROMPT_ORDER, PromptSynthesizer
from backend.services.composer.types import Language, Option, PromptMode


@pytest.fixture
def synth(catalog):
    return PromptSynthesizer(catalog)


def _pick(catalog, category_id, *option_ids):
    return [catalog.option(category_id, oid) for oid in option_ids]


class TestPromptOrder:
    def test_order_is_narrative(self):
        assert PROMPT_ORDER[0] == "format"
        assert PROMPT_ORDER[-1] == "quality"
        assert PROMPT_ORDER.index("subject") < PROMPT_ORDER.index("lighting")
        assert PROMPT_ORDER.index("video_settings") < PROMPT_ORDER.index("lighting")

    def test_negative_and_image_settings_not_ordered(self):
        assert "negative" not in PROMPT_ORDER
        assert "image_settings" not in PROMPT_ORDER


class TestSynthesize:
    def test_empty_selection_gives_empty_string(self, synth):
        assert synth.synthesize({}) == ""

    def test_canonical_order_regardless_of_toggle_order(self, synth, catalog):
        selections = {
            "lighting": _pick(catalog, "lighting", "neon"),
            "subject": _pick(catalog, "subject", "dragon"),
        }
        assert synth.synthesize(selections) == "Subject: a dragon | Lighting: neon"

    def test_values_joined_in_selection_order(self, synth, catalog):
        selections = {"lighting": _pick(catalog, "lighting", "softbox", "neon")}
        assert synth.synthesize(selections) == "Lighting: soft diffused studio light, neon"

    def test_negative_excluded(self, synth, catalog):
        selections = {
            "subject": _pick(catalog, "subject", "dragon"),
            "negative": _pick(catalog, "negative", "no_blur"),
        }
        assert synth.synthesize(selections) == "Subject: a dragon"

    def test_unordered_category_keyed_by_raw_id(self, synth, catalog):
        selections = {
            "image_settings": _pick(catalog, "image_settings", "ar_9_16"),
            "subject": _pick(catalog, "subject", "dragon"),
        }
        assert synth.synthesize(selections) == "Subject: a dragon | image_settings: aspect ratio 9:16"

    def test_freeform_tags_appended_last(self, synth, catalog):
        selections = {"subject": _pick(catalog, "subject", "man")}
        text = synth.synthesize(selections, face_tags=["sharp jawline", "grey eyes"], style_tags=["oil"])
        assert text == "Subject: a man | Face Details: sharp jawline, grey eyes | Style Ref: oil"

    def test_custom_option_rendered_by_value(self, synth):
        selections = {"props": [Option.custom("a red umbrella")]}
        assert synth.synthesize(selections) == "Props: a red umbrella"

    def test_pure_function(self, synth, catalog):
        selections = {"mood": _pick(catalog, "mood", "epic")}
        assert synth.synthesize(selections) == synth.synthesize(selections)
        assert selections == {"mood": _pick(catalog, "mood", "epic")}


class TestGenerationContext:
    def test_image_mode_has_no_duration(self, synth, catalog):
        ctx = synth.build_generation_context(
            {"subject": _pick(catalog, "subject", "dragon")}, PromptMode.IMAGE, Language.EN,
        )
        lines = ctx.split("\n")
        assert lines[0].startswith("GENERATE_IMAGE_PROMPT")
        assert lines[1] == "[Subject]: a dragon"
        assert "DURATION" not in ctx

    def test_video_mode_includes_duration_and_label(self, synth, catalog):
        ctx = synth.build_generation_context(
            {"video_settings": _pick(catalog, "video_settings", "slow_mo")},
            PromptMode.VIDEO, Language.EN, duration_sec=8,
        )
        lines = ctx.split("\n")
        assert lines[0].startswith("GENERATE_CINEMATIC_VIDEO_PROMPT")
        assert "[DURATION]: 8s" in lines
        assert "[VIDEO_SETTINGS]: slow motion" in lines

    def test_localized_labels(self, synth):
        ctx = synth.build_generation_context(
            {}, PromptMode.VIDEO, Language.UA, face_tags=["freckles"], duration_sec=5,
        )
        assert "[ТРИВАЛІСТЬ]: 5s" in ctx
        assert "[ДЕТАЛІ ОБЛИЧЧЯ]: freckles" in ctx

    def test_negative_and_notes_come_last(self, synth, catalog):
        ctx = synth.build_generation_context(
            {
                "negative": _pick(catalog, "negative", "no_blur", "no_watermark"),
                "quality": _pick(catalog, "quality", "q_8k"),
            },
            PromptMode.IMAGE, Language.EN, user_notes="keep it moody",
        )
        lines = ctx.split("\n")
        assert lines[-3] == "[Quality]: 8k"
        assert lines[-2] == "[Negative]: blurry, watermark"
        assert lines[-1] == "[USER NOTES]: keep it moody"

    def test_analysis_tags_precede_categories(self, synth, catalog):
        ctx = synth.build_generation_context(
            {"subject": _pick(catalog, "subject", "woman")}, PromptMode.IMAGE, Language.EN,
            face_tags=["freckles"], style_tags=["watercolor"],
        )
        lines = ctx.split("\n")
        assert lines[1:] == [
            "[FACE DETAILS]: freckles",
            "[STYLE REFERENCE]: watercolor",
            "[Subject]: a young woman",
        ]


class TestEnhanceContext:
    def test_empty_when_nothing_to_enhance(self, synth):
        assert synth.build_enhance_context({}, PromptMode.IMAGE, Language.EN) == ""

    def test_draft_leads(self, synth, catalog):
        ctx = synth.build_enhance_context(
            {"subject": _pick(catalog, "subject", "dragon")}, PromptMode.IMAGE, Language.EN,
            draft="a dragon over a city",
        )
        assert ctx.startswith("[CURRENT DRAFT (Refine this)]: a dragon over a city; \n")
        assert ctx.endswith("[SUBJECT]: a dragon; ")

    def test_video_duration_line(self, synth):
        ctx = synth.build_enhance_context({}, PromptMode.VIDEO, Language.EN, duration_sec=10)
        assert ctx == "[VIDEO DURATION]: 10 seconds; \n"

    def test_includes_negative_and_unordered_after_ordered(self, synth, catalog):
        ctx = synth.build_enhance_context(
            {
                "negative": _pick(catalog, "negative", "no_blur"),
                "image_settings": _pick(catalog, "image_settings", "ar_1_1"),
                "mood": _pick(catalog, "mood", "epic"),
            },
            PromptMode.IMAGE, Language.EN,
        )
        assert ctx.index("[MOOD]") < ctx.index("[NEGATIVE]") < ctx.index("[IMAGE_SETTINGS]")
        assert "[NEGATIVE]: blurry; " in ctx
