"""Tests for the YAML-backed CategoryCatalog."""
import pytest
import yaml

from backend.services.composer.catalog import (
    CategoryCatalog, CategoryNotFoundError, PresetNotFoundError,
)
from backend.services.composer.synthesizer import PROMPT_ORDER


@pytest.fixture
def tiny_catalog(tmp_dir):
    data = {
        "categories": [
            {
                "id": "subject",
                "title": {"en": "Subject", "ua": "Об'єкт"},
                "options": [
                    {"id": "dragon", "label": {"en": "Dragon", "ua": "Дракон"}, "value": "a dragon"},
                    {"id": "robot", "label": {"en": "Robot"}, "value": "a robot"},
                ],
            },
            {"id": "mood", "title": {"en": "Mood"}, "options": []},
        ],
        "presets": [
            {"id": "p1", "name": {"en": "Preset One"}, "selections": {"subject": ["robot"]}},
        ],
    }
    path = tmp_dir / "categories.yaml"
    path.write_text(yaml.dump(data, allow_unicode=True), encoding="utf-8")
    return CategoryCatalog(str(path))


class TestShippedCatalog:
    def test_every_ordered_category_exists(self, catalog):
        ids = {c.id for c in catalog.categories()}
        missing = [cid for cid in PROMPT_ORDER if cid not in ids]
        assert not missing, f"Categories missing from categories.yaml: {missing}"

    def test_negative_kept_apart(self, catalog):
        assert catalog.negative.id == "negative"
        assert "negative" not in {c.id for c in catalog.categories()}
        assert catalog.get("negative") is catalog.negative

    def test_option_ids_unique_within_category(self, catalog):
        for category in catalog.categories() + [catalog.negative]:
            ids = [o.id for o in category.options]
            assert len(ids) == len(set(ids)), f"Duplicate option id in {category.id}"

    def test_every_category_has_bilingual_title(self, catalog):
        for category in catalog.categories():
            assert category.title.get("en"), category.id
            assert category.title.get("ua"), category.id

    def test_no_option_uses_custom_prefix(self, catalog):
        for category in catalog.categories():
            assert not any(o.is_custom for o in category.options), category.id

    def test_presets_reference_known_options(self, catalog):
        for preset in catalog.presets():
            for category_id, option_ids in preset.selections.items():
                category = catalog.get(category_id)
                for option_id in option_ids:
                    assert category.option(option_id) is not None, (preset.id, option_id)

    def test_duration_trigger_options_present(self, catalog):
        for option_id in ("timelapse", "slow_mo", "orbit", "crash_zoom"):
            assert catalog.option("video_settings", option_id) is not None


class TestLookup:
    def test_get_known_category(self, tiny_catalog):
        assert tiny_catalog.get("subject").title["en"] == "Subject"

    def test_get_unknown_raises(self, tiny_catalog):
        with pytest.raises(CategoryNotFoundError):
            tiny_catalog.get("nope")

    def test_find_unknown_returns_none(self, tiny_catalog):
        assert tiny_catalog.find("nope") is None

    def test_option_lookup(self, tiny_catalog):
        assert tiny_catalog.option("subject", "dragon").value == "a dragon"
        assert tiny_catalog.option("subject", "missing") is None
        assert tiny_catalog.option("missing", "dragon") is None

    def test_title_falls_back_to_english(self, tiny_catalog):
        assert tiny_catalog.title("subject", "ua") == "Об'єкт"
        assert tiny_catalog.title("mood", "ua") == "Mood"
        assert tiny_catalog.title("unknown") is None

    def test_missing_negative_section_gets_empty_default(self, tiny_catalog):
        assert tiny_catalog.negative.id == "negative"
        assert tiny_catalog.negative.options == []

    def test_categories_returns_copy(self, tiny_catalog):
        tiny_catalog.categories().clear()
        assert len(tiny_catalog.categories()) == 2


class TestPresets:
    def test_preset_lookup(self, tiny_catalog):
        assert tiny_catalog.preset("p1").selections == {"subject": ["robot"]}

    def test_unknown_preset_raises(self, tiny_catalog):
        with pytest.raises(PresetNotFoundError):
            tiny_catalog.preset("missing")

    def test_not_found_errors_are_key_errors(self):
        assert issubclass(PresetNotFoundError, KeyError)
        assert issubclass(CategoryNotFoundError, KeyError)
