"""YAML-backed registry of tag categories and presets."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from backend.services.composer.types import NEGATIVE_CATEGORY_ID, Category, Option, Preset

logger = logging.getLogger("prompt_architect.composer.catalog")

_YAML_PATH = Path(__file__).parent.parent.parent / "config" / "categories.yaml"


class CategoryNotFoundError(KeyError):
    """Raised when a requested category id is not in the catalog."""


class PresetNotFoundError(KeyError):
    """Raised when a requested preset id is not in the catalog."""


class CategoryCatalog:
    """Static tag configuration, loaded once and never mutated.

    Categories come from ``backend/config/categories.yaml`` on first use. The
    reserved ``negative`` category is kept apart from the ordered list so it
    can be rendered last and left out of the live preview.

    Usage::

        catalog = CategoryCatalog()
        lighting = catalog.get("lighting")
        neon = catalog.option("lighting", "neon")
        catalog.title("lighting", "ua")   # "Освітлення"
    """

    def __init__(self, yaml_path: Optional[str] = None):
        self._yaml_path = Path(yaml_path) if yaml_path else _YAML_PATH
        self._categories: Optional[List[Category]] = None
        self._negative: Optional[Category] = None
        self._presets: Optional[List[Preset]] = None

    # ── public ────────────────────────────────────────────────────────────────

    def categories(self) -> List[Category]:
        """Ordered categories, negative excluded."""
        self._load()
        return list(self._categories)

    @property
    def negative(self) -> Category:
        self._load()
        return self._negative

    def get(self, category_id: str) -> Category:
        """Return a category by id (including the negative one).

        Raises:
            CategoryNotFoundError: If no category has that id.
        """
        category = self.find(category_id)
        if category is None:
            raise CategoryNotFoundError(f"Category '{category_id}' not found.")
        return category

    def find(self, category_id: str) -> Optional[Category]:
        """Return a category by id, or None."""
        self._load()
        if category_id == self._negative.id:
            return self._negative
        for category in self._categories:
            if category.id == category_id:
                return category
        return None

    def option(self, category_id: str, option_id: str) -> Optional[Option]:
        """Return the predefined option, or None if either id is unknown."""
        category = self.find(category_id)
        return category.option(option_id) if category else None

    def title(self, category_id: str, language: str = "en") -> Optional[str]:
        """Localized category title, or None for categories outside the catalog."""
        category = self.find(category_id)
        if category is None:
            return None
        return category.title.get(language) or category.title.get("en")

    def presets(self) -> List[Preset]:
        self._load()
        return list(self._presets)

    def preset(self, preset_id: str) -> Preset:
        """Return a preset by id.

        Raises:
            PresetNotFoundError: If no preset has that id.
        """
        for preset in self.presets():
            if preset.id == preset_id:
                return preset
        raise PresetNotFoundError(
            f"Preset '{preset_id}' not found. Available: {[p.id for p in self.presets()]}"
        )

    # ── internal ──────────────────────────────────────────────────────────────

    def _load(self) -> None:
        if self._categories is not None:
            return
        with open(self._yaml_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        self._categories = [_parse_category(c) for c in raw.get("categories", [])]
        negative_raw = raw.get("negative") or {"id": NEGATIVE_CATEGORY_ID, "title": {"en": "Negative"}}
        self._negative = _parse_category(negative_raw)
        self._presets = [
            Preset(
                id=p["id"],
                name=dict(p.get("name", {})),
                selections={k: list(v) for k, v in (p.get("selections") or {}).items()},
            )
            for p in raw.get("presets", [])
        ]
        logger.info(
            "Loaded %d categories and %d presets from %s",
            len(self._categories), len(self._presets), self._yaml_path,
        )


def _parse_category(raw: Dict[str, Any]) -> Category:
    return Category(
        id=raw["id"],
        title=dict(raw.get("title", {})),
        description=dict(raw.get("description", {})),
        color=raw.get("color", ""),
        options=[
            Option(
                id=o["id"],
                label=dict(o.get("label", {})),
                value=str(o.get("value", "")),
                description=dict(o["description"]) if o.get("description") else None,
            )
            for o in raw.get("options", [])
        ],
    )
