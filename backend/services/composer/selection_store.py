"""Chosen tags per category plus the two freeform tag lists."""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from backend.services.composer.types import Option, Preset, SelectionState

if TYPE_CHECKING:
    from backend.services.composer.catalog import CategoryCatalog


class SelectionStore:
    """Holds the user's tag selections for one session.

    Invariant: a category key is present only while it holds at least one
    option, so ``category_id in store.selections`` answers "has selections".
    """

    def __init__(self):
        self.selections: SelectionState = {}
        self.face_tags: List[str] = []
        self.style_tags: List[str] = []

    # ── selections ────────────────────────────────────────────────────────────

    def toggle(self, category_id: str, option: Option) -> None:
        """Append ``option`` to the category, or remove it if already chosen."""
        current = self.selections.get(category_id, [])
        if any(o.id == option.id for o in current):
            remaining = [o for o in current if o.id != option.id]
        else:
            remaining = current + [option]

        if remaining:
            self.selections[category_id] = remaining
        else:
            self.selections.pop(category_id, None)

    def add_custom(self, category_id: str, text: str) -> Optional[Option]:
        """Create a user-authored option from ``text`` and toggle it in.

        Returns the new option, or None when ``text`` is blank.
        """
        if not text or not text.strip():
            return None
        option = Option.custom(text)
        self.toggle(category_id, option)
        return option

    def clear_category(self, category_id: str) -> bool:
        """Drop a category's selection. Returns False if there was nothing to clear."""
        return self.selections.pop(category_id, None) is not None

    def clear_all(self) -> None:
        self.selections = {}
        self.face_tags = []
        self.style_tags = []

    # ── presets ───────────────────────────────────────────────────────────────

    def apply_preset(self, preset: Preset, catalog: "CategoryCatalog") -> None:
        """Replace the selection of every category the preset names.

        Option order follows the catalog, not the preset. Categories unknown
        to the catalog are skipped; untouched categories keep their selection.
        """
        for category_id, option_ids in preset.selections.items():
            category = catalog.find(category_id)
            if category is None:
                continue
            options = [o for o in category.options if o.id in option_ids]
            if options:
                self.selections[category_id] = options
            else:
                self.selections.pop(category_id, None)

    def is_preset_active(self, preset: Preset) -> bool:
        for category_id, option_ids in preset.selections.items():
            current = self.selections.get(category_id)
            if not current:
                return False
            current_ids = {o.id for o in current}
            if not all(oid in current_ids for oid in option_ids):
                return False
        return True

    # ── freeform tags ─────────────────────────────────────────────────────────

    def set_face_tags(self, tags: List[str]) -> None:
        self.face_tags = list(tags)

    def set_style_tags(self, tags: List[str]) -> None:
        self.style_tags = list(tags)

    # ── queries ───────────────────────────────────────────────────────────────

    def option_ids(self, category_id: str) -> List[str]:
        return [o.id for o in self.selections.get(category_id, [])]

    def flattened_values(self) -> List[str]:
        """Every selected raw value, category by category in map order."""
        return [o.value for options in self.selections.values() for o in options]

    def preview(self, category_id: str) -> Optional[str]:
        """Comma-joined raw values of one category, or None when empty."""
        options = self.selections.get(category_id)
        if not options:
            return None
        return ", ".join(o.value for o in options)

    def is_empty(self) -> bool:
        return not self.selections and not self.face_tags and not self.style_tags

    def snapshot(self) -> SelectionState:
        """Shallow copy safe to hand out (options themselves are immutable)."""
        return {k: list(v) for k, v in self.selections.items()}
