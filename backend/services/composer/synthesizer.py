"""PromptSynthesizer turns tag selections into prompt text.

Two assembly paths share one category ordering:

* live preview: ``"Subject: a dragon | Lighting: neon"``, recomputed on every
  selection change while the prompt is not manually edited;
* generation context: bracket-labelled, multi-line blob handed to the
  generative backend when the user explicitly asks for a prompt.

Ordering (narrative, not alphabetical):
    format → subject → character → clothing → emotion → pose → props → 3D →
    environment → framing → video settings → lighting → composition →
    camera → effects → typography → style → intensity → mood → quality
"""
from __future__ import annotations

from typing import Dict, Iterator, List, Sequence, Tuple

from backend.services.composer.catalog import CategoryCatalog
from backend.services.composer.types import (
    NEGATIVE_CATEGORY_ID, Language, Option, PromptMode, SelectionState,
)

PROMPT_ORDER: Tuple[str, ...] = (
    "format",
    "subject",
    "character_details",
    "clothing",
    "emotion",
    "pose_action",
    "props",
    "models_3d",
    "environment",
    "framing",
    "video_settings",
    "lighting",
    "visual_rules",
    "camera",
    "visual_effects",
    "text_handling",
    "style",
    "style_intensity",
    "mood",
    "quality",
)

FRAGMENT_SEPARATOR = " | "

_MODE_INSTRUCTIONS = {
    PromptMode.IMAGE: "GENERATE_IMAGE_PROMPT (Detailed, High Quality)",
    PromptMode.VIDEO: "GENERATE_CINEMATIC_VIDEO_PROMPT (Describe movement, camera, duration)",
}

_CONTEXT_LABELS: Dict[str, Dict[str, str]] = {
    "duration":       {"en": "DURATION", "ua": "ТРИВАЛІСТЬ"},
    "face":           {"en": "FACE DETAILS", "ua": "ДЕТАЛІ ОБЛИЧЧЯ"},
    "style_ref":      {"en": "STYLE REFERENCE", "ua": "РЕФЕРЕНС СТИЛЮ"},
    "draft":          {"en": "CURRENT DRAFT (Refine this)", "ua": "ПОТОЧНИЙ ЧЕРНОВИК (Редагувати це)"},
    "face_critical":  {"en": "FACE DETAILS (CRITICAL)", "ua": "ДЕТАЛІ ОБЛИЧЧЯ (ВАЖЛИВО)"},
    "video_duration": {"en": "VIDEO DURATION", "ua": "ТРИВАЛІСТЬ ВІДЕО"},
}


def _label(key: str, language: Language) -> str:
    return _CONTEXT_LABELS[key][Language(language).value]


def _values(options: Sequence[Option]) -> str:
    return ", ".join(o.value for o in options)


class PromptSynthesizer:
    """Deterministic prompt assembly.

    Output depends only on the arguments and the (immutable) catalog, never
    on call history.

    Usage::

        synth = PromptSynthesizer(CategoryCatalog())
        synth.synthesize({"subject": [...], "lighting": [...]})
        # "Subject: a dragon | Lighting: neon"
    """

    def __init__(self, catalog: CategoryCatalog):
        self._catalog = catalog

    # ── live preview ──────────────────────────────────────────────────────────

    def synthesize(
        self,
        selections: SelectionState,
        face_tags: Sequence[str] = (),
        style_tags: Sequence[str] = (),
    ) -> str:
        """Assemble the live-preview prompt.

        Args:
            selections: Category id → chosen options.
            face_tags: Descriptors from face analysis.
            style_tags: Descriptors from style-reference analysis.

        Returns:
            Fragments joined by " | ", or "" when nothing is selected.
        """
        parts: List[str] = []

        # 1. Catalog categories in narrative order, titled in English
        for category_id in PROMPT_ORDER:
            options = selections.get(category_id)
            title = self._catalog.title(category_id, "en")
            if options and title:
                parts.append(f"{title}: {_values(options)}")

        # 2. Anything else except the negative category, keyed by raw id
        for category_id, options in self._unordered(selections):
            if options:
                parts.append(f"{category_id}: {_values(options)}")

        # 3. Freeform analysis tags
        if face_tags:
            parts.append(f"Face Details: {', '.join(face_tags)}")
        if style_tags:
            parts.append(f"Style Ref: {', '.join(style_tags)}")

        return FRAGMENT_SEPARATOR.join(parts)

    # ── generation context ────────────────────────────────────────────────────

    def build_generation_context(
        self,
        selections: SelectionState,
        mode: PromptMode,
        language: Language,
        face_tags: Sequence[str] = (),
        style_tags: Sequence[str] = (),
        duration_sec: int = 5,
        user_notes: str = "",
    ) -> str:
        """Assemble the multi-line context for the *format* capability.

        Args:
            selections: Category id → chosen options.
            mode: Image or video; picks the instruction line.
            language: Language of the bracket labels.
            face_tags: Descriptors from face analysis.
            style_tags: Descriptors from style-reference analysis.
            duration_sec: Clip length, emitted in video mode only.
            user_notes: Manually edited prompt text; pass "" when synced.
        """
        mode = PromptMode(mode)
        parts: List[str] = [_MODE_INSTRUCTIONS[mode]]

        if mode == PromptMode.VIDEO:
            parts.append(f"[{_label('duration', language)}]: {duration_sec}s")
        if face_tags:
            parts.append(f"[{_label('face', language)}]: {', '.join(face_tags)}")
        if style_tags:
            parts.append(f"[{_label('style_ref', language)}]: {', '.join(style_tags)}")

        for category_id in PROMPT_ORDER:
            options = selections.get(category_id)
            title = self._catalog.title(category_id, "en")
            if options and title:
                label = "VIDEO_SETTINGS" if category_id == "video_settings" else title
                parts.append(f"[{label}]: {_values(options)}")

        negatives = selections.get(NEGATIVE_CATEGORY_ID)
        if negatives:
            parts.append(f"[Negative]: {_values(negatives)}")

        if user_notes:
            parts.append(f"[USER NOTES]: {user_notes}")

        return "\n".join(parts)

    def build_enhance_context(
        self,
        selections: SelectionState,
        mode: PromptMode,
        language: Language,
        face_tags: Sequence[str] = (),
        style_tags: Sequence[str] = (),
        duration_sec: int = 5,
        draft: str = "",
    ) -> str:
        """Assemble the ``[LABEL]: value; `` context for the *enhance* capability.

        Unlike the format context, every selected category is included (the
        negative one too) and the current draft leads. Returns "" when there
        is nothing at all to enhance.
        """
        text = ""
        if draft:
            text += f"[{_label('draft', language)}]: {draft}; \n"
        if face_tags:
            text += f"[{_label('face_critical', language)}]: {', '.join(face_tags)}; \n"
        if style_tags:
            text += f"[{_label('style_ref', language)}]: {', '.join(style_tags)}; \n"
        if PromptMode(mode) == PromptMode.VIDEO:
            text += f"[{_label('video_duration', language)}]: {duration_sec} seconds; \n"

        ordered = [(cid, selections[cid]) for cid in PROMPT_ORDER if cid in selections]
        rest = [(cid, opts) for cid, opts in selections.items() if cid not in PROMPT_ORDER]
        for category_id, options in ordered + rest:
            if options:
                text += f"[{category_id.upper()}]: {_values(options)}; "

        return text

    # ── internal ──────────────────────────────────────────────────────────────

    @staticmethod
    def _unordered(selections: SelectionState) -> Iterator[Tuple[str, List[Option]]]:
        for category_id, options in selections.items():
            if category_id not in PROMPT_ORDER and category_id != NEGATIVE_CATEGORY_ID:
                yield category_id, options
