"""PromptComposer: one browser tab's prompt-building session.

Owns the selection store, the edit-lock arbiter, the duration control and
the notification queue, and runs the external generative actions against
an injected GenerationBackend.

Every state change is applied synchronously on the event loop thread, so
no locking is needed. Each external action is guarded by an in-flight flag
that is set before the first await and always cleared afterwards.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Set

from backend.services.composer.catalog import CategoryCatalog
from backend.services.composer.credentials import CredentialGateway
from backend.services.composer.duration import DEFAULT_DURATION_SEC, DurationControl, infer_duration
from backend.services.composer.edit_lock import EditLockArbiter
from backend.services.composer.notifications import NotificationSink, translate
from backend.services.composer.selection_store import SelectionStore
from backend.services.composer.synthesizer import PromptSynthesizer
from backend.services.composer.types import (
    Language, NotificationType, Option, PromptMode, VideoOutcome,
)
from backend.services.generation.base import (
    GenerationBackend, GenerationError, ImagePayload, MissingCredentialError,
)

logger = logging.getLogger("prompt_architect.composer.session")

# Both the enhance and the format path write the prompt text, so they share a flag
_ACTION_GENERATE = "generate_prompt"
_ACTION_SUGGEST = "suggest"
_ACTION_FACE = "analyze_face"
_ACTION_STYLE = "analyze_style"
_ACTION_VIDEO = "generate_video"


class ActionInProgressError(RuntimeError):
    """Raised when an external action is triggered while the same one is running."""

    def __init__(self, action: str):
        super().__init__(f"Action '{action}' is already in progress.")
        self.action = action


class ClearNotConfirmedError(ValueError):
    """Raised when clear-all is invoked without the confirmation step."""


class PromptComposer:
    """Prompt-building session.

    Usage::

        composer = PromptComposer(CategoryCatalog(), GeminiBackend(), EnvCredentialGateway())
        composer.toggle_by_id("subject", "dragon")
        composer.prompt_text                     # "Subject: a dragon"
        await composer.generate(enhance=True)    # AI text becomes the new baseline
    """

    def __init__(
        self,
        catalog: CategoryCatalog,
        backend: GenerationBackend,
        credentials: CredentialGateway,
        notifications: Optional[NotificationSink] = None,
        language: Language = Language.UA,
        mode: PromptMode = PromptMode.IMAGE,
        default_duration: int = DEFAULT_DURATION_SEC,
    ):
        self.catalog = catalog
        self.backend = backend
        self.credentials = credentials
        self.notifications = notifications or NotificationSink()
        self.language = Language(language)
        self.mode = PromptMode(mode)

        self.store = SelectionStore()
        self.synthesizer = PromptSynthesizer(catalog)
        self.arbiter = EditLockArbiter()
        self.duration = DurationControl(default_duration)
        self.start_frame: Optional[ImagePayload] = None
        self.last_video_url: Optional[str] = None
        self._in_flight: Set[str] = set()

    # ── flags ─────────────────────────────────────────────────────────────────

    @property
    def prompt_text(self) -> str:
        return self.arbiter.text

    @property
    def is_enhancing(self) -> bool:
        return _ACTION_GENERATE in self._in_flight

    @property
    def is_suggesting(self) -> bool:
        return _ACTION_SUGGEST in self._in_flight

    @property
    def is_analyzing_face(self) -> bool:
        return _ACTION_FACE in self._in_flight

    @property
    def is_analyzing_style(self) -> bool:
        return _ACTION_STYLE in self._in_flight

    @property
    def is_generating_video(self) -> bool:
        return _ACTION_VIDEO in self._in_flight

    # ── selections ────────────────────────────────────────────────────────────

    def toggle(self, category_id: str, option: Option) -> None:
        self.store.toggle(category_id, option)
        self._refresh()

    def toggle_by_id(self, category_id: str, option_id: str) -> bool:
        """Toggle a catalog option, or deselect a custom one already chosen.

        Returns False if the id is neither in the catalog nor selected.
        """
        option = self.catalog.option(category_id, option_id)
        if option is None:
            option = next(
                (o for o in self.store.selections.get(category_id, []) if o.id == option_id),
                None,
            )
        if option is None:
            return False
        self.toggle(category_id, option)
        return True

    def add_custom(self, category_id: str, text: str) -> Optional[Option]:
        """Add a user-typed tag. Blank text is ignored and returns None."""
        if not text or not text.strip():
            return None
        option = self.store.add_custom(category_id, text.strip())
        self._refresh()
        return option

    def clear_category(self, category_id: str) -> bool:
        """Returns False (and changes nothing) when the category is already empty."""
        if not self.store.clear_category(category_id):
            return False
        self._refresh()
        self._notify("category_cleared")
        return True

    def preview_category(self, category_id: str) -> Optional[str]:
        text = self.store.preview(category_id)
        if text is None:
            self._notify("nothing_selected")
        else:
            self.notifications.push(text, NotificationType.INFO)
        return text

    def apply_preset(self, preset_id: str) -> None:
        """Raises PresetNotFoundError for unknown ids."""
        preset = self.catalog.preset(preset_id)
        self.store.apply_preset(preset, self.catalog)
        self._refresh()
        name = preset.name.get(self.language.value) or preset.name.get("en", preset.id)
        self._notify("preset_applied", NotificationType.SUCCESS, name=name)

    def is_preset_active(self, preset_id: str) -> bool:
        return self.store.is_preset_active(self.catalog.preset(preset_id))

    def set_face_tags(self, tags: List[str]) -> None:
        self.store.set_face_tags(tags)
        self._refresh()
        if tags:
            self._notify("face_added", NotificationType.SUCCESS)

    def set_style_tags(self, tags: List[str]) -> None:
        self.store.set_style_tags(tags)
        self._refresh()
        if tags:
            self._notify("style_added", NotificationType.SUCCESS)

    # ── clear all ─────────────────────────────────────────────────────────────

    def request_clear_all(self) -> bool:
        """First step of clear-all. Returns True if a confirmation should be shown."""
        if self._is_blank():
            self._notify("nothing_to_clear")
            return False
        return True

    def clear_all(self, confirm: bool = False) -> None:
        """Reset the whole session in one step.

        Raises:
            ClearNotConfirmedError: If ``confirm`` is not True.
        """
        if not confirm:
            raise ClearNotConfirmedError("clear_all requires confirmation.")
        self.store.clear_all()
        self.arbiter.clear()
        self.duration.reset()
        self.start_frame = None
        self._notify("cleared_all")

    # ── prompt text ───────────────────────────────────────────────────────────

    def edit_text(self, text: str) -> None:
        self.arbiter.edit(text)

    def reset_to_tags(self) -> None:
        self.arbiter.reset(self._synthesize())
        self._notify("reset_to_tags")

    # ── settings ──────────────────────────────────────────────────────────────

    def set_duration(self, seconds: int) -> int:
        return self.duration.set_manual(seconds)

    def set_mode(self, mode: PromptMode) -> None:
        self.mode = PromptMode(mode)
        self._infer_duration()

    def set_language(self, language: Language) -> None:
        self.language = Language(language)

    def set_start_frame(self, image: Optional[ImagePayload]) -> None:
        self.start_frame = image

    # ── external actions ──────────────────────────────────────────────────────

    async def generate(self, enhance: bool = False) -> bool:
        """Ask the backend for a finished prompt.

        ``enhance=True`` rewrites draft plus tags into a narrative; otherwise
        the bracket-labelled context is formatted into fluent text. On success
        the result becomes the manually-edited baseline. Returns True on success.
        """
        with self._action(_ACTION_GENERATE):
            face, style = self.store.face_tags, self.store.style_tags
            if enhance:
                context = self.synthesizer.build_enhance_context(
                    self.store.selections, self.mode, self.language,
                    face_tags=face, style_tags=style,
                    duration_sec=self.duration.value, draft=self.arbiter.text,
                )
                if not context:
                    self._notify("nothing_to_enhance")
                    return False
            else:
                context = self.synthesizer.build_generation_context(
                    self.store.selections, self.mode, self.language,
                    face_tags=face, style_tags=style,
                    duration_sec=self.duration.value,
                    user_notes=self.arbiter.text if self.arbiter.is_manual else "",
                )

            try:
                if enhance:
                    result = await self.backend.enhance_prompt(context, self.mode, self.language)
                else:
                    result = await self.backend.format_prompt(context, self.mode, self.language)
            except GenerationError as exc:
                logger.warning("Prompt %s failed: %s", "enhance" if enhance else "format", exc)
                self._notify("generation_failed", NotificationType.ERROR)
                return False

            self.arbiter.accept_generated(result)
            if enhance:
                self._notify("prompt_enhanced", NotificationType.SUCCESS)
            return True

    async def suggest(self) -> int:
        """Add AI-suggested tags as custom options. Returns how many were added."""
        with self._action(_ACTION_SUGGEST):
            try:
                suggestions = await self.backend.suggest_tags(
                    self.store.flattened_values(), self.mode, self.language,
                )
            except GenerationError as exc:
                logger.warning("Tag suggestion failed: %s", exc)
                self._notify("suggestions_failed", NotificationType.ERROR)
                return 0

            count = 0
            for category_id, tags in suggestions.items():
                for tag in tags:
                    if self.store.add_custom(category_id, tag.strip()) is not None:
                        count += 1

            if count:
                self._refresh()
                self._notify("suggestions_added", NotificationType.SUCCESS, count=count)
            else:
                self._notify("no_suggestions")
            return count

    async def analyze_face(self, image: ImagePayload) -> List[str]:
        with self._action(_ACTION_FACE):
            try:
                tags = await self.backend.analyze_face(image, self.language)
            except GenerationError as exc:
                logger.warning("Face analysis failed: %s", exc)
                self._notify("face_failed", NotificationType.ERROR)
                return []
            self.set_face_tags(tags)
            return tags

    async def analyze_style(self, image: ImagePayload) -> List[str]:
        with self._action(_ACTION_STYLE):
            try:
                tags = await self.backend.analyze_style(image, self.language)
            except GenerationError as exc:
                logger.warning("Style analysis failed: %s", exc)
                self._notify("style_failed", NotificationType.ERROR)
                return []
            self.set_style_tags(tags)
            return tags

    async def generate_video(self) -> VideoOutcome:
        """Render the current prompt text as a video (video mode only)."""
        if self.mode != PromptMode.VIDEO:
            return VideoOutcome(status="skipped")

        with self._action(_ACTION_VIDEO):
            if not self.credentials.has_credential():
                self.credentials.request_credential_selection()
                return VideoOutcome(status="credential_required")

            prompt = self.arbiter.text
            if not prompt:
                self._notify("prompt_required", NotificationType.ERROR)
                return VideoOutcome(status="skipped")

            try:
                url = await self.backend.generate_video(
                    prompt, self._aspect_ratio(), self.start_frame,
                )
            except MissingCredentialError as exc:
                logger.warning("Video generation needs a credential: %s", exc)
                self.credentials.request_credential_selection()
                return VideoOutcome(status="credential_required")
            except GenerationError as exc:
                logger.exception("Video generation failed: %s", exc)
                self._notify("video_failed", NotificationType.ERROR)
                return VideoOutcome(status="failed")

            if not url:
                self._notify("video_failed", NotificationType.ERROR)
                return VideoOutcome(status="failed")

            self.last_video_url = url
            return VideoOutcome(status="completed", video_url=url)

    def select_credential(self) -> bool:
        selected = self.credentials.request_credential_selection()
        if selected:
            self._notify("key_selected", NotificationType.SUCCESS)
        return selected

    # ── views ─────────────────────────────────────────────────────────────────

    def state(self) -> Dict[str, Any]:
        """JSON-ready snapshot for the UI."""
        return {
            "language": self.language.value,
            "mode": self.mode.value,
            "selections": {
                category_id: [
                    {"id": o.id, "label": o.label, "value": o.value, "custom": o.is_custom}
                    for o in options
                ]
                for category_id, options in self.store.selections.items()
            },
            "face_tags": list(self.store.face_tags),
            "style_tags": list(self.store.style_tags),
            "prompt_text": self.arbiter.text,
            "manually_edited": self.arbiter.is_manual,
            "duration": {"value": self.duration.value, "pinned": self.duration.pinned},
            "has_start_frame": self.start_frame is not None,
            "active_presets": [
                p.id for p in self.catalog.presets() if self.store.is_preset_active(p)
            ],
            "in_progress": {
                "is_enhancing": self.is_enhancing,
                "is_suggesting": self.is_suggesting,
                "is_analyzing_face": self.is_analyzing_face,
                "is_analyzing_style": self.is_analyzing_style,
                "is_generating_video": self.is_generating_video,
            },
            "last_video_url": self.last_video_url,
        }

    # ── internal ──────────────────────────────────────────────────────────────

    @contextmanager
    def _action(self, action: str) -> Iterator[None]:
        if action in self._in_flight:
            raise ActionInProgressError(action)
        self._in_flight.add(action)
        try:
            yield
        finally:
            self._in_flight.discard(action)

    def _synthesize(self) -> str:
        return self.synthesizer.synthesize(
            self.store.selections, self.store.face_tags, self.store.style_tags,
        )

    def _refresh(self) -> None:
        """Re-run synthesis (unless locked) and duration inference after a change."""
        self.arbiter.sync(self._synthesize())
        self._infer_duration()

    def _infer_duration(self) -> None:
        if self.mode != PromptMode.VIDEO:
            return
        proposal = infer_duration(self.store.option_ids("video_settings"))
        if self.duration.apply(proposal):
            reason = translate(proposal.reason, self.language)
            self._notify("auto_duration", seconds=proposal.seconds, reason=reason)

    def _aspect_ratio(self) -> str:
        image_settings = self.store.selections.get("image_settings")
        if image_settings and "9:16" in image_settings[0].value:
            return "9:16"
        return "16:9"

    def _is_blank(self) -> bool:
        return self.store.is_empty() and not self.arbiter.text and self.start_frame is None

    def _notify(
        self, key: str, type: NotificationType = NotificationType.INFO, **kwargs: Any,
    ) -> None:
        self.notifications.push(translate(key, self.language, **kwargs), type)
