"""EditLockArbiter decides who owns the visible prompt text.

    Synced(text) ──edit / accept_generated──► Overridden(text)
    Overridden   ──reset / clear────────────► Synced(text)

While Overridden, synthesizer output is dropped so tag toggles never
silently discard hand-written or AI-produced text.
"""
from __future__ import annotations

from backend.services.composer.types import Overridden, PromptText, Synced


class EditLockArbiter:
    def __init__(self, text: str = ""):
        self._state: PromptText = Synced(text)

    @property
    def state(self) -> PromptText:
        return self._state

    @property
    def text(self) -> str:
        return self._state.text

    @property
    def is_manual(self) -> bool:
        return isinstance(self._state, Overridden)

    def sync(self, synthesized: str) -> bool:
        """Publish synthesizer output. Ignored while manually edited.

        Returns True if the visible text changed.
        """
        if self.is_manual or self._state.text == synthesized:
            return False
        self._state = Synced(synthesized)
        return True

    def edit(self, text: str) -> None:
        """Direct edit in the prompt text box."""
        self._state = Overridden(text)

    def accept_generated(self, text: str) -> None:
        """A generation result becomes the new baseline, treated as a manual edit."""
        self._state = Overridden(text)

    def reset(self, synthesized: str) -> None:
        """Explicit "reset to tags": hand control back to the synthesizer."""
        self._state = Synced(synthesized)

    def clear(self) -> None:
        self._state = Synced("")
