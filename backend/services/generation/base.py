"""Abstract GenerationBackend interface, the composer's only route to a model."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Union

from backend.services.composer.types import Language, PromptMode

# Raw image bytes, or a base64 string with or without a "data:...;base64," header
ImagePayload = Union[bytes, str]


class GenerationError(RuntimeError):
    """Raised when a generative capability call fails.

    ``code`` is a stable, machine-readable cause so callers never have to
    inspect the message text.
    """

    code = "generation_failed"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class MissingCredentialError(GenerationError):
    """The API key is absent, invalid, or not entitled to the requested model."""

    code = "missing_credential"


class GenerationBackend(ABC):
    """Abstract base for hosted generative services.

    Implementations wrap one provider and expose every capability the
    composer needs. All calls are coroutines so a slow model never blocks
    the event loop, and every failure surfaces as a GenerationError.
    """

    @abstractmethod
    def name(self) -> str:
        """Short identifier (e.g. "gemini")."""

    @abstractmethod
    async def enhance_prompt(self, context: str, mode: PromptMode, language: Language) -> str:
        """Rewrite tag context plus draft into a narrative prompt."""

    @abstractmethod
    async def format_prompt(self, context: str, mode: PromptMode, language: Language) -> str:
        """Turn a bracket-labelled tag list into a fluent prompt."""

    @abstractmethod
    async def suggest_tags(
        self, current_tags: List[str], mode: PromptMode, language: Language,
    ) -> Dict[str, List[str]]:
        """Suggest complementary tags, keyed by category id."""

    @abstractmethod
    async def analyze_face(self, image: ImagePayload, language: Language) -> List[str]:
        """Physical facial descriptors for likeness."""

    @abstractmethod
    async def analyze_style(self, image: ImagePayload, language: Language) -> List[str]:
        """Medium, palette, and technique descriptors of a reference image."""

    @abstractmethod
    async def generate_video(
        self,
        prompt: str,
        aspect_ratio: str = "16:9",
        start_frame: Optional[ImagePayload] = None,
    ) -> Optional[str]:
        """Submit a video job, wait for it, and return a playable URL.

        Returns None when the job finished without a video.

        Raises:
            MissingCredentialError: If the key is missing or rejected.
            GenerationError: For any other failure.
        """
