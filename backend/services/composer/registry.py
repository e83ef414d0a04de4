"""In-memory registry of composer sessions, one per browser tab."""
from __future__ import annotations

import logging
import uuid
from typing import Callable, Dict, Optional

from backend.services.composer.catalog import CategoryCatalog
from backend.services.composer.credentials import CredentialGateway, EnvCredentialGateway
from backend.services.composer.session import PromptComposer
from backend.services.composer.types import Language, PromptMode
from backend.services.generation.base import GenerationBackend

logger = logging.getLogger("prompt_architect.composer.registry")

_registry_instance: Optional["SessionRegistry"] = None


class SessionNotFoundError(KeyError):
    """Raised when a session id is unknown (expired tab or server restart)."""


class SessionRegistry:
    """Creates, looks up and drops PromptComposer sessions.

    Nothing is persisted: a restart forgets every session.
    """

    def __init__(
        self,
        catalog: CategoryCatalog,
        backend_factory: Callable[[], GenerationBackend],
        credentials: Optional[CredentialGateway] = None,
        language: Language = Language.UA,
        mode: PromptMode = PromptMode.IMAGE,
        default_duration: int = 5,
    ):
        self.catalog = catalog
        self._backend_factory = backend_factory
        self._backend: Optional[GenerationBackend] = None
        self.credentials = credentials or EnvCredentialGateway()
        self._language = Language(language)
        self._mode = PromptMode(mode)
        self._default_duration = default_duration
        self._sessions: Dict[str, PromptComposer] = {}

    @property
    def backend(self) -> GenerationBackend:
        if self._backend is None:
            self._backend = self._backend_factory()
        return self._backend

    def create(self, language: Optional[Language] = None, mode: Optional[PromptMode] = None) -> str:
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = PromptComposer(
            self.catalog,
            self.backend,
            self.credentials,
            language=language or self._language,
            mode=mode or self._mode,
            default_duration=self._default_duration,
        )
        logger.info("Created composer session %s", session_id)
        return session_id

    def get(self, session_id: str) -> PromptComposer:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(f"Session {session_id!r} not found.")

    def drop(self, session_id: str) -> bool:
        removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info("Dropped composer session %s", session_id)
        return removed

    def __len__(self) -> int:
        return len(self._sessions)


# ── module-level singleton ────────────────────────────────────────────────────


def get_registry() -> SessionRegistry:
    """Return the process-wide registry, building it from settings on first use."""
    global _registry_instance
    if _registry_instance is None:
        from backend.services.generation.gemini import GeminiBackend
        from backend.services.shared.config import DEFAULT_SETTINGS_PATH, get_config

        config = get_config(str(DEFAULT_SETTINGS_PATH))
        _registry_instance = SessionRegistry(
            catalog=CategoryCatalog(),
            backend_factory=lambda: GeminiBackend.from_config(config),
            credentials=EnvCredentialGateway(config.get("gemini.api_key_env")),
            language=config.get("composer.language", "ua"),
            mode=config.get("composer.mode", "image"),
            default_duration=int(config.get("composer.default_duration", 5)),
        )
    return _registry_instance


def reset_registry() -> None:
    """Forget all sessions (mainly for testing)."""
    global _registry_instance
    _registry_instance = None
