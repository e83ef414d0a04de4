"""Credential gateway, the only way the composer learns about API keys."""
from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional, Sequence

logger = logging.getLogger("prompt_architect.composer.credentials")

DEFAULT_KEY_ENV = ("GEMINI_API_KEY", "GOOGLE_API_KEY")


class CredentialGateway(ABC):
    """Host capability for checking and selecting the generative API key."""

    @abstractmethod
    def has_credential(self) -> bool:
        """Return True if a usable API key is configured."""

    @abstractmethod
    def request_credential_selection(self) -> bool:
        """Ask the host to let the user pick a key.

        Returns True if a key is available afterwards.
        """


class EnvCredentialGateway(CredentialGateway):
    """Reads the API key from the environment.

    There is no interactive picker on a server: a selection request just
    re-reads the environment (``backend/.env`` is loaded by the config layer)
    and flags that the UI should prompt the user for a key.
    """

    def __init__(self, env_names: Optional[Sequence[str]] = None):
        self._env_names = tuple(env_names or DEFAULT_KEY_ENV)
        self.selection_requested = False

    def api_key(self) -> Optional[str]:
        for name in self._env_names:
            value = os.environ.get(name, "").strip()
            if value:
                return value
        return None

    def has_credential(self) -> bool:
        return self.api_key() is not None

    def request_credential_selection(self) -> bool:
        self.selection_requested = True
        available = self.has_credential()
        if not available:
            logger.warning("No API key found in %s", ", ".join(self._env_names))
        return available
