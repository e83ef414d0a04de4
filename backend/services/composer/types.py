"""Data types for the Prompt Architect composer core."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

CUSTOM_ID_PREFIX = "custom_"
NEGATIVE_CATEGORY_ID = "negative"


class Language(str, Enum):
    EN = "en"
    UA = "ua"


class PromptMode(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class NotificationType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Option:
    """One selectable tag."""
    id: str
    label: Dict[str, str]       # {"en": "...", "ua": "..."}
    value: str                  # Raw text used in prompt synthesis
    description: Optional[Dict[str, str]] = None

    @property
    def is_custom(self) -> bool:
        return self.id.startswith(CUSTOM_ID_PREFIX)

    @classmethod
    def custom(cls, text: str) -> "Option":
        """Build a user-authored option with a fresh unique id."""
        return cls(
            id=f"{CUSTOM_ID_PREFIX}{uuid.uuid4().hex}",
            label={lang.value: text for lang in Language},
            value=text,
        )


@dataclass
class Category:
    """Named, ordered group of options. Loaded once from the catalog YAML."""
    id: str
    title: Dict[str, str]
    options: List[Option]
    description: Dict[str, str] = field(default_factory=dict)
    color: str = ""

    def option(self, option_id: str) -> Optional[Option]:
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None


@dataclass
class Preset:
    """Named bundle of option ids per category."""
    id: str
    name: Dict[str, str]
    selections: Dict[str, List[str]]


# category id → options in selection order; absent key means nothing selected
SelectionState = Dict[str, List[Option]]


# ── visible prompt text ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Synced:
    """Visible text is the latest synthesizer output."""
    text: str = ""


@dataclass(frozen=True)
class Overridden:
    """Visible text is the user's (or a generation result's) last write."""
    text: str


PromptText = Union[Synced, Overridden]


@dataclass(frozen=True)
class DurationProposal:
    """Result of the duration-inference rule."""
    seconds: int
    reason: str                 # Message key, e.g. "reason_timelapse"


@dataclass
class Notification:
    """Transient, timestamp-keyed message for the UI toast stack."""
    id: int                     # Millisecond timestamp, unique per sink
    type: NotificationType
    message: str
    created_at: float


@dataclass
class VideoOutcome:
    """What a video-generation request resolved to."""
    status: str                 # "completed" | "credential_required" | "failed" | "skipped"
    video_url: Optional[str] = None
