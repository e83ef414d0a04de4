"""Shared test fixtures for Prompt Architect."""
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Generator, List, Optional

import pytest
import yaml

from backend.services.composer.catalog import CategoryCatalog
from backend.services.composer.credentials import CredentialGateway
from backend.services.composer.notifications import NotificationSink
from backend.services.composer.session import PromptComposer
from backend.services.composer.types import Language, PromptMode
from backend.services.generation.base import GenerationBackend, GenerationError


@pytest.fixture(scope="session")
def project_root() -> Path:
    return Path(__file__).parent.parent.parent


@pytest.fixture
def tmp_dir() -> Generator[Path, None, None]:
    d = Path(tempfile.mkdtemp())
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def sample_settings(tmp_dir: Path) -> Path:
    """Write a minimal settings.yaml to a temp dir and return its path."""
    settings = {
        "gemini": {
            "text_model": "gemini-3-flash-preview",
            "video_model": "veo-3.1-fast-generate-preview",
            "video_resolution": "720p",
            "poll_interval_sec": 0,
            "api_key_env": ["TEST_GEMINI_KEY"],
        },
        "composer": {"language": "en", "mode": "image", "default_duration": 5},
        "logging": {"level": "DEBUG", "file": str(tmp_dir / "test.log")},
    }
    cfg_path = tmp_dir / "settings.yaml"
    cfg_path.write_text(yaml.dump(settings))
    return cfg_path


# ─────────────────────────────────────────────────────────────────────────────
# Catalog
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def catalog() -> CategoryCatalog:
    """The real catalog shipped in backend/config/categories.yaml."""
    return CategoryCatalog()


# ─────────────────────────────────────────────────────────────────────────────
# Generation backend / credential fakes
# ─────────────────────────────────────────────────────────────────────────────


class FakeBackend(GenerationBackend):
    """Scriptable GenerationBackend that records every call.

    Set ``fail`` to an exception instance to make every call raise it.
    """

    def __init__(self):
        self.calls: List[tuple] = []
        self.fail: Optional[Exception] = None
        self.text_result = "Create an image where a dragon glows in neon light"
        self.suggestions: Dict[str, List[str]] = {"lighting": ["rim light"], "mood": ["mysterious"]}
        self.face_tags = ["30 year old male", "sharp jawline"]
        self.style_tags = ["oil painting style", "thick impasto strokes"]
        self.video_url: Optional[str] = "https://example.test/video.mp4?alt=media&key=k"

    def name(self) -> str:
        return "fake"

    def _record(self, *call):
        self.calls.append(call)
        if self.fail is not None:
            raise self.fail

    async def enhance_prompt(self, context, mode, language):
        self._record("enhance", context, mode, language)
        return self.text_result

    async def format_prompt(self, context, mode, language):
        self._record("format", context, mode, language)
        return self.text_result

    async def suggest_tags(self, current_tags, mode, language):
        self._record("suggest", list(current_tags), mode, language)
        return self.suggestions

    async def analyze_face(self, image, language):
        self._record("face", image, language)
        return self.face_tags

    async def analyze_style(self, image, language):
        self._record("style", image, language)
        return self.style_tags

    async def generate_video(self, prompt, aspect_ratio="16:9", start_frame=None):
        self._record("video", prompt, aspect_ratio, start_frame)
        return self.video_url


class FakeCredentials(CredentialGateway):
    def __init__(self, has_key: bool = True):
        self.has_key = has_key
        self.selection_requests = 0

    def has_credential(self) -> bool:
        return self.has_key

    def request_credential_selection(self) -> bool:
        self.selection_requests += 1
        return self.has_key


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def fake_credentials() -> FakeCredentials:
    return FakeCredentials()


@pytest.fixture
def composer(catalog, fake_backend, fake_credentials) -> PromptComposer:
    """English, image-mode session wired to the fakes."""
    return PromptComposer(
        catalog, fake_backend, fake_credentials,
        notifications=NotificationSink(),
        language=Language.EN,
        mode=PromptMode.IMAGE,
    )


@pytest.fixture
def video_composer(composer) -> PromptComposer:
    composer.set_mode(PromptMode.VIDEO)
    return composer


@pytest.fixture
def failing_backend(fake_backend) -> FakeBackend:
    fake_backend.fail = GenerationError("model unavailable")
    return fake_backend
