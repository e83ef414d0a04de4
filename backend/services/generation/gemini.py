"""Gemini backend: text, vision and Veo video generation via google-genai."""
from __future__ import annotations

import asyncio
import base64
import binascii
import json
import logging
import os
from typing import Any, Dict, List, Optional, Sequence

import httpx
from google import genai
from google.genai import errors, types

from backend.services.composer.types import Language, PromptMode
from backend.services.generation import instructions
from backend.services.generation.base import (
    GenerationBackend, GenerationError, ImagePayload, MissingCredentialError,
)
from backend.services.shared.config import Config

logger = logging.getLogger("prompt_architect.generation.gemini")

_DEFAULT_TEXT_MODEL = "gemini-3-flash-preview"
_DEFAULT_VIDEO_MODEL = "veo-3.1-fast-generate-preview"
_DEFAULT_KEY_ENV = ("GEMINI_API_KEY", "GOOGLE_API_KEY")
# Status codes the API uses for a missing, invalid, or unentitled key
_CREDENTIAL_STATUS_CODES = {401, 403, 404}
# Transport failures the SDK lets through untranslated
_NETWORK_ERRORS = (httpx.HTTPError, OSError, asyncio.TimeoutError)

_STRING_LIST_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(type=types.Type.STRING),
)


def decode_image(payload: ImagePayload) -> bytes:
    """Return raw bytes for an image given as bytes or (data-URL) base64 text.

    Raises:
        GenerationError: If the string is not valid base64.
    """
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    data = payload.split(",", 1)[1] if payload.startswith("data:") else payload
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise GenerationError(
            f"Image payload is not valid base64: {exc}", code="invalid_image",
        ) from exc


class GeminiBackend(GenerationBackend):
    """Google Gemini / Veo implementation of GenerationBackend.

    The API key is resolved on every call so a key selected mid-session is
    picked up without restarting the server.

    Usage::

        backend = GeminiBackend.from_config(get_config())
        text = await backend.format_prompt(context, PromptMode.IMAGE, Language.EN)
        url = await backend.generate_video(text, aspect_ratio="9:16")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        text_model: str = _DEFAULT_TEXT_MODEL,
        video_model: str = _DEFAULT_VIDEO_MODEL,
        video_resolution: str = "720p",
        poll_interval_sec: float = 5.0,
        api_key_env: Sequence[str] = _DEFAULT_KEY_ENV,
    ):
        self._api_key = api_key
        self.text_model = text_model
        self.video_model = video_model
        self.video_resolution = video_resolution
        self.poll_interval_sec = poll_interval_sec
        self._api_key_env = tuple(api_key_env)

    @classmethod
    def from_config(cls, config: Config) -> "GeminiBackend":
        return cls(
            text_model=config.get("gemini.text_model", _DEFAULT_TEXT_MODEL),
            video_model=config.get("gemini.video_model", _DEFAULT_VIDEO_MODEL),
            video_resolution=config.get("gemini.video_resolution", "720p"),
            poll_interval_sec=float(config.get("gemini.poll_interval_sec", 5)),
            api_key_env=config.get("gemini.api_key_env", _DEFAULT_KEY_ENV),
        )

    def name(self) -> str:
        return "gemini"

    # ── text capabilities ─────────────────────────────────────────────────────

    async def enhance_prompt(self, context: str, mode: PromptMode, language: Language) -> str:
        mode = PromptMode(mode)
        contents = (
            f"User Input: {context}. \n\n Mode: {mode.value.upper()}. \n\n "
            "Generate the Narrative Prompt ensuring all selected tags are visually present."
        )
        config = types.GenerateContentConfig(
            system_instruction=instructions.enhance_instruction(mode, language),
            thinking_config=types.ThinkingConfig(thinking_budget=0),
        )
        return (await self._generate(contents, config)).strip()

    async def format_prompt(self, context: str, mode: PromptMode, language: Language) -> str:
        if not context:
            return ""
        config = types.GenerateContentConfig(
            system_instruction=instructions.format_instruction(mode, language),
            thinking_config=types.ThinkingConfig(thinking_budget=0),
        )
        return (await self._generate(context, config)).strip()

    async def suggest_tags(
        self, current_tags: List[str], mode: PromptMode, language: Language,
    ) -> Dict[str, List[str]]:
        contents = (
            f'Current tags: "{", ".join(current_tags)}". '
            f"Mode: {PromptMode(mode).value}. Suggest missing tags."
        )
        config = types.GenerateContentConfig(
            system_instruction=instructions.suggest_instruction(language),
            response_mime_type="application/json",
            response_schema=types.Schema(
                type=types.Type.OBJECT,
                properties={c: _STRING_LIST_SCHEMA for c in instructions.SUGGESTION_CATEGORIES},
            ),
        )
        raw = self._parse_json(await self._generate(contents, config), default={})
        if not isinstance(raw, dict):
            raise GenerationError(f"Expected a JSON object of suggestions, got {type(raw).__name__}")
        return {
            str(category): [str(t) for t in tags if str(t).strip()]
            for category, tags in raw.items()
            if isinstance(tags, list)
        }

    # ── vision capabilities ───────────────────────────────────────────────────

    async def analyze_face(self, image: ImagePayload, language: Language) -> List[str]:
        return await self._describe_image(
            image,
            "Analyze this face and list physical descriptors for a prompt.",
            instructions.face_instruction(language),
        )

    async def analyze_style(self, image: ImagePayload, language: Language) -> List[str]:
        return await self._describe_image(
            image,
            "Analyze the style of this image.",
            instructions.style_instruction(language),
        )

    # ── video ─────────────────────────────────────────────────────────────────

    async def generate_video(
        self,
        prompt: str,
        aspect_ratio: str = "16:9",
        start_frame: Optional[ImagePayload] = None,
    ) -> Optional[str]:
        api_key = self._require_key()
        client = self._client(api_key)

        kwargs: Dict[str, Any] = {
            "model": self.video_model,
            "prompt": prompt,
            "config": types.GenerateVideosConfig(
                number_of_videos=1,
                resolution=self.video_resolution,
                aspect_ratio=aspect_ratio,
            ),
        }
        if start_frame is not None:
            kwargs["image"] = types.Image(image_bytes=decode_image(start_frame), mime_type="image/jpeg")

        logger.info("Submitting %s job (%s, start frame: %s)",
                    self.video_model, aspect_ratio, start_frame is not None)
        try:
            operation = await client.aio.models.generate_videos(**kwargs)
            while not operation.done:
                await asyncio.sleep(self.poll_interval_sec)
                operation = await client.aio.operations.get(operation)
        except errors.APIError as exc:
            raise self._translate(exc) from exc
        except _NETWORK_ERRORS as exc:
            raise GenerationError(f"Video request failed: {exc}", code="network") from exc

        if operation.error:
            raise GenerationError(f"Video job failed: {operation.error}")

        videos = operation.response.generated_videos if operation.response else None
        uri = videos[0].video.uri if videos and videos[0].video else None
        if not uri:
            logger.warning("Video job finished without a video")
            return None
        separator = "&" if "?" in uri else "?"
        return f"{uri}{separator}key={api_key}"

    # ── internal ──────────────────────────────────────────────────────────────

    def _resolve_key(self) -> Optional[str]:
        if self._api_key:
            return self._api_key
        for name in self._api_key_env:
            value = os.environ.get(name, "").strip()
            if value:
                return value
        return None

    def _require_key(self) -> str:
        api_key = self._resolve_key()
        if not api_key:
            raise MissingCredentialError(
                f"API key not found (checked {', '.join(self._api_key_env)})"
            )
        return api_key

    def _client(self, api_key: str) -> genai.Client:
        """Build an SDK client. Overridable for testing."""
        return genai.Client(api_key=api_key)

    async def _generate(self, contents: Any, config: types.GenerateContentConfig) -> str:
        client = self._client(self._require_key())
        try:
            response = await client.aio.models.generate_content(
                model=self.text_model, contents=contents, config=config,
            )
        except errors.APIError as exc:
            raise self._translate(exc) from exc
        except _NETWORK_ERRORS as exc:
            raise GenerationError(f"Gemini request failed: {exc}", code="network") from exc
        return response.text or ""

    async def _describe_image(self, image: ImagePayload, prompt: str, system: str) -> List[str]:
        contents = [
            types.Part.from_bytes(data=decode_image(image), mime_type="image/jpeg"),
            prompt,
        ]
        config = types.GenerateContentConfig(
            system_instruction=system,
            response_mime_type="application/json",
            response_schema=_STRING_LIST_SCHEMA,
        )
        raw = self._parse_json(await self._generate(contents, config), default=[])
        if not isinstance(raw, list):
            raise GenerationError(f"Expected a JSON array of descriptors, got {type(raw).__name__}")
        return [str(t) for t in raw if str(t).strip()]

    @staticmethod
    def _parse_json(text: str, default: Any) -> Any:
        """Parse a JSON response (possibly wrapped in a markdown fence)."""
        text = text.strip()
        if not text:
            return default
        if "```json" in text:
            text = text.split("```json")[1].split("```")[0].strip()
        elif "```" in text:
            text = text.split("```")[1].split("```")[0].strip()
        try:
            return json.loads(text)
        except ValueError as exc:
            raise GenerationError(f"Model returned malformed JSON: {exc}") from exc

    @staticmethod
    def _translate(exc: errors.APIError) -> GenerationError:
        if isinstance(exc, errors.ClientError) and exc.code in _CREDENTIAL_STATUS_CODES:
            return MissingCredentialError(f"Gemini rejected the credential ({exc.code}): {exc}")
        return GenerationError(f"Gemini API error ({exc.code}): {exc}")
