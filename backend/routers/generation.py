"""Generation router: AI enhance/format, suggestions, image analysis and video."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from backend.routers.composer import get_session
from backend.services.composer.session import ActionInProgressError, PromptComposer
from backend.services.shared.logging import get_logger

logger = get_logger("routers.generation")
router = APIRouter()

_ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp"}
_MAX_IMAGE_BYTES = 10 * 1024 * 1024


def _busy(exc: ActionInProgressError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


async def _read_image(file: UploadFile) -> bytes:
    if file.content_type not in _ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=(
                f"Unsupported image type '{file.content_type}'. "
                f"Allowed: {sorted(_ALLOWED_IMAGE_TYPES)}"
            ),
        )
    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty image upload.")
    if len(content) > _MAX_IMAGE_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Image exceeds {_MAX_IMAGE_BYTES // (1024 * 1024)} MB.",
        )
    return content


# ── Prompt text ───────────────────────────────────────────────────────────────


@router.post("/{session_id}/enhance")
async def enhance_prompt(session: PromptComposer = Depends(get_session)) -> Dict[str, Any]:
    """Rewrite draft plus tags into a narrative prompt."""
    try:
        ok = await session.generate(enhance=True)
    except ActionInProgressError as exc:
        raise _busy(exc)
    return {"ok": ok, "state": session.state()}


@router.post("/{session_id}/format")
async def format_prompt(session: PromptComposer = Depends(get_session)) -> Dict[str, Any]:
    """Format the bracket-labelled tag context into fluent text."""
    try:
        ok = await session.generate(enhance=False)
    except ActionInProgressError as exc:
        raise _busy(exc)
    return {"ok": ok, "state": session.state()}


@router.post("/{session_id}/suggest")
async def suggest_tags(session: PromptComposer = Depends(get_session)) -> Dict[str, Any]:
    try:
        added = await session.suggest()
    except ActionInProgressError as exc:
        raise _busy(exc)
    return {"added": added, "state": session.state()}


# ── Image analysis ────────────────────────────────────────────────────────────


@router.post("/{session_id}/analyze/face")
async def analyze_face(
    file: UploadFile = File(...),
    session: PromptComposer = Depends(get_session),
) -> Dict[str, Any]:
    image = await _read_image(file)
    try:
        tags = await session.analyze_face(image)
    except ActionInProgressError as exc:
        raise _busy(exc)
    return {"tags": tags, "state": session.state()}


@router.post("/{session_id}/analyze/style")
async def analyze_style(
    file: UploadFile = File(...),
    session: PromptComposer = Depends(get_session),
) -> Dict[str, Any]:
    image = await _read_image(file)
    try:
        tags = await session.analyze_style(image)
    except ActionInProgressError as exc:
        raise _busy(exc)
    return {"tags": tags, "state": session.state()}


@router.delete("/{session_id}/analyze/face")
async def clear_face_tags(session: PromptComposer = Depends(get_session)) -> Dict[str, Any]:
    session.set_face_tags([])
    return session.state()


@router.delete("/{session_id}/analyze/style")
async def clear_style_tags(session: PromptComposer = Depends(get_session)) -> Dict[str, Any]:
    session.set_style_tags([])
    return session.state()


# ── Video ─────────────────────────────────────────────────────────────────────


@router.post("/{session_id}/start-frame")
async def set_start_frame(
    file: UploadFile = File(...),
    session: PromptComposer = Depends(get_session),
) -> Dict[str, Any]:
    """Attach an optional first frame for image-to-video generation."""
    session.set_start_frame(await _read_image(file))
    return session.state()


@router.delete("/{session_id}/start-frame")
async def clear_start_frame(session: PromptComposer = Depends(get_session)) -> Dict[str, Any]:
    session.set_start_frame(None)
    return session.state()


@router.post("/{session_id}/video")
async def generate_video(session: PromptComposer = Depends(get_session)) -> Dict[str, Any]:
    """Generate a video from the current prompt text.

    Blocks until the job finishes (the backend polls the model between
    awaits). ``status`` is ``completed`` | ``credential_required`` |
    ``failed`` | ``skipped``.
    """
    try:
        outcome = await session.generate_video()
    except ActionInProgressError as exc:
        raise _busy(exc)
    return {"status": outcome.status, "video_url": outcome.video_url, "state": session.state()}


@router.post("/{session_id}/credential")
async def select_credential(session: PromptComposer = Depends(get_session)) -> Dict[str, bool]:
    """Re-check the API key after the user configured one."""
    return {"selected": session.select_credential()}
