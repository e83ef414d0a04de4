"""Composer router: catalog, sessions, tag selection and prompt text."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from backend.services.composer.catalog import PresetNotFoundError
from backend.services.composer.registry import (
    SessionNotFoundError, SessionRegistry, get_registry,
)
from backend.services.composer.session import ClearNotConfirmedError, PromptComposer
from backend.services.composer.types import Category, Language, PromptMode
from backend.services.shared.logging import get_logger

logger = get_logger("routers.composer")
router = APIRouter()


# ── Request models ────────────────────────────────────────────────────────────


class CreateSessionRequest(BaseModel):
    language: Optional[Language] = None
    mode: Optional[PromptMode] = None


class ToggleRequest(BaseModel):
    category_id: str
    option_id: str


class CustomTagRequest(BaseModel):
    category_id: str
    text: str


class CategoryRequest(BaseModel):
    category_id: str


class ClearAllRequest(BaseModel):
    confirm: bool = False


class TextRequest(BaseModel):
    text: str


class DurationRequest(BaseModel):
    seconds: int


class ModeRequest(BaseModel):
    mode: PromptMode


class LanguageRequest(BaseModel):
    language: Language


# ── Helpers ───────────────────────────────────────────────────────────────────


def get_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> PromptComposer:
    try:
        return registry.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id!r} not found. Create one with POST /api/composer/sessions.",
        )


def _category_to_dict(category: Category) -> Dict[str, Any]:
    return {
        "id":          category.id,
        "title":       category.title,
        "description": category.description,
        "color":       category.color,
        "options": [
            {"id": o.id, "label": o.label, "value": o.value, "description": o.description}
            for o in category.options
        ],
    }


# ── Catalog ───────────────────────────────────────────────────────────────────


@router.get("/categories")
async def list_categories(registry: SessionRegistry = Depends(get_registry)) -> Dict[str, Any]:
    """Ordered tag categories; the reserved negative category is returned separately."""
    categories = registry.catalog.categories()
    return {
        "categories": [_category_to_dict(c) for c in categories],
        "negative":   _category_to_dict(registry.catalog.negative),
        "total":      len(categories),
    }


@router.get("/presets")
async def list_presets(registry: SessionRegistry = Depends(get_registry)) -> Dict[str, Any]:
    presets = registry.catalog.presets()
    return {
        "presets": [{"id": p.id, "name": p.name, "selections": p.selections} for p in presets],
        "total": len(presets),
    }


# ── Sessions ──────────────────────────────────────────────────────────────────


@router.post("/sessions", status_code=status.HTTP_201_CREATED)
async def create_session(
    request: CreateSessionRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    session_id = registry.create(language=request.language, mode=request.mode)
    return {"session_id": session_id, "state": registry.get(session_id).state()}


@router.get("/sessions/{session_id}")
async def get_state(session: PromptComposer = Depends(get_session)) -> Dict[str, Any]:
    return session.state()


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def end_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> None:
    if not registry.drop(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id!r} not found.",
        )


# ── Selection ─────────────────────────────────────────────────────────────────


@router.post("/sessions/{session_id}/toggle")
async def toggle_option(
    request: ToggleRequest,
    session: PromptComposer = Depends(get_session),
) -> Dict[str, Any]:
    if not session.toggle_by_id(request.category_id, request.option_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Option {request.option_id!r} not found in category {request.category_id!r}.",
        )
    return session.state()


@router.post("/sessions/{session_id}/custom")
async def add_custom_tag(
    request: CustomTagRequest,
    session: PromptComposer = Depends(get_session),
) -> Dict[str, Any]:
    """Add a user-typed tag. Blank text is accepted and ignored."""
    option = session.add_custom(request.category_id, request.text)
    return {"added": option is not None, "state": session.state()}


@router.post("/sessions/{session_id}/clear-category")
async def clear_category(
    request: CategoryRequest,
    session: PromptComposer = Depends(get_session),
) -> Dict[str, Any]:
    cleared = session.clear_category(request.category_id)
    return {"cleared": cleared, "state": session.state()}


@router.get("/sessions/{session_id}/preview/{category_id}")
async def preview_category(
    category_id: str,
    session: PromptComposer = Depends(get_session),
) -> Dict[str, Optional[str]]:
    return {"category_id": category_id, "text": session.preview_category(category_id)}


@router.post("/sessions/{session_id}/presets/{preset_id}")
async def apply_preset(
    preset_id: str,
    session: PromptComposer = Depends(get_session),
) -> Dict[str, Any]:
    try:
        session.apply_preset(preset_id)
    except PresetNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Preset {preset_id!r} not found.",
        )
    return session.state()


@router.post("/sessions/{session_id}/clear-all/request")
async def request_clear_all(session: PromptComposer = Depends(get_session)) -> Dict[str, bool]:
    """Step one of clear-all: tells the UI whether to show the confirmation dialog."""
    return {"confirmation_required": session.request_clear_all()}


@router.post("/sessions/{session_id}/clear-all")
async def clear_all(
    request: ClearAllRequest,
    session: PromptComposer = Depends(get_session),
) -> Dict[str, Any]:
    try:
        session.clear_all(confirm=request.confirm)
    except ClearNotConfirmedError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return session.state()


# ── Prompt text & settings ────────────────────────────────────────────────────


@router.post("/sessions/{session_id}/text")
async def edit_text(
    request: TextRequest,
    session: PromptComposer = Depends(get_session),
) -> Dict[str, Any]:
    session.edit_text(request.text)
    return session.state()


@router.post("/sessions/{session_id}/reset")
async def reset_to_tags(session: PromptComposer = Depends(get_session)) -> Dict[str, Any]:
    session.reset_to_tags()
    return session.state()


@router.post("/sessions/{session_id}/duration")
async def set_duration(
    request: DurationRequest,
    session: PromptComposer = Depends(get_session),
) -> Dict[str, Any]:
    session.set_duration(request.seconds)
    return session.state()


@router.post("/sessions/{session_id}/mode")
async def set_mode(
    request: ModeRequest,
    session: PromptComposer = Depends(get_session),
) -> Dict[str, Any]:
    session.set_mode(request.mode)
    return session.state()


@router.post("/sessions/{session_id}/language")
async def set_language(
    request: LanguageRequest,
    session: PromptComposer = Depends(get_session),
) -> Dict[str, Any]:
    session.set_language(request.language)
    return session.state()


@router.get("/sessions/{session_id}/notifications")
async def list_notifications(session: PromptComposer = Depends(get_session)) -> Dict[str, List[Dict[str, Any]]]:
    """Notifications that have not yet auto-dismissed, oldest first."""
    return {
        "notifications": [
            {"id": n.id, "type": n.type.value, "message": n.message}
            for n in session.notifications.active()
        ],
    }


@router.delete("/sessions/{session_id}/notifications/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def dismiss_notification(
    notification_id: int,
    session: PromptComposer = Depends(get_session),
) -> None:
    session.notifications.dismiss(notification_id)
