"""System router: health and credential status."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from backend.services.composer.registry import SessionRegistry, get_registry
from backend.services.shared.logging import get_logger

logger = get_logger("routers.system")
router = APIRouter()

VERSION = "1.0.0"


@router.get("/health")
async def health_check(registry: SessionRegistry = Depends(get_registry)) -> Dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "version": VERSION, "sessions": len(registry)}


@router.get("/credentials")
async def credential_status(registry: SessionRegistry = Depends(get_registry)) -> Dict[str, bool]:
    """Whether a generative API key is configured. Never returns the key."""
    return {"has_credential": registry.credentials.has_credential()}
