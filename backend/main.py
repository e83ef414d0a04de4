"""FastAPI application entry point for Prompt Architect.

All routers are mounted here. If a router module exists, it must be
mounted in this file.
"""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.routers import composer, generation, system
from backend.services.shared.config import DEFAULT_SETTINGS_PATH, get_config
from backend.services.shared.logging import get_logger, setup_logging

_config = get_config(str(DEFAULT_SETTINGS_PATH))
setup_logging(
    level=_config.get("logging.level", "INFO"),
    log_file=_config.get("logging.file"),
)
logger = get_logger("main")
logger.info(
    "Prompt Architect %s starting (text model %s)",
    system.VERSION, _config.get("gemini.text_model"),
)

app = FastAPI(
    title="Prompt Architect",
    version=system.VERSION,
    description="Compose structured tag selections into prompts for Gemini and Veo.",
)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(composer.router,    prefix="/api/composer",    tags=["Composer"])
app.include_router(generation.router,  prefix="/api/generation",  tags=["Generation"])
app.include_router(system.router,      prefix="/api/system",      tags=["System"])
