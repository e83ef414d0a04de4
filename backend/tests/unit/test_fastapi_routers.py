"""FastAPI backend: unit tests for router structure and endpoint contracts.

Tests verify:
- All routers are importable and expose a .router attribute
- main.py app is importable and mounts all routers at expected prefixes
- Each router exposes the endpoint functions the UI relies on
- No dead-code routers (all imported = all mounted)
"""
from __future__ import annotations

import importlib

import pytest


# ═══════════════════════════════════════════════════════════════════════════════
# Router import checks
# ═══════════════════════════════════════════════════════════════════════════════


ROUTER_MODULES = [
    "backend.routers.composer",
    "backend.routers.generation",
    "backend.routers.system",
]


class TestRouterImports:
    @pytest.mark.parametrize("module_path", ROUTER_MODULES)
    def test_router_has_router_attribute(self, module_path: str):
        mod = importlib.import_module(module_path)
        assert hasattr(mod, "router"), f"{module_path} must expose a 'router' attribute"

    @pytest.mark.parametrize("module_path", ROUTER_MODULES)
    def test_router_is_fastapi_router(self, module_path: str):
        from fastapi import APIRouter
        mod = importlib.import_module(module_path)
        assert isinstance(mod.router, APIRouter), (
            f"{module_path}.router must be an APIRouter instance"
        )

    @pytest.mark.parametrize("module_path", ROUTER_MODULES)
    def test_router_logs_under_app_namespace(self, module_path: str):
        mod = importlib.import_module(module_path)
        suffix = module_path.rsplit(".", 1)[-1]
        assert mod.logger.name == f"prompt_architect.routers.{suffix}"


# ═══════════════════════════════════════════════════════════════════════════════
# main.py app: importable, all routers mounted
# ═══════════════════════════════════════════════════════════════════════════════


class TestMainApp:
    def test_app_is_fastapi_instance(self):
        from fastapi import FastAPI
        mod = importlib.import_module("backend.main")
        assert isinstance(mod.app, FastAPI)

    def test_all_routers_mounted(self):
        """Every router module must be mounted in the app."""
        mod = importlib.import_module("backend.main")
        paths = mod.app.openapi()["paths"]
        for prefix in ("/api/composer", "/api/generation", "/api/system"):
            assert any(p.startswith(prefix) for p in paths), (
                f"Router prefix '{prefix}' not found in app routes. "
                "Ensure it is mounted in backend/main.py."
            )

    def test_app_title(self):
        mod = importlib.import_module("backend.main")
        assert mod.app.title == "Prompt Architect"

    def test_cors_middleware_configured(self):
        mod = importlib.import_module("backend.main")
        cors_present = any(
            "cors" in str(getattr(m, "cls", "")).lower()
            for m in mod.app.user_middleware
        )
        assert cors_present, "CORS middleware must be configured in main.py"


# ═══════════════════════════════════════════════════════════════════════════════
# Router endpoints
# ═══════════════════════════════════════════════════════════════════════════════


class TestComposerRouterEndpoints:
    def setup_method(self):
        self.mod = importlib.import_module("backend.routers.composer")

    @pytest.mark.parametrize("name", [
        "list_categories", "list_presets", "create_session", "get_state", "end_session",
        "toggle_option", "add_custom_tag", "clear_category", "preview_category",
        "apply_preset", "request_clear_all", "clear_all", "edit_text", "reset_to_tags",
        "set_duration", "set_mode", "set_language", "list_notifications",
        "dismiss_notification",
    ])
    def test_endpoint_exists(self, name):
        assert hasattr(self.mod, name)


class TestGenerationRouterEndpoints:
    def setup_method(self):
        self.mod = importlib.import_module("backend.routers.generation")

    @pytest.mark.parametrize("name", [
        "enhance_prompt", "format_prompt", "suggest_tags", "analyze_face", "analyze_style",
        "clear_face_tags", "clear_style_tags", "set_start_frame", "clear_start_frame",
        "generate_video", "select_credential",
    ])
    def test_endpoint_exists(self, name):
        assert hasattr(self.mod, name)


class TestSystemRouterEndpoints:
    def setup_method(self):
        self.mod = importlib.import_module("backend.routers.system")

    def test_health_endpoint_exists(self):
        assert hasattr(self.mod, "health_check")

    def test_credentials_endpoint_exists(self):
        assert hasattr(self.mod, "credential_status")
