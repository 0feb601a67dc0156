"""Addon registration endpoints."""

from __future__ import annotations

from typing import Any, cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from arflix.domain.entities.addons import AddonEndpoint
from arflix.domain.exceptions import AddonRegistrationError
from arflix.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/addons", tags=["addons"])

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
}


class AddonRegistrationBody(BaseModel):
    url: str


class AddonToggleBody(BaseModel):
    url: str
    enabled: bool


def present_addon(addon: AddonEndpoint) -> dict[str, Any]:
    return {
        "url": addon.manifest_url,
        "baseUrl": addon.base_url,
        "addonId": addon.addon_id,
        "name": addon.name,
        "version": addon.version,
        "icon": addon.icon,
        "idPrefixes": list(addon.declared_id_prefixes),
        "enabled": addon.enabled,
        "orderPosition": addon.order_position,
    }


@router.get("")
async def list_addons(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    addons = await state.addon_repo.list_all()
    return JSONResponse(
        content={"addons": [present_addon(a) for a in addons]},
        headers=_CORS_HEADERS,
    )


@router.post("")
async def register_addon(request: Request, body: AddonRegistrationBody) -> JSONResponse:
    """Validate an addon URL and add (201) or refresh (200) it."""
    state = cast(AppState, request.app.state)
    try:
        result = await state.addon_registration_uc.execute(body.url)
    except AddonRegistrationError as e:
        log.info("addon_registration_rejected", url=body.url, reason=str(e))
        return JSONResponse(
            status_code=400, content={"error": str(e)}, headers=_CORS_HEADERS
        )
    except Exception:
        log.error("addon_registration_failed", url=body.url, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
            headers=_CORS_HEADERS,
        )

    content = present_addon(result.addon)
    if not result.created:
        content["message"] = "Add-on updated successfully"
    return JSONResponse(
        status_code=201 if result.created else 200,
        content=content,
        headers=_CORS_HEADERS,
    )


@router.patch("")
async def toggle_addon(request: Request, body: AddonToggleBody) -> JSONResponse:
    """Enable or disable a registered addon by its manifest URL."""
    state = cast(AppState, request.app.state)
    addon = await state.addon_registration_uc.set_enabled(body.url, body.enabled)
    if addon is None:
        return JSONResponse(
            status_code=404,
            content={"error": "Add-on not found"},
            headers=_CORS_HEADERS,
        )
    return JSONResponse(content=present_addon(addon), headers=_CORS_HEADERS)
