"""REST API routes for the shared tournament settings."""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from ...application.use_cases.settings import SettingsService
from ...dependencies import get_settings_service

router = APIRouter(prefix="/api/settings", tags=["settings"])


def _settings_payload(service: SettingsService) -> Dict[str, Any]:
    return {
        "settings": service.get().to_dict(),
        "effective": service.effective().to_dict(),
    }


@router.get("")
def get_settings(service: SettingsService = Depends(get_settings_service)):
    """Stored settings (unset fields null) and the values actually in effect."""
    return _settings_payload(service)


@router.patch("")
def update_settings(
    patch: Dict[str, Any] = Body(...),
    service: SettingsService = Depends(get_settings_service),
):
    """Write the given camelCase fields; other fields are left untouched."""
    service.save(patch)
    return _settings_payload(service)


@router.post("/refresh")
def refresh_settings(service: SettingsService = Depends(get_settings_service)):
    """Reload from the store, picking up changes made by other sessions."""
    changed = service.refresh()
    return {"changed": changed, **_settings_payload(service)}
