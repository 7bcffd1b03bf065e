from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from .. import services
from ..errors import BadRequest, envelope, upstream
from .deps import require_admin
from .schemas import SettingsUpdateIn

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("")
def api_list_settings(category: str | None = Query(default=None)) -> dict:
    with upstream("Error mengambil pengaturan"):
        return envelope(services.list_settings(category))


@router.get("/social/accounts")
def api_social_accounts() -> dict:
    with upstream("Error mengambil data media sosial"):
        return envelope(services.list_social_accounts())


@router.get("/{setting_id}")
def api_get_setting(setting_id: str) -> dict:
    with upstream("Error mengambil pengaturan"):
        return envelope(services.get_setting(setting_id))


@router.put("")
def api_update_settings(payload: SettingsUpdateIn, user: dict = Depends(require_admin)) -> dict:
    if not payload.settings:
        raise BadRequest("Format pengaturan tidak valid")
    with upstream("Error mengupdate pengaturan"):
        data = services.update_settings(payload.settings)
    return envelope(data, "Pengaturan berhasil diupdate")
