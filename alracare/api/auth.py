from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth_service import login
from ..errors import envelope, upstream
from .deps import get_current_user
from .schemas import LoginIn

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login")
def api_login(payload: LoginIn) -> dict:
    with upstream("Error saat autentikasi"):
        data = login(payload.username, payload.password)
    return envelope(data, "Login berhasil")


@router.get("/verify")
def api_verify(user: dict = Depends(get_current_user)) -> dict:
    return envelope({"user": user})
