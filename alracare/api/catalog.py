from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from .. import services
from ..errors import BadRequest, envelope, upstream
from .deps import optional_admin, require_admin
from .schemas import (
    CategoryCreateIn,
    CategoryUpdateIn,
    ServiceCreateIn,
    ServiceUpdateIn,
    blank,
    present_fields,
)

router = APIRouter(prefix="/services", tags=["Services"])


@router.get("")
def api_list_services(
    include_inactive: bool = Query(default=False),
    admin: dict | None = Depends(optional_admin),
) -> dict:
    """Categorie attive con i loro servizi; include_inactive solo per admin."""
    with upstream("Error mengambil data layanan"):
        return envelope(services.list_services_grouped(include_inactive=include_inactive and admin is not None))


# =========================
# Categorie (admin), prima di /{service_id}
# =========================
@router.post("/categories", status_code=status.HTTP_201_CREATED)
def api_create_category(payload: CategoryCreateIn, user: dict = Depends(require_admin)) -> dict:
    if blank(payload.id, payload.title):
        raise BadRequest("ID dan judul kategori harus diisi")
    with upstream("Error menambahkan kategori"):
        data = services.create_category(
            category_id=payload.id,
            title=payload.title,
            description=payload.description,
            type=payload.type,
            display_order=payload.display_order,
        )
    return envelope(data, "Kategori berhasil ditambahkan")


@router.put("/categories/{category_id}")
def api_update_category(category_id: str, payload: CategoryUpdateIn, user: dict = Depends(require_admin)) -> dict:
    with upstream("Error mengupdate kategori"):
        data = services.update_category(category_id, present_fields(payload))
    return envelope(data, "Kategori berhasil diupdate")


@router.delete("/categories/{category_id}")
def api_delete_category(category_id: str, user: dict = Depends(require_admin)) -> dict:
    with upstream("Error menghapus kategori"):
        services.delete_category(category_id)
    return envelope(message="Kategori berhasil dihapus")


# =========================
# Servizi
# =========================
@router.get("/{service_id}")
def api_get_service(service_id: str, admin: dict | None = Depends(optional_admin)) -> dict:
    with upstream("Error mengambil data layanan"):
        return envelope(services.get_service(service_id, include_inactive=admin is not None))


@router.post("", status_code=status.HTTP_201_CREATED)
def api_create_service(payload: ServiceCreateIn, user: dict = Depends(require_admin)) -> dict:
    if blank(payload.category_id, payload.name, payload.price):
        raise BadRequest("Category ID, nama, dan harga harus diisi")
    with upstream("Error menambahkan layanan"):
        data = services.create_service(
            category_id=payload.category_id,
            name=payload.name,
            price=payload.price,
            price_numeric=payload.price_numeric,
            image_url=payload.image_url,
            display_order=payload.display_order,
        )
    return envelope(data, "Layanan berhasil ditambahkan")


@router.put("/{service_id}")
def api_update_service(service_id: str, payload: ServiceUpdateIn, user: dict = Depends(require_admin)) -> dict:
    with upstream("Error mengupdate layanan"):
        data = services.update_service(service_id, present_fields(payload))
    return envelope(data, "Layanan berhasil diupdate")


@router.delete("/{service_id}")
def api_delete_service(service_id: str, user: dict = Depends(require_admin)) -> dict:
    with upstream("Error menghapus layanan"):
        services.delete_service(service_id)
    return envelope(message="Layanan berhasil dihapus")
