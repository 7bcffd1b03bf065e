from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from .. import services
from ..errors import BadRequest, envelope, upstream
from .deps import optional_admin, require_admin
from .schemas import GalleryCreateIn, GalleryUpdateIn, blank, present_fields

router = APIRouter(prefix="/gallery", tags=["Gallery"])


@router.get("")
def api_list_gallery(
    include_inactive: bool = Query(default=False),
    admin: dict | None = Depends(optional_admin),
) -> dict:
    with upstream("Error mengambil data galeri"):
        return envelope(services.list_gallery(include_inactive=include_inactive and admin is not None))


@router.get("/{image_id}")
def api_get_gallery_image(image_id: int, admin: dict | None = Depends(optional_admin)) -> dict:
    with upstream("Error mengambil data gambar"):
        return envelope(services.get_gallery_image(image_id, include_inactive=admin is not None))


@router.post("", status_code=status.HTTP_201_CREATED)
def api_create_gallery_image(payload: GalleryCreateIn, user: dict = Depends(require_admin)) -> dict:
    if blank(payload.title, payload.image_url):
        raise BadRequest("Judul dan URL gambar harus diisi")
    with upstream("Error menambahkan gambar"):
        data = services.create_gallery_image(
            title=payload.title,
            image_url=payload.image_url,
            description=payload.description,
            category=payload.category,
            display_order=payload.display_order,
        )
    return envelope(data, "Gambar berhasil ditambahkan")


@router.put("/{image_id}")
def api_update_gallery_image(image_id: int, payload: GalleryUpdateIn, user: dict = Depends(require_admin)) -> dict:
    with upstream("Error mengupdate gambar"):
        data = services.update_gallery_image(image_id, present_fields(payload))
    return envelope(data, "Gambar berhasil diupdate")


@router.delete("/{image_id}")
def api_delete_gallery_image(image_id: int, user: dict = Depends(require_admin)) -> dict:
    with upstream("Error menghapus gambar"):
        services.delete_gallery_image(image_id)
    return envelope(message="Gambar berhasil dihapus")
