from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# Campi opzionali: i "mancanti" sono validati negli handler per rispondere 400 con la busta comune.


class LoginIn(BaseModel):
    username: str | None = None
    password: str | None = None


class SelectedServiceIn(BaseModel):
    id: str | None = None
    name: str | None = None
    price: str | None = None


class BookingCreateIn(BaseModel):
    patient_name: str | None = None
    patient_phone: str | None = None
    patient_address: str | None = None
    patient_notes: str | None = None
    appointment_date: str | None = None
    appointment_time: str | None = None
    selected_services: list[SelectedServiceIn] | None = None


class BookingStatusIn(BaseModel):
    status: str | None = None


class CategoryCreateIn(BaseModel):
    id: str | None = None
    title: str | None = None
    description: str | None = None
    type: str | None = None
    display_order: int | None = None


class CategoryUpdateIn(BaseModel):
    title: str | None = None
    description: str | None = None
    type: str | None = None
    is_active: bool | None = None
    display_order: int | None = None


class ServiceCreateIn(BaseModel):
    category_id: str | None = None
    name: str | None = None
    price: str | None = None
    price_numeric: int | None = None
    image_url: str | None = None
    display_order: int | None = None


class ServiceUpdateIn(BaseModel):
    category_id: str | None = None
    name: str | None = None
    price: str | None = None
    price_numeric: int | None = None
    image_url: str | None = None
    is_active: bool | None = None
    display_order: int | None = None


class GalleryCreateIn(BaseModel):
    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    category: str | None = None
    display_order: int | None = None


class GalleryUpdateIn(BaseModel):
    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    category: str | None = None
    is_active: bool | None = None
    display_order: int | None = None


class SettingsUpdateIn(BaseModel):
    settings: dict[str, Any] | None = Field(default=None)


def present_fields(model: BaseModel) -> dict[str, Any]:
    """Solo i campi inviati dal client (aggiornamento parziale)."""
    return model.model_dump(exclude_unset=True)


def blank(*values: Any) -> bool:
    return any(v is None or (isinstance(v, str) and not v.strip()) for v in values)
