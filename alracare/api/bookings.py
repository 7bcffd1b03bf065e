from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from .. import services
from ..errors import BadRequest, envelope, upstream
from .deps import require_admin
from .schemas import BookingCreateIn, BookingStatusIn, blank

router = APIRouter(prefix="/bookings", tags=["Bookings"])


# dichiarata prima di /{booking_id} per non essere catturata dal parametro
@router.get("/stats/dashboard")
def api_dashboard_stats(user: dict = Depends(require_admin)) -> dict:
    with upstream("Error mengambil statistik booking"):
        return envelope(services.dashboard_stats())


@router.get("")
def api_list_bookings(
    status_filter: str | None = Query(default=None, alias="status"),
    date: str | None = Query(default=None),
    user: dict = Depends(require_admin),
) -> dict:
    day = services.parse_date(date) if date else None
    with upstream("Error mengambil data booking"):
        return envelope(services.list_bookings(status=status_filter, day=day))


@router.get("/{booking_id}")
def api_get_booking(booking_id: str) -> dict:
    with upstream("Error mengambil data booking"):
        return envelope(services.get_booking(booking_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def api_create_booking(payload: BookingCreateIn) -> dict:
    """
    Prenotazione pubblica (senza login).
    Campi obbligatori: dati paziente, data, ora e almeno un servizio.
    """
    if blank(
        payload.patient_name,
        payload.patient_phone,
        payload.patient_address,
        payload.appointment_date,
        payload.appointment_time,
    ) or not payload.selected_services:
        raise BadRequest("Data tidak lengkap")

    appointment_date = services.parse_date(payload.appointment_date)
    with upstream("Error membuat booking"):
        booking = services.create_booking(
            patient_name=payload.patient_name,
            patient_phone=payload.patient_phone,
            patient_address=payload.patient_address,
            patient_notes=payload.patient_notes,
            appointment_date=appointment_date,
            appointment_time=payload.appointment_time,
            selected_services=[s.model_dump() for s in payload.selected_services],
        )
    return envelope(booking, "Booking berhasil dibuat")


@router.put("/{booking_id}/status")
def api_update_booking_status(
    booking_id: str,
    payload: BookingStatusIn,
    user: dict = Depends(require_admin),
) -> dict:
    with upstream("Error mengupdate status booking"):
        booking = services.update_booking_status(booking_id, payload.status)
    return envelope(booking, "Status booking berhasil diupdate")


@router.delete("/{booking_id}")
def api_delete_booking(booking_id: str, user: dict = Depends(require_admin)) -> dict:
    with upstream("Error menghapus booking"):
        services.delete_booking(booking_id)
    return envelope(message="Booking berhasil dihapus")
