"""
Procedure lato database.

Ogni funzione corrisponde a una chiamata remota del servizio dati: un solo
round trip, nessuna logica HTTP. Gli errori SQLAlchemy risalgono al chiamante.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import func, select

from .auth_models import User
from .auth_security import verify_password
from .db import db_session
from .models import Booking, BookingService, BookingStatus


@dataclass(frozen=True)
class AuthResult:
    success: bool
    message: str
    user_id: str | None = None
    username: str | None = None
    full_name: str | None = None
    role: str | None = None


def authenticate_user(username: str, password: str) -> AuthResult:
    username = username.strip().lower()
    with db_session() as s:
        u = s.execute(select(User).where(User.username == username)).scalar_one_or_none()
        if not u or not u.is_active:
            return AuthResult(False, "Username atau password salah")
        if not verify_password(password, u.password_hash):
            return AuthResult(False, "Username atau password salah")

        u.last_login_at = datetime.utcnow()
        return AuthResult(True, "Login berhasil", u.id, u.username, u.full_name, u.role)


def check_duplicate_booking(phone: str, appointment_date: date) -> bool:
    """True se esiste già una prenotazione non annullata per lo stesso telefono nello stesso giorno."""
    with db_session() as s:
        q = (
            select(Booking.id)
            .where(
                Booking.patient_phone == phone.strip(),
                Booking.appointment_date == appointment_date,
                Booking.status != BookingStatus.CANCELLED,
            )
            .limit(1)
        )
        return s.execute(q).first() is not None


def get_daily_booking_stats(day: date) -> dict:
    """
    Statistiche per la dashboard:
    - total: tutte le prenotazioni
    - pending: in attesa di conferma
    - today_count: appuntamenti previsti per `day`
    - total_revenue: somma delle righe delle prenotazioni completate
    """
    with db_session() as s:
        total = s.scalar(select(func.count(Booking.id))) or 0
        pending = s.scalar(
            select(func.count(Booking.id)).where(Booking.status == BookingStatus.PENDING)
        ) or 0
        today_count = s.scalar(
            select(func.count(Booking.id)).where(Booking.appointment_date == day)
        ) or 0
        revenue = s.scalar(
            select(func.coalesce(func.sum(BookingService.price_numeric * BookingService.quantity), 0))
            .select_from(BookingService)
            .join(Booking, Booking.id == BookingService.booking_id)
            .where(Booking.status == BookingStatus.COMPLETED)
        ) or 0

        return {
            "date": day.isoformat(),
            "total": int(total),
            "pending": int(pending),
            "today_count": int(today_count),
            "total_revenue": int(revenue),
        }
