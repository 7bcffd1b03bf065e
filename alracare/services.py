from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Iterable

from sqlalchemy import select

from .auth_models import User  # noqa: F401  (registra la tabella users)
from .db import Base, db_session, get_engine
from .errors import BadRequest, Conflict, NotFound
from .helpers import generate_booking_id, generate_service_id, parse_price_label, timestamp_ms
from .models import (
    LIFECYCLE_TIMESTAMPS,
    Booking,
    BookingService,
    BookingStatus,
    GalleryImage,
    Service,
    ServiceCategory,
    Setting,
    SocialAccount,
)
from .procedures import check_duplicate_booking, get_daily_booking_stats

logger = logging.getLogger(__name__)


# =========================
# Bootstrap DB
# =========================
def init_db() -> None:
    """Crea le tabelle se non esistono."""
    Base.metadata.create_all(bind=get_engine())


# =========================
# Serializzazione (dict "flat", safe per JSON)
# =========================
def _iso(v: date | datetime | None) -> str | None:
    return v.isoformat() if v is not None else None


def booking_service_flat(line: BookingService) -> dict:
    return {
        "id": line.id,
        "service_id": line.service_id,
        "service_name": line.service_name,
        "service_price": line.service_price,
        "price_numeric": line.price_numeric,
        "quantity": line.quantity,
    }


def booking_flat(b: Booking) -> dict:
    return {
        "id": b.id,
        "patient_name": b.patient_name,
        "patient_phone": b.patient_phone,
        "patient_address": b.patient_address,
        "patient_notes": b.patient_notes,
        "appointment_date": _iso(b.appointment_date),
        "appointment_time": b.appointment_time,
        "appointment_datetime": _iso(b.appointment_datetime),
        "status": b.status.value,
        "created_at": _iso(b.created_at),
        "confirmed_at": _iso(b.confirmed_at),
        "completed_at": _iso(b.completed_at),
        "cancelled_at": _iso(b.cancelled_at),
        "booking_services": [booking_service_flat(line) for line in b.booking_services],
    }


def category_flat(c: ServiceCategory) -> dict:
    return {
        "id": c.id,
        "title": c.title,
        "description": c.description,
        "type": c.type,
        "is_active": c.is_active,
        "display_order": c.display_order,
    }


def service_flat(svc: Service) -> dict:
    return {
        "id": svc.id,
        "category_id": svc.category_id,
        "name": svc.name,
        "price": svc.price,
        "price_numeric": svc.price_numeric,
        "image_url": svc.image_url,
        "is_active": svc.is_active,
        "display_order": svc.display_order,
    }


def gallery_flat(g: GalleryImage) -> dict:
    return {
        "id": g.id,
        "title": g.title,
        "description": g.description,
        "image_url": g.image_url,
        "category": g.category,
        "is_active": g.is_active,
        "display_order": g.display_order,
        "created_at": _iso(g.created_at),
    }


def setting_flat(st: Setting) -> dict:
    return {"id": st.id, "category": st.category, "value": st.value, "updated_at": _iso(st.updated_at)}


def _apply(obj: Any, fields: dict[str, Any], allowed: Iterable[str]) -> None:
    """Aggiornamento parziale: solo i campi ammessi effettivamente presenti; null vietato sulle colonne NOT NULL."""
    columns = obj.__table__.c
    for key in allowed:
        if key in fields and fields[key] is None and not columns[key].nullable:
            raise BadRequest(f"Field {key} tidak boleh kosong")
    for key in allowed:
        if key in fields:
            setattr(obj, key, fields[key])


# =========================
# Parsing input
# =========================
def parse_date(raw: str) -> date:
    try:
        return date.fromisoformat(str(raw).strip())
    except ValueError:
        raise BadRequest("Format tanggal tidak valid (YYYY-MM-DD)")


def parse_time(raw: str) -> time:
    try:
        return datetime.strptime(str(raw).strip(), "%H:%M").time()
    except ValueError:
        raise BadRequest("Format jam tidak valid (HH:MM)")


def parse_status(raw: str | None) -> BookingStatus:
    try:
        return BookingStatus(raw)
    except ValueError:
        raise BadRequest("Status tidak valid")


# =========================
# Bookings
# =========================
def list_bookings(status: str | None = None, day: date | None = None) -> list[dict]:
    q = select(Booking).order_by(Booking.created_at.desc(), Booking.id.desc())
    if status:
        q = q.where(Booking.status == parse_status(status))
    if day:
        q = q.where(Booking.appointment_date == day)

    with db_session() as s:
        return [booking_flat(b) for b in s.scalars(q)]


def get_booking(booking_id: str) -> dict:
    with db_session() as s:
        b = s.get(Booking, booking_id)
        if not b:
            raise NotFound("Booking tidak ditemukan")
        return booking_flat(b)


def create_booking(
    patient_name: str,
    patient_phone: str,
    patient_address: str,
    appointment_date: date,
    appointment_time: str,
    selected_services: list[dict],
    patient_notes: str | None = None,
) -> dict:
    """
    Prenotazione pubblica:
    - controllo duplicati (stesso telefono, stesso giorno) -> Conflict
    - riga booking in stato pending + una riga per servizio, nella stessa transazione
    - prezzo numerico ricavato dall'etichetta togliendo le non-cifre
    """
    if not selected_services:
        raise BadRequest("Data tidak lengkap")

    appt_time = parse_time(appointment_time)

    # finestra di race accettata: due invii simultanei possono superare entrambi il controllo
    if check_duplicate_booking(patient_phone, appointment_date):
        raise Conflict("Anda sudah memiliki booking untuk tanggal yang sama")

    booking_id = generate_booking_id()
    with db_session() as s:
        b = Booking(
            id=booking_id,
            patient_name=patient_name.strip(),
            patient_phone=patient_phone.strip(),
            patient_address=patient_address.strip(),
            patient_notes=patient_notes,
            appointment_date=appointment_date,
            appointment_time=appt_time.strftime("%H:%M"),
            appointment_datetime=datetime.combine(appointment_date, appt_time),
            status=BookingStatus.PENDING,
        )
        s.add(b)
        s.flush()

        # righe servizio nella stessa transazione: un errore annulla anche il booking
        for item in selected_services:
            label = str(item.get("price") or "")
            s.add(
                BookingService(
                    booking_id=booking_id,
                    service_id=str(item.get("id") or ""),
                    service_name=str(item.get("name") or ""),
                    service_price=label,
                    price_numeric=parse_price_label(label),
                    quantity=1,
                )
            )
        s.flush()
        logger.info("Booking %s creato (%d servizi)", booking_id, len(selected_services))

    return get_booking(booking_id)


def update_booking_status(booking_id: str, status: str | None) -> dict:
    """Imposta lo stato e il timestamp corrispondente; gli altri timestamp restano invariati."""
    new_status = parse_status(status)

    with db_session(elevated=True) as s:
        b = s.get(Booking, booking_id)
        if not b:
            raise NotFound("Booking tidak ditemukan")

        b.status = new_status
        column = LIFECYCLE_TIMESTAMPS.get(new_status)
        if column:
            setattr(b, column, datetime.utcnow())
        s.flush()
        return booking_flat(b)


def delete_booking(booking_id: str) -> None:
    with db_session(elevated=True) as s:
        b = s.get(Booking, booking_id)
        if not b:
            raise NotFound("Booking tidak ditemukan")
        # le righe booking_services seguono via cascade
        s.delete(b)


def dashboard_stats(today: date | None = None) -> dict:
    return get_daily_booking_stats(today or date.today())


# =========================
# Servizi e categorie
# =========================
def list_services_grouped(include_inactive: bool = False) -> dict[str, dict]:
    """{category_id: {title, description, type, options: [...]}} ordinato per display_order."""
    cat_q = select(ServiceCategory).order_by(ServiceCategory.display_order, ServiceCategory.id)
    svc_q = select(Service).order_by(Service.display_order, Service.id)
    if not include_inactive:
        cat_q = cat_q.where(ServiceCategory.is_active.is_(True))
        svc_q = svc_q.where(Service.is_active.is_(True))

    with db_session() as s:
        categories = list(s.scalars(cat_q))
        services = list(s.scalars(svc_q))

        grouped: dict[str, dict] = {}
        for c in categories:
            options = []
            for svc in services:
                if svc.category_id != c.id:
                    continue
                opt = {"id": svc.id, "name": svc.name, "price": svc.price, "image": svc.image_url}
                if include_inactive:
                    opt.update(price_numeric=svc.price_numeric, is_active=svc.is_active)
                options.append(opt)

            grouped[c.id] = {
                "title": c.title,
                "description": c.description,
                "type": c.type,
                "options": options,
            }
            if include_inactive:
                grouped[c.id]["is_active"] = c.is_active
        return grouped


def get_service(service_id: str, include_inactive: bool = False) -> dict:
    with db_session() as s:
        svc = s.get(Service, service_id)
        if not svc or (not include_inactive and not svc.is_active):
            raise NotFound("Layanan tidak ditemukan")
        data = service_flat(svc)
        data["category"] = category_flat(svc.category) if svc.category else None
        return data


def create_service(
    category_id: str,
    name: str,
    price: str,
    price_numeric: int | None = None,
    image_url: str | None = None,
    display_order: int | None = None,
) -> dict:
    with db_session(elevated=True) as s:
        if not s.get(ServiceCategory, category_id):
            raise BadRequest("Kategori tidak ditemukan")

        ts = timestamp_ms()
        # due creazioni nello stesso millisecondo
        while s.get(Service, generate_service_id(category_id, ts)) is not None:
            ts += 1
        service_id = generate_service_id(category_id, ts)

        svc = Service(
            id=service_id,
            category_id=category_id,
            name=name.strip(),
            price=price,
            price_numeric=price_numeric if price_numeric is not None else parse_price_label(price),
            image_url=image_url,
            is_active=True,
            display_order=display_order or 0,
        )
        s.add(svc)
        s.flush()
        return service_flat(svc)


def update_service(service_id: str, fields: dict[str, Any]) -> dict:
    with db_session(elevated=True) as s:
        svc = s.get(Service, service_id)
        if not svc:
            raise NotFound("Layanan tidak ditemukan")

        _apply(svc, fields, ("category_id", "name", "price", "price_numeric", "image_url", "is_active", "display_order"))
        if "category_id" in fields and not s.get(ServiceCategory, svc.category_id):
            raise BadRequest("Kategori tidak ditemukan")
        if "price" in fields and "price_numeric" not in fields:
            svc.price_numeric = parse_price_label(svc.price)
        s.flush()
        return service_flat(svc)


def delete_service(service_id: str) -> None:
    with db_session(elevated=True) as s:
        svc = s.get(Service, service_id)
        if not svc:
            raise NotFound("Layanan tidak ditemukan")
        s.delete(svc)


def create_category(
    category_id: str,
    title: str,
    description: str | None = None,
    type: str | None = None,
    display_order: int | None = None,
) -> dict:
    with db_session(elevated=True) as s:
        if s.get(ServiceCategory, category_id):
            raise Conflict("Kategori sudah ada")
        c = ServiceCategory(
            id=category_id.strip(),
            title=title.strip(),
            description=description,
            type=type,
            is_active=True,
            display_order=display_order or 0,
        )
        s.add(c)
        s.flush()
        return category_flat(c)


def update_category(category_id: str, fields: dict[str, Any]) -> dict:
    with db_session(elevated=True) as s:
        c = s.get(ServiceCategory, category_id)
        if not c:
            raise NotFound("Kategori tidak ditemukan")
        _apply(c, fields, ("title", "description", "type", "is_active", "display_order"))
        s.flush()
        return category_flat(c)


def delete_category(category_id: str) -> None:
    """Bloccata finché esistono servizi collegati: niente servizi orfani."""
    with db_session(elevated=True) as s:
        c = s.get(ServiceCategory, category_id)
        if not c:
            raise NotFound("Kategori tidak ditemukan")
        in_use = s.execute(select(Service.id).where(Service.category_id == category_id).limit(1)).first()
        if in_use:
            raise Conflict("Kategori masih memiliki layanan")
        s.delete(c)


# =========================
# Galleria
# =========================
def list_gallery(include_inactive: bool = False) -> list[dict]:
    q = select(GalleryImage).order_by(GalleryImage.display_order, GalleryImage.id)
    if not include_inactive:
        q = q.where(GalleryImage.is_active.is_(True))
    with db_session() as s:
        return [gallery_flat(g) for g in s.scalars(q)]


def get_gallery_image(image_id: int, include_inactive: bool = False) -> dict:
    with db_session() as s:
        g = s.get(GalleryImage, image_id)
        if not g or (not include_inactive and not g.is_active):
            raise NotFound("Gambar tidak ditemukan")
        return gallery_flat(g)


def create_gallery_image(
    title: str,
    image_url: str,
    description: str | None = None,
    category: str | None = None,
    display_order: int | None = None,
) -> dict:
    with db_session(elevated=True) as s:
        g = GalleryImage(
            title=title.strip(),
            image_url=image_url.strip(),
            description=description,
            category=category,
            is_active=True,
            display_order=display_order or 0,
        )
        s.add(g)
        s.flush()
        return gallery_flat(g)


def update_gallery_image(image_id: int, fields: dict[str, Any]) -> dict:
    with db_session(elevated=True) as s:
        g = s.get(GalleryImage, image_id)
        if not g:
            raise NotFound("Gambar tidak ditemukan")
        _apply(g, fields, ("title", "description", "image_url", "category", "is_active", "display_order"))
        s.flush()
        return gallery_flat(g)


def delete_gallery_image(image_id: int) -> None:
    with db_session(elevated=True) as s:
        g = s.get(GalleryImage, image_id)
        if not g:
            raise NotFound("Gambar tidak ditemukan")
        s.delete(g)


# =========================
# Impostazioni e social
# =========================
def list_settings(category: str | None = None) -> dict[str, dict[str, Any]]:
    q = select(Setting).order_by(Setting.category, Setting.id)
    if category:
        q = q.where(Setting.category == category)

    with db_session() as s:
        out: dict[str, dict[str, Any]] = {}
        for st in s.scalars(q):
            out.setdefault(st.category, {})[st.id] = st.value
        return out


def get_setting(setting_id: str) -> dict:
    with db_session() as s:
        st = s.get(Setting, setting_id)
        if not st:
            raise NotFound("Pengaturan tidak ditemukan")
        return setting_flat(st)


def update_settings(values: dict[str, Any]) -> dict[str, list[str]]:
    """Aggiorna solo chiavi esistenti, tutte nella stessa transazione; riporta quelle sconosciute."""
    updated: list[str] = []
    missing: list[str] = []
    with db_session(elevated=True) as s:
        for key, value in values.items():
            st = s.get(Setting, key)
            if not st:
                missing.append(key)
                continue
            st.value = value
            updated.append(key)

    if missing:
        logger.warning("Impostazioni sconosciute ignorate: %s", ", ".join(missing))
    return {"updated": updated, "missing": missing}


def list_social_accounts() -> dict[str, list[dict]]:
    q = (
        select(SocialAccount)
        .where(SocialAccount.is_active.is_(True))
        .order_by(SocialAccount.display_order, SocialAccount.id)
    )
    with db_session() as s:
        out: dict[str, list[dict]] = {}
        for acc in s.scalars(q):
            out.setdefault(acc.platform, []).append({"name": acc.account_name, "url": acc.account_url})
        return out
