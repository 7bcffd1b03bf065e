from __future__ import annotations

import logging

from sqlalchemy import select

from .auth_models import User
from .auth_security import hash_password
from .config import settings
from .db import db_session
from .helpers import parse_price_label
from .models import Service, ServiceCategory, Setting, SocialAccount

logger = logging.getLogger(__name__)

CATEGORIES = [
    ("facial", "Facial Treatment", "Perawatan wajah untuk kulit sehat dan cerah", "multiple"),
    ("laser", "Laser Treatment", "Perawatan laser oleh tenaga profesional", "multiple"),
    ("konsultasi", "Konsultasi Dokter", "Konsultasi langsung dengan dokter", "single"),
]

SERVICES = [
    ("facial_basic", "facial", "Facial Basic", "Rp 150.000"),
    ("facial_acne", "facial", "Facial Acne", "Rp 200.000"),
    ("laser_rejuve", "laser", "Laser Rejuvenation", "Rp 500.000"),
    ("konsultasi_umum", "konsultasi", "Konsultasi Umum", "Rp 100.000"),
]

SETTINGS = [
    ("clinic_name", "general", "Alra Care"),
    ("clinic_address", "general", ""),
    ("clinic_phone", "contact", ""),
    ("whatsapp_number", "contact", ""),
    ("opening_hours", "schedule", {"mon-fri": "09:00-17:00", "sat": "09:00-13:00"}),
]

SOCIAL = [
    ("instagram", "@alracare", "https://instagram.com/alracare"),
]


def seed_admin() -> None:
    """Crea l'admin da ADMIN_USERNAME/ADMIN_PASSWORD se impostati e non già presente."""
    if not settings.admin_password:
        return
    username = settings.admin_username.strip().lower()
    with db_session() as s:
        if s.execute(select(User).where(User.username == username)).scalar_one_or_none() is None:
            s.add(User(
                username=username,
                password_hash=hash_password(settings.admin_password),
                full_name=settings.admin_full_name,
                role="admin",
            ))
            logger.info("Utente admin '%s' creato", username)


def seed_base() -> None:
    """
    Popola dati minimi (idempotente):
    - categorie e servizi
    - impostazioni
    - account social
    - admin (se configurato)
    """
    with db_session() as s:
        for order, (cid, title, desc, kind) in enumerate(CATEGORIES):
            if s.get(ServiceCategory, cid) is None:
                s.add(ServiceCategory(id=cid, title=title, description=desc, type=kind, display_order=order))
        s.flush()

        for order, (sid, cid, name, price) in enumerate(SERVICES):
            if s.get(Service, sid) is None:
                s.add(Service(
                    id=sid,
                    category_id=cid,
                    name=name,
                    price=price,
                    price_numeric=parse_price_label(price),
                    display_order=order,
                ))

        for key, category, value in SETTINGS:
            if s.get(Setting, key) is None:
                s.add(Setting(id=key, category=category, value=value))

        for order, (platform, name, url) in enumerate(SOCIAL):
            exists = s.execute(
                select(SocialAccount).where(SocialAccount.platform == platform, SocialAccount.account_name == name)
            ).scalar_one_or_none()
            if exists is None:
                s.add(SocialAccount(platform=platform, account_name=name, account_url=url, display_order=order))

    seed_admin()
