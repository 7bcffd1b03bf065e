from __future__ import annotations

import random
import re
import string
import time
from datetime import date

_NON_DIGITS = re.compile(r"[^0-9]")


def parse_price_label(label: str | None) -> int:
    """'Rp 150.000' -> 150000. Etichetta vuota o senza cifre -> 0."""
    if not label:
        return 0
    digits = _NON_DIGITS.sub("", str(label))
    return int(digits) if digits else 0


def format_price(amount: int | float) -> str:
    """150000 -> 'Rp 150.000' (separatore migliaia all'indonesiana)."""
    return "Rp " + f"{int(amount):,}".replace(",", ".")


def timestamp_ms() -> int:
    return int(time.time() * 1000)


def generate_booking_id() -> str:
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=6))
    return f"BK{timestamp_ms()}{suffix}"


def generate_service_id(category_id: str, ts: int | None = None) -> str:
    return f"{category_id}_{ts if ts is not None else timestamp_ms()}"


def is_past_date(day: date, today: date | None = None) -> bool:
    return day < (today or date.today())
