import re
from datetime import date

import pytest

from alracare.helpers import format_price, generate_booking_id, generate_service_id, is_past_date, parse_price_label


@pytest.mark.parametrize("label,expected", [
    ("Rp 150.000", 150000),
    ("IDR 1,250,000", 1250000),
    ("200000", 200000),
    ("Gratis", 0),
    ("", 0),
    (None, 0),
])
def test_parse_price_label(label, expected):
    assert parse_price_label(label) == expected


def test_format_price():
    assert format_price(150000) == "Rp 150.000"
    assert format_price(0) == "Rp 0"


def test_generate_booking_id_pattern():
    assert re.fullmatch(r"BK\d{13}[A-Z0-9]{6}", generate_booking_id())


def test_generate_service_id():
    assert generate_service_id("facial", 123) == "facial_123"
    assert re.fullmatch(r"laser_\d{13}", generate_service_id("laser"))


def test_is_past_date():
    today = date(2025, 6, 1)
    assert is_past_date(date(2025, 5, 31), today)
    assert not is_past_date(today, today)
