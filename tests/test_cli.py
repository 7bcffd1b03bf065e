from alracare.cli import main
from alracare.services import create_booking, list_services_grouped, parse_date


def test_init_seeds_catalog(capsys):
    assert main(["init"]) == 0
    assert "facial" in list_services_grouped()
    assert "seed" in capsys.readouterr().out


def test_create_admin_and_duplicate(capsys):
    assert main(["create-admin", "--username", "Owner", "--password", "pw123"]) == 0
    assert main(["create-admin", "--username", "owner", "--password", "pw123"]) == 1
    assert "Username sudah terdaftar" in capsys.readouterr().out


def test_set_status_and_list(capsys):
    b = create_booking(
        patient_name="Siti",
        patient_phone="0812",
        patient_address="Jl. C",
        appointment_date=parse_date("2025-06-01"),
        appointment_time="09:30",
        selected_services=[{"id": "s1", "name": "Facial", "price": "Rp 150.000"}],
    )

    assert main(["set-status", b["id"], "completed"]) == 0
    assert main(["list", "bookings", "--status", "completed"]) == 0
    assert main(["stats"]) == 0

    out = capsys.readouterr().out
    assert f"{b['id']} -> completed" in out
    assert "Rp 150.000" in out


def test_unknown_booking_reports_error(capsys):
    assert main(["set-status", "BK0", "confirmed"]) == 1
    assert "Booking tidak ditemukan" in capsys.readouterr().out
