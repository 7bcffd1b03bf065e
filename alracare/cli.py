from __future__ import annotations

import argparse
import getpass

from .auth_service import create_user
from .config import configure_logging
from .errors import ApiError
from .helpers import format_price
from .seed import seed_base
from .services import (
    dashboard_stats,
    init_db,
    list_bookings,
    list_gallery,
    list_services_grouped,
    parse_date,
    update_booking_status,
)


def cmd_init(args: argparse.Namespace) -> None:
    seed_base()
    print("DB inizializzato e seed completato.")


def cmd_create_admin(args: argparse.Namespace) -> None:
    password = args.password or getpass.getpass("Password: ")
    user_id = create_user(args.username, password, full_name=args.full_name)
    print(f"Admin creato: {user_id}")


def cmd_list(args: argparse.Namespace) -> None:
    if args.entity == "bookings":
        day = parse_date(args.date) if args.date else None
        for b in list_bookings(status=args.status, day=day):
            total = sum(line["price_numeric"] * line["quantity"] for line in b["booking_services"])
            print(
                f"{b['id']} | {b['appointment_date']} {b['appointment_time']} | "
                f"{b['patient_name']} ({b['patient_phone']}) | {b['status']} | {format_price(total)}"
            )
    elif args.entity == "services":
        for cid, cat in list_services_grouped(include_inactive=True).items():
            print(f"[{cid}] {cat['title']}")
            for opt in cat["options"]:
                flag = "" if opt.get("is_active", True) else " (nonaktif)"
                print(f"    {opt['id']} | {opt['name']} | {opt['price']}{flag}")
    elif args.entity == "gallery":
        for g in list_gallery(include_inactive=True):
            print(f"{g['id']} | {g['title']} | {g['image_url']} | {'aktif' if g['is_active'] else 'nonaktif'}")


def cmd_stats(args: argparse.Namespace) -> None:
    day = parse_date(args.date) if args.date else None
    st = dashboard_stats(day)
    print(f"Data           : {st['date']}")
    print(f"Totale booking : {st['total']}")
    print(f"In attesa      : {st['pending']}")
    print(f"Oggi           : {st['today_count']}")
    print(f"Incasso        : {format_price(st['total_revenue'])}")


def cmd_set_status(args: argparse.Namespace) -> None:
    b = update_booking_status(args.booking_id, args.status)
    print(f"{b['id']} -> {b['status']}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="alracare", description="CLI amministrazione Alra Care")
    sub = p.add_subparsers(required=True)

    p_init = sub.add_parser("init", help="Crea DB e carica seed")
    p_init.set_defaults(func=cmd_init)

    p_admin = sub.add_parser("create-admin", help="Crea utente admin")
    p_admin.add_argument("--username", required=True)
    p_admin.add_argument("--password", default=None, help="Se omessa viene chiesta a terminale")
    p_admin.add_argument("--full-name", default=None)
    p_admin.set_defaults(func=cmd_create_admin)

    p_list = sub.add_parser("list", help="Lista entità")
    p_list.add_argument("entity", choices=["bookings", "services", "gallery"])
    p_list.add_argument("--status", default=None, choices=["pending", "confirmed", "completed", "cancelled"])
    p_list.add_argument("--date", default=None, help="YYYY-MM-DD (solo bookings)")
    p_list.set_defaults(func=cmd_list)

    p_stats = sub.add_parser("stats", help="Statistiche dashboard")
    p_stats.add_argument("--date", default=None, help="YYYY-MM-DD, default oggi")
    p_stats.set_defaults(func=cmd_stats)

    p_status = sub.add_parser("set-status", help="Cambia stato di un booking")
    p_status.add_argument("booking_id")
    p_status.add_argument("status", choices=["pending", "confirmed", "completed", "cancelled"])
    p_status.set_defaults(func=cmd_set_status)

    return p


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    init_db()  # garantisce tabelle
    try:
        args.func(args)
    except ApiError as e:
        print(f"Errore: {e.message}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
