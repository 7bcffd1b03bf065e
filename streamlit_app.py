from __future__ import annotations

import base64
import json
from datetime import date, datetime, time, timezone

import requests
import streamlit as st

from alracare.client import API_BASE, ApiClient, ApiClientError, AuthError, LocalMirror
from alracare.helpers import format_price, is_past_date, parse_price_label

st.set_page_config(page_title="Alra Care", layout="wide")

mirror = LocalMirror()



# JWT helpers (solo per UI, senza verifica firma)

def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def jwt_payload(token: str) -> dict:
    parts = token.split(".")
    if len(parts) != 3:
        return {}
    try:
        payload = json.loads(_b64url_decode(parts[1]).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return {}
    return payload if isinstance(payload, dict) else {}


def jwt_is_expired(token: str) -> bool:
    exp = jwt_payload(token).get("exp")
    if not isinstance(exp, (int, float)):
        return False
    now = int(datetime.now(tz=timezone.utc).timestamp())
    return now >= (int(exp) - 5)


def client(token: str | None = None) -> ApiClient:
    return ApiClient(API_BASE, token=token, mirror=mirror)


def is_logged_in() -> bool:
    token = st.session_state.get("token")
    return bool(token) and isinstance(token, str)


def do_logout() -> None:
    st.session_state.pop("token", None)
    st.session_state.pop("user", None)
    st.rerun()


def require_auth() -> str | None:
    token = st.session_state.get("token")
    if not token:
        st.warning("Bagian khusus admin. Silakan login dari sidebar.")
        return None
    if jwt_is_expired(token):
        st.error("Sesi berakhir. Logout lalu login kembali.")
        return None
    return token



# Read-through cache: invalidata con .clear() dopo ogni scrittura

@st.cache_data(ttl=30)
def load_services(token: str | None = None, include_inactive: bool = False) -> tuple[dict, bool]:
    res = client(token).services(include_inactive=include_inactive)
    return res.data, res.offline


@st.cache_data(ttl=30)
def load_gallery(token: str | None = None, include_inactive: bool = False) -> tuple[list, bool]:
    res = client(token).gallery(include_inactive=include_inactive)
    return res.data, res.offline


@st.cache_data(ttl=30)
def load_settings() -> tuple[dict, bool]:
    res = client().settings()
    return res.data, res.offline


@st.cache_data(ttl=30)
def load_social() -> tuple[dict, bool]:
    res = client().social_accounts()
    return res.data, res.offline


@st.cache_data(ttl=10)
def load_bookings(token: str, status: str | None, day: str | None) -> tuple[list, bool]:
    res = client(token).bookings(status=status, date=day)
    return res.data, res.offline


def invalidate() -> None:
    for fn in (load_services, load_gallery, load_settings, load_social, load_bookings):
        fn.clear()


def offline_notice(offline: bool) -> None:
    if offline:
        st.caption("Server tidak dapat dihubungi: menampilkan data tersimpan terakhir.")



# Sidebar login

with st.sidebar:
    st.header("Admin")

    if not is_logged_in():
        u = st.text_input("Username", key="login_user")
        p = st.text_input("Password", type="password", key="login_pass")

        if st.button("Login", key="login_btn"):
            try:
                data = client().login(u.strip().lower(), p)
                st.session_state["token"] = data["token"]
                st.session_state["user"] = data["user"]
                st.success("Login berhasil.")
                st.rerun()
            except AuthError as e:
                st.error(e.message)
            except (ApiClientError, requests.RequestException) as e:
                st.error(str(e))
    else:
        user = st.session_state.get("user") or jwt_payload(st.session_state["token"])
        st.write(f"Login sebagai: **{user.get('full_name') or user.get('username')}**")
        if st.button("Logout", key="logout_btn"):
            do_logout()

    st.divider()
    st.caption(f"API: {API_BASE}")



# UI


try:
    site, _ = load_settings()
except requests.RequestException:
    site = {}

st.title((site or {}).get("general", {}).get("clinic_name") or "Alra Care")

tabs = st.tabs(["Layanan & Booking", "Cek Booking", "Galeri", "Dashboard", "Kelola Booking", "Kelola Layanan", "Kelola Galeri", "Pengaturan"])



# TAB 1 - Layanan e prenotazione pubblica

with tabs[0]:
    try:
        catalog, offline = load_services()
    except requests.RequestException as e:
        st.error(f"API tidak dapat dihubungi: {e}")
        st.stop()
    offline_notice(offline)

    selected: list[dict] = []
    for cid, cat in catalog.items():
        st.subheader(cat["title"])
        if cat.get("description"):
            st.caption(cat["description"])
        for opt in cat["options"]:
            if st.checkbox(f"{opt['name']} | {opt['price']}", key=f"svc_{opt['id']}"):
                selected.append({"id": opt["id"], "name": opt["name"], "price": opt["price"]})

    st.divider()
    st.subheader("Form Booking")

    c1, c2 = st.columns(2)
    name = c1.text_input("Nama pasien", key="bk_name")
    phone = c2.text_input("No. HP", key="bk_phone")
    address = st.text_area("Alamat", height=80, key="bk_address")
    notes = st.text_area("Catatan (opsional)", height=80, key="bk_notes")
    c3, c4 = st.columns(2)
    appt_date = c3.date_input("Tanggal", value=date.today(), key="bk_date")
    appt_time = c4.time_input("Jam", value=time(10, 0), key="bk_time")

    if selected:
        st.write(f"Estimasi biaya: **{format_price(sum(parse_price_label(s['price']) for s in selected))}**")

    if st.button("Kirim Booking", key="bk_submit"):
        if not (name.strip() and phone.strip() and address.strip()) or not selected:
            st.error("Lengkapi data pasien dan pilih minimal satu layanan.")
        elif is_past_date(appt_date):
            st.error("Tanggal sudah lewat.")
        else:
            payload = {
                "patient_name": name.strip(),
                "patient_phone": phone.strip(),
                "patient_address": address.strip(),
                "patient_notes": notes.strip() or None,
                "appointment_date": appt_date.isoformat(),
                "appointment_time": appt_time.strftime("%H:%M"),
                "selected_services": selected,
            }
            try:
                booking = client().create_booking(payload)
                invalidate()
                st.success(f"Booking berhasil dibuat. ID: {booking['id']}")
            except ApiClientError as e:
                st.error(e.message)
            except requests.RequestException as e:
                st.error(f"Server tidak dapat dihubungi: {e}")



# TAB 2 - Verifica prenotazione

with tabs[1]:
    bid = st.text_input("ID Booking", key="lookup_id")
    if st.button("Cek", key="lookup_btn") and bid.strip():
        try:
            b = client().booking(bid.strip())
            st.write(f"**{b['patient_name']}** | {b['appointment_date']} {b['appointment_time']} | Status: **{b['status']}**")
            for line in b["booking_services"]:
                st.write(f"- {line['service_name']} ({line['service_price']})")
        except ApiClientError as e:
            st.error(e.message)
        except requests.RequestException as e:
            st.error(str(e))



# TAB 3 - Galleria pubblica

with tabs[2]:
    try:
        images, offline = load_gallery()
        offline_notice(offline)
        cols = st.columns(3)
        for i, g in enumerate(images):
            with cols[i % 3]:
                st.image(g["image_url"], caption=g["title"])
    except requests.RequestException as e:
        st.error(f"Galeri tidak tersedia: {e}")

    try:
        social, _ = load_social()
        for platform, accounts in social.items():
            st.write(f"**{platform.title()}**: " + ", ".join(f"[{a['name']}]({a['url']})" for a in accounts))
    except requests.RequestException:
        pass



# TAB 4 - Dashboard (PROTETTO)

with tabs[3]:
    token = require_auth()
    if token:
        try:
            stats = client(token).dashboard_stats()
            m1, m2, m3, m4 = st.columns(4)
            m1.metric("Total booking", stats["total"])
            m2.metric("Pending", stats["pending"])
            m3.metric("Hari ini", stats["today_count"])
            m4.metric("Pendapatan", format_price(stats["total_revenue"]))
        except AuthError:
            st.error("Sesi tidak valid. Logout lalu login kembali.")
        except (ApiClientError, requests.RequestException) as e:
            st.error(f"Error statistik: {e}")



# TAB 5 - Prenotazioni (PROTETTO)

with tabs[4]:
    token = require_auth()
    if token:
        f1, f2 = st.columns(2)
        status_filter = f1.selectbox("Status", ["", "pending", "confirmed", "completed", "cancelled"], key="adm_status")
        use_day = f2.checkbox("Filter tanggal", key="adm_use_day")
        day = f2.date_input("Tanggal", value=date.today(), key="adm_day") if use_day else None

        try:
            rows, offline = load_bookings(token, status_filter or None, day.isoformat() if day else None)
            offline_notice(offline)
            if not rows:
                st.info("Belum ada booking.")
            for b in rows:
                with st.expander(f"{b['id']} | {b['patient_name']} | {b['appointment_date']} {b['appointment_time']} | {b['status']}"):
                    st.write(f"HP: {b['patient_phone']} | Alamat: {b['patient_address']}")
                    for line in b["booking_services"]:
                        st.write(f"- {line['service_name']} ({line['service_price']})")
                    new_status = st.selectbox(
                        "Ubah status",
                        ["pending", "confirmed", "completed", "cancelled"],
                        index=["pending", "confirmed", "completed", "cancelled"].index(b["status"]),
                        key=f"st_{b['id']}",
                    )
                    a1, a2 = st.columns(2)
                    if a1.button("Simpan", key=f"save_{b['id']}"):
                        client(token).update_booking_status(b["id"], new_status)
                        invalidate()
                        st.rerun()
                    if a2.button("Hapus", key=f"del_{b['id']}"):
                        client(token).delete_booking(b["id"])
                        invalidate()
                        st.rerun()
        except AuthError:
            st.error("Sesi tidak valid. Logout lalu login kembali.")
        except (ApiClientError, requests.RequestException) as e:
            st.error(f"Error booking: {e}")



# TAB 6 - Servizi (PROTETTO)

with tabs[5]:
    token = require_auth()
    if token:
        try:
            catalog, _ = load_services(token, include_inactive=True)
            with st.expander("Tambah kategori"):
                cid = st.text_input("ID kategori", key="cat_id")
                ctitle = st.text_input("Judul", key="cat_title")
                if st.button("Simpan kategori", key="cat_submit"):
                    client(token).create_category({"id": cid.strip(), "title": ctitle.strip()})
                    invalidate()
                    st.rerun()

            with st.expander("Tambah layanan"):
                cat_id = st.selectbox("Kategori", list(catalog.keys()), key="svc_cat")
                sname = st.text_input("Nama layanan", key="svc_name")
                sprice = st.text_input("Harga (mis. Rp 150.000)", key="svc_price")
                simage = st.text_input("URL gambar", key="svc_image")
                if st.button("Simpan layanan", key="svc_submit"):
                    client(token).create_service({
                        "category_id": cat_id,
                        "name": sname.strip(),
                        "price": sprice.strip(),
                        "image_url": simage.strip() or None,
                    })
                    invalidate()
                    st.rerun()

            for cid, cat in catalog.items():
                st.subheader(f"{cat['title']} ({cid})")
                for opt in cat["options"]:
                    c1, c2, c3 = st.columns([4, 1, 1])
                    c1.write(f"{opt['name']} | {opt['price']}")
                    active = c2.toggle("Aktif", value=opt.get("is_active", True), key=f"act_{opt['id']}")
                    if active != opt.get("is_active", True):
                        client(token).update_service(opt["id"], {"is_active": active})
                        invalidate()
                        st.rerun()
                    if c3.button("Hapus", key=f"sdel_{opt['id']}"):
                        client(token).delete_service(opt["id"])
                        invalidate()
                        st.rerun()
        except AuthError:
            st.error("Sesi tidak valid. Logout lalu login kembali.")
        except (ApiClientError, requests.RequestException) as e:
            st.error(f"Error layanan: {e}")



# TAB 7 - Galleria (PROTETTO)

with tabs[6]:
    token = require_auth()
    if token:
        try:
            with st.expander("Tambah gambar"):
                gtitle = st.text_input("Judul", key="g_title")
                gurl = st.text_input("URL gambar", key="g_url")
                gcat = st.text_input("Kategori", key="g_cat")
                if st.button("Simpan gambar", key="g_submit"):
                    client(token).create_gallery_image({"title": gtitle.strip(), "image_url": gurl.strip(), "category": gcat.strip() or None})
                    invalidate()
                    st.rerun()

            images, _ = load_gallery(token, include_inactive=True)
            for g in images:
                c1, c2 = st.columns([5, 1])
                c1.write(f"{g['id']} | {g['title']} | {'aktif' if g['is_active'] else 'nonaktif'}")
                if c2.button("Hapus", key=f"gdel_{g['id']}"):
                    client(token).delete_gallery_image(g["id"])
                    invalidate()
                    st.rerun()
        except AuthError:
            st.error("Sesi tidak valid. Logout lalu login kembali.")
        except (ApiClientError, requests.RequestException) as e:
            st.error(f"Error galeri: {e}")



# TAB 8 - Impostazioni (PROTETTO)

with tabs[7]:
    token = require_auth()
    if token:
        changes: dict = {}
        for category, values in (site or {}).items():
            st.subheader(category.title())
            for key, value in values.items():
                if isinstance(value, str):
                    new_value = st.text_input(key, value=value, key=f"set_{key}")
                    if new_value != value:
                        changes[key] = new_value
                else:
                    st.json({key: value})

        if st.button("Simpan pengaturan", key="set_submit", disabled=not changes):
            try:
                res = client(token).update_settings(changes)
                invalidate()
                if res.get("missing"):
                    st.warning("Tidak dikenal: " + ", ".join(res["missing"]))
                st.success("Pengaturan berhasil diupdate.")
            except AuthError:
                st.error("Sesi tidak valid. Logout lalu login kembali.")
            except (ApiClientError, requests.RequestException) as e:
                st.error(str(e))
