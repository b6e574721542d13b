from __future__ import annotations

import os
from datetime import date, datetime, timedelta

import requests
import streamlit as st

from medappointments.catalog import SPECIALTIES, TIME_SLOTS, doctor_display_name, doctors_for
from medappointments.functional import (
    filter_by_doctor,
    filter_by_status,
    format_date,
    format_time,
    pipe,
    search,
    sort_by_date,
    stats,
    today,
    unique_doctors,
    upcoming,
)
from medappointments.lifecycle import ACTIONS, available_actions

st.set_page_config(page_title="Medical Appointments", layout="wide")

API_BASE = os.getenv("API_BASE", "http://127.0.0.1:8000")



# HTTP client

class ApiRequestError(Exception):
    def __init__(self, message: str, errors: dict | None = None) -> None:
        super().__init__(message)
        self.errors = errors or {}


def _raise_for(r: requests.Response) -> None:
    if r.ok:
        return
    try:
        body = r.json()
    except ValueError:
        body = {}
    raise ApiRequestError(body.get("message") or f"HTTP {r.status_code}", body.get("errors"))


def api_get(path: str, params: dict | None = None) -> dict | list:
    r = requests.get(f"{API_BASE}{path}", params=params, timeout=10)
    _raise_for(r)
    return r.json()


def api_post(path: str, payload: dict) -> dict:
    r = requests.post(f"{API_BASE}{path}", json=payload, timeout=10)
    _raise_for(r)
    return r.json()


def api_patch(path: str, payload: dict) -> dict:
    r = requests.patch(f"{API_BASE}{path}", json=payload, timeout=10)
    _raise_for(r)
    return r.json()


def api_delete(path: str) -> None:
    r = requests.delete(f"{API_BASE}{path}", timeout=10)
    _raise_for(r)


@st.cache_data(ttl=5)
def load_appointments() -> list[dict]:
    return api_get("/api/appointments")


def refresh() -> None:
    load_appointments.clear()
    st.rerun()


def show_error(e: Exception) -> None:
    if isinstance(e, ApiRequestError) and e.errors:
        st.error(str(e))
        for name, messages in e.errors.items():
            st.caption(f"{name}: {'; '.join(messages)}")
    else:
        st.error(str(e))



# Card appuntamento + azioni

def appointment_card(a: dict, key_prefix: str) -> None:
    with st.container(border=True):
        c1, c2, c3 = st.columns([3, 2, 2])
        c1.markdown(f"**{a['patientName']}**  \n{doctor_display_name(a['doctorName'])} · {a['specialty']}")
        c2.write(f"{format_date(a['appointmentDate'])}  \n{format_time(a['appointmentDate'])}")
        c3.write(f"Stato: **{a['status']}**")
        if a.get("notes"):
            st.caption(a["notes"])

        buttons = st.columns(4)
        for i, action in enumerate(available_actions(a["status"])):
            if buttons[i].button(action.capitalize(), key=f"{key_prefix}-{action}-{a['id']}"):
                try:
                    api_patch(f"/api/appointments/{a['id']}", {"status": ACTIONS[action].value})
                    st.toast("Appuntamento aggiornato.")
                    refresh()
                except Exception as e:
                    show_error(e)

        if buttons[3].button("Delete", key=f"{key_prefix}-delete-{a['id']}"):
            try:
                api_delete(f"/api/appointments/{a['id']}")
                st.toast("Appuntamento eliminato.")
                refresh()
            except Exception as e:
                show_error(e)



# UI

st.title("Medical Appointments")
st.caption(f"API: {API_BASE}")

try:
    appointments = load_appointments()
except Exception as e:
    st.error(f"API non raggiungibile o errore: {e}")
    st.stop()

tab1, tab2, tab3 = st.tabs(["Dashboard", "Appuntamenti", "Nuovo appuntamento"])



# TAB 1 - Dashboard

with tab1:
    s = stats(appointments)
    cols = st.columns(4)
    cols[0].metric("Totali", s["total"])
    cols[1].metric("Oggi", s["today"])
    cols[2].metric("Da confermare", s["pending"])
    cols[3].metric("Completati", s["completed"])

    st.subheader("Oggi")
    todays = sort_by_date(today(appointments))
    if not todays:
        st.info("Nessun appuntamento oggi.")
    for a in todays:
        appointment_card(a, "today")

    st.subheader("Prossimi")
    next_items = upcoming(appointments)[:6]
    if not next_items:
        st.info("Nessun appuntamento in programma.")
    for a in next_items:
        appointment_card(a, "upcoming")



# TAB 2 - Lista con filtri

with tab2:
    f1, f2, f3 = st.columns([3, 2, 2])
    query = f1.text_input("Cerca paziente, medico o specialità", key="flt_query")
    status_filter = f2.selectbox(
        "Stato", options=["all", "pending", "confirmed", "completed", "cancelled"], key="flt_status"
    )
    doctor_filter = f3.selectbox("Medico", options=["all", *unique_doctors(appointments)], key="flt_doctor")

    view = pipe(
        lambda items: search(items, query),
        lambda items: filter_by_status(items, status_filter),
        lambda items: filter_by_doctor(items, doctor_filter),
        lambda items: sort_by_date(items, "asc"),
    )
    filtered = view(appointments)

    if not filtered:
        st.info("Nessun appuntamento. Prova a modificare i filtri.")
    for a in filtered:
        appointment_card(a, "list")

    st.caption(f"Mostrati {len(filtered)} di {len(appointments)} appuntamenti")



# TAB 3 - Creazione

with tab3:
    st.subheader("Prenota appuntamento")

    colA, colB = st.columns(2)
    with colA:
        patient = st.text_input("Paziente", key="new_patient")
        specialty = st.selectbox("Specialità", options=SPECIALTIES, key="new_specialty")
        doctor = st.selectbox(
            "Medico", options=doctors_for(specialty), format_func=doctor_display_name, key="new_doctor"
        )
    with colB:
        day = st.date_input("Data", value=date.today() + timedelta(days=1), key="new_day")
        slot = st.selectbox("Ora", options=TIME_SLOTS, key="new_slot")
        notes = st.text_area("Note (opzionale)", height=100, key="new_notes")

    hour, minute = map(int, slot.split(":"))
    start_dt = datetime.combine(day, datetime.min.time()).replace(hour=hour, minute=minute)

    try:
        slot_info = api_get(
            "/api/appointments/availability",
            params={"doctor": doctor, "start": start_dt.isoformat()},
        )
        if not slot_info.get("available", True):
            st.warning(f"{doctor_display_name(doctor)} ha già un appuntamento in questo orario.")
    except Exception as e:
        st.caption(f"Disponibilità non verificabile: {e}")

    if st.button("Conferma prenotazione", key="new_submit"):
        if len(patient.strip()) < 2:
            st.error("Il nome del paziente deve avere almeno 2 caratteri.")
        else:
            payload = {
                "patientName": patient.strip(),
                "doctorName": doctor,
                "specialty": specialty,
                "appointmentDate": start_dt.isoformat(),
                "notes": notes.strip() or None,
            }
            try:
                res = api_post("/api/appointments", payload)
                st.success(f"Appuntamento creato (ID: {res.get('id')})")
                load_appointments.clear()
            except Exception as e:
                show_error(e)
