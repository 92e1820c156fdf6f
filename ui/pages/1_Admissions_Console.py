# -*- coding: utf-8 -*-
import datetime as dt
import pandas as pd
import streamlit as st
import streamlit.components.v1 as components

from api_client import get, get_bytes, post, put, site_config
from iti_admissions.config import settings
from iti_admissions.services import fields as F
from iti_admissions.services.console import (
    build_edit_payload, detail_view, document_status, edit_form_state, page_stats, validate_manual_entry,
)
from iti_admissions.services.export import ExportFilter, export_filename
from iti_admissions.services.print_forms import admission_form_html

st.set_page_config(page_title="Admissions Console", layout="wide")

if "site" not in st.session_state:
    st.session_state["site"] = site_config()
st.session_state.setdefault("console_page", 1)
st.session_state.setdefault("selected_id", None)
st.session_state.setdefault("editing", False)


def status_badge(text: str):
    color = {"approved": "#16a34a", "pending": "#f59e0b", "rejected": "#dc2626"}.get(text, "#6b7280")
    st.markdown(
        f"""
        <span style="
            display:inline-block;
            padding:4px 10px;
            border-radius:999px;
            background:{color}20;
            color:{color};
            font-weight:600;
            font-size:0.9rem;">
            {text.capitalize()}
        </span>
        """,
        unsafe_allow_html=True
    )


st.title("Admissions Console")

# ---------------------------
# Filters
# ---------------------------
f1, f2, f3, f4 = st.columns([2, 1, 1, 1])
with f1:
    search = st.text_input("Search", placeholder="Name, application ID, mobile or email")
with f2:
    status = st.selectbox("Status", ["all", *F.STATUSES], format_func=str.capitalize)
with f3:
    trade = st.selectbox("Trade", ["all", *settings.TRADES])
with f4:
    day = st.date_input("Submitted on", value=None)

filters = (search, status, trade, day)
if st.session_state.get("last_filters") != filters:
    st.session_state["console_page"] = 1
    st.session_state["last_filters"] = filters

params = {"page": st.session_state["console_page"], "limit": settings.PAGE_SIZE,
          "status": status, "trade": trade}
if search.strip():
    params["q"] = search.strip()
if day:
    params["date"] = day.isoformat()

listing, err = get("/admin/admissions", params=params)
if err:
    st.error(err)
    st.stop()

# ---------------------------
# Stat cards + table
# ---------------------------
stats = page_stats(listing["items"], listing["total"])
m1, m2, m3, m4 = st.columns(4)
m1.metric("Total", stats["total"])
m2.metric("Pending", stats["pending"])
m3.metric("Approved", stats["approved"])
m4.metric("Rejected", stats["rejected"])

if listing["items"]:
    df = pd.DataFrame(listing["items"])[
        ["db_id", "application_id", "name", "mobile", "trade", "registration_type", "status", "date_submitted"]
    ]
    df["status"] = df["status"].str.capitalize()
    df["date_submitted"] = pd.to_datetime(df["date_submitted"]).dt.strftime("%Y-%m-%d %H:%M")
    st.dataframe(df.set_index("db_id"), use_container_width=True)
else:
    st.info("No admissions found.")

p1, p2, p3 = st.columns([1, 2, 1])
with p1:
    if st.button("Previous page", disabled=st.session_state["console_page"] <= 1):
        st.session_state["console_page"] -= 1
        st.rerun()
with p2:
    st.caption(f"Page {listing['page']} of {max(listing['total_pages'], 1)}")
with p3:
    if st.button("Next page", disabled=st.session_state["console_page"] >= listing["total_pages"]):
        st.session_state["console_page"] += 1
        st.rerun()

# ---------------------------
# Export
# ---------------------------
with st.expander("Export CSV"):
    kind = st.radio("Rows", [f.value for f in ExportFilter], horizontal=True,
                    format_func={"all": "All", "regular": "Regular", "scc": "Student Credit Card"}.get)
    if st.button("Prepare export"):
        content, err = get_bytes("/admin/admissions/export",
                                 params={"filter_type": kind, "status": status, "trade": trade})
        if err:
            st.error(err)
        else:
            st.download_button("Download CSV", data=content, file_name=export_filename(ExportFilter(kind)),
                               mime="text/csv")

# ---------------------------
# Manual entry
# ---------------------------
with st.expander("Add admission manually"):
    with st.form("manual_form", clear_on_submit=True):
        c1, c2, c3 = st.columns(3)
        with c1:
            m_name = st.text_input("Name *")
            m_mobile = st.text_input("Mobile *", max_chars=10)
        with c2:
            m_father = st.text_input("Father's Name *")
            m_trade = st.selectbox("Trade *", settings.TRADES)
        with c3:
            m_qual = st.selectbox("Qualification *", settings.QUALIFICATIONS)
            m_cat = st.selectbox("Category *", F.CATEGORIES)
        m_email = st.text_input("Email")
        m_status = st.selectbox("Status", F.STATUSES, format_func=str.capitalize)
        add = st.form_submit_button("Create admission")
    if add:
        entry = {"name": m_name, "father_name": m_father, "mobile": m_mobile, "email": m_email,
                 "trade": m_trade, "qualification": m_qual, "category": m_cat, "status": m_status}
        problem = validate_manual_entry(entry)
        if problem:
            st.error(problem)
        else:
            res, err = post("/admin/admissions/manual", entry)
            if err:
                st.error(err)
            else:
                st.success(f"{res['message']} ({res['application_id']})")
                st.rerun()

# ---------------------------
# Detail / edit
# ---------------------------
st.divider()
ids = [item["db_id"] for item in listing["items"]]
labels = {item["db_id"]: f"{item['application_id']} - {item['name']}" for item in listing["items"]}
if not ids:
    st.stop()
selected = st.selectbox("Open application", ids, format_func=labels.get,
                        index=ids.index(st.session_state["selected_id"]) if st.session_state["selected_id"] in ids else 0)
if selected != st.session_state["selected_id"]:
    st.session_state["selected_id"] = selected
    st.session_state["editing"] = False

app, err = get(f"/admin/admissions/{selected}")
if err:
    st.error(err)
    st.stop()

h1, h2 = st.columns([3, 1], vertical_alignment="center")
with h1:
    st.markdown(f"#### {app['name']}")
    st.caption(f"Application ID: **{app['application_id']}**")
with h2:
    status_badge(app["status"])

a1, a2, a3, a4 = st.columns(4)
for col, target, label in ((a1, "approved", "Approve"), (a2, "rejected", "Reject"), (a3, "pending", "Mark pending")):
    with col:
        if st.button(label, disabled=app["status"] == target, use_container_width=True):
            res, err = put(f"/admin/admissions/{selected}/status", {"status": target})
            if err:
                st.error(err)
            else:
                st.success(res["message"])
                st.rerun()
with a4:
    if st.button("Print form", use_container_width=True):
        components.html(admission_form_html(app, st.session_state["site"]), height=0)

if not st.session_state["editing"]:
    for title, rows in detail_view(app):
        st.markdown(f"**{title}**")
        st.table(pd.DataFrame(rows, columns=["Field", "Value"]).set_index("Field"))

    st.markdown("**Documents**")
    for doc in document_status(app):
        d1, d2 = st.columns([3, 1])
        d1.write(f"{doc['label']}: {'Submitted' if doc['present'] else 'Not submitted'}")
        if doc["downloadable"]:
            # fetched on request only, cached per stored file name
            cache_key = f"doc_{doc['filename']}"
            if cache_key not in st.session_state:
                if d2.button("Fetch", key=f"fetch_{selected}_{doc['slot']}"):
                    content, err = get_bytes(f"/admin/admissions/documents/{doc['filename']}")
                    if err:
                        d2.caption(err)
                    else:
                        st.session_state[cache_key] = content
            if cache_key in st.session_state:
                d2.download_button("Download", data=st.session_state[cache_key], file_name=doc["filename"],
                                   key=f"dl_{selected}_{doc['slot']}")
        elif doc["present"]:
            d2.caption("Verified manually")

    if st.button("Edit application"):
        st.session_state["editing"] = True
        st.rerun()
else:
    state = edit_form_state(app)
    with st.form("edit_form"):
        c1, c2, c3 = st.columns(3)
        with c1:
            for key, label in (("name", "Name *"), ("father_name", "Father's Name *"), ("mother_name", "Mother's Name"),
                               ("mobile", "Mobile *"), ("email", "Email"), ("uidai_number", "UIDAI Number")):
                state[key] = st.text_input(label, value=state[key] or "")
            dob = state["dob"]
            state["dob"] = st.date_input("Date of Birth", value=dt.date.fromisoformat(dob) if dob else None)
            state["gender"] = st.text_input("Gender", value=state["gender"] or "")
            state["category"] = st.selectbox("Category *", F.CATEGORIES, index=F.CATEGORIES.index(state["category"]))
        with c2:
            for key, label in (("village_town_city", "Village/Town/City"), ("nearby", "Nearby"),
                               ("police_station", "Police Station"), ("post_office", "Post Office"),
                               ("block", "Block"), ("district", "District"), ("state", "State"),
                               ("pincode", "Pincode")):
                state[key] = st.text_input(label, value=state[key] or "")
        with c3:
            for key, label in (("class_10th_school", "10th School"), ("class_10th_subject", "10th Subject"),
                               ("class_12th_school", "12th School"), ("class_12th_subject", "12th Subject")):
                state[key] = st.text_input(label, value=state[key] or "")
            for key, label in (("class_10th_marks_obtained", "10th Marks"), ("class_10th_total_marks", "10th Total"),
                               ("class_12th_marks_obtained", "12th Marks"), ("class_12th_total_marks", "12th Total")):
                state[key] = st.number_input(label, min_value=0.0, value=state[key], step=1.0)

        e1, e2, e3, e4 = st.columns(4)
        with e1:
            state["trade"] = st.selectbox("Trade *", settings.TRADES,
                                          index=settings.TRADES.index(state["trade"]) if state["trade"] in settings.TRADES else 0)
            state["qualification"] = st.text_input("Qualification *", value=state["qualification"] or "")
        with e2:
            state["session"] = st.text_input("Session", value=state["session"] or "")
            state["shift"] = st.selectbox("Shift", ["", *settings.SHIFTS],
                                          index=([""] + settings.SHIFTS).index(state["shift"] or ""))
        with e3:
            state["pwd_claim"] = st.selectbox("PWD Claim", F.YES_NO, index=F.YES_NO.index(state["pwd_claim"]))
            state["pwd_category"] = st.text_input("PWD Category", value=state["pwd_category"] or "")
            state["status"] = st.selectbox("Status", F.STATUSES, index=F.STATUSES.index(state["status"]),
                                           format_func=str.capitalize)
        with e4:
            state["student_credit_card"] = st.selectbox("Student Credit Card", F.YES_NO,
                                                        index=F.YES_NO.index(state["student_credit_card"]))
            state["student_credit_card_bank"] = st.text_input("Bank Name", value=state["student_credit_card_bank"])
            state["student_credit_card_account"] = st.text_input("Account Number",
                                                                 value=state["student_credit_card_account"])

        st.markdown("**Documents on file**")
        k1, k2, k3 = st.columns(3)
        state["has_photo"] = k1.checkbox("Photo", value=state["has_photo"])
        state["has_aadhaar"] = k2.checkbox("Aadhaar", value=state["has_aadhaar"])
        state["has_marksheet"] = k3.checkbox("Marksheet", value=state["has_marksheet"])

        s1, s2 = st.columns(2)
        save = s1.form_submit_button("Save changes", type="primary")
        cancel = s2.form_submit_button("Cancel")

    if cancel:
        st.session_state["editing"] = False
        st.rerun()
    if save:
        problem = validate_manual_entry(state)
        if problem:
            st.error(problem)
        else:
            res, err = put(f"/admin/admissions/{selected}", build_edit_payload(state))
            if err:
                st.error(err)
            else:
                st.success("Admission updated successfully")
                st.session_state["editing"] = False
                st.rerun()
