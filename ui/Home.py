# -*- coding: utf-8 -*-
import datetime as dt
import streamlit as st
import streamlit.components.v1 as components

from api_client import get, post_multipart, site_config
from iti_admissions.config import settings
from iti_admissions.services import fields as F
from iti_admissions.services.print_forms import receipt_html, DOCUMENT_LABELS
from iti_admissions.services.wizard import (
    ApplicationWizard, DocumentFile, Step, STEPS, SubmissionError, icon_for,
)

st.set_page_config(page_title="ITI Admission Application", layout="centered")

# ---------------------------
# State
# ---------------------------
if "wizard" not in st.session_state:
    st.session_state["wizard"] = ApplicationWizard()
if "site" not in st.session_state:
    st.session_state["site"] = site_config()

wiz: ApplicationWizard = st.session_state["wizard"]
site = st.session_state["site"]


def set_field(field: str, value):
    """Push a widget value into the wizard; runs the UIDAI lookup when one is due."""
    if wiz.data.get(field) == value:
        return
    check = wiz.update(field, value)
    if check is None:
        return
    data, err = get(f"/admissions/check-uidai/{check.number}", timeout=10)
    if err:
        # lookup failures never block the applicant; the server re-checks on submit
        wiz.resolve_uidai_check(check, True)
    else:
        wiz.resolve_uidai_check(check, data["available"], data.get("message", ""))


def choice(label: str, field: str, options, **kw):
    current = wiz.data.get(field) or ""
    opts = [""] + list(options)
    value = st.selectbox(label, opts, index=opts.index(current) if current in opts else 0, key=f"w_{field}", **kw)
    set_field(field, value)


def text(label: str, field: str, **kw):
    value = st.text_input(label, value=str(wiz.data.get(field) or ""), key=f"w_{field}", **kw)
    set_field(field, value.strip())


def send(fields, files):
    res, err = post_multipart("/admissions", fields, files)
    if err:
        raise SubmissionError(err)
    return res


@st.cache_data(ttl=300)
def active_sessions():
    data, err = get("/sessions/active", timeout=10)
    return [s["session_name"] for s in data] if not err and data else []


# ---------------------------
# Header + progress
# ---------------------------
st.title(site.institute_name)
st.caption(f"Admission Application - Session {site.session_label}")

cols = st.columns(len(STEPS))
for col, info in zip(cols, STEPS):
    done = wiz.submitted or info.step < wiz.step
    marker = icon_for("Check") if done else icon_for(info.icon)
    weight = "**" if info.step == wiz.step else ""
    col.markdown(f"{marker} {weight}{info.title}{weight}  \n{info.subtitle}")
st.progress((wiz.step - 1) / (len(STEPS) - 1))

# ---------------------------
# Submitted: receipt
# ---------------------------
if wiz.submitted:
    st.success(f"Application submitted successfully! Your application ID is **{wiz.application_id}**")
    page = receipt_html(wiz.receipt, site, dt.datetime.now())
    c1, c2, c3 = st.columns(3)
    with c1:
        st.download_button("Download receipt", data=page, file_name=f"receipt_{wiz.application_id}.html",
                           mime="text/html", use_container_width=True)
    with c2:
        if st.button("Print receipt", use_container_width=True):
            components.html(page, height=0)
    with c3:
        if st.button("New application", use_container_width=True):
            st.session_state["wizard"] = ApplicationWizard()
            st.rerun()
    st.stop()

# ---------------------------
# Steps
# ---------------------------
if wiz.step == Step.PERSONAL:
    st.subheader("Personal Details")
    c1, c2 = st.columns(2)
    with c1:
        text("Full Name *", "name")
        text("Mother's Name *", "mother_name")
        text("Email *", "email")
        choice("Gender *", "gender", ["Male", "Female", "Other"])
    with c2:
        text("Father's Name *", "father_name")
        text("Mobile Number *", "mobile", max_chars=10)
        dob = st.date_input("Date of Birth *", value=dt.date.fromisoformat(wiz.data["dob"]) if wiz.data["dob"] else None,
                            min_value=dt.date(1950, 1, 1), max_value=dt.date.today(), key="w_dob")
        set_field("dob", dob.isoformat() if dob else "")
        choice("Category *", "category", F.CATEGORIES)
    text("UIDAI / Aadhaar Number *", "uidai_number", max_chars=12)
    if wiz.uidai_checking:
        st.caption("Checking UIDAI number...")
    elif wiz.uidai_error:
        st.error(wiz.uidai_error)
    choice("PWD Claim", "pwd_claim", F.YES_NO)
    if wiz.data["pwd_claim"] == "Yes":
        choice("PWD Category *", "pwd_category", ["Locomotor", "Visual", "Hearing", "Speech", "Other"])

elif wiz.step == Step.ADDRESS:
    st.subheader("Address")
    c1, c2 = st.columns(2)
    with c1:
        text("Village / Town / City *", "village_town_city")
        text("Police Station *", "police_station")
        text("Block *", "block")
        text("State *", "state")
    with c2:
        text("Nearby", "nearby")
        text("Post Office *", "post_office")
        text("District *", "district")
        text("Pincode *", "pincode", max_chars=6)

elif wiz.step == Step.EDUCATION:
    for block, label, req in (("class_10th", "10th", " *"), ("class_12th", "12th", "")):
        st.subheader(f"Class {label}")
        c1, c2 = st.columns(2)
        with c1:
            text(f"School{req}", f"{block}_school")
            text(f"Marks Obtained{req}", f"{block}_marks_obtained")
        with c2:
            text("Subject", f"{block}_subject")
            text(f"Total Marks{req}", f"{block}_total_marks")
        st.caption(f"Percentage: {wiz.data[f'{block}_percentage'] or '-'}%")

elif wiz.step == Step.PREFERENCES:
    st.subheader("Admission Preferences")
    sessions = active_sessions()
    if not sessions:
        st.warning("No admission session is open right now.")
    choice("Trade *", "trade", settings.TRADES)
    choice("Session *", "session", sessions)
    choice("Shift", "shift", settings.SHIFTS)
    choice("Student Credit Card", "student_credit_card", F.YES_NO)
    if wiz.data["student_credit_card"] == "Yes":
        text("Bank Name", "student_credit_card_bank")
        text("Account Number", "student_credit_card_account")

elif wiz.step == Step.DOCUMENTS:
    st.subheader("Documents")
    st.caption(f"PDF or image files, up to {settings.MAX_UPLOAD_MB}MB each.")
    for slot in ("photo", "aadhaar", "marksheet", "student_credit_card_doc"):
        if slot == "student_credit_card_doc" and wiz.data["student_credit_card"] != "Yes":
            continue
        required = " *" if slot != "student_credit_card_doc" else ""
        current = wiz.data.get(slot)
        up = st.file_uploader(f"{DOCUMENT_LABELS[slot]}{required}", type=sorted(settings.ALLOWED_EXTENSIONS),
                              key=f"w_{slot}")
        if up is not None:
            set_field(slot, DocumentFile(up.name, up.getvalue(), up.type or "application/octet-stream"))
        elif current is not None:
            st.caption(f"Attached: {current.filename}")

elif wiz.step == Step.REVIEW:
    st.subheader("Review & Submit")
    d = wiz.data
    st.markdown(
        f"**{d['name']}** (S/o or D/o {d['father_name']})  \n"
        f"Mobile: {d['mobile']} | Email: {d['email']} | UIDAI: {d['uidai_number']}  \n"
        f"Trade: {d['trade']} | Session: {d['session']} | Shift: {d['shift'] or 'N/A'}  \n"
        f"10th: {d['class_10th_percentage'] or 'N/A'}% | "
        f"Registration: {F.registration_type_for(d['student_credit_card'])}"
    )
    for slot in ("photo", "aadhaar", "marksheet", "student_credit_card_doc"):
        doc = d.get(slot)
        st.caption(f"{DOCUMENT_LABELS[slot]}: {doc.filename if doc else 'Not attached'}")
    agreed = st.checkbox("I hereby declare that all the information provided is true to the best of my knowledge.",
                         value=bool(d["declaration"]), key="w_declaration")
    set_field("declaration", agreed)

for msg in wiz.errors:
    st.error(msg)
for msg in wiz.warnings:
    st.warning(msg)

# ---------------------------
# Navigation
# ---------------------------
left, right = st.columns(2)
with left:
    if wiz.step > Step.PERSONAL and st.button("Previous", use_container_width=True):
        wiz.previous()
        st.rerun()
with right:
    if wiz.step < Step.REVIEW:
        if st.button("Next", type="primary", use_container_width=True):
            wiz.next()
            st.rerun()
    elif st.button("Submit Application", type="primary", use_container_width=True, disabled=wiz.submitting):
        with st.spinner("Submitting..."):
            wiz.submit(send)
        st.rerun()

# Footer
st.divider()
st.caption(f"{site.address} | {site.phone} | {site.email}")
