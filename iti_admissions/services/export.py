# -*- coding: utf-8 -*-
import datetime as dt
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Tuple

from iti_admissions.services.fields import csv_escape, REGULAR


class ExportFilter(str, Enum):
    ALL = "all"
    REGULAR = "regular"
    SCC = "scc"


def _marks(v: Any) -> Any:
    # 425.0 -> "425", 72.5 -> "72.5"
    return f"{v:g}" if isinstance(v, float) else v


def _date(v: Any) -> Any:
    if isinstance(v, dt.datetime):
        return v.strftime("%Y-%m-%d %H:%M")
    if isinstance(v, dt.date):
        return v.isoformat()
    return v


# (header, getter) pairs; order is the file layout
COLUMNS: Tuple[Tuple[str, Callable[[Any], Any]], ...] = (
    ("Application ID", lambda a: a.application_no),
    ("Name", lambda a: a.name),
    ("Father Name", lambda a: a.father_name),
    ("Mother Name", lambda a: a.mother_name),
    ("Mobile", lambda a: a.mobile),
    ("Email", lambda a: a.email),
    ("Date of Birth", lambda a: _date(a.dob)),
    ("Gender", lambda a: a.gender),
    ("Category", lambda a: a.category),
    ("UIDAI Number", lambda a: a.uidai_number),
    ("Village/Town/City", lambda a: a.village_town_city),
    ("Police Station", lambda a: a.police_station),
    ("Post Office", lambda a: a.post_office),
    ("Block", lambda a: a.block),
    ("District", lambda a: a.district),
    ("State", lambda a: a.state),
    ("Pincode", lambda a: a.pincode),
    ("10th School", lambda a: a.class_10th_school),
    ("10th Subject", lambda a: a.class_10th_subject),
    ("10th Marks Obtained", lambda a: _marks(a.class_10th_marks_obtained)),
    ("10th Total Marks", lambda a: _marks(a.class_10th_total_marks)),
    ("10th Percentage", lambda a: a.class_10th_percentage),
    ("12th School", lambda a: a.class_12th_school),
    ("12th Subject", lambda a: a.class_12th_subject),
    ("12th Marks Obtained", lambda a: _marks(a.class_12th_marks_obtained)),
    ("12th Total Marks", lambda a: _marks(a.class_12th_total_marks)),
    ("12th Percentage", lambda a: a.class_12th_percentage),
    ("Trade", lambda a: a.trade),
    ("Qualification", lambda a: a.qualification),
    ("Session", lambda a: a.session),
    ("Shift", lambda a: a.shift),
    ("PWD Claim", lambda a: a.pwd_claim),
    ("PWD Category", lambda a: a.pwd_category),
    ("Student Credit Card", lambda a: a.student_credit_card),
    ("Registration Type", lambda a: a.registration_type),
    ("Status", lambda a: a.status),
    ("Date Submitted", lambda a: _date(a.created_at)),
)

CSV_COLUMNS: List[str] = [header for header, _ in COLUMNS]


def matches(app: Any, filter_type: ExportFilter) -> bool:
    filter_type = ExportFilter(filter_type)
    if filter_type is ExportFilter.REGULAR:
        return app.registration_type == REGULAR
    if filter_type is ExportFilter.SCC:
        return app.student_credit_card == "Yes"
    return True


def apply_filter(apps: Iterable[Any], filter_type: ExportFilter) -> List[Any]:
    return [a for a in apps if matches(a, filter_type)]


def build_csv(apps: Iterable[Any]) -> str:
    rows = [",".join(csv_escape(h) for h in CSV_COLUMNS)]
    for app in apps:
        rows.append(",".join(csv_escape(get(app)) for _, get in COLUMNS))
    return "\n".join(rows)


def export_filename(filter_type: ExportFilter, today: dt.date | None = None) -> str:
    suffix: Dict[ExportFilter, str] = {
        ExportFilter.ALL: "",
        ExportFilter.REGULAR: "_regular",
        ExportFilter.SCC: "_scc",
    }
    today = today or dt.date.today()
    return f"admissions{suffix[ExportFilter(filter_type)]}_{today.isoformat()}.csv"
