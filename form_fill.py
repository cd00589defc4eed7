"""
Form-fill engine: pre-populates a form from a job record, tracks edits,
validates the active section and keeps a draft of in-progress values.

A FormFillSession walks through three phases:

    staff -> client -> signature

Forms that do not need a client signature submit straight from the staff
phase. Moving back is always allowed and never discards values.
"""

import os
import json
import logging
import re
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from core_forms import VALIDATION_EXEMPT_FORM_IDS
from schemas import Form, FormField, now_iso

logger = logging.getLogger(__name__)

DRAFTS_DIR = Path(os.getenv("DRAFTS_DIR", "data/drafts"))

PHASES = ("staff", "client", "signature")

# Form names whose workflow includes a client section and signature
SIGNATURE_FORM_NAMES = frozenset(["Clearance Certificate", "SAHL Certificate Form", "ABSA Form", "Discovery Form"])

# Legacy staff/client split for forms that declare no sections: (client_start, client_end)
POSITIONAL_CLIENT_RANGES = {
    "ABSA Form": (5, 13),
    "SAHL Certificate Form": (5, 11),
    "Clearance Certificate": (4, 10),
}

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
TEL_PATTERN = re.compile(r"^[\d\s\-+()]+$")

STAFF_LABEL_WORDS = ("staff", "technician", "inspector")
CLIENT_LABEL_WORDS = ("client", "insured")
ADDRESS_LABEL_WORDS = ("address", "location")

# Job record attributes arrive in lower camel or Pascal case depending on the source
JOB_ALIASES: Dict[str, tuple] = {
    "title": ("title", "Title"),
    "underwriter": ("underwriter", "Underwriter"),
    "claimNo": ("claimNo", "ClaimNo"),
    "insuredName": ("insuredName", "InsuredName"),
    "email": ("insEmail", "Email"),
    "riskAddress": ("riskAddress", "RiskAddress"),
    "excess": ("excess", "Excess"),
    "policyNo": ("policyNo", "PolicyNo"),
    "assignedTo": ("assignedTo", "AssignedTo"),
    "description": ("description", "Description"),
    "incidentDate": ("incidentDate", "IncidentDate", "dateOfLoss", "DateOfLoss"),
}


def resolve(record: Dict[str, Any], *names: str, default: Any = "") -> Any:
    """First truthy value among the given attribute names."""
    for name in names:
        value = record.get(name)
        if value:
            return value
    return default


def job_value(job: Dict[str, Any], key: str, default: Any = "") -> Any:
    """Read a job attribute, trying its known alternate spellings."""
    names = JOB_ALIASES.get(key)
    if names is None:
        names = (key, key[:1].upper() + key[1:])
    return resolve(job, *names, default=default)


def is_blank(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


def requires_signature(form: Form) -> bool:
    return form.name in SIGNATURE_FORM_NAMES


def fields_by_section(form: Form, section: str) -> List[FormField]:
    """Fields belonging to the staff or client section of a form."""
    if any(f.section for f in form.fields):
        return [f for f in form.fields if (f.section or "staff") == section]

    client_range = POSITIONAL_CLIENT_RANGES.get(form.name)
    if client_range is None:
        return list(form.fields)
    start, end = client_range
    in_client = [start <= i < end for i in range(len(form.fields))]
    if section == "client":
        return [f for f, c in zip(form.fields, in_client) if c]
    return [f for f, c in zip(form.fields, in_client) if not c]


def section_map(form: Form) -> Dict[str, List[str]]:
    return {
        "staff": [f.id for f in fields_by_section(form, "staff")],
        "client": [f.id for f in fields_by_section(form, "client")],
    }


def is_visible(field: FormField, values: Dict[str, Any]) -> bool:
    if field.dependsOn and field.showWhen is not None:
        return values.get(field.dependsOn) == field.showWhen
    return True


def field_error(field: FormField, value: Any) -> bool:
    """True when a required field's value is missing or malformed for its type."""
    if not field.required:
        return False
    if is_blank(value):
        return True
    text = str(value)
    if field.type == "number":
        try:
            number = float(text)
        except ValueError:
            return True
        return number != number or number in (float("inf"), float("-inf"))
    if field.type == "email":
        return not EMAIL_PATTERN.match(text)
    if field.type == "tel":
        return not TEL_PATTERN.match(text)
    return False


def error_message(field: FormField) -> str:
    """Inline hint shown next to a field that failed validation."""
    return {
        "number": "(Enter a valid number)",
        "email": "(Enter a valid email)",
        "tel": "(Enter a valid phone number)",
    }.get(field.type, "(This field is required)")


def _excess_paid_field(form: Form) -> Optional[FormField]:
    return next((f for f in form.fields if "excess paid" in f.label.lower()), None)


def _excess_amount_field(form: Form) -> Optional[FormField]:
    return next((f for f in form.fields if f.autoCalculate and "amount" in f.label.lower()), None)


def _excess_amount(job: Dict[str, Any], excess_paid: Any) -> str:
    if excess_paid == "Yes":
        return str(job_value(job, "excess", "0"))
    return "0"


def auto_fill(form: Form, job: Dict[str, Any], staff: List[Dict[str, Any]],
              draft: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Initial values for every field, layered on top of a saved draft.

    A field that already has a value in the draft is left alone. Otherwise the
    field's autoFillFrom source is used, then the label keyword rules, which
    may refine the source value. Excess amounts are derived last.
    """
    values: Dict[str, Any] = dict(draft or {})
    assigned_id = job_value(job, "assignedTo")
    assigned_staff = next((s for s in staff if s.get("id") == assigned_id), None)

    for field in form.fields:
        if values.get(field.id):
            continue

        label = field.label.lower()
        source = field.autoFillFrom
        if source:
            if source == "assignedStaffName":
                values[field.id] = (assigned_staff or {}).get("name", "")
            elif source == "clientName":
                values[field.id] = job_value(job, "insuredName")
            elif source == "currentDate":
                values[field.id] = date.today().isoformat()
            else:
                found = job_value(job, source, None)
                if found:
                    values[field.id] = found

        if assigned_staff and any(w in label for w in STAFF_LABEL_WORDS):
            values[field.id] = assigned_staff.get("name", "")

        if any(w in label for w in CLIENT_LABEL_WORDS):
            if "name" in label:
                values[field.id] = job_value(job, "insuredName")
            if "email" in label:
                values[field.id] = job_value(job, "email")

        if any(w in label for w in ADDRESS_LABEL_WORDS):
            values[field.id] = job_value(job, "riskAddress")

        if field.autoCalculate and "amount" in label:
            paid_field = _excess_paid_field(form)
            if paid_field is not None:
                values[field.id] = _excess_amount(job, values.get(paid_field.id))

    return values


# ---------------------------------------------------------------------------
# Draft persistence
# ---------------------------------------------------------------------------

def draft_key(job_id: str, form_id: str) -> str:
    return f"form_{job_id}_{form_id}"


class DraftStore(Protocol):
    def load(self, key: str) -> Dict[str, Any]: ...

    def save(self, key: str, values: Dict[str, Any]) -> None: ...

    def clear(self, key: str) -> None: ...


class MemoryDraftStore:
    def __init__(self):
        self._drafts: Dict[str, Dict[str, Any]] = {}

    def load(self, key: str) -> Dict[str, Any]:
        return dict(self._drafts.get(key, {}))

    def save(self, key: str, values: Dict[str, Any]) -> None:
        self._drafts[key] = dict(values)

    def clear(self, key: str) -> None:
        self._drafts.pop(key, None)


class JsonFileDraftStore:
    """
    One JSON file per draft key under root_dir. Last write wins.
    """

    def __init__(self, root_dir: Path = DRAFTS_DIR):
        self.root = Path(root_dir)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.root / f"{safe}.json"

    def load(self, key: str) -> Dict[str, Any]:
        path = self._path(key)
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Failed to parse saved form data %s: %s", path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, key: str, values: Dict[str, Any]) -> None:
        self._path(key).write_text(json.dumps(values), encoding="utf-8")

    def clear(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class FormFillSession:
    """
    State for one staff member filling one form for one job.

    Every edit is written through to the draft store; a confirmed submission
    clears the draft.
    """

    def __init__(self, form: Form, job: Dict[str, Any], staff: List[Dict[str, Any]], drafts: DraftStore):
        self.form = form
        self.job = job
        self.staff = staff
        self.drafts = drafts
        self.job_id = str(resolve(job, "id", "Id", "_id"))
        self.key = draft_key(self.job_id, form.id)
        self.phase = "staff"
        self.signature: Optional[str] = None
        self.validation_errors: List[str] = []

        self.values = auto_fill(form, job, staff, drafts.load(self.key))
        self.drafts.save(self.key, self.values)

    @property
    def requires_signature(self) -> bool:
        return requires_signature(self.form)

    def set_value(self, field_id: str, value: Any) -> None:
        self.values[field_id] = value

        changed = next((f for f in self.form.fields if f.id == field_id), None)
        if changed is not None and "excess paid" in changed.label.lower():
            amount_field = _excess_amount_field(self.form)
            if amount_field is not None:
                self.values[amount_field.id] = _excess_amount(self.job, value)

        if field_id in self.validation_errors:
            self.validation_errors.remove(field_id)
        self.drafts.save(self.key, self.values)

    def visible_fields(self, section: Optional[str] = None) -> List[FormField]:
        """Fields of a section (default: the active one) whose display condition holds."""
        section = section or ("client" if self.phase == "signature" else self.phase)
        return [f for f in fields_by_section(self.form, section) if is_visible(f, self.values)]

    def validate(self) -> List[str]:
        """Ids of failing fields in the active section, in form order."""
        if self.form.id in VALIDATION_EXEMPT_FORM_IDS:
            self.validation_errors = []
        else:
            self.validation_errors = [
                f.id for f in self.visible_fields() if field_error(f, self.values.get(f.id))
            ]
        return list(self.validation_errors)

    def next_phase(self) -> str:
        if self.phase == "staff":
            if not self.requires_signature:
                logger.warning("%s has no client section; submit from the staff phase", self.form.name)
                return self.phase
            self.phase = "client"
        elif self.phase == "client":
            self.phase = "signature"
        return self.phase

    def previous_phase(self) -> str:
        if self.phase == "signature":
            self.phase = "client"
        elif self.phase == "client":
            self.phase = "staff"
        return self.phase

    def capture_signature(self, signature: str) -> None:
        self.signature = signature
        self.values["signature"] = signature
        self.drafts.save(self.key, self.values)

    def submission_payload(self) -> Dict[str, Any]:
        """Body for POST /api/form-submissions."""
        return {
            "jobId": self.job_id,
            "formId": self.form.id,
            "data": {
                **self.values,
                "signature": self.signature or "",
                "submissionTimestamp": now_iso(),
            },
        }

    def mark_submitted(self) -> None:
        self.drafts.clear(self.key)
