"""
Turn a pasted block of "Label: sample value" lines into form fields.

Each line is one candidate field. The label and sample value are split on the
first colon or tab, and the field type is inferred from keywords in the label
and from the shape of the sample value. Lines that do not look like a field,
or that are section headers, are dropped without error.
"""

import re
from typing import List

from schemas import FormField

# Header lines copied from job sheets, never fields
HEADER_WORDS = ("Details", "Notification", "Appointment")

SELECT_PLACEHOLDER_OPTIONS = ["Current", "Pending", "Completed"]

_FIELD_LINE = re.compile(r"^([^:\t]+)[\t:]\s*(.*)$")
_SLASH_DATE = re.compile(r"\d{1,2}/\d{1,2}/\d{2,4}")
_WORD_DATE = re.compile(r"\d{1,2}\s+\w+\s+\d{4}")
_NUMERIC = re.compile(r"^\d+\.?\d*$")


def infer_field_type(label: str, sample: str) -> str:
    """First matching rule wins."""
    lowered = label.lower()
    if "email" in lowered:
        return "email"
    if "date" in lowered or _SLASH_DATE.search(sample) or _WORD_DATE.search(sample):
        return "date"
    if any(k in lowered for k in ("amount", "sum", "estimate")) or _NUMERIC.match(sample):
        return "number"
    if "description" in lowered or "address" in lowered or len(sample) > 50:
        return "textarea"
    if any(k in lowered for k in ("status", "section", "peril")):
        return "select"
    return "text"


def parse_form_schema(schema: str) -> List[FormField]:
    """Parse schema text into fields, in input order, all required.

    Field ids are left empty; the registry assigns them when the form is created.
    """
    fields: List[FormField] = []
    for raw in schema.split("\n"):
        line = raw.strip()
        if not line:
            continue
        if any(word in line for word in HEADER_WORDS):
            continue

        match = _FIELD_LINE.match(line)
        if not match:
            continue
        label = match.group(1).strip()
        sample = match.group(2).strip()
        if not label:
            continue

        field_type = infer_field_type(label, sample)
        if field_type == "select":
            fields.append(FormField(
                label=label,
                type="select",
                required=True,
                options=list(SELECT_PLACEHOLDER_OPTIONS),
            ))
        else:
            fields.append(FormField(
                label=label,
                type=field_type,
                required=True,
                placeholder=f"Enter {label}",
            ))
    return fields
