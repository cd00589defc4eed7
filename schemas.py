"""
Data models for the claim forms service

Field names follow the JSON wire format (camelCase) used by the staff app.
- FormField -> one input on a form
- Form -> a named, ordered collection of FormFields
- FormSubmission -> stored in MongoDB collection "formsubmission"
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

FieldType = Literal[
    "text", "textarea", "number", "email", "tel", "date", "select", "checkbox", "signature"
]
Section = Literal["staff", "client"]


def now_iso() -> str:
    return datetime.utcnow().isoformat()


class FormField(BaseModel):
    id: str = ""
    label: str
    type: FieldType = Field("text", description="text, textarea, number, email, tel, date, select, checkbox, signature")
    required: bool = False
    options: Optional[List[str]] = None
    placeholder: Optional[str] = None
    autoFillFrom: Optional[str] = None
    autoCalculate: Optional[bool] = None
    dependsOn: Optional[str] = None
    showWhen: Optional[str] = None
    section: Optional[Section] = None
    readonly: Optional[bool] = None

    @model_validator(mode="after")
    def select_needs_options(self):
        if self.type == "select" and not self.options:
            raise ValueError(f"select field '{self.label}' needs at least one option")
        return self


class Form(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    fields: List[FormField] = Field(default_factory=list)
    isTemplate: bool = False
    restrictedToCompanies: List[str] = Field(default_factory=list)
    pdfTemplate: Optional[str] = None
    formType: Optional[str] = None
    createdBy: str = "system"
    createdAt: str = Field(default_factory=now_iso)
    updatedAt: str = Field(default_factory=now_iso)

    @model_validator(mode="after")
    def dependencies_point_inside_form(self):
        ids = {f.id for f in self.fields}
        for f in self.fields:
            if f.dependsOn and f.dependsOn not in ids:
                raise ValueError(f"field '{f.id}' depends on unknown field '{f.dependsOn}'")
        return self


class FormSubmission(BaseModel):
    id: str
    jobId: str
    formId: str
    submittedBy: str
    data: Dict[str, Any]
    signature: Optional[str] = None
    submittedAt: str = Field(default_factory=now_iso)
    submissionNumber: int = 1
    formType: Optional[str] = None
    updatedAt: Optional[str] = None
    updatedBy: Optional[str] = None


class SignaturePosition(BaseModel):
    x: float
    y: float
    width: float
    height: float
    opacity: Optional[float] = None


# --- Request bodies ---
# Required keys are Optional here so that a missing key is reported as a 400
# by the handlers rather than as FastAPI's 422.

class CreateFormRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    fields: List[FormField] = Field(default_factory=list)
    rawSchema: Optional[str] = None
    isTemplate: bool = False
    restrictedToCompanies: List[str] = Field(default_factory=list)
    pdfTemplate: Optional[str] = None
    formType: Optional[str] = None


class ParseSchemaRequest(BaseModel):
    schema_text: Optional[str] = Field(None, alias="schema")


class SubmitFormRequest(BaseModel):
    jobId: Optional[str] = None
    formId: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    signature: Optional[str] = None


class PrefillRequest(BaseModel):
    job: Dict[str, Any]
    staff: List[Dict[str, Any]] = Field(default_factory=list)
    draft: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("job")
    @classmethod
    def job_not_empty(cls, v):
        if not v:
            raise ValueError("job record is required")
        return v
