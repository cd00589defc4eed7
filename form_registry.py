"""
In-memory registry of form definitions.

Seeded at startup from the core forms plus an optional predefined-forms JSON
file. Mutations only touch memory; form definitions are not persisted.
"""

import os
import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from core_forms import core_forms
from errors import NotFound, ValidationError
from schemas import CreateFormRequest, Form, FormField, now_iso
from schema_parser import parse_form_schema

logger = logging.getLogger(__name__)

PREDEFINED_FORMS_PATH = os.getenv("PREDEFINED_FORMS_PATH")

# Keys an update may not overwrite
_IMMUTABLE_KEYS = {"id", "createdAt", "createdBy"}


def load_predefined_forms(path: Optional[str] = PREDEFINED_FORMS_PATH) -> List[Form]:
    """Read predefined form definitions from a JSON list.

    Raises on any problem; callers decide whether to fall back.
    """
    if not path:
        return []
    with open(path, "r", encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a JSON list of forms")
    return [Form(**item) for item in raw]


def merge_seed_forms(predefined: List[Form], core: List[Form]) -> List[Form]:
    """Predefined forms first, core forms replacing any predefined form with the same id."""
    core_ids = {f.id for f in core}
    return [f for f in predefined if f.id not in core_ids] + list(core)


class FormRegistry:
    """Ordered list of form definitions with CRUD operations."""

    def __init__(self, forms: Optional[List[Form]] = None, predefined_count: int = 0):
        self.forms: List[Form] = list(forms or [])
        self._next_form_number = predefined_count + 1

    @classmethod
    def seeded(cls, predefined_path: Optional[str] = PREDEFINED_FORMS_PATH) -> "FormRegistry":
        """Build the startup registry. Falls back to core forms if the predefined source fails."""
        try:
            predefined = load_predefined_forms(predefined_path)
        except (OSError, ValueError, PydanticValidationError) as e:
            logger.error("Error loading predefined forms from %s, using core forms only: %s", predefined_path, e)
            predefined = []
        forms = merge_seed_forms(predefined, core_forms())
        logger.info("Form registry seeded with %d forms (%d predefined)", len(forms), len(predefined))
        return cls(forms, predefined_count=len(predefined))

    def _index_of(self, form_id: str) -> int:
        for i, form in enumerate(self.forms):
            if form.id == form_id:
                return i
        raise NotFound("Form not found")

    def create(self, request: CreateFormRequest, created_by: str) -> Form:
        if not request.name:
            raise ValidationError("Form name is required")

        fields = list(request.fields)
        if request.rawSchema:
            parsed = parse_form_schema(request.rawSchema)
            if parsed:
                fields = parsed

        number = self._next_form_number
        self._next_form_number += 1
        new_ids = {}
        for i, f in enumerate(fields, start=1):
            if f.id:
                new_ids[f.id] = f"field-{number}-{i}"
        fields_with_ids = [
            f.model_copy(update={
                "id": f"field-{number}-{i}",
                "dependsOn": new_ids.get(f.dependsOn, f.dependsOn) if f.dependsOn else None,
            })
            for i, f in enumerate(fields, start=1)
        ]
        unknown = [f.dependsOn for f in fields_with_ids if f.dependsOn and f.dependsOn not in new_ids.values()]
        if unknown:
            raise ValidationError(f"Conditional fields depend on unknown fields: {', '.join(unknown)}")
        stamp = now_iso()
        form = Form(
            id=f"form-{number}",
            name=request.name,
            description=request.description,
            fields=fields_with_ids,
            isTemplate=request.isTemplate,
            restrictedToCompanies=list(request.restrictedToCompanies),
            pdfTemplate=request.pdfTemplate,
            formType=request.formType,
            createdBy=created_by,
            createdAt=stamp,
            updatedAt=stamp,
        )
        self.forms.append(form)
        logger.info("Created form %s (%s) with %d fields", form.id, form.name, len(form.fields))
        return form

    def list(self, is_template: Optional[bool] = None, company_id: Optional[str] = None) -> List[Form]:
        result = self.forms
        if is_template is not None:
            result = [f for f in result if f.isTemplate == is_template]
        if company_id:
            result = [
                f for f in result
                if not f.restrictedToCompanies or company_id in f.restrictedToCompanies
            ]
        return list(result)

    def get(self, form_id: str) -> Form:
        return self.forms[self._index_of(form_id)]

    def update(self, form_id: str, updates: Dict[str, Any]) -> Form:
        """Shallow merge; the merged result is not re-validated."""
        index = self._index_of(form_id)
        changes = {k: v for k, v in updates.items() if k not in _IMMUTABLE_KEYS}
        if "fields" in changes and isinstance(changes["fields"], list):
            changes["fields"] = [
                FormField.model_construct(**f) if isinstance(f, dict) else f
                for f in changes["fields"]
            ]
        changes["updatedAt"] = now_iso()
        updated = self.forms[index].model_copy(update=changes)
        self.forms[index] = updated
        return updated

    def delete(self, form_id: str) -> Form:
        """Remove a form. Authorization is the caller's job."""
        index = self._index_of(form_id)
        removed = self.forms.pop(index)
        logger.info("Deleted form %s", form_id)
        return removed
