import json

import pytest

from core_forms import CORE_FORM_IDS, core_forms
from errors import NotFound, ValidationError
from form_registry import FormRegistry, merge_seed_forms
from schemas import CreateFormRequest, Form, FormField


def _request(**kwargs):
    kwargs.setdefault("name", "Site Inspection")
    return CreateFormRequest(**kwargs)


def test_create_assigns_form_and_field_ids():
    registry = FormRegistry(predefined_count=2)
    form = registry.create(_request(fields=[FormField(label="A"), FormField(label="B")]), created_by="admin-1")

    assert form.id == "form-3"
    assert [f.id for f in form.fields] == ["field-3-1", "field-3-2"]
    assert form.createdBy == "admin-1"
    assert form.createdAt == form.updatedAt
    assert registry.get("form-3") is form


def test_create_ids_are_unique():
    registry = FormRegistry()
    first = registry.create(_request(), created_by="admin-1")
    second = registry.create(_request(), created_by="admin-1")
    assert first.id != second.id


def test_create_without_name_fails():
    registry = FormRegistry()
    with pytest.raises(ValidationError):
        registry.create(CreateFormRequest(), created_by="admin-1")


def test_raw_schema_overrides_fields_when_it_parses():
    registry = FormRegistry()
    form = registry.create(
        _request(fields=[FormField(label="Ignored")], rawSchema="Claim Number: 1\nInsured: Jo"),
        created_by="admin-1",
    )
    assert [f.label for f in form.fields] == ["Claim Number", "Insured"]


def test_unparseable_raw_schema_keeps_fields():
    registry = FormRegistry()
    form = registry.create(_request(fields=[FormField(label="Kept")], rawSchema="no fields here"), created_by="x")
    assert [f.label for f in form.fields] == ["Kept"]


def test_list_filters_by_template_flag_and_company():
    registry = FormRegistry()
    registry.create(_request(name="Open", isTemplate=True), created_by="a")
    registry.create(_request(name="Acme only", restrictedToCompanies=["acme"]), created_by="a")
    registry.create(_request(name="Other only", restrictedToCompanies=["other"]), created_by="a")

    assert [f.name for f in registry.list(is_template=True)] == ["Open"]
    assert [f.name for f in registry.list(company_id="acme")] == ["Open", "Acme only"]
    assert len(registry.list()) == 3


def test_get_missing_form():
    with pytest.raises(NotFound):
        FormRegistry().get("nope")


def test_update_shallow_merges_and_refreshes_timestamp():
    registry = FormRegistry(core_forms())
    before = registry.get("liability-form")

    updated = registry.update("liability-form", {"description": "New", "id": "hijack"})

    assert updated.id == "liability-form"
    assert updated.description == "New"
    assert updated.fields == before.fields
    assert updated.updatedAt >= before.updatedAt


def test_update_missing_form():
    with pytest.raises(NotFound):
        FormRegistry().update("nope", {"name": "x"})


def test_delete_removes_form():
    registry = FormRegistry(core_forms())
    registry.delete("absa-form")
    with pytest.raises(NotFound):
        registry.get("absa-form")
    with pytest.raises(NotFound):
        registry.delete("absa-form")


def test_core_forms_win_id_collisions():
    predefined = [
        Form(id="liability-form", name="Old liability"),
        Form(id="geyser-report", name="Geyser Report"),
    ]
    merged = merge_seed_forms(predefined, core_forms())

    by_id = {f.id: f for f in merged}
    assert by_id["liability-form"].name == "Liability Form"
    assert "geyser-report" in by_id
    assert len(merged) == len(CORE_FORM_IDS) + 1


def test_seeded_reads_predefined_file(tmp_path):
    path = tmp_path / "forms.json"
    path.write_text(json.dumps([{"id": "geyser-report", "name": "Geyser Report"}]))

    registry = FormRegistry.seeded(str(path))

    assert registry.get("geyser-report").name == "Geyser Report"
    assert CORE_FORM_IDS <= {f.id for f in registry.forms}
    assert registry.create(_request(), created_by="a").id == "form-2"


def test_seeded_falls_back_to_core_forms(tmp_path):
    broken = tmp_path / "forms.json"
    broken.write_text("{not json")

    for path in (str(broken), str(tmp_path / "missing.json")):
        registry = FormRegistry.seeded(path)
        assert {f.id for f in registry.forms} == CORE_FORM_IDS
