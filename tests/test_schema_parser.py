from schema_parser import infer_field_type, parse_form_schema


def test_claim_sheet_lines_become_required_fields_in_order():
    text = "Claim Number:\tCL-2024-001\nDescription:\tLong text here..."
    fields = parse_form_schema(text)

    assert [f.label for f in fields] == ["Claim Number", "Description"]
    assert fields[0].type == "text"
    assert fields[1].type == "textarea"
    assert all(f.required for f in fields)


def test_every_matching_line_yields_one_field():
    lines = ["Insured: John Smith", "Policy: P-9", "Broker\tAcme Brokers", "Excess: R 2500"]
    fields = parse_form_schema("\n".join(lines))

    assert [f.label for f in fields] == ["Insured", "Policy", "Broker", "Excess"]
    assert all(f.required for f in fields)


def test_headers_and_non_field_lines_are_dropped():
    text = "\n".join([
        "Claim Details",
        "Appointment: 10:00",
        "just some prose with no separator",
        "",
        "Claim Number: 123-A",
    ])
    fields = parse_form_schema(text)

    assert [f.label for f in fields] == ["Claim Number"]


def test_empty_or_unrecognised_text_gives_no_fields():
    assert parse_form_schema("") == []
    assert parse_form_schema("nothing to see here") == []


def test_type_inference_rules():
    assert infer_field_type("Client Email", "a@b.co") == "email"
    assert infer_field_type("Date of Loss", "") == "date"
    assert infer_field_type("Reported", "12/03/2024") == "date"
    assert infer_field_type("Reported", "5 March 2024") == "date"
    assert infer_field_type("Sum Insured", "R 1m") == "number"
    assert infer_field_type("Units", "42.5") == "number"
    assert infer_field_type("Risk Address", "1 Main Rd") == "textarea"
    assert infer_field_type("Notes", "x" * 51) == "textarea"
    assert infer_field_type("Claim Status", "Open") == "select"
    assert infer_field_type("Peril", "Burst geyser") == "select"
    assert infer_field_type("Broker", "Acme") == "text"


def test_email_wins_over_date_keyword():
    assert infer_field_type("Email Date", "12/03/2024") == "email"


def test_select_fields_get_placeholder_options():
    fields = parse_form_schema("Claim Status: Open\nInsured: Jo")

    status, insured = fields
    assert status.options == ["Current", "Pending", "Completed"]
    assert status.placeholder is None
    assert insured.placeholder == "Enter Insured"
    assert insured.options is None
