"""
Core form definitions seeded into the registry at startup.

These cover the assessment, materials, liability and certificate paperwork
every job needs. Forms that go to the client for signature declare a
`section` on each field; the others are filled by staff only.
"""

import copy
from typing import Any, Dict, List

from schemas import Form

YES_NO = ["Yes", "No"]
GEYSER_SIZES = ["150L", "200L", "250L", "300L", "Other"]
RATING_1_TO_10 = [str(i) for i in range(1, 11)]

CORE_FORM_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "id": "noncompliance-form",
        "name": "Non Compliance Form",
        "description": "Assessment form for non-compliance issues and geyser replacement",
        "pdfTemplate": "Noncompliance.pdf",
        "formType": "assessment",
        "fields": [
            {"id": "date", "label": "Date", "type": "date", "autoFillFrom": "currentDate"},
            {"id": "insuranceName", "label": "Insurance Name", "type": "text", "autoFillFrom": "underwriter"},
            {"id": "claimNumber", "label": "Claim Number", "type": "text", "autoFillFrom": "claimNo"},
            {"id": "clientName", "label": "Client Name", "type": "text", "autoFillFrom": "insuredName"},
            {"id": "clientSurname", "label": "Client Surname", "type": "text"},
            {"id": "installersName", "label": "Installers Name", "type": "text", "autoFillFrom": "assignedStaffName"},
            {"id": "quotationSupplied", "label": "Quotation Supplied?", "type": "select", "options": YES_NO},
            {"id": "plumberIndemnity", "label": "Plumber Indemnity", "type": "select",
             "options": ["Electric geyser", "Solar geyser", "Heat pump", "Pipe Repairs", "Assessment"]},
            {"id": "geyserMake", "label": "Geyser Make", "type": "text"},
            {"id": "geyserSerial", "label": "Geyser Serial", "type": "text"},
            {"id": "geyserCode", "label": "Geyser Code", "type": "text"},
            {"id": "selectedIssues", "label": "Selected Compliance Issues", "type": "checkbox"},
        ],
    },
    {
        "id": "material-list-form",
        "name": "Material List Form",
        "description": "Comprehensive material list for geyser installation projects",
        "pdfTemplate": "ML.pdf",
        "formType": "materials",
        "fields": [
            {"id": "date", "label": "Date", "type": "date", "autoFillFrom": "currentDate"},
            {"id": "plumber", "label": "Plumber Name", "type": "text", "autoFillFrom": "assignedStaffName"},
            {"id": "claimNumber", "label": "Claim Number", "type": "text", "autoFillFrom": "claimNo"},
            {"id": "insurance", "label": "Insurance Company", "type": "text", "autoFillFrom": "underwriter"},
            {"id": "geyserSize", "label": "Geyser Size", "type": "select",
             "options": ["50L", "100L", "150L", "200L", "250L", "300L"]},
            {"id": "geyserBrand", "label": "Geyser Brand", "type": "select",
             "options": ["Kwikot", "Heat Tech", "Techron", "Other"]},
            {"id": "dripTraySize", "label": "Drip Tray Size", "type": "text"},
            {"id": "vacuumBreaker1", "label": "Vacuum Breaker 1", "type": "text"},
            {"id": "vacuumBreaker2", "label": "Vacuum Breaker 2", "type": "text"},
            {"id": "pressureControlValve", "label": "Pressure Control Valve", "type": "text"},
            {"id": "nonReturnValve", "label": "Non Return Valve", "type": "text"},
            {"id": "fogiPack", "label": "Fogi Pack", "type": "text"},
            {"id": "additionalMaterials", "label": "Additional Materials", "type": "textarea"},
        ],
    },
    {
        "id": "liability-form",
        "name": "Liability Form",
        "description": "Enhanced liability waiver form with comprehensive assessment",
        "pdfTemplate": "liabWave.pdf",
        "formType": "liability",
        "fields": [
            {"id": "date", "label": "Date", "type": "date", "autoFillFrom": "currentDate"},
            {"id": "insurance", "label": "Insurance", "type": "text", "autoFillFrom": "underwriter"},
            {"id": "claimNumber", "label": "Claim Number", "type": "text", "autoFillFrom": "claimNo"},
            {"id": "client", "label": "Client", "type": "text", "autoFillFrom": "insuredName"},
            {"id": "plumber", "label": "Plumber", "type": "text", "autoFillFrom": "assignedStaffName"},
            {"id": "wasExcessPaid", "label": "Was Excess Paid?", "type": "select", "options": ["yes", "no"]},
            {"id": "excessReceiptNumber", "label": "Excess Receipt Number", "type": "text",
             "dependsOn": "wasExcessPaid", "showWhen": "yes"},
            {"id": "selectedAssessmentItems", "label": "Assessment Items", "type": "checkbox"},
            {"id": "waterHammerBefore", "label": "Water Hammer Before", "type": "text"},
            {"id": "waterHammerAfter", "label": "Water Hammer After", "type": "text"},
            {"id": "pressureTestBefore", "label": "Pressure Test Before", "type": "text"},
            {"id": "pressureTestAfter", "label": "Pressure Test After", "type": "text"},
            {"id": "thermostatSettingBefore", "label": "Thermostat Setting Before", "type": "text"},
            {"id": "thermostatSettingAfter", "label": "Thermostat Setting After", "type": "text"},
            {"id": "pipeInstallation", "label": "Pipe Installation Quality", "type": "select",
             "options": ["excellent", "good", "acceptable", "poor", "not-applicable"]},
            {"id": "pipeInsulation", "label": "Pipe Insulation", "type": "select",
             "options": ["adequate", "inadequate", "missing", "not-required"]},
            {"id": "pressureRegulation", "label": "Pressure Regulation", "type": "select",
             "options": ["within-limits", "too-high", "too-low", "not-tested"]},
            {"id": "temperatureControl", "label": "Temperature Control", "type": "select",
             "options": ["functioning", "erratic", "not-functioning", "needs-adjustment"]},
            {"id": "safetyCompliance", "label": "Safety Compliance", "type": "select",
             "options": ["compliant", "minor-issues", "major-issues", "non-compliant"]},
            {"id": "workmanshipQuality", "label": "Workmanship Quality", "type": "select",
             "options": list(reversed(RATING_1_TO_10))},
            {"id": "materialStandards", "label": "Material Standards", "type": "select",
             "options": ["sabs-approved", "iso-certified", "non-standard", "unknown"]},
            {"id": "installationCertificate", "label": "Installation Certificate", "type": "select",
             "options": ["issued", "pending", "not-required", "rejected"]},
            {"id": "additionalComments", "label": "Additional Comments", "type": "textarea"},
        ],
    },
    {
        "id": "clearance-certificate-form",
        "name": "Clearance Certificate",
        "description": "BBP clearance certificate for geyser installations",
        "pdfTemplate": "BBPClearanceCertificate.pdf",
        "formType": "certificate",
        "fields": [
            {"id": "cname", "label": "Client Name", "type": "text", "autoFillFrom": "insuredName", "section": "staff"},
            {"id": "cref", "label": "Claim Reference", "type": "text", "autoFillFrom": "claimNo", "section": "staff"},
            {"id": "caddress", "label": "Client Address", "type": "text", "autoFillFrom": "riskAddress",
             "section": "staff"},
            {"id": "cdamage", "label": "Cause of Damage", "type": "text", "section": "staff"},
            {"id": "gcomments", "label": "General Comments", "type": "textarea", "section": "staff"},
            {"id": "scopework", "label": "Scope of Work", "type": "textarea", "section": "staff"},
            {"id": "oldgeyser", "label": "Old Geyser", "type": "select", "options": GEYSER_SIZES, "section": "staff"},
            {"id": "newgeyser", "label": "New Geyser", "type": "select", "options": GEYSER_SIZES, "section": "staff"},
            {"id": "staff", "label": "Staff Member", "type": "text", "autoFillFrom": "assignedStaffName",
             "section": "staff"},
            {"id": "cquality1", "label": "Quality Check 1", "type": "select", "options": YES_NO, "section": "client"},
            {"id": "cquality2", "label": "Quality Check 2", "type": "select", "options": YES_NO, "section": "client"},
            {"id": "cquality3", "label": "Quality Check 3", "type": "select", "options": YES_NO, "section": "client"},
            {"id": "cquality4", "label": "Quality Check 4", "type": "select", "options": YES_NO, "section": "client"},
            {"id": "cquality5", "label": "Quality Check 5", "type": "select", "options": YES_NO, "section": "client"},
            {"id": "cquality6", "label": "Workmanship Rating", "type": "select", "options": RATING_1_TO_10,
             "section": "client"},
            {"id": "excess", "label": "Excess Paid", "type": "select", "options": YES_NO, "section": "client"},
            {"id": "amount", "label": "Excess Amount", "type": "text", "autoCalculate": True, "section": "client"},
        ],
    },
    {
        "id": "absa-form",
        "name": "ABSA Form",
        "description": "ABSA claim assessment and work authorization",
        "pdfTemplate": "ABSACertificate.pdf",
        "formType": "absa-form",
        "fields": [
            {"id": "date", "label": "Date", "type": "date", "autoFillFrom": "currentDate", "section": "staff"},
            {"id": "insurance", "label": "Insurance", "type": "text", "autoFillFrom": "underwriter", "section": "staff"},
            {"id": "claimNumber", "label": "Claim Number", "type": "text", "autoFillFrom": "claimNo", "section": "staff"},
            {"id": "client", "label": "Client", "type": "text", "autoFillFrom": "insuredName", "section": "staff"},
            {"id": "plumber", "label": "Plumber", "type": "text", "autoFillFrom": "assignedStaffName",
             "section": "staff"},
            {"id": "address", "label": "Address", "type": "text", "autoFillFrom": "riskAddress", "section": "staff"},
            {"id": "absaAccountNumber", "label": "ABSA Account Number", "type": "text", "autoFillFrom": "policyNo",
             "section": "staff"},
            {"id": "damageDescription", "label": "Damage Description", "type": "textarea",
             "autoFillFrom": "description", "required": True, "section": "staff"},
            {"id": "causeOfDamage", "label": "Cause of Damage", "type": "text", "required": True, "section": "staff"},
            {"id": "urgencyLevel", "label": "Urgency Level", "type": "select",
             "options": ["Low", "Medium", "High", "Emergency"], "section": "staff"},
            {"id": "totalEstimate", "label": "Total Estimate", "type": "number", "required": True, "section": "staff"},
            {"id": "excessAmount", "label": "Excess Amount", "type": "text", "autoFillFrom": "excess",
             "section": "staff"},
            {"id": "workAuthorized", "label": "Work Authorized", "type": "select",
             "options": ["Pending", "Approved", "Declined"], "section": "client"},
            {"id": "authorizedBy", "label": "Authorized By", "type": "text", "section": "client"},
            {"id": "clientSatisfaction", "label": "Client Satisfaction", "type": "select",
             "options": ["Very satisfied", "Satisfied", "Neutral", "Dissatisfied"], "section": "client"},
            {"id": "clientEmail", "label": "Client Email", "type": "email", "section": "client"},
            {"id": "clientPhone", "label": "Client Contact Number", "type": "tel", "section": "client"},
            {"id": "additionalRemarks", "label": "Additional Remarks", "type": "textarea", "section": "client"},
        ],
    },
    {
        "id": "discovery-form",
        "name": "Discovery Form",
        "description": "Discovery Insure incident investigation and completion report",
        "pdfTemplate": "DiscoveryForm.pdf",
        "formType": "discovery-form",
        "fields": [
            {"id": "date", "label": "Date", "type": "date", "autoFillFrom": "currentDate", "section": "staff"},
            {"id": "insurance", "label": "Insurance", "type": "text", "autoFillFrom": "underwriter", "section": "staff"},
            {"id": "claimNumber", "label": "Claim Number", "type": "text", "autoFillFrom": "claimNo", "section": "staff"},
            {"id": "client", "label": "Client", "type": "text", "autoFillFrom": "insuredName", "section": "staff"},
            {"id": "plumber", "label": "Plumber", "type": "text", "autoFillFrom": "assignedStaffName",
             "section": "staff"},
            {"id": "address", "label": "Address", "type": "text", "autoFillFrom": "riskAddress", "section": "staff"},
            {"id": "discoveryMemberNumber", "label": "Discovery Member Number", "type": "text",
             "autoFillFrom": "policyNo", "section": "staff"},
            {"id": "incidentDate", "label": "Incident Date", "type": "date", "autoFillFrom": "incidentDate",
             "section": "staff"},
            {"id": "rootCause", "label": "Root Cause", "type": "textarea", "section": "staff"},
            {"id": "riskRating", "label": "Risk Rating", "type": "select",
             "options": ["Low", "Medium", "High"], "section": "staff"},
            {"id": "workScope", "label": "Work Scope", "type": "textarea", "section": "staff"},
            {"id": "clientConsultation", "label": "Client Consultation", "type": "textarea", "section": "client"},
            {"id": "acceptanceCriteria", "label": "Acceptance Criteria", "type": "textarea", "section": "client"},
            {"id": "warrantyCoverage", "label": "Warranty Coverage", "type": "select",
             "options": ["12 months", "24 months", "None"], "section": "client"},
            {"id": "additionalObservations", "label": "Additional Observations", "type": "textarea",
             "section": "client"},
        ],
    },
]

CORE_FORM_IDS = frozenset(d["id"] for d in CORE_FORM_DEFINITIONS)

# Core forms whose fields are all treated as optional when filling
VALIDATION_EXEMPT_FORM_IDS = frozenset(["noncompliance-form", "material-list-form", "liability-form"])

MATERIAL_LIST_FORM_ID = "material-list-form"


def core_forms() -> List[Form]:
    """Fresh Form objects for every core definition, stamped with the current time."""
    return [Form(**copy.deepcopy(d)) for d in CORE_FORM_DEFINITIONS]
