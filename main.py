import os
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

import database
from auth import ADMIN_USER_ID, current_user, require_admin, submitting_user
from errors import FormsError, NotFound, ValidationError
from form_fill import auto_fill, requires_signature, section_map
from form_registry import FormRegistry
from schema_parser import parse_form_schema
from schemas import (
    CreateFormRequest,
    ParseSchemaRequest,
    PrefillRequest,
    SignaturePosition,
    SubmitFormRequest,
)
from signature_positions import SignaturePlacements
from submission_store import SubmissionStore

logger = logging.getLogger(__name__)

# --- Config ---
# Shown to staff as "submission N/CAP"; never enforced, resubmission is unlimited
SUBMISSION_CAP_DISPLAY = int(os.getenv("SUBMISSION_CAP_DISPLAY", "3"))


# --- State accessors ---

def get_registry(request: Request) -> FormRegistry:
    return request.app.state.registry


def get_store(request: Request) -> SubmissionStore:
    return request.app.state.store


def get_placements(request: Request) -> SignaturePlacements:
    return request.app.state.placements


# --- Error handlers ---

async def forms_error_handler(request: Request, exc: FormsError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


router = APIRouter()


# --- Routes ---
@router.get("/")
def read_root():
    return {"message": "Claim Forms API running"}


@router.get("/health/db")
def database_health():
    """Ping MongoDB; submissions still work from memory when it is down."""
    collection = database.get_collection(database.FORM_SUBMISSIONS)
    if collection is None:
        return {"configured": False, "reachable": False, "submissions": None}
    try:
        collection.database.command("ping")
        return {"configured": True, "reachable": True, "submissions": collection.count_documents({})}
    except PyMongoError as e:
        logger.warning("MongoDB health check failed: %s", e)
        return {"configured": True, "reachable": False, "submissions": None}


# ---------- Forms ----------

@router.post("/api/forms", status_code=201)
def create_form(payload: CreateFormRequest, uid: str = Depends(current_user),
                registry: FormRegistry = Depends(get_registry)):
    form = registry.create(payload, created_by=uid or ADMIN_USER_ID)
    return form.model_dump()


@router.get("/api/forms")
def list_forms(isTemplate: Optional[str] = Query(None), companyId: Optional[str] = Query(None),
               registry: FormRegistry = Depends(get_registry)):
    is_template = None if isTemplate is None else isTemplate == "true"
    return [f.model_dump() for f in registry.list(is_template=is_template, company_id=companyId)]


@router.get("/api/forms/{form_id}")
def get_form(form_id: str, registry: FormRegistry = Depends(get_registry)):
    return registry.get(form_id).model_dump()


@router.put("/api/forms/{form_id}")
def update_form(form_id: str, updates: Dict[str, Any] = Body(...),
                registry: FormRegistry = Depends(get_registry)):
    return registry.update(form_id, updates).model_dump(warnings=False)


@router.delete("/api/forms/{form_id}", status_code=204)
def delete_form(form_id: str, uid: str = Depends(current_user),
                registry: FormRegistry = Depends(get_registry)):
    require_admin(uid, "Only administrators can delete forms")
    registry.delete(form_id)
    return Response(status_code=204)


@router.post("/api/forms/{form_id}/prefill")
def prefill_form(form_id: str, payload: PrefillRequest, registry: FormRegistry = Depends(get_registry)):
    form = registry.get(form_id)
    return {
        "values": auto_fill(form, payload.job, payload.staff, payload.draft),
        "sections": section_map(form),
        "requiresSignature": requires_signature(form),
    }


@router.post("/api/form-schema/parse")
def parse_schema(payload: ParseSchemaRequest):
    if not payload.schema_text:
        raise ValidationError("Schema is required")
    fields = parse_form_schema(payload.schema_text)
    return {"fields": [f.model_dump(exclude={"id"}, exclude_none=True) for f in fields]}


# ---------- Submissions ----------

@router.post("/api/form-submissions", status_code=201)
def submit_form(payload: SubmitFormRequest, uid: str = Depends(submitting_user),
                registry: FormRegistry = Depends(get_registry), store: SubmissionStore = Depends(get_store)):
    if not payload.jobId or not payload.formId or payload.data is None:
        raise ValidationError("jobId, formId, and data are required")

    form_type = None
    try:
        form_type = registry.get(payload.formId).formType
    except NotFound:
        # Submissions for forms outside the registry are still accepted
        pass

    result = store.submit(
        payload.jobId, payload.formId, payload.data, uid,
        signature=payload.signature, form_type=form_type,
    )
    submission = result.value
    if not result.mirrored:
        logger.warning("Submission %s kept in memory only", submission.id)

    number = submission.submissionNumber
    return {
        **submission.model_dump(),
        "message": f"Form submitted successfully (submission {number}/{SUBMISSION_CAP_DISPLAY})",
        "remainingSubmissions": max(SUBMISSION_CAP_DISPLAY - number, 0),
        "mirrored": result.mirrored,
    }


@router.get("/api/form-submissions")
def list_submissions(jobId: Optional[str] = Query(None), formId: Optional[str] = Query(None),
                     submittedBy: Optional[str] = Query(None), store: SubmissionStore = Depends(get_store)):
    return [s.model_dump() for s in store.list(job_id=jobId, form_id=formId, submitted_by=submittedBy)]


@router.put("/api/form-submissions/{submission_id}")
def update_submission(submission_id: str, patch: Dict[str, Any] = Body(...),
                      uid: str = Depends(current_user), store: SubmissionStore = Depends(get_store)):
    result = store.update(submission_id, patch, editor_id=uid)
    return {**result.value.model_dump(warnings=False), "mirrored": result.mirrored}


@router.delete("/api/form-submissions/{submission_id}")
def delete_submission(submission_id: str, uid: str = Depends(current_user),
                      store: SubmissionStore = Depends(get_store)):
    require_admin(uid, "Only administrators can delete form submissions")
    result = store.delete(submission_id)
    return {
        "success": True,
        "message": "Form submission deleted successfully",
        "deletedSubmission": result.value.model_dump(warnings=False),
        "mirrored": result.mirrored,
    }


@router.delete("/api/form-submissions")
def clear_submissions(uid: str = Depends(current_user), store: SubmissionStore = Depends(get_store)):
    require_admin(uid, "Only administrators can clear form submissions")
    result = store.clear()
    return {
        "success": True,
        "message": "All form submissions have been cleared successfully",
        "clearedCount": result.value,
        "mirrored": result.mirrored,
    }


# ---------- Signature placement ----------

@router.get("/api/signature-positions")
def list_signature_positions(placements: SignaturePlacements = Depends(get_placements)):
    return {k: v.model_dump() for k, v in placements.all().items()}


@router.get("/api/signature-positions/{form_type}")
def get_signature_position(form_type: str, placements: SignaturePlacements = Depends(get_placements)):
    return placements.get(form_type).model_dump()


@router.put("/api/signature-positions/{form_type}")
def update_signature_position(form_type: str, position: SignaturePosition, uid: str = Depends(current_user),
                              placements: SignaturePlacements = Depends(get_placements)):
    require_admin(uid, "Only administrators can change signature positions")
    return placements.update(form_type, position).model_dump()


# --- App ---

def create_app(registry: Optional[FormRegistry] = None, store: Optional[SubmissionStore] = None,
               placements: Optional[SignaturePlacements] = None) -> FastAPI:
    """Build the API around one registry, submission store and placement table."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store.load()
        yield

    app = FastAPI(title="Claim Forms API", lifespan=lifespan)
    app.state.registry = registry if registry is not None else FormRegistry.seeded()
    app.state.store = store if store is not None else SubmissionStore(
        database.get_collection(database.FORM_SUBMISSIONS)
    )
    app.state.placements = placements if placements is not None else SignaturePlacements()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(FormsError, forms_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
