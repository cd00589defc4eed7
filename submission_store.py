"""
Form submissions: an in-memory list mirrored to MongoDB.

Memory is authoritative for the running process. Every write lands in memory
first and is then copied to the collection; a failed copy is logged and
reported through MirroredResult.mirrored, never raised.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, TypeVar

from bson.errors import InvalidDocument
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from auth import is_admin
from core_forms import MATERIAL_LIST_FORM_ID
from errors import Forbidden, NotFound
from schemas import FormSubmission, now_iso

logger = logging.getLogger(__name__)

ID_PREFIX = "submission-"

# Keys an edit may not overwrite
_IMMUTABLE_KEYS = {"id", "submittedBy", "submittedAt"}

T = TypeVar("T")


@dataclass
class MirroredResult(Generic[T]):
    value: T
    mirrored: bool


def _id_number(submission_id: str) -> int:
    try:
        return int(submission_id.replace(ID_PREFIX, ""))
    except (TypeError, ValueError):
        return 0


class SubmissionStore:
    """
    `collection` is a pymongo Collection, or None to run memory-only.
    """

    def __init__(self, collection=None):
        self.collection = collection
        self.submissions: List[FormSubmission] = []
        self._next_id = 1

    # ---------- Startup ----------

    def load(self) -> int:
        """Reset memory and reload every durable record, newest first."""
        self.submissions = []
        self._next_id = 1
        if self.collection is None:
            logger.info("No submissions collection configured; starting empty")
            return 0
        try:
            docs = list(self.collection.find({}, {"_id": 0}).sort("submittedAt", DESCENDING))
        except PyMongoError:
            logger.exception("Error loading form submissions from MongoDB; starting empty")
            return 0

        for doc in docs:
            try:
                self.submissions.append(FormSubmission(**doc))
            except Exception as e:
                logger.warning("Skipping unreadable submission %s: %s", doc.get("id"), e)
        if self.submissions:
            self._next_id = max(_id_number(s.id) for s in self.submissions) + 1
        logger.info("Loaded %d form submissions from MongoDB", len(self.submissions))
        return len(self.submissions)

    # ---------- Mirror helpers ----------

    def _mirror(self, action: str, fn, *args) -> bool:
        if self.collection is None:
            return False
        try:
            fn(*args)
            return True
        except (PyMongoError, InvalidDocument, OverflowError) as e:
            # encoding errors surface before anything reaches the server
            logger.warning("Could not %s form submission in MongoDB: %s", action, e)
            return False

    # ---------- Operations ----------

    def submit(self, job_id: str, form_id: str, data: Dict[str, Any], submitted_by: str,
               signature: Optional[str] = None, form_type: Optional[str] = None) -> MirroredResult[FormSubmission]:
        """Always accepted; resubmission is unlimited."""
        previous = self.list(job_id=job_id, form_id=form_id, submitted_by=submitted_by)
        submission = FormSubmission(
            id=f"{ID_PREFIX}{self._next_id}",
            jobId=job_id,
            formId=form_id,
            submittedBy=submitted_by,
            data=data,
            signature=signature,
            submittedAt=now_iso(),
            submissionNumber=len(previous) + 1,
            formType=form_type,
        )
        self._next_id += 1
        self.submissions.append(submission)

        mirrored = self._mirror(
            "save", lambda doc: self.collection.insert_one(doc), submission.model_dump()
        )
        return MirroredResult(submission, mirrored)

    def list(self, job_id: Optional[str] = None, form_id: Optional[str] = None,
             submitted_by: Optional[str] = None) -> List[FormSubmission]:
        result = self.submissions
        if job_id:
            result = [s for s in result if s.jobId == job_id]
        if form_id:
            result = [s for s in result if s.formId == form_id]
        if submitted_by:
            result = [s for s in result if s.submittedBy == submitted_by]
        return list(result)

    def _index_of(self, submission_id: str) -> int:
        for i, s in enumerate(self.submissions):
            if s.id == submission_id:
                return i
        raise NotFound("Form submission not found")

    def get(self, submission_id: str) -> FormSubmission:
        return self.submissions[self._index_of(submission_id)]

    def update(self, submission_id: str, patch: Dict[str, Any], editor_id: str) -> MirroredResult[FormSubmission]:
        """Admins may edit anything; staff only their own material list submissions."""
        index = self._index_of(submission_id)
        current = self.submissions[index]

        owns_material_list = current.submittedBy == editor_id and current.formId == MATERIAL_LIST_FORM_ID
        if not is_admin(editor_id) and not owns_material_list:
            raise Forbidden("You can only edit your own material list submissions")

        changes = {k: v for k, v in patch.items() if k not in _IMMUTABLE_KEYS}
        changes["updatedAt"] = now_iso()
        changes["updatedBy"] = editor_id
        updated = current.model_copy(update=changes)
        self.submissions[index] = updated

        mirrored = self._mirror(
            "update", lambda c: self.collection.update_one({"id": submission_id}, {"$set": c}), changes
        )
        return MirroredResult(updated, mirrored)

    def delete(self, submission_id: str) -> MirroredResult[FormSubmission]:
        """Remove one submission. Authorization is the caller's job."""
        index = self._index_of(submission_id)
        removed = self.submissions.pop(index)
        mirrored = self._mirror(
            "delete", lambda sid: self.collection.delete_one({"id": sid}), submission_id
        )
        logger.info("Deleted form submission %s", submission_id)
        return MirroredResult(removed, mirrored)

    def clear(self) -> MirroredResult[int]:
        """Drop every submission and reset the id sequence."""
        count = len(self.submissions)
        self.submissions = []
        self._next_id = 1
        mirrored = self._mirror("clear", lambda: self.collection.delete_many({}))
        logger.info("Cleared %d form submissions (mirrored=%s)", count, mirrored)
        return MirroredResult(count, mirrored)
