import bson
import pytest

from errors import Forbidden, NotFound
from submission_store import SubmissionStore
from tests.conftest import FailingCollection, FakeCollection


def test_submission_numbers_count_per_user_job_and_form(store):
    numbers = [store.submit("J1", "liability-form", {"n": i}, "u1").value.submissionNumber for i in range(3)]
    assert numbers == [1, 2, 3]

    assert store.submit("J1", "liability-form", {}, "u2").value.submissionNumber == 1
    assert store.submit("J2", "liability-form", {}, "u1").value.submissionNumber == 1
    assert store.submit("J1", "absa-form", {}, "u1").value.submissionNumber == 1


def test_resubmission_is_never_refused(store):
    for expected in range(1, 8):
        assert store.submit("J1", "liability-form", {}, "u1").value.submissionNumber == expected


def test_submit_mirrors_to_collection(store, collection):
    result = store.submit("J1", "liability-form", {"a": "b"}, "u1", signature="data:image/png;base64,xx")

    assert result.mirrored is True
    assert collection.docs[0]["id"] == result.value.id == "submission-1"
    assert collection.docs[0]["signature"] == "data:image/png;base64,xx"


def test_failed_mirror_keeps_submission_in_memory():
    store = SubmissionStore(FailingCollection())
    result = store.submit("J1", "liability-form", {}, "u1")

    assert result.mirrored is False
    assert store.list() == [result.value]


def test_memory_only_store_reports_not_mirrored():
    store = SubmissionStore(None)
    assert store.submit("J1", "f", {}, "u1").mirrored is False


def test_list_filters_are_conjunctive_and_keep_insertion_order(store):
    a = store.submit("J1", "f1", {}, "u1").value
    store.submit("J1", "f2", {}, "u1")
    c = store.submit("J1", "f1", {}, "u2").value
    store.submit("J2", "f1", {}, "u1")

    assert store.list(job_id="J1", form_id="f1") == [a, c]
    assert store.list(job_id="J1", form_id="f1", submitted_by="u2") == [c]
    assert len(store.list()) == 4


def test_admin_can_edit_any_submission(store, collection):
    sub = store.submit("J1", "liability-form", {"a": 1}, "u1").value

    result = store.update(sub.id, {"data": {"a": 2}}, editor_id="admin-1")

    assert result.value.data == {"a": 2}
    assert result.value.updatedBy == "admin-1"
    assert result.value.updatedAt is not None
    assert collection.docs[0]["data"] == {"a": 2}


def test_owner_can_edit_own_material_list_only(store):
    material = store.submit("J1", "material-list-form", {}, "u1").value
    liability = store.submit("J1", "liability-form", {}, "u1").value

    assert store.update(material.id, {"data": {"x": "y"}}, editor_id="u1").value.data == {"x": "y"}
    with pytest.raises(Forbidden):
        store.update(liability.id, {"data": {}}, editor_id="u1")
    with pytest.raises(Forbidden):
        store.update(material.id, {"data": {}}, editor_id="u2")


def test_edit_cannot_change_owner(store):
    sub = store.submit("J1", "material-list-form", {}, "u1").value
    updated = store.update(sub.id, {"submittedBy": "u9", "id": "other"}, editor_id="admin-1").value
    assert updated.submittedBy == "u1"
    assert updated.id == sub.id


def test_update_and_delete_missing_submission(store):
    with pytest.raises(NotFound):
        store.update("submission-99", {}, editor_id="admin-1")
    with pytest.raises(NotFound):
        store.delete("submission-99")


def test_delete_removes_from_memory_and_collection(store, collection):
    sub = store.submit("J1", "f", {}, "u1").value
    result = store.delete(sub.id)

    assert result.value == sub
    assert result.mirrored is True
    assert store.list() == []
    assert collection.docs == []


def test_clear_resets_everything(store, collection):
    store.submit("J1", "f", {}, "u1")
    store.submit("J1", "f", {}, "u1")

    result = store.clear()

    assert result.value == 2
    assert store.list() == []
    assert collection.docs == []
    assert store.submit("J1", "f", {}, "u1").value.id == "submission-1"


def test_load_restores_newest_first_and_continues_ids():
    docs = [
        {"id": "submission-4", "jobId": "J1", "formId": "f", "submittedBy": "u1", "data": {},
         "submittedAt": "2024-01-01T10:00:00", "submissionNumber": 1},
        {"id": "submission-9", "jobId": "J1", "formId": "f", "submittedBy": "u1", "data": {},
         "submittedAt": "2024-03-01T10:00:00", "submissionNumber": 2},
        {"id": "legacy", "jobId": "J2", "formId": "f", "submittedBy": "u1", "data": {},
         "submittedAt": "2024-02-01T10:00:00"},
    ]
    store = SubmissionStore(FakeCollection(docs))
    store.submit("stale", "f", {}, "u1")

    assert store.load() == 3
    assert [s.id for s in store.list()] == ["submission-9", "legacy", "submission-4"]

    new = store.submit("J1", "f", {}, "u1").value
    assert new.id == "submission-10"
    assert new.submissionNumber == 3


def test_load_without_collection_starts_empty():
    store = SubmissionStore(None)
    store.submit("J1", "f", {}, "u1")
    assert store.load() == 0
    assert store.list() == []


class EncodingCollection(FakeCollection):
    """Encodes documents to BSON the way pymongo does before sending."""

    def insert_one(self, doc):
        bson.encode(doc)
        super().insert_one(doc)

    def update_one(self, filter_dict, update):
        bson.encode(update)
        super().update_one(filter_dict, update)


def test_unencodable_data_is_kept_in_memory_but_not_mirrored():
    collection = EncodingCollection()
    store = SubmissionStore(collection)

    result = store.submit("J1", "liability-form", {"reading": 2 ** 70}, "u1")

    assert result.mirrored is False
    assert store.list() == [result.value]
    assert collection.docs == []
    assert store.submit("J1", "liability-form", {"reading": 1}, "u1").value.submissionNumber == 2


def test_unencodable_edit_is_not_mirrored():
    store = SubmissionStore(EncodingCollection())
    sub = store.submit("J1", "material-list-form", {}, "u1").value

    result = store.update(sub.id, {"data": {"meter": object()}}, editor_id="admin-1")

    assert result.mirrored is False
    assert "meter" in result.value.data
