"""Test configuration for pytest."""

import copy

import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from core_forms import core_forms
from form_registry import FormRegistry
from main import create_app
from signature_positions import SignaturePlacements
from submission_store import SubmissionStore

ADMIN_HEADERS = {"Authorization": "Bearer mock-token-admin-1"}


def staff_headers(user_id):
    return {"Authorization": f"Bearer mock-token-{user_id}"}


class _Cursor:
    def __init__(self, docs):
        self.docs = docs

    def sort(self, key, direction):
        self.docs.sort(key=lambda d: d.get(key) or "", reverse=direction < 0)
        return self

    def __iter__(self):
        return iter(self.docs)


class FakeCollection:
    """Just enough of pymongo's Collection for the submission store."""

    def __init__(self, docs=None):
        self.docs = [copy.deepcopy(d) for d in (docs or [])]

    def find(self, filter_dict=None, projection=None):
        docs = [copy.deepcopy(d) for d in self.docs if self._matches(d, filter_dict or {})]
        for d in docs:
            d.pop("_id", None)
        return _Cursor(docs)

    def insert_one(self, doc):
        self.docs.append(copy.deepcopy(doc))

    def update_one(self, filter_dict, update):
        for d in self.docs:
            if self._matches(d, filter_dict):
                d.update(update["$set"])
                return

    def delete_one(self, filter_dict):
        for i, d in enumerate(self.docs):
            if self._matches(d, filter_dict):
                del self.docs[i]
                return

    def delete_many(self, filter_dict):
        self.docs = [d for d in self.docs if not self._matches(d, filter_dict)]

    @staticmethod
    def _matches(doc, filter_dict):
        return all(doc.get(k) == v for k, v in filter_dict.items())


class FailingCollection(FakeCollection):
    """Every write fails as if the server were unreachable."""

    def _fail(self, *args, **kwargs):
        raise ServerSelectionTimeoutError("mongo unreachable")

    insert_one = update_one = delete_one = delete_many = _fail


@pytest.fixture
def collection():
    return FakeCollection()


@pytest.fixture
def store(collection):
    return SubmissionStore(collection)


@pytest.fixture
def registry():
    return FormRegistry(core_forms())


@pytest.fixture
def client(registry, store):
    app = create_app(registry=registry, store=store, placements=SignaturePlacements())
    with TestClient(app) as c:
        yield c
