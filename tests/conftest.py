"""Shared fixtures: in-memory users collection, blob store and app clients."""

import asyncio
from types import SimpleNamespace

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError

from profilehub.api.dependencies import get_registration_service
from profilehub.core.config import Capabilities, Settings
from profilehub.main import create_app
from profilehub.services.blob_store import InMemoryBlobStore
from profilehub.services.registration_service import RegistrationService

BASE_URL = "https://x/user/"


class FakeUsersCollection:
    """
    Async stand-in for the Motor users collection.
    
    Enforces the unique slug index the way MongoDB does: a second insert
    with the same uniqueSlug raises DuplicateKeyError.
    """

    def __init__(self):
        self.documents = []
        self.fail_with = None
        self.yield_after_find = False
        self.find_calls = 0

    def _maybe_fail(self):
        if self.fail_with is not None:
            raise self.fail_with

    @staticmethod
    def _matches(document, query):
        return all(document.get(key) == value for key, value in query.items())

    async def find_one(self, query):
        self.find_calls += 1
        self._maybe_fail()
        found = next((d for d in self.documents if self._matches(d, query)), None)
        if self.yield_after_find:
            # Lets a concurrent request run its own lookup before we insert
            await asyncio.sleep(0)
        return dict(found) if found else None

    async def insert_one(self, document):
        self._maybe_fail()
        if any(d["uniqueSlug"] == document["uniqueSlug"] for d in self.documents):
            raise DuplicateKeyError(
                "E11000 duplicate key error collection: profilehub.users "
                "index: unique_slug_unique"
            )
        document.setdefault("_id", ObjectId())
        self.documents.append(dict(document))
        return SimpleNamespace(inserted_id=document["_id"], acknowledged=True)

    async def delete_one(self, query):
        self._maybe_fail()
        for index, document in enumerate(self.documents):
            if self._matches(document, query):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def count_documents(self, query):
        self._maybe_fail()
        return len([d for d in self.documents if self._matches(d, query)])


@pytest.fixture
def users() -> FakeUsersCollection:
    return FakeUsersCollection()


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


def make_service(users, blob_store=None, **capabilities) -> RegistrationService:
    capabilities.setdefault("base_url", BASE_URL)
    return RegistrationService(users, Capabilities(**capabilities), blob_store=blob_store)


def make_client(users, blob_store=None, **overrides):
    """
    Builds an app for the given settings overrides with the service wired
    to the in-memory collection. The lifespan (MongoDB connect) is not run.
    """
    values = {
        "PUBLIC_BASE_URL": BASE_URL,
        "BLOB_BACKEND": "memory",
        "ENVIRONMENT": "development",
    }
    values.update(overrides)
    settings = Settings(_env_file=None, **values)
    app = create_app(settings)
    service = RegistrationService(
        users, settings.capabilities(), blob_store=blob_store
    )
    app.dependency_overrides[get_registration_service] = lambda: service
    return TestClient(app)


@pytest.fixture
def client(users) -> TestClient:
    """Original revision: no images, no delete."""
    return make_client(users)


@pytest.fixture
def delete_client(users) -> TestClient:
    """Revision with multiple images and secret-gated delete."""
    return make_client(
        users, InMemoryBlobStore(), IMAGE_MODE="multiple", ENABLE_DELETE=True
    )


@pytest.fixture
def service_factory(users):
    """Builds a RegistrationService over the shared collection."""
    def factory(blob_store=None, **capabilities):
        return make_service(users, blob_store, **capabilities)
    return factory


@pytest.fixture
def client_factory(users):
    """Builds a TestClient over the shared collection for given settings."""
    def factory(blob_store=None, **overrides):
        return make_client(users, blob_store, **overrides)
    return factory
