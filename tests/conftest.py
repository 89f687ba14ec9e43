"""
Shared pytest fixtures.

Provides:
- An in-memory double of pymongo's async database/collection API
- Test settings (fast bcrypt, deterministic JWT secret)
- Mocked identity provider and mail relay
- A FastAPI TestClient wired to the doubles
"""

import copy
import pytest
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError
from pymongo.results import DeleteResult, InsertOneResult

from backend.src.config import Settings
from backend.src.main import create_app
from backend.src.repositories.notification_repo import NotificationRepository
from backend.src.repositories.trip_repo import TripRepository
from backend.src.repositories.user_repo import UserRepository
from backend.src.services.auth_service import AuthService
from backend.src.services.identity_provider import FirebaseIdentityProvider
from backend.src.services.mail_relay import SmtpMailRelay

TEST_JWT_SECRET = "test-secret-key-for-unit-tests-only-0123456789"
RESET_LINK = "https://vaacay.firebaseapp.com/__/auth/action?mode=resetPassword&oobCode=abc123"


# ============================================================================
# IN-MEMORY MONGODB DOUBLE
# ============================================================================


class FakeCursor:
    """Subset of AsyncCursor: ``sort`` then ``await to_list()``."""

    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents

    def sort(self, key_or_list, direction: int = ASCENDING) -> "FakeCursor":
        if isinstance(key_or_list, str):
            keys = [(key_or_list, direction)]
        else:
            keys = list(key_or_list)

        # Stable sorts applied from the least significant key
        for field, order in reversed(keys):
            self._documents.sort(key=lambda d: d.get(field), reverse=order == DESCENDING)
        return self

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        if length is None:
            return list(self._documents)
        return self._documents[:length]


class FakeCollection:
    """Subset of AsyncCollection used by the repositories."""

    def __init__(self, name: str):
        self.name = name
        self.documents: List[Dict[str, Any]] = []
        self.unique_fields: List[str] = []
        self.indexes: List[Any] = []

    @staticmethod
    def _matches(document: Dict[str, Any], filter: Dict[str, Any]) -> bool:
        return all(document.get(key) == value for key, value in filter.items())

    async def create_index(self, keys, unique: bool = False, **kwargs) -> str:
        if isinstance(keys, str):
            keys = [(keys, ASCENDING)]
        self.indexes.append(keys)
        if unique:
            self.unique_fields.extend(field for field, _ in keys)
        return "_".join(f"{field}_{order}" for field, order in keys)

    async def insert_one(self, document: Dict[str, Any]) -> InsertOneResult:
        for field in self.unique_fields:
            if any(existing.get(field) == document.get(field) for existing in self.documents):
                raise DuplicateKeyError(
                    f"E11000 duplicate key error collection: {self.name} index: {field}_1",
                    code=11000
                )

        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        return InsertOneResult(document["_id"], True)

    async def find_one(self, filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for document in self.documents:
            if self._matches(document, filter):
                return copy.deepcopy(document)
        return None

    def find(self, filter: Optional[Dict[str, Any]] = None) -> FakeCursor:
        filter = filter or {}
        return FakeCursor([
            copy.deepcopy(document)
            for document in self.documents
            if self._matches(document, filter)
        ])

    async def delete_one(self, filter: Dict[str, Any]) -> DeleteResult:
        for index, document in enumerate(self.documents):
            if self._matches(document, filter):
                del self.documents[index]
                return DeleteResult({"n": 1, "ok": 1.0}, True)
        return DeleteResult({"n": 0, "ok": 1.0}, True)

    async def count_documents(self, filter: Dict[str, Any]) -> int:
        return sum(1 for document in self.documents if self._matches(document, filter))


class FakeDatabase:
    """Subset of AsyncDatabase: collection access and ``command("ping")``."""

    def __init__(self, name: str = "vaacay_test"):
        self.name = name
        self.reachable = True
        self._collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]

    async def command(self, command: str) -> Dict[str, Any]:
        if not self.reachable:
            raise ServerSelectionTimeoutError("No servers found yet")
        return {"ok": 1.0}


# ============================================================================
# SETTINGS AND COLLABORATORS
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings for tests: cheap bcrypt and no real Firebase credentials."""
    return Settings(
        environment="development",
        jwt_secret_key=TEST_JWT_SECRET,
        password_bcrypt_rounds=4,
        firebase_credentials_path="/nonexistent/service-account.json",
        smtp_username="noreply@vaacay.test",
        smtp_password="app-password",
        log_level="WARNING",
        log_format="text",
    )


@pytest.fixture
def mongo_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def identity_provider() -> AsyncMock:
    provider = AsyncMock(spec=FirebaseIdentityProvider)
    provider.generate_password_reset_link.return_value = RESET_LINK
    return provider


@pytest.fixture
def reset_link() -> str:
    return RESET_LINK


@pytest.fixture
def mail_relay() -> AsyncMock:
    return AsyncMock(spec=SmtpMailRelay)


# ============================================================================
# REPOSITORIES AND SERVICES
# ============================================================================


@pytest.fixture
def user_repo(mongo_db: FakeDatabase) -> UserRepository:
    return UserRepository(mongo_db["users"])


@pytest.fixture
def trip_repo(mongo_db: FakeDatabase) -> TripRepository:
    return TripRepository(mongo_db["trips"])


@pytest.fixture
def notification_repo(mongo_db: FakeDatabase) -> NotificationRepository:
    return NotificationRepository(mongo_db["notifications"])


@pytest.fixture
def auth_service(
    user_repo: UserRepository,
    identity_provider: AsyncMock,
    mail_relay: AsyncMock,
    settings: Settings
) -> AuthService:
    return AuthService(
        user_repo,
        identity_provider=identity_provider,
        mail_relay=mail_relay,
        settings=settings
    )


# ============================================================================
# APPLICATION
# ============================================================================


@pytest.fixture
def app(settings, mongo_db, identity_provider, mail_relay):
    return create_app(
        settings=settings,
        database=mongo_db,
        identity_provider=identity_provider,
        mail_relay=mail_relay
    )


@pytest.fixture
def client(app):
    """TestClient with the lifespan (index creation, service wiring) run."""
    with TestClient(app) as test_client:
        yield test_client
