import asyncio
import copy
import os
import re
from datetime import datetime, timedelta, timezone

# Cheap hashes for the test run; must be set before app.core.config is imported
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from app.api.deps import get_email_service, get_otp_service, get_sms_service, get_user_store
from app.core.exceptions import ConflictError, DeliveryError
from app.main import app
from app.models.user import User, new_user_document
from app.services.otp_service import OtpService


class FakeUserStore:
    """
    In-memory stand-in for UserStore with the same conditional-write rules.

    Writes yield to the event loop first so concurrent callers interleave.
    """

    def __init__(self):
        self.documents = {}

    def _find(self, **query):
        for document in self.documents.values():
            if all(document.get(k) == v for k, v in query.items()):
                return document
        return None

    @staticmethod
    def _user(document):
        return User.from_document(copy.deepcopy(document)) if document else None

    async def find_by_id(self, user_id):
        return self._user(self.documents.get(user_id))

    async def find_by_mobile(self, mobile):
        return self._user(self._find(mobile=mobile))

    async def find_by_email(self, email):
        return self._user(self._find(email=email))

    async def find_by_mobile_or_email(self, mobile, email):
        return self._user(self._find(mobile=mobile) or self._find(email=email))

    async def insert(self, document):
        await asyncio.sleep(0)
        if self._find(mobile=document["mobile"]) or self._find(email=document["email"]):
            raise ConflictError("User already exists")
        user_id = str(ObjectId())
        self.documents[user_id] = {**copy.deepcopy(document), "_id": user_id}
        return self._user(self.documents[user_id])

    async def set_otp(self, user_id, challenge):
        await asyncio.sleep(0)
        document = self.documents.get(user_id)
        if document is None:
            return False
        document["otp"] = challenge.model_dump()
        return True

    async def consume_otp(self, user_id, code, now, updates=None):
        await asyncio.sleep(0)
        document = self.documents.get(user_id)
        otp = document.get("otp") if document else None
        if not otp or otp["code"] != code or not otp["expires_at"] > now:
            return False
        del document["otp"]
        document.update(updates or {})
        return True

    async def set_pin_if_absent(self, user_id, pin_hash):
        await asyncio.sleep(0)
        document = self.documents.get(user_id)
        if document is None or document.get("pin_hash") is not None:
            return False
        document["pin_hash"] = pin_hash
        return True

    def raw(self, user_id):
        return self.documents[user_id]


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeSmsService:
    def __init__(self):
        self.sent = []
        self.fail = False

    async def send_sms(self, to_phone, message):
        if self.fail:
            raise DeliveryError("SMS provider error: 503")
        self.sent.append((to_phone, message))
        return f"SM{len(self.sent)}"

    @property
    def last_code(self):
        return re.search(r"\d{6}", self.sent[-1][1]).group()


class FakeEmailService:
    def __init__(self):
        self.sent = []
        self.fail = False

    async def send_email(self, to_email, subject, body):
        if self.fail:
            raise DeliveryError("Email provider error")
        self.sent.append((to_email, subject, body))

    @property
    def last_code(self):
        return re.search(r"\d{6}", self.sent[-1][2]).group()


@pytest.fixture
def make_user(store):
    async def _make_user(mobile="9991112222", email="asha@example.com"):
        return await store.insert(
            new_user_document(
                name="Asha",
                mobile=mobile,
                email=email,
                password_hash="not-a-real-hash",
            )
        )
    return _make_user


@pytest.fixture
def store():
    return FakeUserStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sms():
    return FakeSmsService()


@pytest.fixture
def email():
    return FakeEmailService()


@pytest.fixture
def client(store, clock, sms, email):
    app.dependency_overrides[get_user_store] = lambda: store
    app.dependency_overrides[get_sms_service] = lambda: sms
    app.dependency_overrides[get_email_service] = lambda: email
    app.dependency_overrides[get_otp_service] = lambda: OtpService(store, clock=clock)
    yield TestClient(app)
    app.dependency_overrides.clear()
