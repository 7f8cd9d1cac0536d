from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ConflictError
from app.db.user_store import UserStore
from app.models.user import OtpChallenge, new_user_document

USER_ID = "65a1f0c2e4b0a1b2c3d4e5f6"
NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def collection():
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.update_one = AsyncMock()
    collection.find_one_and_update = AsyncMock()
    return collection


@pytest.mark.asyncio
async def test_find_by_mobile_or_email_queries_both(collection):
    await UserStore(collection).find_by_mobile_or_email("9991112222", "asha@example.com")

    collection.find_one.assert_awaited_once_with(
        {"$or": [{"mobile": "9991112222"}, {"email": "asha@example.com"}]}
    )


@pytest.mark.asyncio
async def test_find_by_id_with_malformed_id(collection):
    assert await UserStore(collection).find_by_id("not-an-object-id") is None
    collection.find_one.assert_not_awaited()


@pytest.mark.asyncio
async def test_find_by_id_maps_document(collection):
    collection.find_one.return_value = {
        "_id": ObjectId(USER_ID),
        **new_user_document("Asha", "9991112222", "asha@example.com", "hash"),
        "otp": {"code": "123456", "expires_at": datetime(2024, 1, 1, 12, 10)},
    }

    user = await UserStore(collection).find_by_id(USER_ID)

    assert user.id == USER_ID
    assert user.otp.code == "123456"
    # Naive datetimes from the driver are read as UTC
    assert user.otp.expires_at.tzinfo == timezone.utc


@pytest.mark.asyncio
async def test_insert_duplicate_key_is_conflict(collection):
    collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")

    with pytest.raises(ConflictError):
        await UserStore(collection).insert(
            new_user_document("Asha", "9991112222", "asha@example.com", "hash")
        )


@pytest.mark.asyncio
async def test_set_otp_overwrites_challenge(collection):
    collection.update_one.return_value = SimpleNamespace(matched_count=1, modified_count=1)
    challenge = OtpChallenge(code="123456", expires_at=NOW)

    assert await UserStore(collection).set_otp(USER_ID, challenge)

    query, update = collection.update_one.await_args.args
    assert query == {"_id": ObjectId(USER_ID)}
    assert update["$set"]["otp"] == {"code": "123456", "expires_at": NOW}


@pytest.mark.asyncio
async def test_consume_otp_is_conditional_on_code_and_expiry(collection):
    collection.find_one_and_update.return_value = None

    consumed = await UserStore(collection).consume_otp(USER_ID, "123456", NOW, {"is_verified": True})

    assert consumed is False
    query, update = collection.find_one_and_update.await_args.args
    assert query == {
        "_id": ObjectId(USER_ID),
        "otp.code": "123456",
        "otp.expires_at": {"$gt": NOW},
    }
    assert update["$unset"] == {"otp": ""}
    assert update["$set"]["is_verified"] is True


@pytest.mark.asyncio
async def test_set_pin_only_when_absent(collection):
    collection.update_one.return_value = SimpleNamespace(matched_count=0, modified_count=0)

    assert not await UserStore(collection).set_pin_if_absent(USER_ID, "pin-hash")

    query, _ = collection.update_one.await_args.args
    assert query == {"_id": ObjectId(USER_ID), "pin_hash": None}
