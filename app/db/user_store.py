"""
app/db/user_store.py

Purpose: Credential store over the users collection

- Point lookups by id, mobile and email
- Registration insert guarded by unique indexes
- Single-document atomic writes for OTP and PIN state
"""

from datetime import datetime
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ConflictError
from app.core.logging import get_logger
from app.models.user import OtpChallenge, User
from utils.constants import USER_EXISTS_MESSAGE
from utils.time_utils import utcnow

logger = get_logger(__name__)


def _object_id(user_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(user_id)
    except (InvalidId, TypeError):
        return None


class UserStore:
    """
    Motor-backed user persistence.

    Every mutating method is a single update on one document, so concurrent
    requests for the same user never interleave inside a write.
    """

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def find_by_id(self, user_id: str) -> Optional[User]:
        oid = _object_id(user_id)
        if oid is None:
            return None
        return User.from_document(await self.collection.find_one({"_id": oid}))

    async def find_by_mobile(self, mobile: str) -> Optional[User]:
        return User.from_document(await self.collection.find_one({"mobile": mobile}))

    async def find_by_email(self, email: str) -> Optional[User]:
        return User.from_document(await self.collection.find_one({"email": email}))

    async def find_by_mobile_or_email(self, mobile: str, email: str) -> Optional[User]:
        document = await self.collection.find_one(
            {"$or": [{"mobile": mobile}, {"email": email}]}
        )
        return User.from_document(document)

    async def insert(self, document: Dict[str, Any]) -> User:
        """
        Inserts a new user.

        Raises:
            ConflictError: If a concurrent registration took the mobile or email
        """
        try:
            result = await self.collection.insert_one(document)
        except DuplicateKeyError as e:
            logger.warning("Duplicate key on user insert", extra={"reason": str(e)})
            raise ConflictError(USER_EXISTS_MESSAGE) from e

        return User.from_document({**document, "_id": result.inserted_id})

    async def set_otp(self, user_id: str, challenge: OtpChallenge) -> bool:
        """
        Replaces whatever challenge the user had with ``challenge``.
        """
        result = await self.collection.update_one(
            {"_id": _object_id(user_id)},
            {
                "$set": {
                    "otp": challenge.model_dump(),
                    "updated_at": utcnow(),
                }
            }
        )
        return result.matched_count > 0

    async def consume_otp(
        self,
        user_id: str,
        code: str,
        now: datetime,
        updates: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Removes the challenge and applies ``updates`` only if the stored
        challenge still has this code and has not expired at ``now``.
        """
        result = await self.collection.find_one_and_update(
            {
                "_id": _object_id(user_id),
                "otp.code": code,
                "otp.expires_at": {"$gt": now},
            },
            {
                "$unset": {"otp": ""},
                "$set": {**(updates or {}), "updated_at": now},
            },
            return_document=ReturnDocument.AFTER,
        )
        return result is not None

    async def set_pin_if_absent(self, user_id: str, pin_hash: str) -> bool:
        """
        Stores the PIN hash unless one is already present.
        """
        result = await self.collection.update_one(
            {"_id": _object_id(user_id), "pin_hash": None},
            {
                "$set": {
                    "pin_hash": pin_hash,
                    "updated_at": utcnow(),
                }
            }
        )
        return result.modified_count > 0
