"""
User Service - Accounts and profiles
"""
from typing import Any

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from exceptions import ConflictException, ResourceNotFoundException, ValidationException
from logging_config import logger
from models.users import ROLE_FIELDS, Role, UserRegister, UserUpdate, parse_user
from services.db_operation import with_retry
from utils import new_id, utc_now

# never returned by the profile lookups
PRIVATE_FIELDS = {"password": 0}
# never cleared by a profile update
REQUIRED_FIELDS = {"name", "skills"}


class UserService:
    """Service for registering users and reading/updating their profiles"""

    def __init__(self, mongodb):
        self.db = mongodb

    @with_retry("get_user_by_email")
    async def get_user_by_email(self, email: str) -> dict | None:
        """Raw user document including the password hash, for login"""
        return await self.db["users"].find_one({"email": email.strip().lower()})

    @with_retry("get_user")
    async def get_user(self, user_id: str):
        user = await self.db["users"].find_one({"_id": user_id}, PRIVATE_FIELDS)
        if user is None:
            raise ResourceNotFoundException(resource_type="User", resource_id=user_id)
        return parse_user(user)

    async def create_user(self, new_user: UserRegister, password_hash: str) -> dict:
        """Store a new account; the id is fixed before the retried insert"""
        now = utc_now()
        document = {
            "_id": new_id(),
            "name": new_user.name,
            "email": new_user.email,
            "password": password_hash,
            "role": Role(new_user.role).value,
            "createdAt": now,
            "updatedAt": now,
        }
        # fills the role payload defaults (availability, averageRating, ...)
        document.update(parse_user(document).model_dump(by_alias=True, exclude={"id"}))

        await self._insert_user(document)
        logger.bind(role=document["role"]).info(f"User registered: {document['_id']}")
        return document

    @with_retry("create_user")
    async def _insert_user(self, document: dict) -> None:
        try:
            await self.db["users"].insert_one(document)
        except DuplicateKeyError as e:
            key_pattern = (e.details or {}).get("keyPattern") or {}
            if "_id" in key_pattern:
                logger.debug(f"User {document['_id']} already stored by a previous attempt")
                return
            raise ConflictException(
                resource_type="User",
                message="User already exists",
                details={"email": document["email"]},
                status_code=400,
            ) from e

    @with_retry("update_password_hash")
    async def update_password_hash(self, user_id: str, password_hash: str) -> None:
        await self.db["users"].update_one({"_id": user_id}, {"$set": {"password": password_hash}})

    @with_retry("update_user")
    async def update_user(self, user_id: str, changes: UserUpdate):
        """Apply profile changes, role-specific fields only for the user's own role"""
        user = await self.db["users"].find_one({"_id": user_id}, {"role": 1})
        if user is None:
            raise ResourceNotFoundException(resource_type="User", resource_id=user_id)

        update: dict[str, Any] = {
            field: value
            for field, value in changes.model_dump(exclude_unset=True).items()
            if value is not None or field not in REQUIRED_FIELDS
        }
        if not update:
            return await self.get_user(user_id)

        role = Role(user["role"])
        foreign = {
            field
            for other, fields in ROLE_FIELDS.items()
            if other != role
            for field in fields
            if field in update
        }
        if foreign:
            raise ValidationException(
                field=sorted(foreign)[0],
                message=f"Not a {role.value} field",
                details={"fields": sorted(foreign)},
            )

        update["updatedAt"] = utc_now()
        updated = await self.db["users"].find_one_and_update(
            {"_id": user_id},
            {"$set": update},
            projection=PRIVATE_FIELDS,
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            raise ResourceNotFoundException(resource_type="User", resource_id=user_id)

        logger.bind(fields=sorted(update)).info(f"User updated: {user_id}")
        return parse_user(updated)
