"""
User CRUD use cases on top of the JSON storage.

Each call is a self-contained read-mutate-write cycle: the collection is
loaded fresh, changed in memory and written back in full.
"""

from __future__ import annotations

from typing import Any, Mapping

from users_api.core.config import get_settings
from users_api.core.logging import get_logger
from users_api.domain.users import (
    build_user,
    find_user_index,
    merge_user,
    missing_required_fields,
    next_user_id,
    parse_user_id,
)
from users_api.repositories.json_storage import JsonUserStorage, StorageWriteError

logger = get_logger(__name__)


class UserServiceError(Exception):
    """Base exception for user workflows."""

    message = "User service error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class UserNotFoundError(UserServiceError):
    message = "User not found"


class MissingFieldsError(UserServiceError):
    message = "All fields (name, age, email) are required."

    def __init__(self, fields: list[str]):
        super().__init__()
        self.fields = fields


class UserService:
    """List, fetch, create, update and delete users stored in one JSON document."""

    def __init__(self, storage: JsonUserStorage | None = None, *, strict_reads: bool | None = None) -> None:
        settings = get_settings()
        self.storage = storage or JsonUserStorage(settings.users_file)
        self.strict_reads = settings.strict_reads if strict_reads is None else strict_reads

    def _load(self) -> list[dict]:
        # StorageReadError only escapes in strict mode.
        if self.strict_reads:
            return self.storage.read()
        return self.storage.load()

    def list_users(self) -> list[dict]:
        return self._load()

    def get_user(self, raw_id: Any) -> dict:
        user_id = parse_user_id(raw_id)
        users = self._load()
        idx = find_user_index(users, user_id)
        if idx == -1:
            logger.info("User %r not found", raw_id)
            raise UserNotFoundError()
        return users[idx]

    def create_user(self, payload: Mapping[str, Any]) -> dict:
        missing = missing_required_fields(payload)
        if missing:
            logger.info("Validation failed: missing required fields %s", ", ".join(missing))
            raise MissingFieldsError(missing)
        with self.storage.lock():
            users = self._load()
            user = build_user(next_user_id(users), payload)
            users.append(user)
            self.storage.save(users)
        logger.info("User with ID %s created.", user["id"])
        return user

    def update_user(self, raw_id: Any, changes: Mapping[str, Any]) -> dict:
        user_id = parse_user_id(raw_id)
        with self.storage.lock():
            users = self._load()
            idx = find_user_index(users, user_id)
            if idx == -1:
                logger.info("User %r not found", raw_id)
                raise UserNotFoundError()
            users[idx] = merge_user(users[idx], changes)
            self.storage.save(users)
        logger.info("User with ID %s updated.", user_id)
        return users[idx]

    def delete_user(self, raw_id: Any) -> dict:
        user_id = parse_user_id(raw_id)
        with self.storage.lock():
            users = self._load()
            idx = find_user_index(users, user_id)
            if idx == -1:
                logger.info("User %r not found", raw_id)
                raise UserNotFoundError()
            removed = users.pop(idx)
            self.storage.save(users)
        logger.info("User with ID %s deleted.", user_id)
        return removed


__all__ = [
    "UserService",
    "UserServiceError",
    "UserNotFoundError",
    "MissingFieldsError",
    "StorageWriteError",
]
