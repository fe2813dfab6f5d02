from __future__ import annotations

import json

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from users_api.core.logging import get_logger
from users_api.repositories.json_storage import StorageReadError, StorageWriteError
from users_api.services.user_service import (
    MissingFieldsError,
    UserNotFoundError,
    UserService,
)

router = APIRouter(prefix="/users", tags=["users"])
logger = get_logger(__name__)

FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")
WRITE_FAILED = "Failed to write users to file."
READ_FAILED = "Failed to read users from file."


class InvalidBodyError(Exception):
    message = "Invalid request body."


def _get_user_service(request: Request) -> UserService:
    svc = getattr(getattr(request.app, "state", None), "user_service", None)
    if not svc:
        raise RuntimeError("UserService not configured")
    return svc


def _message(text: str, status_code: int) -> JSONResponse:
    return JSONResponse({"message": text}, status_code=status_code)


async def _read_payload(request: Request) -> dict:
    """Decode a JSON or form body into a dict; an empty body is {}."""
    content_type = (request.headers.get("content-type") or "").split(";")[0].strip().lower()
    if content_type in FORM_TYPES:
        form = await request.form()
        # file parts (UploadFile) cannot be stored in the JSON document
        if any(not isinstance(value, str) for value in form.values()):
            raise InvalidBodyError()
        return {key: value for key, value in form.items()}
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise InvalidBodyError() from exc
    if not isinstance(payload, dict):
        raise InvalidBodyError()
    return payload


@router.get("")
def list_users(request: Request):
    svc = _get_user_service(request)
    try:
        return svc.list_users()
    except StorageReadError:
        return _message(READ_FAILED, 500)


@router.get("/{user_id}")
def get_user(user_id: str, request: Request):
    svc = _get_user_service(request)
    try:
        return svc.get_user(user_id)
    except UserNotFoundError as exc:
        return _message(exc.message, 404)
    except StorageReadError:
        return _message(READ_FAILED, 500)


@router.post("", status_code=201)
async def create_user(request: Request):
    svc = _get_user_service(request)
    try:
        payload = await _read_payload(request)
        logger.debug("Request body: %r", payload)
        return await run_in_threadpool(svc.create_user, payload)
    except InvalidBodyError as exc:
        return _message(exc.message, 400)
    except MissingFieldsError as exc:
        return _message(exc.message, 400)
    except StorageWriteError:
        return _message(WRITE_FAILED, 500)
    except StorageReadError:
        return _message(READ_FAILED, 500)


@router.put("/{user_id}")
async def update_user(user_id: str, request: Request):
    svc = _get_user_service(request)
    try:
        changes = await _read_payload(request)
        return await run_in_threadpool(svc.update_user, user_id, changes)
    except InvalidBodyError as exc:
        return _message(exc.message, 400)
    except UserNotFoundError as exc:
        return _message(exc.message, 404)
    except StorageWriteError:
        return _message(WRITE_FAILED, 500)
    except StorageReadError:
        return _message(READ_FAILED, 500)


@router.delete("/{user_id}")
def delete_user(user_id: str, request: Request):
    svc = _get_user_service(request)
    try:
        return [svc.delete_user(user_id)]
    except UserNotFoundError as exc:
        return _message(exc.message, 404)
    except StorageWriteError:
        return _message(WRITE_FAILED, 500)
    except StorageReadError:
        return _message(READ_FAILED, 500)
