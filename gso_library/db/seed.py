"""Create accounts listed in a JSON seed file.

The file holds an array of objects with ``username``, ``email``, ``password``,
optional ``first_name``/``last_name`` and a ``roles`` list. Usernames that
already exist are left untouched.
"""
import json
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError
from sqlmodel import Session

from gso_library.services.errors import ServiceError
from gso_library.services.user_service import create_user, get_user_by_username


class SeedUser(BaseModel):
    username: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    roles: list[str] = Field(default_factory=list)


def load_seed_file(path: Path) -> list[SeedUser]:
    payload = json.loads(path.read_text(encoding='utf-8'))
    if not isinstance(payload, list):
        raise RuntimeError(f'Seed file {path} must contain a JSON array')
    entries = []
    for index, item in enumerate(payload):
        try:
            entries.append(SeedUser.model_validate(item))
        except PydanticValidationError as exc:
            logger.error('seed.user.invalid', index=index, error=str(exc))
    return entries


def seed_users(session: Session, path: Path) -> list[str]:
    if not path.is_file():
        logger.info('seed.file.missing', path=str(path))
        return []

    created = []
    for entry in load_seed_file(path):
        if get_user_by_username(session, entry.username) is not None:
            logger.info('seed.user.exists', username=entry.username)
            continue
        try:
            create_user(
                session,
                username=entry.username,
                email=entry.email,
                password=entry.password,
                first_name=entry.first_name,
                last_name=entry.last_name,
                roles=entry.roles,
            )
        except ServiceError as exc:
            session.rollback()
            logger.error('seed.user.failed', username=entry.username, error=exc.message)
            continue
        logger.info('seed.user.created', username=entry.username, roles=entry.roles)
        created.append(entry.username)
    return created
