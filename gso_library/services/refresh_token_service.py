"""Refresh token ledger.

Rows are never deleted. A token moves from active to revoked by flipping
``revoked``; expiry is computed from ``expires_at`` at lookup time.
"""
import base64
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from loguru import logger
from sqlalchemy import update
from sqlmodel import Session, select

from gso_library.core.config import settings
from gso_library.models.base import ensure_utc
from gso_library.models.refresh_token import RefreshToken
from gso_library.models.user import User
from gso_library.services.errors import (
    AccountDisabledError,
    ForbiddenError,
    InvalidOrExpiredToken,
    NotFoundError,
)


def generate_token_value() -> str:
    return base64.b64encode(secrets.token_bytes(settings.REFRESH_TOKEN_BYTES)).decode('ascii')


def get_refresh_token(session: Session, token: str) -> Optional[RefreshToken]:
    return session.exec(select(RefreshToken).where(RefreshToken.token == token)).first()


def is_usable(record: RefreshToken, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now(timezone.utc)
    return not record.revoked and ensure_utc(record.expires_at) > now


def _new_row(user_id: str, now: datetime) -> RefreshToken:
    return RefreshToken(
        token=generate_token_value(),
        user_id=user_id,
        created_at=now,
        expires_at=now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def issue_refresh_token(session: Session, user_id: str) -> RefreshToken:
    record = _new_row(user_id, datetime.now(timezone.utc))
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def validate_and_rotate(session: Session, token: str) -> tuple[User, RefreshToken]:
    now = datetime.now(timezone.utc)
    record = get_refresh_token(session, token)
    if record is None or not is_usable(record, now):
        raise InvalidOrExpiredToken('Invalid or expired refresh token')

    user = session.get(User, record.user_id)
    if user is None or user.disabled:
        raise AccountDisabledError('Invalid or expired refresh token')

    # Only the caller whose UPDATE flips the row wins the rotation.
    result = session.connection().execute(
        update(RefreshToken)
        .where(RefreshToken.id == record.id)
        .where(RefreshToken.revoked.is_(False))
        .where(RefreshToken.expires_at > now)
        .values(revoked=True)
    )
    if result.rowcount != 1:
        session.rollback()
        logger.warning('auth.refresh.rotation_lost', user_id=record.user_id)
        raise InvalidOrExpiredToken('Invalid or expired refresh token')

    successor = _new_row(user.id, now)
    session.add(successor)
    session.commit()
    session.refresh(successor)
    session.refresh(user)
    return user, successor


def revoke_refresh_token(
    session: Session,
    token: str,
    requester_id: str,
    requester_is_admin: bool,
) -> RefreshToken:
    record = get_refresh_token(session, token)
    if record is None:
        raise NotFoundError('Refresh token not found')
    if record.user_id != requester_id and not requester_is_admin:
        raise ForbiddenError('Not allowed to revoke this token')
    if not record.revoked:
        record.revoked = True
        session.add(record)
        session.commit()
        session.refresh(record)
    return record


def revoke_all_for_user(session: Session, user_id: str) -> int:
    """Mark every active token of ``user_id`` revoked; the caller commits."""
    result = session.connection().execute(
        update(RefreshToken)
        .where(RefreshToken.user_id == user_id)
        .where(RefreshToken.revoked.is_(False))
        .values(revoked=True)
    )
    return result.rowcount or 0


def list_active_tokens(session: Session, user_id: str) -> list[RefreshToken]:
    records = session.exec(
        select(RefreshToken)
        .where(RefreshToken.user_id == user_id)
        .where(RefreshToken.revoked.is_(False))
    ).all()
    now = datetime.now(timezone.utc)
    return [record for record in records if is_usable(record, now)]
