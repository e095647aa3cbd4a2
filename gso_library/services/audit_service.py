"""Security audit trail.

Recording is best-effort: the event is always written to the application log,
and persisted to ``audit_events`` through its own session so that a failed
insert can never roll back or fail the action it describes.
"""
from typing import Optional, Union

from loguru import logger
from sqlmodel import Session, select

from gso_library.models.audit_event import AuditEvent
from gso_library.models.enums import AuditEventType

_WARNING_EVENTS = {AuditEventType.LOGIN_FAILURE, AuditEventType.ACCOUNT_DISABLE}


def _persist(session: Session, event: AuditEvent) -> None:
    with Session(session.get_bind()) as audit_session:
        audit_session.add(event)
        audit_session.commit()


def record_audit_event(
    session: Session,
    event_type: Union[AuditEventType, str],
    username: Optional[str] = None,
    target_username: Optional[str] = None,
    ip_address: Optional[str] = None,
    detail: Optional[str] = None,
) -> None:
    try:
        event_type = AuditEventType(event_type)
    except ValueError:
        logger.exception(
            'audit.invalid_event_type',
            event_type=str(event_type),
            username=username,
            target_username=target_username,
            ip_address=ip_address,
            detail=detail,
        )
        return
    level = 'WARNING' if event_type in _WARNING_EVENTS else 'INFO'
    logger.log(
        level,
        'audit.{event_type}',
        event_type=event_type.value,
        username=username,
        target_username=target_username,
        ip_address=ip_address,
        detail=detail,
    )
    event = AuditEvent(
        event_type=event_type.value,
        username=username,
        target_username=target_username,
        ip_address=ip_address,
        detail=detail,
    )
    try:
        _persist(session, event)
    except Exception:
        logger.exception('audit.persist_failed', event_type=event_type.value)


def list_audit_events(
    session: Session,
    event_type: Optional[AuditEventType] = None,
    since_id: Optional[int] = None,
    username: Optional[str] = None,
    limit: Optional[int] = 100,
    offset: int = 0,
) -> list[AuditEvent]:
    statement = select(AuditEvent)
    if event_type is not None:
        statement = statement.where(AuditEvent.event_type == event_type.value)
    if since_id is not None:
        statement = statement.where(AuditEvent.id > since_id)
    if username is not None:
        statement = statement.where(AuditEvent.username == username)
    statement = statement.order_by(AuditEvent.id)
    if offset:
        statement = statement.offset(offset)
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())


def latest_audit_event_id(session: Session) -> int:
    last = session.exec(select(AuditEvent).order_by(AuditEvent.id.desc()).limit(1)).first()
    return last.id if last else 0
