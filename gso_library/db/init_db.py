from sqlmodel import Session, SQLModel
from gso_library.db.session import engine
from gso_library.core.config import settings
from gso_library.models import audit_event, refresh_token, role, user  # noqa: F401
from gso_library.services.user_service import ensure_roles


def init_db(drop_all: bool = False) -> None:
    if drop_all:
        SQLModel.metadata.drop_all(engine)
    if settings.DATABASE_URL.startswith('sqlite') or settings.ENV != 'production' or settings.AUTO_CREATE_TABLES:
        SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        ensure_roles(session, settings.ROLES)
