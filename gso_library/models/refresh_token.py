from datetime import datetime
from sqlmodel import Field, SQLModel
from sqlalchemy import DateTime
from gso_library.models.base import CreatedAtModel, IDModel


class RefreshToken(IDModel, CreatedAtModel, SQLModel, table=True):
    __tablename__ = 'refresh_tokens'

    token: str = Field(index=True, unique=True)
    user_id: str = Field(foreign_key='users.id', index=True)
    expires_at: datetime = Field(sa_type=DateTime(timezone=True), sa_column_kwargs={"nullable": False})
    revoked: bool = False
