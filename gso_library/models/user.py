from typing import Optional
from sqlmodel import Field, Relationship, SQLModel
from gso_library.models.base import IDModel, TimestampModel
from gso_library.models.role import Role, UserRoleLink


class User(IDModel, TimestampModel, SQLModel, table=True):
    __tablename__ = 'users'

    username: str = Field(index=True, unique=True)
    email: str = Field(index=True)
    hashed_password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    disabled: bool = False

    roles: list[Role] = Relationship(link_model=UserRoleLink)
