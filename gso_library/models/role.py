from sqlmodel import Field, SQLModel
from gso_library.models.base import IDModel


class UserRoleLink(SQLModel, table=True):
    __tablename__ = 'user_roles'

    user_id: str = Field(foreign_key='users.id', primary_key=True)
    role_id: str = Field(foreign_key='roles.id', primary_key=True)


class Role(IDModel, SQLModel, table=True):
    __tablename__ = 'roles'

    name: str = Field(index=True, unique=True)
