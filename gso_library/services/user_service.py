import re
from typing import Iterable, Optional

from passlib.context import CryptContext
from sqlmodel import Session, select

from gso_library.core.config import settings
from gso_library.models.role import Role
from gso_library.models.user import User
from gso_library.schemas.user import UserOut
from gso_library.services.errors import ConflictError, ValidationError

pwd_context = CryptContext(schemes=['bcrypt'], deprecated='auto', bcrypt__rounds=settings.BCRYPT_ROUNDS)

_DIGIT = re.compile(r'\d')
_UPPER = re.compile(r'[A-Z]')


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(user: User, password: str) -> bool:
    return pwd_context.verify(password, user.hashed_password)


def password_problems(password: str) -> list[str]:
    problems = []
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        problems.append(f'Passwords must be at least {settings.PASSWORD_MIN_LENGTH} characters')
    if not _DIGIT.search(password):
        problems.append("Passwords must have at least one digit ('0'-'9')")
    if not _UPPER.search(password):
        problems.append("Passwords must have at least one uppercase ('A'-'Z')")
    return problems


def check_password_policy(password: str) -> None:
    problems = password_problems(password)
    if problems:
        raise ValidationError(', '.join(problems))


def get_user(session: Session, user_id: str) -> Optional[User]:
    return session.get(User, user_id)


def get_user_by_username(session: Session, username: str) -> Optional[User]:
    return session.exec(select(User).where(User.username == username)).first()


def list_users(session: Session) -> list[User]:
    return list(session.exec(select(User).order_by(User.username)).all())


def role_names(user: User) -> list[str]:
    return sorted(role.name for role in user.roles)


def get_role(session: Session, name: str) -> Optional[Role]:
    return session.exec(select(Role).where(Role.name == name)).first()


def ensure_roles(session: Session, names: Iterable[str]) -> list[Role]:
    roles = []
    for name in names:
        role = get_role(session, name)
        if role is None:
            role = Role(name=name)
            session.add(role)
        roles.append(role)
    session.commit()
    return roles


def create_user(
    session: Session,
    username: str,
    email: str,
    password: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    roles: Iterable[str] = (),
) -> User:
    if get_user_by_username(session, username):
        raise ConflictError(f"Username '{username}' is already taken")
    check_password_policy(password)
    assigned = []
    for name in roles:
        role = get_role(session, name)
        if role is None:
            raise ValidationError(f"Role '{name}' does not exist")
        assigned.append(role)
    user = User(
        username=username,
        email=email,
        hashed_password=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        roles=assigned,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def set_email(user: User, email: str) -> None:
    user.email = email


def set_password(user: User, new_password: str) -> None:
    check_password_policy(new_password)
    user.hashed_password = hash_password(new_password)


def change_password(user: User, current_password: str, new_password: str) -> None:
    if not verify_password(user, current_password):
        raise ValidationError('Current password is incorrect')
    set_password(user, new_password)


def set_disabled(session: Session, user: User, disabled: bool) -> None:
    user.disabled = disabled
    session.add(user)


def add_role(session: Session, user: User, role: Role) -> None:
    user.roles.append(role)
    session.add(user)


def remove_role(session: Session, user: User, role: Role) -> None:
    user.roles = [item for item in user.roles if item.id != role.id]
    session.add(user)


def to_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        disabled=user.disabled,
        roles=role_names(user),
    )
