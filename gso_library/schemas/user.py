from typing import Optional
from pydantic import BaseModel


class UserOut(BaseModel):
    id: str
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    disabled: bool
    roles: list[str]
