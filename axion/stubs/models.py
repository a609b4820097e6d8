from typing import Optional

from axion.domain import Model


class User(Model):
    table = "users"
    fillable = frozenset({"name", "email", "password", "bio", "picture"})

    id: int
    name: str
    email: str
    password: Optional[str] = None
    bio: Optional[str] = None
    picture: Optional[str] = None
