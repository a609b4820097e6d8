from __future__ import annotations

from typing import Optional

import pytest

from axion.domain import models
from axion.domain.models import Model
from axion.errors import (
    AxionError,
    HydrationError,
    InvalidQueryError,
    UnsafeDeleteError,
    UnsafeUpdateError,
)
from axion.infrastructure.db_factory import Connection

SEEDED = 25
CREATED = "2024-01-01 08:00:00"
LATER = "2024-01-02 09:30:00"


class User(Model):
    table = "users"
    fillable = frozenset({"name", "email", "role", "age", "bio", "email_verified"})
    integer_columns = frozenset({"id", "age", "email_verified"})

    id: int
    name: str
    email: Optional[str] = None
    role: str = "member"
    age: Optional[int] = None
    email_verified: bool = False
    bio: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Profile(Model):
    table = "users"
    timestamps = False

    id: int
    bio: str = "n/a"


class StrictProfile(Model):
    table = "users"

    id: int
    bio: str


class Post(Model):
    table = "posts"
    fillable = frozenset({"user_id", "title"})
    timestamps = False

    id: int
    user_id: int
    title: str


@pytest.fixture
def frozen_clock(monkeypatch: pytest.MonkeyPatch):
    stamps = {"now": CREATED}
    monkeypatch.setattr(models, "utc_timestamp", lambda: stamps["now"])
    return stamps


@pytest.fixture
def posts_table(users_table: Connection) -> Connection:
    users_table.execute(
        "CREATE TABLE posts (id INTEGER PRIMARY KEY AUTOINCREMENT, user_id INTEGER NOT NULL, title VARCHAR(255) NOT NULL)",
        table="posts",
        operation="create",
    )
    return users_table


class TestHydration:
    def test_typed_fields_and_extra_columns(self):
        user = User.hydrate({"id": "3", "name": "Ada", "email_verified": 1, "nickname": "ada"})
        assert user.id == 3
        assert user.email_verified is True
        assert user.nickname == "ada"

    def test_null_on_non_nullable_field_keeps_default(self):
        profile = Profile.hydrate({"id": 1, "bio": None})
        assert profile.bio == "n/a"

    def test_null_on_nullable_field_is_assigned(self):
        user = User.hydrate({"id": 1, "name": "Ada", "bio": None})
        assert user.bio is None

    def test_null_on_required_non_nullable_field_raises(self):
        with pytest.raises(HydrationError) as excinfo:
            StrictProfile.hydrate({"id": 1, "bio": None})
        assert excinfo.value.column == "bio"

    def test_invalid_value_raises_hydration_error(self):
        with pytest.raises(HydrationError):
            User.hydrate({"id": "not-a-number", "name": "Ada"})

    def test_extra_column_shadowed_by_model_member(self):
        user = User.hydrate({"id": 1, "name": "Ada", "count": 5, "where": "here"})
        assert callable(user.count)
        assert user.get_attribute("count") == 5
        assert user.get_attribute("where") == "here"
        assert user.get_attribute("name") == "Ada"
        assert user.get_attribute("missing", "n/a") == "n/a"


class TestCreate:
    def test_timestamps_equal_on_insert(self, users_table: Connection, frozen_clock):
        assert User.create(users_table, {"name": "Ada", "email": "ada@example.com"}) is True
        user = User.find_by(users_table, "email", "ada@example.com")
        assert user.created_at == CREATED
        assert user.updated_at == CREATED

    def test_update_only_touches_updated_at(self, users_table: Connection, frozen_clock):
        User.create(users_table, {"name": "Ada"})
        frozen_clock["now"] = LATER

        assert User.update_by(users_table, "name", "Ada", {"bio": "hello"}) == 1

        user = User.find_by(users_table, "name", "Ada")
        assert user.bio == "hello"
        assert user.created_at == CREATED
        assert user.updated_at == LATER

    def test_non_fillable_keys_dropped(self, users_table: Connection):
        User.create(users_table, {"id": 999, "name": "Ada", "password": "secret"})
        assert User.find(users_table, 999) is None
        assert User.find(users_table, 1).name == "Ada"

    def test_without_timestamps(self, users_table: Connection):
        class Plain(Model):
            table = "users"
            fillable = frozenset({"name"})
            timestamps = False

            id: int
            name: str
            created_at: Optional[str] = None

        Plain.create(users_table, {"name": "Bo", "created_at": "2000-01-01 00:00:00"})
        assert Plain.find(users_table, 1).created_at is None

    def test_timestamp_format(self):
        assert len(models.utc_timestamp()) == len("YYYY-MM-DD HH:MM:SS")


class TestQueries:
    def test_find_returns_model(self, seeded_users: int, connection: Connection):
        user = User.find(connection, 5)
        assert isinstance(user, User)
        assert user.name == "user0005"

    def test_find_missing_returns_none(self, seeded_users: int, connection: Connection):
        assert User.find(connection, 1000) is None

    def test_all_and_count(self, seeded_users: int, connection: Connection):
        assert len(User.all(connection)) == SEEDED
        assert User.count(connection) == SEEDED

    def test_where_or_where_chain(self, seeded_users: int, connection: Connection):
        users = User.where(connection, "id", "<", 3).or_where("id", 25).order_by("id").get()
        assert [u.id for u in users] == [1, 2, 25]

    def test_first_where(self, seeded_users: int, connection: Connection):
        user = User.first_where(connection, {"name": "user0007", "email": "user0007@example.com"})
        assert user.id == 7

    def test_paginate_hydrates(self, seeded_users: int, connection: Connection):
        page = User.paginate(connection, per_page=10, page=3)
        assert page["total"] == SEEDED
        assert len(page["data"]) == 5
        assert all(isinstance(u, User) for u in page["data"])

    def test_filtered_paginate(self, seeded_users: int, connection: Connection):
        page = User.where(connection, "id", ">", 20).paginate(per_page=2, page=1)
        assert page["total"] == 5
        assert page["last_page"] == 3

    @pytest.mark.parametrize("method", ["limit", "offset"])
    def test_negative_limit_and_offset_rejected(self, connection: Connection, method: str):
        with pytest.raises(InvalidQueryError):
            getattr(User.query(connection), method)(-1)

    def test_limit_and_offset(self, seeded_users: int, connection: Connection):
        users = User.query(connection).order_by("id").limit(2).offset(3).get()
        assert [u.id for u in users] == [4, 5]


class TestMutations:
    def test_chained_update_returns_count(self, seeded_users: int, connection: Connection):
        assert User.where(connection, "id", "<=", 3).update({"role": "editor"}) == 3

    def test_chained_delete(self, seeded_users: int, connection: Connection):
        assert User.where(connection, "id", 1).or_where("id", 2).delete() == 2
        assert User.count(connection) == SEEDED - 2

    def test_delete_shapes(self, seeded_users: int, connection: Connection):
        assert User.delete(connection, 1) == 1
        assert User.delete(connection, {"id": 2}) == 1
        assert User.delete(connection, [("id", "=", 3)]) == 1
        assert User.count(connection) == SEEDED - 3

    def test_delete_without_where_refused(self, seeded_users: int, connection: Connection):
        with pytest.raises(UnsafeDeleteError):
            User.delete(connection, [])
        with pytest.raises(UnsafeDeleteError):
            User.query(connection).delete()
        assert User.count(connection) == SEEDED

    def test_update_without_where_refused(self, seeded_users: int, connection: Connection):
        with pytest.raises(UnsafeUpdateError):
            User.update_where(connection, [], {"bio": "x"})

    def test_update_with_nothing_fillable_is_noop(self, seeded_users: int, connection: Connection):
        before = User.find(connection, 1)
        assert User.update_where(connection, 1, {"password": "nope"}) == 0
        assert User.find(connection, 1).updated_at == before.updated_at

    def test_integer_columns_are_per_model(self, users_table: Connection):
        User.create(users_table, {"name": "Cy", "age": ""})
        assert User.find(users_table, 1).age is None


class TestRelations:
    def test_has_many_and_belongs_to(self, posts_table: Connection):
        User.create(posts_table, {"name": "Ada"})
        Post.create(posts_table, {"user_id": 1, "title": "one"})
        Post.create(posts_table, {"user_id": 1, "title": "two"})

        user = User.find(posts_table, 1)
        posts = user.has_many(Post, "user_id")
        assert [p.title for p in posts] == ["one", "two"]
        assert posts[0].belongs_to(User, "user_id").name == "Ada"
        assert user.has_one(Post, "user_id").title == "one"

    def test_missing_key_attribute(self, posts_table: Connection):
        User.create(posts_table, {"name": "Ada"})
        user = User.find(posts_table, 1)
        assert user.belongs_to(Post, "post_id") is None
        assert user.has_many(Post, "user_id", local_key="uuid") == []

    def test_requires_connection(self):
        user = User.hydrate({"id": 1, "name": "Ada"})
        with pytest.raises(AxionError):
            user.has_many(Post, "user_id")


def test_model_without_table(connection: Connection):
    class Nameless(Model):
        id: int

    with pytest.raises(AxionError):
        Nameless.all(connection)
