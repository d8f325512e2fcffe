# tests/test_repositories.py
"""Table access and error normalisation."""

import pytest
from postgrest.exceptions import APIError

from pinboard.database import DatabaseManager
from pinboard.errors import NO_ROWS_CODE, DatabaseError
from pinboard.models.image import NewImage
from pinboard.models.user import UserRecord
from pinboard.repositories import ImageRepository, ProfileRepository, UserRepository


@pytest.fixture
def images(db, logger):
    return ImageRepository(db=db, logger=logger)


@pytest.fixture
def users(db, logger):
    return UserRepository(db=db, logger=logger)


@pytest.fixture
def profiles(db, logger):
    return ProfileRepository(db=db, logger=logger)


def test_list_recent_newest_first(fake, images):
    older = fake.add_row("images", user_id="u1", storage_path="a.jpg")
    newer = fake.add_row("images", user_id="u2", storage_path="b.jpg")
    assert [r.id for r in images.list_recent()] == [newer["id"], older["id"]]


def test_list_by_owner(fake, images):
    mine = fake.add_row("images", user_id="u1", storage_path="a.jpg")
    fake.add_row("images", user_id="u2", storage_path="b.jpg")
    assert [r.id for r in images.list_by_owner("u1")] == [mine["id"]]


def test_get_by_id_missing_is_none(images):
    assert images.get_by_id("missing") is None


def test_insert_returns_stored_row(fake, images):
    record = images.insert(
        NewImage(user_id="u1", storage_path="1.png", original_filename="a.png", title="A")
    )
    assert record.id
    assert record.created_at is not None
    assert fake.tables["images"][0]["title"] == "A"


def test_delete_with_no_affected_rows_raises(fake, images):
    row = fake.add_row("images", user_id="u1", storage_path="a.jpg")
    fake.rls_blocked_deletes.add("images")
    with pytest.raises(DatabaseError):
        images.delete(row["id"])


def test_check_reachable_wraps_failures(fake, images):
    fake.failures["images.select"] = APIError({"code": "42P01", "message": "relation does not exist"})
    with pytest.raises(DatabaseError) as info:
        images.check_reachable()
    assert info.value.code == "42P01"
    assert not info.value.is_no_rows


def test_users_by_ids_skips_missing(fake, users):
    fake.add_row("users", id="u1", username="ana")
    found = users.get_by_ids(["u1", "u2", "", "u1"])
    assert list(found) == ["u1"]
    assert found["u1"].display_name == "ana"


def test_users_by_ids_empty_input_makes_no_query(fake, users):
    fake.failures["users.select"] = AssertionError("must not be called")
    assert users.get_by_ids([]) == {}


def test_user_upsert_and_lookup(users):
    users.upsert(UserRecord(id="u5", first_name="Bo"))
    assert users.get_by_id("u5").display_name == "Bo"
    assert users.get_by_id("u6") is None


def test_profile_lookup_and_upsert(fake, profiles):
    assert profiles.get_by_user_id("u1") is None

    profiles.upsert("u1", "bio", None)
    profiles.upsert("u1", "bio 2", "https://a/x.png")

    record = profiles.get_by_user_id("u1")
    assert record.description == "bio 2"
    assert record.avatar_url == "https://a/x.png"
    assert len(fake.tables["profiles"]) == 1
    assert set(profiles.get_by_user_ids(["u1", "u2"])) == {"u1"}


def test_unconfigured_client_raises_database_error(logger):
    offline = DatabaseManager("", "", logger)
    assert not offline.is_online
    with pytest.raises(DatabaseError):
        ImageRepository(db=offline, logger=logger).list_recent()


def test_from_exception_keeps_no_rows_code():
    exc = APIError({"code": NO_ROWS_CODE, "message": "no rows"})
    error = DatabaseError.from_exception(exc, "get")
    assert error.is_no_rows
    assert error.message == "get: no rows"
