# tests/test_profile_service.py
"""Profile header, finish-profile and edit-profile flows."""

import pytest

from pinboard.models.enums import ErrorKind
from pinboard.models.service_models import AvatarUpload
from tests.conftest import FAKE_URL


@pytest.fixture
def profiles(services):
    return services["profile_service"]


def _avatar(**overrides):
    fields = dict(filename="me.png", content=b"png-bytes", content_type="image/png")
    fields.update(overrides)
    return AvatarUpload(**fields)


def test_new_user_has_no_profile(profiles, signed_in):
    result = profiles.load_profile()

    assert result.success
    view = result.data
    assert view.user_id == signed_in
    assert not view.has_profile
    assert view.display_name == "owner"
    assert view.avatar_url is None
    assert profiles.needs_profile().data is True


def test_existing_profile_is_loaded(fake, profiles, signed_in):
    fake.add_row("users", id=signed_in, username="ana")
    fake.add_row("profiles", user_id=signed_in, description="Painter", avatar_url="u.png")

    view = profiles.load_profile().data

    assert view.has_profile
    assert view.display_name == "ana"
    assert view.description == "Painter"
    assert view.avatar_url == f"{FAKE_URL}/storage/v1/object/public/images/avatars/u.png"
    assert profiles.needs_profile().data is False


def test_profile_read_failure(fake, profiles, signed_in):
    fake.failures["profiles.select"] = Exception("timeout")

    result = profiles.load_profile()

    assert not result.success
    assert result.error_kind == ErrorKind.DATABASE
    assert not profiles.needs_profile().success


def test_signed_out_reads_fail(profiles):
    assert profiles.load_profile().error_kind == ErrorKind.AUTH
    assert profiles.save_profile("x").error_kind == ErrorKind.AUTH


def test_save_profile_upserts_on_user_id(fake, profiles, signed_in):
    assert profiles.save_profile("  First  ").success
    assert profiles.save_profile("Second", "https://img.example/a.png").success

    rows = fake.tables["profiles"]
    assert len(rows) == 1
    assert rows[0]["user_id"] == signed_in
    assert rows[0]["description"] == "Second"
    assert rows[0]["avatar_url"] == "https://img.example/a.png"


def test_save_profile_rejects_non_http_avatar(fake, profiles, signed_in):
    result = profiles.save_profile("bio", "ftp://nope/a.png")
    assert result.error_kind == ErrorKind.VALIDATION
    assert "profiles" not in fake.tables


def test_save_profile_database_failure(fake, profiles, signed_in):
    fake.failures["profiles.upsert"] = Exception("denied")
    assert profiles.save_profile("bio").error_kind == ErrorKind.DATABASE


def test_upload_avatar_writes_to_avatar_folder(fake, profiles, signed_in):
    fake.storage.create_bucket("images", options={"public": True})

    result = profiles.upload_avatar(_avatar())

    assert result.success
    (key,) = fake.storage.objects["images"].keys()
    assert key.startswith(f"avatars/{signed_in}-")
    assert key.endswith(".png")
    assert fake.storage.upload_options[0]["upsert"] == "true"
    assert result.data.endswith(key)


def test_upload_avatar_rejects_other_types(profiles, signed_in):
    result = profiles.upload_avatar(_avatar(filename="me.gif", content_type="image/gif"))
    assert result.error_kind == ErrorKind.VALIDATION


def test_upload_avatar_rejects_empty_file(profiles, signed_in):
    assert profiles.upload_avatar(_avatar(content=b"")).error_kind == ErrorKind.VALIDATION


def test_update_profile_uses_uploaded_avatar(fake, profiles, signed_in):
    fake.storage.create_bucket("images", options={"public": True})

    result = profiles.update_profile("New bio", "https://old/avatar.png", avatar=_avatar())

    assert result.success
    row = fake.tables["profiles"][0]
    assert row["description"] == "New bio"
    assert row["avatar_url"].startswith(f"{FAKE_URL}/storage/v1/object/public/images/avatars/")


def test_update_profile_stops_on_avatar_failure(fake, profiles, signed_in):
    result = profiles.update_profile("New bio", avatar=_avatar())

    # No bucket: the upload is refused as a storage setup problem.
    assert result.error_kind == ErrorKind.STORAGE_SETUP
    assert "profiles" not in fake.tables
