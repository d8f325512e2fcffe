# tests/test_pin_service.py
"""Pin upload (with compensating delete) and pin delete."""

import pytest
from postgrest.exceptions import APIError

from pinboard.errors import DatabaseError
from pinboard.models.enums import ErrorKind
from pinboard.models.image import ImageRecord
from pinboard.models.service_models import UploadRequest
from pinboard.services.feed_assembler import build_feed_item
from pinboard.services.pin_service import PinService, insert_error_message, object_key

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def _request(**overrides):
    fields = dict(
        filename="sunset.PNG",
        content=PNG_BYTES,
        content_type="image/png",
        title="  Sunset  ",
        description="Golden hour",
    )
    fields.update(overrides)
    return UploadRequest(**fields)


@pytest.fixture
def pins(services):
    return services["pin_service"]


@pytest.fixture
def ready(services, signed_in):
    assert services["storage_service"].ensure_ready().success
    return signed_in


# ---------------------------------------------------------------------------
# Validation and keys
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"filename": "", "content": b""}, "Please select an image to upload"),
        ({"content_type": "application/pdf"}, "Please select an image file"),
        ({"title": "   "}, "Please enter a title for your pin"),
    ],
)
def test_validation_messages(overrides, message):
    check = PinService.validate_upload(_request(**overrides))
    assert not check.is_valid
    assert check.error_message == message


def test_object_key_uses_timestamp_and_extension():
    assert object_key(_request(), now_ms=1700000000000) == "1700000000000.png"
    assert object_key(_request(filename="noext"), now_ms=5) == "5.png"


def test_insert_error_messages():
    assert "Permission denied" in insert_error_message(DatabaseError("x", code="42501"))
    assert "RLS policy violation" in insert_error_message(
        DatabaseError("new row violates row-level security policy")
    )
    assert insert_error_message(DatabaseError("boom")) == "Database error: boom"


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

def test_upload_success_stores_object_and_row(fake, pins, ready):
    result = pins.upload_pin(_request())

    assert result.success
    item = result.data
    assert item.title == "Sunset"
    assert item.user_id == ready
    rows = fake.tables["images"]
    assert len(rows) == 1
    assert rows[0]["storage_path"] in fake.storage.objects["images"]
    assert rows[0]["original_filename"] == "sunset.PNG"
    assert fake.storage.upload_options[0]["cache-control"] == "3600"
    assert item.src.endswith(rows[0]["storage_path"])


def test_upload_refused_until_storage_ready(pins, signed_in):
    result = pins.upload_pin(_request())
    assert not result.success
    assert result.error_kind == ErrorKind.STORAGE_SETUP


def test_upload_refused_on_identity_mismatch(fake, pins, ready):
    fake.auth.server_user_id = "someone-else"
    result = pins.upload_pin(_request())
    assert not result.success
    assert result.error_kind == ErrorKind.AUTH
    assert "images" not in fake.storage.objects or not fake.storage.objects["images"]


def test_upload_validation_fails_before_network(fake, pins, ready):
    result = pins.upload_pin(_request(title=""))
    assert result.error_kind == ErrorKind.VALIDATION
    assert fake.storage.upload_options == []


def test_insert_failure_removes_uploaded_object(fake, pins, ready):
    fake.failures["images.insert"] = APIError(
        {"code": "42501", "message": "new row violates row-level security policy"}
    )

    result = pins.upload_pin(_request())

    assert not result.success
    assert result.error_kind == ErrorKind.UPLOAD
    assert result.error == "Permission denied. RLS policy prevents this operation."
    assert fake.storage.objects["images"] == {}
    assert len(fake.storage.removed) == 1


def test_insert_failure_with_failed_cleanup_still_reports_insert_error(fake, pins, ready):
    fake.failures["images.insert"] = Exception("insert exploded")
    fake.failures["storage.remove"] = Exception("remove exploded")

    result = pins.upload_pin(_request())

    assert not result.success
    assert "insert exploded" in result.error


def test_storage_write_failure_is_inline(fake, pins, ready):
    fake.failures["storage.upload"] = Exception("payload too large")
    result = pins.upload_pin(_request())
    assert result.error_kind == ErrorKind.UPLOAD
    assert fake.tables.get("images") == []


def test_missing_bucket_is_storage_setup_error(fake, pins, ready):
    fake.storage.buckets.clear()
    result = pins.upload_pin(_request())
    assert result.error_kind == ErrorKind.STORAGE_SETUP


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

def _owned_item(fake, user_id):
    row = fake.add_row("images", user_id=user_id, storage_path="old.jpg", title="Old")
    fake.storage.objects.setdefault("images", {})["old.jpg"] = b"jpeg"
    return build_feed_item(ImageRecord(**row), "https://x/old.jpg", None, None)


def test_delete_removes_row_and_object(fake, pins, signed_in):
    item = _owned_item(fake, signed_in)

    result = pins.delete_pin(item)

    assert result.success
    assert result.data == item.id
    assert fake.tables["images"] == []
    assert "old.jpg" not in fake.storage.objects["images"]


def test_delete_blocked_by_row_security_fails(fake, pins, signed_in):
    item = _owned_item(fake, signed_in)
    fake.rls_blocked_deletes.add("images")

    result = pins.delete_pin(item)

    assert not result.success
    assert result.error_kind == ErrorKind.DATABASE
    assert len(fake.tables["images"]) == 1


def test_delete_storage_failure_is_only_logged(fake, pins, signed_in):
    item = _owned_item(fake, signed_in)
    fake.failures["storage.remove"] = Exception("object store down")

    result = pins.delete_pin(item)

    assert result.success
    assert fake.tables["images"] == []


def test_delete_someone_elses_pin_is_refused(fake, pins, signed_in):
    item = _owned_item(fake, "another-user")
    result = pins.delete_pin(item)
    assert result.error_kind == ErrorKind.AUTH
    assert len(fake.tables["images"]) == 1


def test_delete_requires_session(fake, pins):
    item = _owned_item(fake, "user-1")
    result = pins.delete_pin(item)
    assert result.error_kind == ErrorKind.AUTH
