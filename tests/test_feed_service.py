# tests/test_feed_service.py
"""Feed, user-pins and single-pin loading against the in-memory backend."""

import pytest

from pinboard.config import AppConfig
from pinboard.models.enums import ErrorKind
from pinboard.models.feed import DEFAULT_USERNAME
from pinboard.services import create_services
from pinboard.services.feed_service import PIN_PAGE_USERNAME
from pinboard.utils.cancellation import CancellationToken
from tests.conftest import FAKE_URL


@pytest.fixture
def seeded(fake):
    fake.add_row("users", id="u1", username="ana")
    fake.add_row("users", id="u2", first_name="Bo", last_name="Chen")
    fake.add_row("profiles", user_id="u1", description="hi", avatar_url="https://a/ana.png")
    first = fake.add_row("images", user_id="u1", storage_path="1.jpg", title="Lake")
    second = fake.add_row("images", user_id="u2", storage_path="2.jpg", title="City")
    third = fake.add_row("images", user_id="u3", storage_path="3.jpg", title="Dune")
    return first, second, third


@pytest.fixture
def feed_service(services):
    return services["feed_service"]


def test_feed_is_newest_first_with_owner_data(seeded, feed_service):
    first, second, third = seeded

    result = feed_service.load_feed()

    assert result.success
    items = result.data
    assert [i.id for i in items] == [third["id"], second["id"], first["id"]]
    by_id = {i.id: i for i in items}
    assert by_id[first["id"]].username == "ana"
    assert by_id[first["id"]].profile_image == "https://a/ana.png"
    assert by_id[second["id"]].username == "Bo Chen"
    assert by_id[second["id"]].profile_image is None
    assert by_id[third["id"]].username == DEFAULT_USERNAME


def test_unresolvable_item_is_dropped(fake, db, session, logger, seeded):
    config = AppConfig(_env_file=None, SUPABASE_URL="", RESOLVE_TIMEOUT_S=2.0)
    service = create_services(db, config, session, with_image_loader=False)["feed_service"]
    fake.storage.broken_paths.add("2.jpg")

    result = service.load_feed()

    assert result.success
    assert [i.title for i in result.data] == ["Dune", "Lake"]


def test_owner_lookup_failure_degrades_to_defaults(fake, seeded, feed_service):
    fake.failures["users.select"] = Exception("users table down")
    fake.failures["profiles.select"] = Exception("profiles table down")

    result = feed_service.load_feed()

    assert result.success
    assert len(result.data) == 3
    assert {i.username for i in result.data} == {DEFAULT_USERNAME}
    assert all(i.profile_image is None for i in result.data)


def _feed_service_with(db, session, **timeouts):
    config = AppConfig(
        _env_file=None, SUPABASE_URL=FAKE_URL, SUPABASE_ANON_KEY="anon-key", **timeouts,
    )
    return create_services(db, config, session, with_image_loader=False)["feed_service"]


def test_owner_lookup_timeout_degrades_to_defaults(fake, db, session, seeded):
    fake.delays["users.select"] = 1.0
    fake.delays["profiles.select"] = 1.0
    service = _feed_service_with(db, session, FETCH_TIMEOUT_S=0.2, RESOLVE_TIMEOUT_S=2.0)

    result = service.load_feed()

    assert result.success
    assert [i.title for i in result.data] == ["Dune", "City", "Lake"]
    assert {i.username for i in result.data} == {DEFAULT_USERNAME}
    assert all(i.profile_image is None for i in result.data)


def test_resolve_timeout_is_per_call_not_per_batch(fake, db, session):
    for n in range(40):
        fake.add_row("images", user_id="u1", storage_path=f"{n}.jpg", title=f"Pin {n}")
    fake.storage.url_delay = 0.3
    service = _feed_service_with(db, session, FETCH_TIMEOUT_S=2.0, RESOLVE_TIMEOUT_S=1.0)

    result = service.load_feed()

    assert result.success
    assert len(result.data) == 40


def test_slow_resolution_drops_only_that_pin(fake, db, session, seeded):
    fake.storage.url_delays["2.jpg"] = 1.5
    service = _feed_service_with(db, session, FETCH_TIMEOUT_S=2.0, RESOLVE_TIMEOUT_S=0.3)

    result = service.load_feed()

    assert result.success
    assert [i.title for i in result.data] == ["Dune", "Lake"]


def test_image_fetch_failure_is_reported(fake, feed_service):
    fake.failures["images.select"] = Exception("connection reset")

    result = feed_service.load_feed()

    assert not result.success
    assert result.error_kind == ErrorKind.DATABASE


def test_empty_feed(feed_service):
    result = feed_service.load_feed()
    assert result.success
    assert result.data == []


def test_cancelled_token_discards_result(seeded, feed_service):
    token = CancellationToken("feed")
    token.cancel()

    result = feed_service.load_feed(token)

    assert not result.success
    assert result.error_kind == ErrorKind.CANCELLED


def test_user_pins_only_lists_owner(seeded, feed_service):
    first, _, _ = seeded
    result = feed_service.load_user_pins("u1")
    assert result.success
    assert [i.id for i in result.data] == [first["id"]]


def test_load_pin_found(seeded, feed_service):
    first, _, _ = seeded
    result = feed_service.load_pin(first["id"])
    assert result.success
    assert result.data.id == first["id"]
    assert result.data.username == "ana"


def test_load_pin_without_owner_row_uses_pin_page_default(seeded, feed_service):
    _, _, third = seeded
    result = feed_service.load_pin(third["id"])
    assert result.data.username == PIN_PAGE_USERNAME


def test_load_pin_missing_is_ok_none(feed_service):
    result = feed_service.load_pin("does-not-exist")
    assert result.success
    assert result.data is None


def test_load_pin_backend_failure(fake, feed_service):
    fake.failures["images.select"] = Exception("timeout")
    result = feed_service.load_pin("1")
    assert not result.success
    assert result.error_kind == ErrorKind.DATABASE
