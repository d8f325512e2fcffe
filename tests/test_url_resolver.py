# tests/test_url_resolver.py
"""Public URL resolution with the manual fallback."""

import pytest

from pinboard.config import AppConfig
from pinboard.errors import ResolutionError
from pinboard.services.url_resolver import UrlResolver
from tests.conftest import FAKE_URL


@pytest.fixture
def resolver(services):
    return services["url_resolver"]


def test_resolves_through_storage_sdk(resolver):
    assert resolver.resolve("a.jpg") == f"{FAKE_URL}/storage/v1/object/public/images/a.jpg"


def test_empty_path_resolves_to_none(resolver):
    assert resolver.resolve("") is None
    assert resolver.resolve(None) is None


def test_blank_sdk_url_uses_fallback(fake, resolver):
    fake.storage.blank_public_urls = True
    assert resolver.resolve("/b.png") == f"{FAKE_URL}/storage/v1/object/public/images/b.png"


def test_sdk_error_uses_fallback(fake, resolver):
    fake.storage.broken_paths.add("c.png")
    assert resolver.resolve("c.png") == f"{FAKE_URL}/storage/v1/object/public/images/c.png"


def test_fallback_prefers_explicit_public_base(db, logger):
    config = AppConfig(
        _env_file=None,
        SUPABASE_URL=FAKE_URL,
        STORAGE_PUBLIC_BASE_URL="https://cdn.example/",
    )
    resolver = UrlResolver(db=db, config=config, logger=logger)
    assert resolver.build_fallback("d.jpg") == (
        "https://cdn.example/storage/v1/object/public/images/d.jpg"
    )


def test_no_base_and_broken_sdk_yields_none(fake, db, logger):
    config = AppConfig(_env_file=None, SUPABASE_URL="")
    resolver = UrlResolver(db=db, config=config, logger=logger)
    fake.storage.broken_paths.add("e.jpg")

    assert resolver.resolve("e.jpg") is None
    with pytest.raises(ResolutionError):
        resolver.require("e.jpg")


def test_avatar_full_url_passes_through(resolver):
    assert resolver.resolve_avatar("https://images.example/me.png") == "https://images.example/me.png"


def test_avatar_bare_key_resolved_in_avatar_folder(resolver):
    expected = f"{FAKE_URL}/storage/v1/object/public/images/avatars/u1.png"
    assert resolver.resolve_avatar("u1.png") == expected
    assert resolver.resolve_avatar("avatars/u1.png") == expected


def test_blank_avatar_is_none(resolver):
    assert resolver.resolve_avatar("   ") is None
    assert resolver.resolve_avatar(None) is None
