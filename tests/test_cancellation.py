# tests/test_cancellation.py
"""Cancellation tokens handed out per view load."""

import pytest

from pinboard.utils.cancellation import CancellationToken, OperationCancelled, TokenSource


def test_token_starts_live_and_cancels_once():
    token = CancellationToken("feed")
    assert not token.cancelled
    token.raise_if_cancelled()
    token.cancel()
    token.cancel()
    assert token.cancelled


def test_cancelled_token_raises_with_label():
    token = CancellationToken("profile")
    token.cancel()
    with pytest.raises(OperationCancelled, match="profile"):
        token.raise_if_cancelled()


def test_next_token_supersedes_previous():
    source = TokenSource("feed")
    first = source.next()
    second = source.next()
    assert first.cancelled
    assert not second.cancelled


def test_source_cancel_stops_current_token():
    source = TokenSource()
    token = source.next()
    source.cancel()
    assert token.cancelled
    assert not source.next().cancelled
