# tests/test_scroll_lock.py
"""Reference-counted page scroll lock used by modals."""

from pinboard.ui.scroll_lock import ScrollLock


class RecordingTarget:
    def __init__(self):
        self.calls = []

    def set_scroll_enabled(self, enabled):
        self.calls.append(enabled)


def test_single_lease_locks_and_unlocks():
    target = RecordingTarget()
    lock = ScrollLock(target)

    lease = lock.acquire()
    assert lock.locked
    lease.release()

    assert not lock.locked
    assert target.calls == [False, True]


def test_stacked_leases_unlock_on_last_release():
    target = RecordingTarget()
    lock = ScrollLock(target)

    first, second = lock.acquire(), lock.acquire()
    first.release()
    assert lock.locked
    assert target.calls == [False]

    second.release()
    assert target.calls == [False, True]
    assert lock.holders == 0


def test_release_is_idempotent():
    lock = ScrollLock(RecordingTarget())
    other = lock.acquire()
    lease = lock.acquire()
    lease.release()
    lease.release()
    assert lease.released
    assert lock.holders == 1
    other.release()


def test_context_manager_releases():
    target = RecordingTarget()
    lock = ScrollLock(target)
    with lock.acquire():
        assert lock.locked
    assert not lock.locked
    assert target.calls == [False, True]


def test_works_without_target():
    lock = ScrollLock()
    lease = lock.acquire()
    assert lock.locked
    lease.release()
    assert not lock.locked


def test_attach_applies_current_state():
    lock = ScrollLock()
    lease = lock.acquire()

    target = RecordingTarget()
    lock.attach(target)
    assert target.calls == [False]

    lease.release()
    assert target.calls == [False, True]


def test_attach_while_locked_restores_previous_target():
    old, new = RecordingTarget(), RecordingTarget()
    lock = ScrollLock(old)
    lease = lock.acquire()

    lock.attach(new)

    assert old.calls == [False, True]
    assert new.calls == [False]
    lease.release()
    assert new.calls == [False, True]


def test_attach_unlocked_enables_target():
    target = RecordingTarget()
    ScrollLock().attach(target)
    assert target.calls == [True]
