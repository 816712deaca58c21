"""
Unit Tests for lock models and the Actor value
"""
from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta

import pytest

from app.models.record_lock import RecordLock
from app.models.user import User, UserRole
from app.modules.auth.actor import Actor


def make_lock(**overrides) -> RecordLock:
    now = datetime.utcnow()
    values = dict(
        record_id="rec-1",
        locked_by_user_id="user-1",
        locked_by_name="Dana Counselor",
        locked_by_role="counselor",
        locked_by_email="dana@example.com",
        locked_at=now,
        expires_at=now + timedelta(hours=24),
        is_active=True,
    )
    values.update(overrides)
    return RecordLock(**values)


class TestRecordLock:
    """Validity rules on a lock row"""

    def test_fresh_lock_is_valid(self):
        lock = make_lock()
        assert lock.is_expired() is False
        assert lock.is_valid() is True

    def test_past_expiry_is_invalid(self):
        lock = make_lock(expires_at=datetime.utcnow() - timedelta(seconds=1))
        assert lock.is_expired() is True
        assert lock.is_valid() is False

    def test_inactive_is_invalid(self):
        assert make_lock(is_active=False).is_valid() is False

    def test_validity_at_given_time(self):
        lock = make_lock()
        later = lock.expires_at + timedelta(minutes=1)
        assert lock.is_valid(now=later) is False

    def test_expires_exactly_at_expires_at(self):
        lock = make_lock()
        just_before = lock.expires_at - timedelta(microseconds=1)
        assert lock.is_valid(now=just_before) is True
        assert lock.is_valid(now=lock.expires_at) is False
        assert lock.is_expired(now=lock.expires_at) is True

    def test_is_held_by(self):
        lock = make_lock()
        assert lock.is_held_by("user-1") is True
        assert lock.is_held_by("user-2") is False

    def test_holder_snapshot(self):
        assert make_lock().holder == {
            "user_id": "user-1",
            "user_name": "Dana Counselor",
            "user_role": "counselor",
            "user_email": "dana@example.com",
        }


class TestActor:
    """Actor resolution from a user row"""

    def test_from_user(self):
        user = User(id="u-1", email="ada@example.com", full_name="Ada", role=UserRole.ADMIN)
        actor = Actor.from_user(user)

        assert actor == Actor("u-1", "Ada", "admin", "ada@example.com")
        assert actor.is_admin is True
        assert actor.is_counselor is False

    def test_name_falls_back_to_email(self):
        user = User(id="u-2", email="sam@example.com", full_name=None, role=UserRole.COUNSELOR)
        assert Actor.from_user(user).user_name == "sam@example.com"

    def test_actor_is_immutable(self):
        actor = Actor("u-3", "Sam", "counselor", "sam@example.com")
        with pytest.raises(FrozenInstanceError):
            actor.user_role = "admin"
