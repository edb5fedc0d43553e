"""
Tests for the message, analytics and profile services.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from networking_coach.database import get_db_session
from networking_coach.message_templates import MessageData
from networking_coach.models import ActionType, MessageAnalytics, NetworkingMessage
from networking_coach.services import AnalyticsService, MessageService, ProfileService


@pytest.fixture
def alice(make_user):
    return make_user("alice@example.edu", full_name="Alice Student")


@pytest.fixture
def db(alice):
    session = get_db_session(alice.id)
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def service(db, alice):
    return MessageService(db, alice)


def _form(recipient="Sarah Johnson", message_type="linkedin", **overrides):
    fields = {
        "recipient_name": recipient,
        "company": "Microsoft",
        "recipient_title": "",
        "purpose": "",
        "message_type": message_type,
    }
    fields.update(overrides)
    return MessageData(**fields)


def _actions(db):
    return [e.action_type for e in db.query(MessageAnalytics).order_by(MessageAnalytics.created_at).all()]


STALE = datetime(2020, 1, 1)


def _naive(value):
    return value.replace(tzinfo=None)


class TestMessageService:
    """Tests for message history CRUD."""

    def test_create_records_generated(self, db, service, alice):
        """Saving a message stores it and logs a generated event."""
        message = service.create(_form(recipient_title="Engineer"), "  Hi Sarah!  ")

        assert message.user_id == alice.id
        assert message.generated_message == "Hi Sarah!"
        assert message.recipient_title == "Engineer"
        assert message.purpose is None
        assert message.is_favorite is False
        assert _actions(db) == ["generated"]

    @pytest.mark.parametrize("form,text", [
        (_form(message_type="fax"), "Hi"),
        (_form(recipient=""), "Hi"),
        (_form(), "   "),
    ])
    def test_create_rejects_invalid(self, service, form, text):
        with pytest.raises(ValueError):
            service.create(form, text)

    def test_get_all_newest_first(self, service):
        """History is listed by creation time, newest first."""
        older = service.create(_form("First"), "one")
        newer = service.create(_form("Second"), "two")
        older.created_at = datetime.now(timezone.utc) - timedelta(days=1)
        service.db.flush()

        messages = service.get_all()

        assert [m.id for m in messages] == [newer.id, older.id]
        assert service.get_count() == 2

    def test_filters(self, service):
        """Favorites and type filters narrow the list."""
        linkedin = service.create(_form("A"), "one")
        service.create(_form("B", message_type="informational"), "two")
        service.toggle_favorite(linkedin.id)

        assert [m.id for m in service.get_all(favorites_only=True)] == [linkedin.id]
        assert len(service.get_all(message_type="informational")) == 1
        assert len(service.get_all(limit=1)) == 1

    def test_toggle_favorite(self, db, service):
        """Toggling flips the flag each time and is tracked every time."""
        message = service.create(_form(), "Hi")

        assert service.toggle_favorite(message.id).is_favorite is True
        assert service.toggle_favorite(message.id).is_favorite is False
        assert _actions(db).count("favorited") == 2

    def test_copy_and_view_are_tracked(self, db, service):
        message = service.create(_form(), "Hi")

        assert service.mark_copied(message.id) is message
        assert service.view(message.id) is message
        assert sorted(_actions(db)) == ["copied", "generated", "viewed"]

    def test_update(self, service):
        """Only editable fields change."""
        message = service.create(_form(), "Hi")

        updated = service.update(message.id, generated_message="Hello there", user_id="someone-else")

        assert updated.generated_message == "Hello there"
        assert updated.user_id == service.user.id

    def test_update_refreshes_updated_at(self, db, service):
        message = service.create(_form(), "Hi")
        message.updated_at = STALE
        db.flush()

        service.update(message.id, purpose="Catching up")
        db.refresh(message)

        assert _naive(message.updated_at) > STALE

    def test_delete(self, db, service):
        """Deleting removes the message and its analytics."""
        message = service.create(_form(), "Hi")
        db.commit()

        assert service.delete(message.id) is True
        db.commit()

        assert service.get_by_id(message.id) is None
        assert db.query(MessageAnalytics).count() == 0
        assert service.delete(message.id) is False

    def test_missing_ids(self, service):
        """Unknown ids come back as None/False."""
        assert service.get_by_id("missing") is None
        assert service.toggle_favorite("missing") is None
        assert service.mark_copied("missing") is None
        assert service.update("missing", generated_message="x") is None
        assert service.delete("missing") is False

    def test_other_users_messages_are_invisible(self, service, make_user):
        """A message saved by someone else cannot be read or changed."""
        bob = make_user("bob@example.edu")
        bob_db = get_db_session(bob.id)
        try:
            theirs = MessageService(bob_db, bob).create(_form(), "Bob's message")
            bob_db.commit()
        finally:
            bob_db.close()

        assert service.get_by_id(theirs.id) is None
        assert service.toggle_favorite(theirs.id) is None
        assert service.delete(theirs.id) is False
        assert service.get_all() == []


class TestAnalyticsService:
    """Tests for usage statistics."""

    def test_stats(self, db, service, alice):
        first = service.create(_form("A"), "one")
        service.create(_form("B", message_type="mentor-request"), "two")
        service.toggle_favorite(first.id)
        service.mark_copied(first.id)

        stats = AnalyticsService(db, alice).get_stats()

        assert stats["actions"] == {"generated": 2, "copied": 1, "favorited": 1, "viewed": 0}
        assert stats["messages"] == 2
        assert stats["favorites"] == 1
        assert stats["by_type"] == {"linkedin": 1, "mentor-request": 1}

    def test_track_without_message(self, db, alice):
        """Events do not need a message."""
        event = AnalyticsService(db, alice).track(ActionType.VIEWED)

        assert event.message_id is None
        assert AnalyticsService(db, alice).recent() == [event]


class TestProfileService:

    def test_profile_created_with_account(self, db, alice):
        """Registration creates the profile from the account details."""
        profile = ProfileService(db, alice).get()

        assert profile.full_name == "Alice Student"
        assert profile.email == "alice@example.edu"

    def test_update(self, db, alice):
        service = ProfileService(db, alice)

        service.update(full_name="Alice S.")

        assert service.get().full_name == "Alice S."
        assert service.to_dict()["fullName"] == "Alice S."

    def test_update_refreshes_updated_at(self, db, alice):
        service = ProfileService(db, alice)
        profile = service.get()
        profile.updated_at = STALE
        db.flush()

        service.update(full_name="Alice S.")
        db.refresh(profile)

        assert _naive(profile.updated_at) > STALE


class TestCheckConstraints:
    """The database rejects unknown types even for the service role."""

    @pytest.fixture
    def admin(self):
        session = get_db_session()
        yield session
        session.rollback()
        session.close()

    def test_unknown_message_type(self, admin, alice):
        admin.add(NetworkingMessage(
            user_id=alice.id,
            message_type="fax",
            recipient_name="Sarah",
            company="Acme",
            generated_message="Hi",
        ))

        with pytest.raises(IntegrityError, match="ck_networking_messages_type|CHECK constraint"):
            admin.flush()

    def test_unknown_action_type(self, admin, alice):
        admin.add(MessageAnalytics(user_id=alice.id, action_type="deleted"))

        with pytest.raises(IntegrityError):
            admin.flush()
