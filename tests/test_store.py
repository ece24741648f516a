"""
Tests for the entity store.
"""

import pytest
from sqlalchemy.exc import DataError
from sqlalchemy.orm import Session

from jobboard.db import make_engine
from jobboard.errors import NotFound, ServiceUnavailable, ValidationError
from jobboard.models import Job, User
from jobboard.store import MAX_ID, EntityStore, valid_id


class TestDocuments:
    def test_create_and_get(self, store, make_user):
        user = make_user("Ann")

        loaded = store.get(User, user.id)
        assert loaded.email == "ann@example.com"
        assert loaded.posted_jobs == []

    def test_get_missing_raises(self, store):
        with pytest.raises(NotFound, match="Job not found"):
            store.get(Job, 12345)

    def test_duplicate_email_is_validation_error(self, store, make_user):
        make_user("Ann", email="a@x.com")
        with pytest.raises(ValidationError) as exc:
            make_user("Other", email="a@x.com")
        assert "email" in exc.value.errors
        assert store.count(User) == 1

    def test_update_merges_fields(self, store, make_user):
        user = make_user("Ann")
        updated = store.update(User, user.id, {"mobile": "555"})
        assert updated.mobile == "555"
        assert updated.name == "Ann"

    def test_update_missing_raises(self, store):
        with pytest.raises(NotFound):
            store.update(User, 999, {"name": "x"})

    def test_delete(self, store, make_user):
        user = make_user("Ann")
        store.delete(User, user.id)
        assert store.find_by_id(User, user.id) is None
        with pytest.raises(NotFound):
            store.delete(User, user.id)

    def test_find_and_find_many(self, store, make_user):
        a, b = make_user("Ann"), make_user("Bob")

        assert [u.id for u in store.find(User, User.name == "Bob")] == [b.id]
        assert set(store.find_many(User, [a.id, b.id, 999])) == {a.id, b.id}
        assert store.find_many(User, []) == {}

    def test_out_of_range_ids_are_missing(self, store, make_user):
        user = make_user("Ann")

        assert store.find_by_id(User, 10**30) is None
        assert store.find_by_id(User, -1) is None
        with pytest.raises(NotFound):
            store.update(User, MAX_ID + 1, {"name": "x"})
        assert set(store.find_many(User, [user.id, 10**30])) == {user.id}
        assert store.add_ref(User, 10**30, "posted_jobs", 1) is False

    def test_valid_id(self):
        assert valid_id(1) and valid_id(MAX_ID)
        assert not valid_id(0)
        assert not valid_id(True)
        assert not valid_id("1")
        assert not valid_id(MAX_ID + 1)

    def test_value_rejected_by_database_is_validation_error(self, store, make_user, monkeypatch):
        user = make_user("Ann")

        def _too_long(self):
            raise DataError("UPDATE users ...", {}, Exception("value too long for type character varying(40)"))

        monkeypatch.setattr(Session, "commit", _too_long)

        with pytest.raises(ValidationError) as exc:
            store.update(User, user.id, {"mobile": "5" * 41})
        assert "body" in exc.value.errors


class TestIdLists:
    def test_add_ref_is_idempotent(self, store, make_user):
        user = make_user("Ann")

        assert store.add_ref(User, user.id, "posted_jobs", 7) is True
        assert store.add_ref(User, user.id, "posted_jobs", 8) is True
        assert store.add_ref(User, user.id, "posted_jobs", 7) is True

        assert store.get(User, user.id).posted_jobs == [7, 8]

    def test_remove_ref(self, store, make_user):
        user = make_user("Ann")
        store.add_ref(User, user.id, "applications", 1)
        store.add_ref(User, user.id, "applications", 2)

        store.remove_ref(User, user.id, "applications", 1)
        store.remove_ref(User, user.id, "applications", 42)

        assert store.get(User, user.id).applications == [2]

    def test_missing_parent_is_skipped(self, store):
        assert store.add_ref(User, 999, "posted_jobs", 1) is False
        assert store.remove_ref(User, 999, "posted_jobs", 1) is False


class TestUnavailable:
    def test_unreachable_store_maps_to_service_unavailable(self, tmp_path):
        broken = EntityStore(make_engine(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'x.db'}", timeout=0.1))

        with pytest.raises(ServiceUnavailable):
            broken.count(User)
