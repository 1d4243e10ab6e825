"""Tests for stockpulse.database.store."""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy import text

from stockpulse.database import DataStore
from stockpulse.database.store import UNKNOWN_USER
from stockpulse.errors import DuplicateEmail, InternalError


def _user(store: DataStore, name: str = "Ann", email: str = "ann@x.com"):
    return store.create_user(name=name, email=email, password_hash="hash")


def test_create_and_lookup_user(store: DataStore) -> None:
    user = _user(store)
    uuid.UUID(user.id)
    assert store.get_user_by_id(user.id).email == "ann@x.com"
    assert store.get_user_by_email("ann@x.com").id == user.id
    assert store.get_user_by_id("missing") is None
    assert store.get_user_by_email("missing@x.com") is None


def test_ids_are_unique(store: DataStore) -> None:
    ids = {_user(store, email=f"u{i}@x.com").id for i in range(5)}
    assert len(ids) == 5


def test_duplicate_email_rejected_by_schema(store: DataStore) -> None:
    _user(store)
    with pytest.raises(DuplicateEmail):
        _user(store, name="Other")
    # the failed insert leaves the store usable
    assert store.get_user_by_email("ann@x.com").name == "Ann"


def test_set_watchlist_keeps_order(store: DataStore) -> None:
    user = _user(store)
    assert store.set_watchlist(user.id, ["TSLA", "AAPL", "MSFT"])
    assert store.get_user_by_id(user.id).watchlist == ["TSLA", "AAPL", "MSFT"]

    assert store.set_watchlist(user.id, ["AAPL"])
    assert store.get_user_by_id(user.id).watchlist == ["AAPL"]


def test_set_watchlist_unknown_user_is_noop(store: DataStore) -> None:
    assert store.set_watchlist("missing", ["AAPL"]) is False


def test_review_lifecycle(store: DataStore) -> None:
    user = _user(store)
    review = store.create_review(user.id, "AAPL", 5, "Great call, very accurate!")

    assert store.get_review_by_id(review.id) == review
    listed = store.list_reviews()
    assert [r.id for r in listed] == [review.id]
    assert listed[0].user_name == "Ann"

    store.delete_review(review.id)
    assert store.get_review_by_id(review.id) is None
    assert store.list_reviews() == []


def test_delete_missing_review_is_noop(store: DataStore) -> None:
    store.delete_review("missing")
    assert store.list_reviews() == []


def test_list_reviews_with_dangling_owner(store: DataStore) -> None:
    store.create_review("ghost-user", "MSFT", 3, "Owner no longer exists")
    [review] = store.list_reviews()
    assert review.user_name == UNKNOWN_USER


def test_list_reviews_newest_first(store: DataStore) -> None:
    user = _user(store)
    first = store.create_review(user.id, "AAPL", 4, "First review text")
    second = store.create_review(user.id, "MSFT", 2, "Second review text")
    assert [r.id for r in store.list_reviews()] == [second.id, first.id]


def test_list_reviews_by_user(store: DataStore) -> None:
    ann = _user(store)
    bob = _user(store, name="Bob", email="bob@x.com")
    mine = store.create_review(ann.id, "AAPL", 4, "Ann's review here")
    store.create_review(bob.id, "AAPL", 1, "Bob's review here")

    assert [r.id for r in store.list_reviews_by_user(ann.id)] == [mine.id]


def test_ping(store: DataStore) -> None:
    assert store.ping() is True


def test_storage_failure_becomes_internal_error(store: DataStore) -> None:
    with store.db_manager.engine.begin() as conn:
        conn.execute(text("DROP TABLE reviews"))

    with pytest.raises(InternalError) as excinfo:
        store.list_reviews()
    assert excinfo.value.status_code == 500
    assert excinfo.value.message == "Storage failure: OperationalError"
