from datetime import datetime, timezone

import pytest

from models import Listing
from queries import build_listing_query, featured_listing_query, is_truthy


def _add(session, name, status="Available", quantity=1, expire_day=1):
    listing = Listing(
        food_name=name,
        food_quantity=quantity,
        status=status,
        expire_date=datetime(2026, 11, expire_day, tzinfo=timezone.utc),
        donor_email="a@x.com",
    )
    session.add(listing)
    return listing


@pytest.mark.parametrize(
    "flag,expected",
    [
        (None, False),
        ("", False),
        ("false", False),
        ("0", False),
        ("No", False),
        ("true", True),
        ("1", True),
        ("yes", True),
    ],
)
def test_is_truthy(flag, expected):
    assert is_truthy(flag) is expected


def test_available_filter_and_ascending_expiry(db_session):
    _add(db_session, "Late", expire_day=20)
    _add(db_session, "Early", expire_day=2)
    _add(db_session, "Taken", status="Requested", expire_day=1)
    db_session.commit()

    rows = db_session.exec(build_listing_query(available="true", sort="asc")).all()

    assert [row.food_name for row in rows] == ["Early", "Late"]


def test_descending_expiry(db_session):
    _add(db_session, "Early", expire_day=2)
    _add(db_session, "Late", expire_day=20)
    db_session.commit()

    rows = db_session.exec(build_listing_query(sort="dsc")).all()

    assert [row.food_name for row in rows] == ["Late", "Early"]


def test_search_is_case_insensitive_substring(db_session):
    _add(db_session, "Sourdough Bread")
    _add(db_session, "Apples")
    db_session.commit()

    rows = db_session.exec(build_listing_query(search="BREAD")).all()

    assert [row.food_name for row in rows] == ["Sourdough Bread"]


def test_search_treats_wildcards_literally(db_session):
    _add(db_session, "100% juice")
    _add(db_session, "Milk")
    db_session.commit()

    assert len(db_session.exec(build_listing_query(search="%")).all()) == 1
    assert db_session.exec(build_listing_query(search="_")).all() == []


def test_unknown_sort_adds_no_ordering():
    query = build_listing_query(sort="sideways")

    assert not query._order_by_clauses


def test_featured_is_top_six_available_by_quantity(db_session):
    for quantity in range(1, 9):
        _add(db_session, f"Item {quantity}", quantity=quantity)
    _add(db_session, "Huge but taken", status="Requested", quantity=100)
    db_session.commit()

    rows = db_session.exec(featured_listing_query()).all()

    assert [row.food_quantity for row in rows] == [8, 7, 6, 5, 4, 3]
