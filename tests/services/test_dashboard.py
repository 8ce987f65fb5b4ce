# tests/services/test_dashboard.py
"""Tests for dashboard counters."""

import pytest

from onthebell.core.errors import AuthorizationError
from onthebell.services.dashboard import get_admin_stats
from onthebell.services.posts import moderate_post
from onthebell.services.reports import create_report, resolve_report


def test_counts(db_session, admin, test_user, test_post, make_user) -> None:
    make_user(is_verified=True)
    make_user(is_suspended=True)
    first = create_report(db_session, test_user, "post", test_post.id, "spam")
    create_report(db_session, test_user, "post", test_post.id, "scam")
    resolve_report(db_session, admin, first.id, "dismiss")
    moderate_post(db_session, admin, test_post.id, "hide")

    stats = get_admin_stats(db_session, admin)

    # admin, test_user, other_user and the two extra members
    assert stats.users == {"total": 5, "verified": 1, "suspended": 1}
    assert stats.posts == {"total": 1, "active": 0, "hidden": 1, "removed": 0}
    assert stats.reports == {"pending": 1, "resolved": 0, "dismissed": 1}


def test_moderator_cannot_view_analytics(db_session, moderator) -> None:
    with pytest.raises(AuthorizationError):
        get_admin_stats(db_session, moderator)
