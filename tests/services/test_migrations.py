# tests/services/test_migrations.py
"""Tests for the one-time data migration ledger."""

import pytest

from onthebell.models import MigrationRecord, User
from onthebell.services.migrations import (
    NOTIFICATION_PREFERENCES_MIGRATION,
    is_applied,
    run_once,
    run_pending_migrations,
)
from onthebell.services.notifications import default_notification_preferences


def test_run_once_applies_only_once(db_session) -> None:
    calls = []

    def migration(db):
        calls.append(1)
        return {"touched": len(calls)}

    assert run_once(db_session, "demo", migration) == {"touched": 1}
    assert run_once(db_session, "demo", migration) is None
    assert calls == [1]
    assert is_applied(db_session, "demo")
    assert db_session.get(MigrationRecord, "demo").details == {"touched": 1}


def test_failed_migration_is_not_recorded(db_session, test_user) -> None:
    def migration(db):
        test_user.display_name = "changed"
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        run_once(db_session, "broken", migration)

    assert not is_applied(db_session, "broken")
    assert db_session.get(User, test_user.id).display_name == "Test User"


def test_notification_preferences_backfill(db_session, make_user) -> None:
    bare = make_user()
    custom = make_user(notification_preferences={"likes": False})

    applied = run_pending_migrations(db_session)

    assert applied[NOTIFICATION_PREFERENCES_MIGRATION] == {"migrated_count": 1, "total_checked": 2}
    assert bare.notification_preferences == default_notification_preferences()
    assert custom.notification_preferences == {"likes": False}
    assert run_pending_migrations(db_session) == {}


def test_schema_upgrade_uses_configured_url_unchanged(mocker) -> None:
    from onthebell.core.settings import settings
    from onthebell.scripts import migrate

    url = "postgresql+asyncpg://bell:secret@db/onthebell"
    mocker.patch.object(settings, "database_url", url)
    mocker.patch.object(settings, "use_testing_database", False)
    upgrade = mocker.patch.object(migrate.command, "upgrade")

    migrate.run_upgrade_head()

    cfg, revision = upgrade.call_args.args
    assert revision == "head"
    assert cfg.get_main_option("sqlalchemy.url") == url
    assert not hasattr(settings, "database_url_sync")
