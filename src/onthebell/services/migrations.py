"""One-time data migrations guarded by a persisted ledger.

Each migration runs at most once per database: the runner records the
migration name in ``migration_record`` in the same transaction as the data
changes, and skips names that are already recorded.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from onthebell.models import MigrationRecord, User
from onthebell.services.notifications import default_notification_preferences

logger = logging.getLogger(__name__)

MigrationFn = Callable[[Session], dict[str, Any]]

NOTIFICATION_PREFERENCES_MIGRATION = "notification-preferences-defaults"


def is_applied(db: Session, name: str) -> bool:
    return db.get(MigrationRecord, name) is not None


def run_once(db: Session, name: str, migration: MigrationFn) -> dict[str, Any] | None:
    """Apply ``migration`` unless the ledger already records ``name``.

    Returns:
        The migration's summary, or None if it had already been applied.
    """
    if is_applied(db, name):
        logger.debug("Migration %s already applied, skipping", name)
        return None

    logger.info("Applying migration %s", name)
    try:
        details = migration(db)
        db.add(MigrationRecord(name=name, details=details))
        db.commit()
    except IntegrityError:
        # Another runner recorded the same name first.
        db.rollback()
        logger.info("Migration %s was applied concurrently, skipping", name)
        return None
    except Exception:
        db.rollback()
        raise
    logger.info("Migration %s applied: %s", name, details)
    return details


def migrate_notification_preferences(db: Session) -> dict[str, Any]:
    """Give every user without notification preferences the defaults."""
    users = db.query(User).all()
    migrated = 0
    for user in users:
        if user.notification_preferences is None:
            user.notification_preferences = default_notification_preferences()
            migrated += 1
    return {"migrated_count": migrated, "total_checked": len(users)}


MIGRATIONS: dict[str, MigrationFn] = {
    NOTIFICATION_PREFERENCES_MIGRATION: migrate_notification_preferences,
}


def run_pending_migrations(db: Session) -> dict[str, dict[str, Any]]:
    """Run every registered migration not yet in the ledger."""
    applied: dict[str, dict[str, Any]] = {}
    for name, migration in MIGRATIONS.items():
        details = run_once(db, name, migration)
        if details is not None:
            applied[name] = details
    return applied
