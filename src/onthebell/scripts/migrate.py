# src/onthebell/scripts/migrate.py
"""Bring the database schema and one-time data migrations up to date."""

from __future__ import annotations

import argparse
import logging
import os

from alembic import command
from alembic.config import Config

from onthebell.core.settings import settings
from onthebell.db.session import SessionLocal
from onthebell.services.migrations import run_pending_migrations

logger = logging.getLogger(__name__)

PROJECT_ROOT = os.path.join(os.path.dirname(__file__), "..", "..", "..")


def run_upgrade_head() -> None:
    cfg = Config(os.path.join(PROJECT_ROOT, "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", settings.effective_database_url)
    cfg.set_main_option("script_location", os.path.abspath(os.path.join(PROJECT_ROOT, "migrations")))
    command.upgrade(cfg, "head")


def run_data_migrations() -> dict[str, dict]:
    db = SessionLocal()
    try:
        return run_pending_migrations(db)
    finally:
        db.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Apply schema and data migrations")
    parser.add_argument(
        "--data-only",
        action="store_true",
        help="Skip Alembic and only run the recorded one-time data migrations.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper())
    if not args.data_only:
        run_upgrade_head()
    applied = run_data_migrations()
    if applied:
        for name, details in applied.items():
            logger.info("Applied %s: %s", name, details)
    else:
        logger.info("No pending data migrations")


if __name__ == "__main__":
    main()
