"""Apply Alembic migrations up to head."""
from __future__ import annotations

import os

from alembic import command
from alembic.config import Config

from pulsevote.core.settings import settings

MIGRATIONS_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "..", "migrations")


def run_upgrade_head() -> None:
    cfg = Config(os.path.join(MIGRATIONS_DIR, "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", settings.database_url_sync)
    cfg.set_main_option("script_location", os.path.abspath(MIGRATIONS_DIR))
    command.upgrade(cfg, "head")


if __name__ == "__main__":
    run_upgrade_head()
