"""Insert the default topic tags into the catalog."""
from __future__ import annotations

import argparse
import logging
import sys

from sqlalchemy.orm import Session

from pulsevote.core.settings import settings
from pulsevote.db.session import SessionLocal
from pulsevote.models import Preference
from pulsevote.repositories import PreferenceRepository, StoreError
from pulsevote.schemas.suggestion import SuggestionCategory

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCES = tuple(category.preference_name for category in SuggestionCategory)


def seed_preferences(db: Session, names: tuple[str, ...] = DEFAULT_PREFERENCES) -> list[Preference]:
    """Create any missing catalog entries and return the new rows."""
    created = PreferenceRepository(db).ensure_preferences(names)
    logger.info("Seeded %d preferences", len(created))
    return created


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the default topic tags")
    parser.parse_args()
    logging.basicConfig(level=settings.log_level.upper())

    db = SessionLocal()
    try:
        created = seed_preferences(db)
    except StoreError as exc:
        print(f"[seed_preferences] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()
    print(f"[seed_preferences] created {len(created)} preferences")


if __name__ == "__main__":
    main()
