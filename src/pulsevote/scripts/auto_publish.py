"""
Cron job that publishes a fresh batch of generated surveys.

Run periodically to:
1. Pick an admin account as the author
2. Ask the generator for five global drafts
3. Publish each draft, skipping any that fail
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from sqlalchemy.orm import Session

from pulsevote.core.settings import settings
from pulsevote.db.session import SessionLocal
from pulsevote.models import AppRole
from pulsevote.repositories import (
    PreferenceRepository,
    ProfileRepository,
    StoreError,
    SurveyRepository,
)
from pulsevote.services.suggestions import SuggestionBridge, SuggestionError
from pulsevote.services.surveys import publish_suggestion

logger = logging.getLogger(__name__)


class NoAdminError(RuntimeError):
    """Raised when no admin account exists to author the surveys."""


async def auto_publish(db: Session, bridge: SuggestionBridge) -> list[str]:
    """Generate and publish global surveys.

    Returns:
        Ids of the surveys that were published.

    Raises:
        NoAdminError: If no profile holds the admin role.
        SuggestionError: If the generator call fails.
    """
    author_id = ProfileRepository(db).first_with_role(AppRole.ADMIN)
    if author_id is None:
        raise NoAdminError("No admin user found to publish surveys")
    logger.info("Starting auto-publish as %s", author_id)

    suggestions = await bridge.generate_suggestions(region=None)

    surveys = SurveyRepository(db)
    preferences = PreferenceRepository(db)
    published: list[str] = []
    for suggestion in suggestions:
        try:
            survey = publish_suggestion(
                surveys, preferences, author_id=author_id, suggestion=suggestion
            )
        except (StoreError, ValueError):
            logger.exception("Error publishing suggestion %r", suggestion.title)
            continue
        published.append(survey.id)

    logger.info("Published %d of %d surveys", len(published), len(suggestions))
    return published


async def _run() -> list[str]:
    bridge = SuggestionBridge()
    db = SessionLocal()
    try:
        return await auto_publish(db, bridge)
    finally:
        db.close()
        await bridge.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate and publish a batch of surveys")
    parser.parse_args()
    logging.basicConfig(level=settings.log_level.upper())

    try:
        survey_ids = asyncio.run(_run())
    except (NoAdminError, SuggestionError) as exc:
        print(f"[auto_publish] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"[auto_publish] published {len(survey_ids)} surveys")


if __name__ == "__main__":
    main()
