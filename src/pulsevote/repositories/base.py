"""Shared plumbing for the data store repositories."""
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

__all__ = ["DuplicateVoteError", "RecordNotFoundError", "Repository", "StoreError"]


class StoreError(RuntimeError):
    """Base exception raised when the data store rejects or fails a call."""


class RecordNotFoundError(StoreError):
    """Raised when a row addressed by id does not exist."""


class DuplicateVoteError(StoreError):
    """Raised when a vote would break the one-vote uniqueness rules."""


class Repository:
    """Thin wrapper around a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        """Translate driver failures into StoreError and roll the session back."""
        try:
            yield
        except StoreError:
            self.session.rollback()
            raise
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(f"{action} failed: {exc.__class__.__name__}") from exc
