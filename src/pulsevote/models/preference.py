"""SQLAlchemy models for topic tags and per-user tag selections."""

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from pulsevote.db.session import Base
from pulsevote.db.time import new_id


class Preference(Base):
    """Global catalog entry for a topic tag."""

    __tablename__ = "preferences"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    icon: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str | None] = mapped_column(Text, nullable=True)


class UserPreference(Base):
    """Join table recording which tags a user opted into."""

    __tablename__ = "user_preferences"
    __table_args__ = (
        UniqueConstraint("user_id", "preference_id", name="uq_user_preferences_pair"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    preference_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("preferences.id", ondelete="CASCADE"),
        nullable=False,
    )
