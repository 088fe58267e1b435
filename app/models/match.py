import enum
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, Index, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from app.database import Base
from app.services.errors import InvalidBestOf
from app.utils.timestamps import utcnow


class MatchStatus(str, enum.Enum):
    """Match lifecycle."""
    scheduled = "scheduled"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"
    postponed = "postponed"


# Administrator-set statuses the outcome resolver never overrides
LOCKED_STATUSES = frozenset({MatchStatus.cancelled, MatchStatus.postponed})


class Match(Base):
    __tablename__ = "matches"
    __table_args__ = (
        Index("ix_matches_scheduled_at_id", "scheduled_at", "id"),
        Index("ix_matches_stage_round_position", "stage_id", "round", "position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    stage_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("competition_stages.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    venue: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    scheduled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    start_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    best_of: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    status: Mapped[MatchStatus] = mapped_column(
        Enum(MatchStatus), nullable=False, default=MatchStatus.scheduled, server_default="scheduled"
    )

    # Parallel groups inside one group stage ("A", "B", ...)
    group_name: Mapped[str | None] = mapped_column(String(50))

    # Bracket placement (playoffs/finals/playins)
    round: Mapped[int | None] = mapped_column(Integer)
    position: Mapped[int | None] = mapped_column(Integer)
    advances_to_match_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("matches.id"), index=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    stage: Mapped["CompetitionStage"] = relationship("CompetitionStage", back_populates="matches")
    participants: Mapped[list["MatchParticipant"]] = relationship(
        "MatchParticipant",
        back_populates="match",
        cascade="all, delete-orphan",
        order_by="MatchParticipant.id",
    )
    games: Mapped[list["Game"]] = relationship(
        "Game",
        back_populates="match",
        cascade="all, delete-orphan",
        order_by="Game.game_number",
    )

    @validates("best_of")
    def _validate_best_of(self, key, value):
        if value is None or value <= 0 or value % 2 == 0:
            raise InvalidBestOf(f"best_of must be an odd positive integer, got {value!r}")
        return value

    @property
    def games_to_win(self) -> int:
        return (self.best_of + 1) // 2
