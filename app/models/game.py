from datetime import datetime
from sqlalchemy import Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Game(Base):
    """One game (set, map, leg) of a best-of-N match."""
    __tablename__ = "games"
    __table_args__ = (
        UniqueConstraint("match_id", "game_number", name="uq_games_match_game_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("matches.id"), nullable=False, index=True
    )
    game_number: Mapped[int] = mapped_column(Integer, nullable=False)
    start_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    match: Mapped["Match"] = relationship("Match", back_populates="games")
    scores: Mapped[list["GameScore"]] = relationship(
        "GameScore", back_populates="game", cascade="all, delete-orphan"
    )
