from sqlalchemy import Integer, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from app.database import Base
from app.services.errors import NegativeScore


class GameScore(Base):
    __tablename__ = "game_scores"
    __table_args__ = (
        UniqueConstraint("game_id", "match_participant_id", name="uq_game_scores_game_participant"),
        CheckConstraint("score >= 0", name="ck_game_scores_score_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    game_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("games.id"), nullable=False, index=True
    )
    match_participant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("match_participants.id"), nullable=False, index=True
    )
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    game: Mapped["Game"] = relationship("Game", back_populates="scores")
    match_participant: Mapped["MatchParticipant"] = relationship(
        "MatchParticipant", back_populates="game_scores"
    )

    @validates("score")
    def _validate_score(self, key, value):
        if value is None or value < 0:
            raise NegativeScore(f"score must be non-negative, got {value!r}")
        return value
