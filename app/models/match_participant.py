from sqlalchemy import Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class MatchParticipant(Base):
    __tablename__ = "match_participants"
    __table_args__ = (
        UniqueConstraint("match_id", "team_id", name="uq_match_participants_match_team"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("matches.id"), nullable=False, index=True
    )
    team_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("school_teams.id"), nullable=False, index=True
    )
    # Cumulative score shown next to the team; game scores decide best-of matches
    match_score: Mapped[int | None] = mapped_column(Integer)

    match: Mapped["Match"] = relationship("Match", back_populates="participants")
    team: Mapped["SchoolTeam"] = relationship("SchoolTeam")
    game_scores: Mapped[list["GameScore"]] = relationship(
        "GameScore", back_populates="match_participant"
    )
