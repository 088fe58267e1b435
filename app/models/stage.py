import enum
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.utils.timestamps import utcnow


class CompetitionStageKind(str, enum.Enum):
    """Phase of a competition. Declaration order is stage precedence."""
    group_stage = "group_stage"
    playins = "playins"
    playoffs = "playoffs"
    finals = "finals"

    @property
    def precedence(self) -> int:
        return STAGE_PRECEDENCE[self]


STAGE_PRECEDENCE = {kind: index for index, kind in enumerate(CompetitionStageKind)}

BRACKET_STAGE_KINDS = frozenset({CompetitionStageKind.playoffs, CompetitionStageKind.finals})


class CompetitionStage(Base):
    """One phase of a sport category's competition within a season."""
    __tablename__ = "competition_stages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    season_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("seasons.id"), nullable=False, index=True
    )
    sport_category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sport_categories.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    competition_stage: Mapped[CompetitionStageKind] = mapped_column(
        Enum(CompetitionStageKind), nullable=False
    )
    order_index: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    season: Mapped["Season"] = relationship("Season", back_populates="stages")
    sport_category: Mapped["SportCategory"] = relationship(
        "SportCategory", back_populates="stages"
    )
    matches: Mapped[list["Match"]] = relationship("Match", back_populates="stage")
