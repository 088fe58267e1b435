from datetime import datetime, date
from sqlalchemy import Integer, Date, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.utils.timestamps import utcnow


class Season(Base):
    """School year of competition.

    Several seasons may coexist; the current one is whichever range
    contains today.
    """
    __tablename__ = "seasons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    start_at: Mapped[date] = mapped_column(Date, nullable=False)
    end_at: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    stages: Mapped[list["CompetitionStage"]] = relationship(
        "CompetitionStage", back_populates="season"
    )

    @property
    def name(self) -> str:
        """Display name built from the two years, e.g. "2025-2026"."""
        return f"{self.start_at.year}-{self.end_at.year}"
