from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from harmony.core.database import Base, new_id, utcnow


class ConflictCoachSession(Base):
    """A guided conversation between housemates and the AI conflict coach."""
    __tablename__ = "conflict_coach_sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    household_id: Mapped[str] = mapped_column(String(64), index=True)
    participants: Mapped[list[str]] = mapped_column(JSON, default=list)
    topic: Mapped[str] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(20), default="active")  # active | completed | cancelled
    messages: Mapped[list[dict]] = mapped_column(JSON, default=list)  # [{"role", "content", "timestamp"}]
    suggestions: Mapped[list[str]] = mapped_column(JSON, default=list)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class ConflictAnalysis(Base):
    __tablename__ = "conflict_analyses"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    household_id: Mapped[str] = mapped_column(String(64), index=True)
    trigger_message_id: Mapped[str | None] = mapped_column(String(64))
    analysis: Mapped[dict] = mapped_column(JSON)  # sentiment, severity, topics, suggestions
    is_resolved: Mapped[bool] = mapped_column(Boolean, default=False)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
