from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import JSON, Date, DateTime, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from harmony.core.database import Base, new_id, utcnow


class Bill(Base):
    """A shared household bill (utilities etc.) split between members."""
    __tablename__ = "bills"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    household_id: Mapped[str] = mapped_column(String(64), index=True)
    name: Mapped[str] = mapped_column(String(255))
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    due_date: Mapped[date] = mapped_column(Date, index=True)
    paid_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), default="pending")  # pending | paid | overdue
    category: Mapped[str] = mapped_column(String(30), default="other")
    paid_by: Mapped[str | None] = mapped_column(String(128))
    split_between: Mapped[list[str]] = mapped_column(JSON, default=list)
    receipt_url: Mapped[str | None] = mapped_column(String(1000))
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )
