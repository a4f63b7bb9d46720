"""Report model for anonymously submitted observations."""

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from defrost.database import Base


class Report(Base):
    """
    An anonymous report of activity at a location.

    Rows are created once and never edited; the feed source reads the most
    recent ones as a snapshot.
    """

    __tablename__ = "reports"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Classification
    category: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # Location
    location_label: Mapped[str] = mapped_column(String(255), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    narrative: Mapped[str] = mapped_column(Text, nullable=False)
    media_ref: Mapped[str | None] = mapped_column(String(512))

    __table_args__ = (
        # Feed snapshot and cursor pagination index
        Index("idx_reports_cursor", created_at.desc(), id.desc()),
    )

    def __repr__(self) -> str:
        return f"<Report {self.id}: {self.category} at {self.location_label}>"
