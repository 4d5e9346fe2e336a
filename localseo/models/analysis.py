"""Saved Local SEO analyses and the per-directory citation rows behind them."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from localseo.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BusinessAnalysis(Base):
    """One full report run for a business, with the raw report as JSON."""

    __tablename__ = "business_analyses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    business_name: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    website_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    full_address: Mapped[str] = mapped_column(String(500), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    overall_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    report_json: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, index=True
    )

    citations: Mapped[list["CitationRecord"]] = relationship(
        back_populates="analysis", cascade="all, delete-orphan", lazy="selectin"
    )

    def __repr__(self) -> str:
        return (
            f"<BusinessAnalysis id={self.id} name={self.business_name!r} "
            f"score={self.overall_score}>"
        )


class CitationRecord(Base):
    """Outcome of one directory lookup within an analysis."""

    __tablename__ = "citation_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    analysis_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("business_analyses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    directory_name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="not_found", nullable=False)
    url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    nap_match: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    nap_confidence: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    analysis: Mapped["BusinessAnalysis"] = relationship(back_populates="citations")

    def __repr__(self) -> str:
        return (
            f"<CitationRecord id={self.id} dir={self.directory_name!r} "
            f"status={self.status!r} nap={self.nap_match}>"
        )
