"""SQLAlchemy table definitions."""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import JSON, Date, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class DomainRow(Base):
    """One confirmed drop candidate, keyed by domain name."""

    __tablename__ = "domains"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    domain_name: Mapped[str] = mapped_column(String(253), nullable=False, unique=True)
    tld: Mapped[str] = mapped_column(String(63), nullable=False)
    expiry_date: Mapped[date] = mapped_column(Date, nullable=False)
    drop_date: Mapped[date] = mapped_column(Date, nullable=False)
    days_until_drop: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    registrar: Mapped[str] = mapped_column(String(255), nullable=False)
    popularity_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    category: Mapped[str] = mapped_column(String(32), default="general", nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    score_metadata: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_domains_status_days", "status", "days_until_drop"),
        Index("ix_domains_popularity", "popularity_score"),
    )
