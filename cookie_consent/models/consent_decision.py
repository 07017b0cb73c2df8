"""
ConsentDecision model for cookie consent capture.

Each row is one agree/decline decision by a person for one cookie category.
Rows are append-only: a later submission adds new rows and does not replace
earlier ones.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from cookie_consent.database import Base


class ConsentStatus(str, enum.Enum):
    """Outcome of a consent decision."""

    AGREED = "Agreed"
    DECLINED = "Declined"


class ConsentDecision(Base):
    __tablename__ = "consent_decisions"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(
        Integer,
        ForeignKey("cookie_categories.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    person_id = Column(
        Integer,
        ForeignKey("persons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Unset when the submitted value was neither "true" nor "false"
    status = Column(Enum(ConsentStatus), nullable=True)
    capture_source = Column(String(100), nullable=True)
    capture_channel = Column(String(50), nullable=True)
    captured_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    person = relationship("Person", back_populates="consent_decisions")
    category = relationship("CookieCategory")

    __table_args__ = (
        Index("idx_consent_person_category", "person_id", "category_id"),
        Index("idx_consent_person_status", "person_id", "status"),
    )
