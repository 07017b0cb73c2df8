"""
Person model.

A person is the identity consent decisions attach to: either a signed-in
account or an anonymous browser recognised by its browser ID.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from cookie_consent.database import Base


class Person(Base):
    __tablename__ = "persons"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    # Not unique: concurrent first visits may create duplicates
    browser_id = Column(String(255), nullable=True, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    account = relationship("User", back_populates="persons")
    consent_decisions = relationship("ConsentDecision", back_populates="person")
