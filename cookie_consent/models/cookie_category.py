from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from cookie_consent.database import Base


class CookieCategory(Base):
    """A group of cookies sharing one consent decision (e.g. "Marketing")."""

    __tablename__ = "cookie_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    is_mandatory = Column(Boolean, default=False, nullable=False)
    default_value = Column(Boolean, default=False, nullable=False)
    additional_info = Column(Text, nullable=True)
    # Catalog order
    position = Column(Integer, default=0, nullable=False)

    cookies = relationship("Cookie", back_populates="category", order_by="Cookie.id")


class Cookie(Base):
    __tablename__ = "cookies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(
        Integer,
        ForeignKey("cookie_categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    category = relationship("CookieCategory", back_populates="cookies")
