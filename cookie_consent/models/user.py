from sqlalchemy import Column, Enum, Integer, String
from sqlalchemy.orm import relationship

from cookie_consent.constants.user_types import UserType
from cookie_consent.database import Base


# Account model (owned by the identity provider, read-only here)
class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, index=True)
    email = Column(String, unique=True, nullable=False)
    user_type = Column(Enum(UserType), default=UserType.STANDARD, nullable=False)

    persons = relationship("Person", back_populates="account")
