"""User model — API account that can obtain bearer tokens."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from app.database import Base


class User(Base):
    """Authenticated principal of the quoting API.

    Attributes:
        id: Primary key, stored as the JWT ``sub`` claim.
        email: Unique login e-mail.
        password_hash: Bcrypt hash (never the plain password).
        name: Display name.
        active: Inactive users cannot log in nor use existing tokens.
        created_at: Record creation timestamp.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(200), unique=True, nullable=False, index=True)
    password_hash = Column(String(200), nullable=False)
    name = Column(String(200), nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)
