"""Client model — contact records referenced by budgets."""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from app.database import Base


class Client(Base):
    """Customer that receives budgets.

    Attributes:
        id: Primary key.
        name: Person or company name (required).
        email: Contact e-mail.
        phone: Contact phone number.
        address: Postal address.
        ruc: Tax identification number.
    """

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(300), nullable=False)
    email = Column(String(200), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    ruc = Column(String(20), nullable=True, index=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)
