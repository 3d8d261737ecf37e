"""
SQLAlchemy ORM models for the QR Inventory service.

Defines the database schema for the inventory table.
"""
from sqlalchemy import Column, Integer, String, Text
from .database import Base


class InventoryItem(Base):
    """
    Inventory item identified externally by its QR code.

    Attributes:
        id (int): Primary key, auto-incremented
        name (str): Display name
        quantity (int): Units in stock
        code (str): Unique QR code, stored in the ``qr_code`` column
        description (str): Optional free text
        image_reference (str): Optional image URL or data URI, stored in ``image_url``
    """
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    code = Column("qr_code", String(255), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    image_reference = Column("image_url", Text, nullable=True)
