"""Sale model."""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from stockpos.database import Base
import enum


class SaleType(str, enum.Enum):
    """Sale type."""
    INDIVIDUAL = 'INDIVIDUAL'
    BULK = 'BULK'


class Sale(Base):
    """Sale (created once, immutable afterwards)."""

    __tablename__ = 'sale'

    id = Column(Integer, primary_key=True, autoincrement=True)
    client = Column(String(100), nullable=False)
    notes = Column(String(500), nullable=True)
    sale_type = Column(Enum(SaleType, name='sale_type'), nullable=False, default=SaleType.INDIVIDUAL)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    total = Column(Numeric(12, 2), nullable=False, default=0)

    # Relationships
    lines = relationship(
        'SaleLine',
        back_populates='sale',
        cascade='all, delete-orphan',
        order_by='SaleLine.id',
    )

    def __repr__(self):
        return f"<Sale(id={self.id}, client='{self.client}', total={self.total})>"
