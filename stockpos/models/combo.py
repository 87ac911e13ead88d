"""Combo model."""
from sqlalchemy import Column, Integer, String, Boolean, Numeric, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from stockpos.database import Base


class Combo(Base):
    """Fixed-price bundle of products in fixed proportions."""

    __tablename__ = 'combo'
    __table_args__ = (
        CheckConstraint('price >= 0', name='ck_combo_price_non_negative'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False, default='')
    price = Column(Numeric(10, 2), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    lines = relationship('ComboLine', back_populates='combo', cascade='all, delete-orphan')

    def __repr__(self):
        return f"<Combo(id={self.id}, name='{self.name}', price={self.price})>"
