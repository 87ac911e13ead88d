"""Product model."""
from sqlalchemy import Column, Integer, String, Boolean, Numeric, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from stockpos.database import Base


class Product(Base):
    """Product sold by weight. Quantities are in pounds."""

    __tablename__ = 'product'
    __table_args__ = (
        CheckConstraint('quantity_on_hand >= 0', name='ck_product_quantity_non_negative'),
        CheckConstraint('unit_price >= 0', name='ck_product_unit_price_non_negative'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    quantity_on_hand = Column(Numeric(10, 2), nullable=False, default=0)
    unit_price = Column(Numeric(10, 2), nullable=False)  # Price per pound
    package_type = Column(String(50), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    # Deletion is left to the database, which restricts it while combos reference the product
    combo_lines = relationship('ComboLine', back_populates='product', passive_deletes='all')

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', on_hand={self.quantity_on_hand})>"
