"""Combo Line model."""
from sqlalchemy import Column, Integer, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from stockpos.database import Base


class ComboLine(Base):
    """One (product, pounds per combo unit) pair of a combo's recipe."""

    __tablename__ = 'combo_line'
    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_combo_line_quantity_positive'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    combo_id = Column(Integer, ForeignKey('combo.id', ondelete='CASCADE'), nullable=False, index=True)
    # A product cannot be deleted while a combo references it
    product_id = Column(Integer, ForeignKey('product.id', ondelete='RESTRICT'), nullable=False, index=True)
    quantity = Column(Numeric(10, 2), nullable=False)

    # Relationships
    combo = relationship('Combo', back_populates='lines')
    product = relationship('Product', back_populates='combo_lines')

    def __repr__(self):
        return f"<ComboLine(combo_id={self.combo_id}, product_id={self.product_id}, qty={self.quantity})>"
