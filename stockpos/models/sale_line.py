"""Sale Line model."""
from sqlalchemy import Column, Integer, Numeric, ForeignKey, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from stockpos.database import Base
import enum


class LineType(str, enum.Enum):
    """What a sale line references."""
    PRODUCT = 'PRODUCT'
    COMBO = 'COMBO'


class SaleLine(Base):
    """Sale Line: one product or one combo, with price snapshot and subtotal."""

    __tablename__ = 'sale_line'
    __table_args__ = (
        # Exactly one reference is set, and it matches the line type
        CheckConstraint(
            "(line_type = 'PRODUCT' AND product_id IS NOT NULL AND combo_id IS NULL) OR "
            "(line_type = 'COMBO' AND combo_id IS NOT NULL AND product_id IS NULL)",
            name='ck_sale_line_single_reference',
        ),
        CheckConstraint('quantity > 0', name='ck_sale_line_quantity_positive'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    sale_id = Column(Integer, ForeignKey('sale.id', ondelete='CASCADE'), nullable=False, index=True)
    line_type = Column(Enum(LineType, name='sale_line_type'), nullable=False)
    product_id = Column(Integer, ForeignKey('product.id', ondelete='RESTRICT'), nullable=True)
    combo_id = Column(Integer, ForeignKey('combo.id', ondelete='RESTRICT'), nullable=True)
    quantity = Column(Numeric(10, 2), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)

    # Relationships
    sale = relationship('Sale', back_populates='lines')
    product = relationship('Product')
    combo = relationship('Combo')

    @property
    def item_id(self):
        """Id of whichever item the line references."""
        return self.product_id if self.line_type == LineType.PRODUCT else self.combo_id

    def __repr__(self):
        return f"<SaleLine(id={self.id}, type={self.line_type.value}, item={self.item_id}, qty={self.quantity})>"
