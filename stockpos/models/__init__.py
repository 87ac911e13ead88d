"""Models package - exports all SQLAlchemy models."""
from stockpos.models.product import Product
from stockpos.models.combo import Combo
from stockpos.models.combo_line import ComboLine
from stockpos.models.sale import Sale, SaleType
from stockpos.models.sale_line import SaleLine, LineType

__all__ = [
    'Product', 'Combo', 'ComboLine',
    'Sale', 'SaleType', 'SaleLine', 'LineType',
]
