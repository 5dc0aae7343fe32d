"""SQL clause value objects.

Each clause has a ``.sql`` property (SQL fragment with ``?`` placeholders)
and ``.values`` (tuple of bound values in the same order). The compiler
assembles them into full statements without ever interpolating values.
"""

from ._bases import OPERATORS, Expression, normalize_operator
from .join import Join, JoinType
from .order import Order, normalize_direction
from .where import Connective, Where

__all__ = [
    "OPERATORS",
    "Connective",
    "Expression",
    "Join",
    "JoinType",
    "Order",
    "Where",
    "normalize_direction",
    "normalize_operator",
]
