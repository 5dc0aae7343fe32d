"""JOIN clause."""

from enum import Enum

from ._bases import Expression


class JoinType(str, Enum):
    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"


class Join(Expression):
    """``<kind> JOIN table ON local_key operator foreign_key``; both keys are column references."""

    table: str
    local_key: str
    operator: str = "="
    foreign_key: str
    kind: JoinType = JoinType.INNER

    @property
    def sql(self) -> str:
        return (
            f"{self.kind.value} JOIN {self.table} "
            f"ON {self.local_key} {self.operator.upper()} {self.foreign_key}"
        )
