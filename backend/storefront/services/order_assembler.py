from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Tuple

from storefront.errors import InvalidArgument

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class OrderLine:
    product_id: int
    sku: str
    name: Optional[str]
    quantity: int
    price: Decimal

    @property
    def line_total(self) -> Decimal:
        return (self.price * self.quantity).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class AssembledOrder:
    lines: Tuple[OrderLine, ...]
    total_amount: Decimal


class OrderAssembler:
    """
    Turns reserved stock into order lines. Pure: no session, no I/O.

    Each line keeps the price captured under the stock lock, and the total is
    summed from those same line values.
    """

    def assemble(self, reservations: Iterable) -> AssembledOrder:
        lines = []
        for r in reservations:
            if r.quantity <= 0:
                raise InvalidArgument(f"Quantity must be positive (product {r.product_id})")
            lines.append(
                OrderLine(
                    product_id=r.product_id,
                    sku=r.sku,
                    name=r.name,
                    quantity=r.quantity,
                    price=Decimal(r.price).quantize(CENTS, rounding=ROUND_HALF_UP),
                )
            )
        if not lines:
            raise InvalidArgument("An order needs at least one item")

        total = sum((line.line_total for line in lines), Decimal("0.00"))
        return AssembledOrder(lines=tuple(lines), total_amount=total)
