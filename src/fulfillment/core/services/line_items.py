"""Validation shared by every document that carries product lines."""

from collections.abc import Sequence
from typing import Protocol

from fulfillment.core.exceptions import ValidationError


class ProductLine(Protocol):
    product_id: str
    quantity: int


def validate_lines(items: Sequence[ProductLine], allow_repeats: bool = True) -> None:
    """
    Reject empty line lists and non-positive quantities.

    Raises:
        ValidationError: With the 0-based ``line`` index of the first bad row
    """
    if not items:
        raise ValidationError("items", "At least one line item is required")

    seen: set[str] = set()
    for index, item in enumerate(items):
        if not item.product_id:
            raise ValidationError("product_id", "Product is required", line=index)
        if item.quantity < 1:
            raise ValidationError(
                "quantity", "Quantity must be at least 1", item.quantity, line=index
            )
        if not allow_repeats and item.product_id in seen:
            raise ValidationError(
                "product_id", "Product listed more than once", item.product_id, line=index
            )
        seen.add(item.product_id)


def aggregate_lines(items: Sequence[ProductLine]) -> dict[str, tuple[int, int]]:
    """
    Sum quantities per product.

    Returns:
        product_id -> (total quantity, index of the first line naming it),
        in first-seen order
    """
    totals: dict[str, tuple[int, int]] = {}
    for index, item in enumerate(items):
        quantity, first = totals.get(item.product_id, (0, index))
        totals[item.product_id] = (quantity + item.quantity, first)
    return totals
