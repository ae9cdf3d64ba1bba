# autotrash/game/models/item_stack.py
from __future__ import annotations
from typing import Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field


class ItemStack(BaseModel):
    """
    An occupied slot: an opaque item identifier and a positive quantity.
    Stacks are immutable; a slot is replaced, never edited in place.
    Empty slots are represented by None, never by a zero-quantity stack.
    """
    model_config = ConfigDict(frozen=True)

    item_id: str
    quantity: int = Field(default=1, ge=1)

    def with_quantity(self, quantity: int) -> Optional["ItemStack"]:
        if quantity <= 0:
            return None
        return ItemStack(item_id=self.item_id, quantity=quantity)


def is_empty(stack: Any) -> bool:
    if stack is None:
        return True
    if isinstance(stack, ItemStack):
        return False
    if isinstance(stack, dict):
        item_id = stack.get('item_id')
        try:
            quantity = int(stack.get('quantity', 1) or 0)
        except (TypeError, ValueError):
            return True
        return not item_id or not str(item_id).strip() or quantity <= 0
    return True


def normalize_stack(stack: Any) -> Optional[ItemStack]:
    """Collapses every flavour of 'nothing here' (None, {}, quantity 0) into None."""
    if is_empty(stack):
        return None
    if isinstance(stack, ItemStack):
        return stack
    data: Dict[str, Any] = stack
    return ItemStack(item_id=str(data['item_id']), quantity=int(data.get('quantity', 1)))
