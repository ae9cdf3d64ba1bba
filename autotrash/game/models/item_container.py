# autotrash/game/models/item_container.py
from __future__ import annotations
import logging
from typing import Optional, Dict, Any, List, Iterator, Tuple, Callable

from autotrash.game.models.item_stack import ItemStack, normalize_stack

logger = logging.getLogger(__name__)


class ItemContainer:
    """
    Fixed-capacity sequence of optional item stacks.
    Any slot index outside [0, capacity) is ignored rather than raising, so a bad index
    coming from an event can never abort the caller.
    """

    def __init__(self, capacity: int, slots: Optional[Dict[int, Any]] = None):
        self.capacity: int = max(0, int(capacity))
        self._slots: Dict[int, ItemStack] = {}
        if slots:
            for slot, stack in slots.items():
                self.set_item_stack(slot, stack)

    def is_valid_slot(self, slot: int) -> bool:
        return isinstance(slot, int) and 0 <= slot < self.capacity

    def get_item_stack(self, slot: int) -> Optional[ItemStack]:
        if not self.is_valid_slot(slot):
            return None
        return self._slots.get(slot)

    def set_item_stack(self, slot: int, stack: Any) -> Optional[ItemStack]:
        """Replaces the stack in `slot` and returns the previous one."""
        if not self.is_valid_slot(slot):
            logger.debug("ItemContainer: ignoring write to out-of-range slot %s (capacity %s).", slot, self.capacity)
            return None
        previous = self._slots.get(slot)
        normalized = normalize_stack(stack)
        if normalized is None:
            self._slots.pop(slot, None)
        else:
            self._slots[slot] = normalized
        return previous

    def remove_item_stack_from_slot(self, slot: int) -> Optional[ItemStack]:
        if not self.is_valid_slot(slot):
            return None
        return self._slots.pop(slot, None)

    def clear(self) -> None:
        self._slots.clear()

    def iter_stacks(self) -> Iterator[Tuple[int, ItemStack]]:
        for slot in sorted(self._slots):
            yield slot, self._slots[slot]

    def is_empty(self) -> bool:
        return not self._slots

    def to_dict(self) -> Dict[str, Any]:
        return {
            'capacity': self.capacity,
            'slots': {str(slot): stack.model_dump() for slot, stack in self.iter_stacks()},
        }

    def __repr__(self) -> str:
        return f"ItemContainer(capacity={self.capacity}, occupied={len(self._slots)})"


class AutoClearingContainer(ItemContainer):
    """
    Trash bin: anything placed here is destroyed immediately.
    `on_destroy` is called once per destroyed stack.
    """

    def __init__(self, capacity: int = 1, on_destroy: Optional[Callable[[ItemStack], None]] = None):
        super().__init__(capacity)
        self._on_destroy = on_destroy
        self._is_clearing = False

    def set_item_stack(self, slot: int, stack: Any) -> Optional[ItemStack]:
        previous = super().set_item_stack(slot, stack)
        placed = self.get_item_stack(slot)
        if self._is_clearing or placed is None:
            return previous
        self._is_clearing = True
        try:
            self.clear()
            if self._on_destroy:
                self._on_destroy(placed)
            logger.info("AutoClearingContainer: destroyed %s x%s.", placed.item_id, placed.quantity)
        finally:
            self._is_clearing = False
        return previous


class PlayerInventory:
    """The containers that make up one player's own inventory."""

    HOTBAR = "hotbar"

    def __init__(self, containers: Optional[Dict[str, ItemContainer]] = None, active_hotbar_slot: int = 0):
        self.containers: Dict[str, ItemContainer] = dict(containers or {})
        self.active_hotbar_slot = active_hotbar_slot

    @property
    def hotbar(self) -> Optional[ItemContainer]:
        return self.containers.get(self.HOTBAR)

    def item_in_hand(self) -> Optional[ItemStack]:
        hotbar = self.hotbar
        if hotbar is None:
            return None
        return hotbar.get_item_stack(self.active_hotbar_slot)

    def contains_container(self, container: Optional[ItemContainer]) -> bool:
        if container is None:
            return False
        return any(owned is container for owned in self.containers.values())

    def combined_containers(self) -> List[ItemContainer]:
        return list(self.containers.values())
