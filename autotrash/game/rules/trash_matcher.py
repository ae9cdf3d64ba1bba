# autotrash/game/rules/trash_matcher.py
"""
Walks an inventory transaction and works out which slots now hold trash.

The walk is depth-first and order-preserving. Only successful, non-removal leaves can
introduce trash. A matching leaf always marks its slot for clearing; it only adds to the
report when a `before` stack existed and the quantity grew. Slots are cleared after the
whole tree has been walked so every branch sees the container as the transaction left it,
and only while they still hold the stack the transaction put there.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, List, Any, Union

from typing_extensions import assert_never

from autotrash.game.models.item_container import ItemContainer
from autotrash.game.models.item_stack import ItemStack
from autotrash.game.models.transaction import SlotTransaction, ListTransaction, MoveTransaction
from autotrash.game.models.trash_profile import TrashProfile, TrashRules

logger = logging.getLogger(__name__)

MatchRules = Union[TrashProfile, TrashRules]
_TRANSACTION_TYPES = (SlotTransaction, ListTransaction, MoveTransaction)


@dataclass
class RemovedItemEntry:
    item_id: str
    total_quantity: int
    sample_stack: ItemStack


@dataclass
class TrashRemovalReport:
    slots_to_clear: List[int] = field(default_factory=list)
    expected_stacks: Dict[int, ItemStack] = field(default_factory=dict)
    totals: Dict[str, int] = field(default_factory=dict)
    samples: Dict[str, ItemStack] = field(default_factory=dict)

    def record_slot(self, slot: int, stack: Optional[ItemStack] = None) -> None:
        if slot not in self.slots_to_clear:
            self.slots_to_clear.append(slot)
        if stack is not None:
            # Last matching leaf wins.
            self.expected_stacks[slot] = stack

    def record_removed(self, stack: ItemStack, delta: int) -> None:
        self.totals[stack.item_id] = self.totals.get(stack.item_id, 0) + delta
        self.samples.setdefault(stack.item_id, stack)

    @property
    def removed_count(self) -> int:
        return sum(self.totals.values())

    def is_empty(self) -> bool:
        return not self.slots_to_clear and not self.totals

    def entries(self) -> List[RemovedItemEntry]:
        """One entry per distinct item id, in the order the items were first seen."""
        return [
            RemovedItemEntry(item_id=item_id, total_quantity=total, sample_stack=self.samples[item_id])
            for item_id, total in self.totals.items()
            if item_id in self.samples
        ]


def collect_trash_slots(container: ItemContainer, transaction: Any, rules: MatchRules) -> TrashRemovalReport:
    """Walks `transaction` without touching the container."""
    report = TrashRemovalReport()
    if container is None or transaction is None or rules is None:
        return report
    _collect(container, transaction, rules, report)
    return report


def match_and_collect(container: ItemContainer, transaction: Any, rules: MatchRules) -> TrashRemovalReport:
    """
    Walks `transaction`, then clears the collected slots in collection order.
    A slot whose stack no longer equals the transaction's final `after` stack is left alone.
    """
    report = collect_trash_slots(container, transaction, rules)
    for slot in report.slots_to_clear:
        expected = report.expected_stacks.get(slot)
        current = container.get_item_stack(slot)
        if expected is not None and current is not None and current != expected:
            logger.warning(f"Slot {slot} changed to {current.item_id} x{current.quantity} before clearing; skipped.")
            continue
        container.remove_item_stack_from_slot(slot)
    if report.slots_to_clear:
        logger.debug(f"Cleared slots {report.slots_to_clear} ({report.removed_count} items reported).")
    return report


def scan_container(container: ItemContainer, rules: MatchRules) -> List[int]:
    """Clears every occupied slot whose stack matches `rules`; returns the cleared slots."""
    slots = [slot for slot, stack in container.iter_stacks() if rules.matches(stack.item_id)]
    for slot in slots:
        container.remove_item_stack_from_slot(slot)
    return slots


def _collect(container: ItemContainer, transaction: Any, rules: MatchRules, report: TrashRemovalReport) -> None:
    if not isinstance(transaction, _TRANSACTION_TYPES):
        logger.warning(f"Skipping unrecognised transaction node of type {type(transaction).__name__}.")
        return
    if not transaction.succeeded:
        return

    if isinstance(transaction, SlotTransaction):
        _collect_from_slot(container, transaction, rules, report)
    elif isinstance(transaction, ListTransaction):
        for sub_transaction in transaction.items:
            _collect(container, sub_transaction, rules, report)
    elif isinstance(transaction, MoveTransaction):
        _collect(container, transaction.remove, rules, report)
        if transaction.add is not None:
            _collect(container, transaction.add, rules, report)
    else:
        assert_never(transaction)


def _collect_from_slot(container: ItemContainer, transaction: SlotTransaction, rules: MatchRules,
                       report: TrashRemovalReport) -> None:
    if transaction.is_removal:
        return
    if not container.is_valid_slot(transaction.slot):
        logger.debug(f"Ignoring slot {transaction.slot} outside container capacity {container.capacity}.")
        return

    after: Optional[ItemStack] = transaction.after
    if after is None or not rules.matches(after.item_id):
        return

    report.record_slot(transaction.slot, after)
    before: Optional[ItemStack] = transaction.before
    if before is None:
        return
    # Replacements and shrinks clear the slot without adding to the report.
    delta = after.quantity - before.quantity
    if delta > 0:
        report.record_removed(after, delta)
