import pytest

from autotrash.game.exceptions import InvalidTransactionError
from autotrash.game.models.item_stack import ItemStack
from autotrash.game.models.transaction import (
    SlotTransaction,
    ListTransaction,
    MoveTransaction,
    parse_transaction,
)


def test_slot_transaction_normalizes_empty_stacks():
    leaf = SlotTransaction(slot=0, before={"item_id": "Rock", "quantity": 0}, after={"item_id": "Rock", "quantity": 2})
    assert leaf.before is None
    assert leaf.after == ItemStack(item_id="Rock", quantity=2)
    assert leaf.succeeded is True
    assert leaf.is_removal is False


def test_parse_nested_payload():
    payload = {
        "kind": "move",
        "remove": {"kind": "slot", "slot": 4, "before": {"item_id": "Rock", "quantity": 3}, "is_removal": True},
        "add": {
            "kind": "list",
            "items": [
                {"kind": "slot", "slot": 0, "after": {"item_id": "Rock", "quantity": 2}},
                {"kind": "slot", "slot": 1, "after": {"item_id": "Rock", "quantity": 1}, "succeeded": False},
            ],
        },
    }
    transaction = parse_transaction(payload)

    assert isinstance(transaction, MoveTransaction)
    assert isinstance(transaction.remove, SlotTransaction)
    assert transaction.remove.is_removal
    assert isinstance(transaction.add, ListTransaction)
    assert [leaf.slot for leaf in transaction.add.items] == [0, 1]
    assert transaction.add.items[1].succeeded is False


def test_parse_passes_through_existing_tree():
    leaf = SlotTransaction(slot=2)
    assert parse_transaction(leaf) is leaf


def test_move_without_add():
    transaction = parse_transaction({"kind": "move", "remove": {"kind": "slot", "slot": 1}})
    assert transaction.add is None


@pytest.mark.parametrize("payload", [
    {"kind": "teleport", "slot": 1},
    {"kind": "slot"},
    {"kind": "move"},
    "not a transaction",
])
def test_parse_rejects_malformed_payload(payload):
    with pytest.raises(InvalidTransactionError):
        parse_transaction(payload)


def test_transactions_are_immutable():
    leaf = SlotTransaction(slot=0)
    with pytest.raises(Exception):
        leaf.slot = 1
