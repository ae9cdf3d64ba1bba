# tests/game/rules/test_trash_matcher.py
import pytest

from autotrash.game.models.item_container import ItemContainer
from autotrash.game.models.item_stack import ItemStack
from autotrash.game.models.transaction import SlotTransaction, ListTransaction, MoveTransaction
from autotrash.game.models.trash_profile import TrashProfile, TrashRules
from autotrash.game.rules.trash_matcher import (
    collect_trash_slots,
    match_and_collect,
    scan_container,
    TrashRemovalReport,
)


def stack(item_id: str, quantity: int = 1) -> ItemStack:
    return ItemStack(item_id=item_id, quantity=quantity)


@pytest.fixture
def container() -> ItemContainer:
    return ItemContainer(capacity=10)


@pytest.fixture
def rock_profile() -> TrashProfile:
    return TrashProfile(exact_items=["Rock"])


def test_grown_stack_is_cleared_and_reported(container, rock_profile):
    container.set_item_stack(3, stack("Rock", 5))
    leaf = SlotTransaction(slot=3, before=stack("Rock", 1), after=stack("Rock", 5))

    report = match_and_collect(container, leaf, rock_profile)

    assert report.slots_to_clear == [3]
    assert report.totals == {"Rock": 4}
    assert report.samples == {"Rock": stack("Rock", 5)}
    assert container.get_item_stack(3) is None


def test_list_only_reports_matching_items(container, rock_profile):
    container.set_item_stack(0, stack("Rock", 3))
    container.set_item_stack(1, stack("Dirt", 4))
    batch = ListTransaction(items=[
        SlotTransaction(slot=0, before=stack("Rock", 1), after=stack("Rock", 3)),
        SlotTransaction(slot=1, before=stack("Dirt", 1), after=stack("Dirt", 4)),
    ])

    report = match_and_collect(container, batch, rock_profile)

    assert report.totals == {"Rock": 2}
    assert report.slots_to_clear == [0]
    assert container.get_item_stack(1) == stack("Dirt", 4)


def test_failed_leaf_contributes_nothing(container, rock_profile):
    container.set_item_stack(2, stack("Rock", 5))
    leaf = SlotTransaction(slot=2, before=stack("Rock", 1), after=stack("Rock", 5), succeeded=False)

    report = match_and_collect(container, leaf, rock_profile)

    assert report.is_empty()
    assert container.get_item_stack(2) == stack("Rock", 5)


def test_failed_list_skips_whole_subtree(container, rock_profile):
    batch = ListTransaction(succeeded=False, items=[
        SlotTransaction(slot=0, before=stack("Rock", 1), after=stack("Rock", 3)),
    ])
    assert collect_trash_slots(container, batch, rock_profile).is_empty()


def test_removal_leaf_contributes_nothing(container, rock_profile):
    leaf = SlotTransaction(slot=4, before=stack("Rock", 5), after=stack("Rock", 9), is_removal=True)
    assert collect_trash_slots(container, leaf, rock_profile).is_empty()


def test_new_stack_in_empty_slot_is_cleared_without_total(container, rock_profile):
    container.set_item_stack(5, stack("Rock", 2))
    leaf = SlotTransaction(slot=5, before=None, after=stack("Rock", 2))

    report = match_and_collect(container, leaf, rock_profile)

    assert report.slots_to_clear == [5]
    assert report.totals == {}
    assert report.entries() == []
    assert container.get_item_stack(5) is None


@pytest.mark.parametrize("before_quantity", [5, 8])
def test_replacement_or_shrink_clears_without_total(container, rock_profile, before_quantity):
    container.set_item_stack(1, stack("Rock", 5))
    leaf = SlotTransaction(slot=1, before=stack("Rock", before_quantity), after=stack("Rock", 5))

    report = match_and_collect(container, leaf, rock_profile)

    assert report.slots_to_clear == [1]
    assert report.totals == {}
    assert container.get_item_stack(1) is None


def test_out_of_range_slot_is_ignored(container, rock_profile):
    leaf = SlotTransaction(slot=42, before=stack("Rock", 1), after=stack("Rock", 5))
    assert collect_trash_slots(container, leaf, rock_profile).is_empty()


def test_move_walks_remove_then_add(container, rock_profile):
    container.set_item_stack(7, stack("Rock", 6))
    move = MoveTransaction(
        remove=SlotTransaction(slot=2, before=stack("Rock", 4), after=None, is_removal=True),
        add=SlotTransaction(slot=7, before=stack("Rock", 2), after=stack("Rock", 6)),
    )

    report = match_and_collect(container, move, rock_profile)

    assert report.slots_to_clear == [7]
    assert report.totals == {"Rock": 4}


def test_move_without_add(container, rock_profile):
    move = MoveTransaction(remove=SlotTransaction(slot=2, before=stack("Rock", 4), is_removal=True))
    assert collect_trash_slots(container, move, rock_profile).is_empty()


def test_same_slot_is_recorded_once_but_totals_accumulate(container, rock_profile):
    container.set_item_stack(0, stack("Rock", 6))
    batch = ListTransaction(items=[
        SlotTransaction(slot=0, before=stack("Rock", 1), after=stack("Rock", 3)),
        ListTransaction(items=[
            SlotTransaction(slot=0, before=stack("Rock", 3), after=stack("Rock", 6)),
        ]),
    ])

    report = match_and_collect(container, batch, rock_profile)

    assert report.slots_to_clear == [0]
    assert report.totals == {"Rock": 5}
    assert report.samples["Rock"] == stack("Rock", 3)


def test_collect_does_not_touch_container(container, rock_profile):
    container.set_item_stack(3, stack("Rock", 5))
    leaf = SlotTransaction(slot=3, before=stack("Rock", 1), after=stack("Rock", 5))

    report = collect_trash_slots(container, leaf, rock_profile)

    assert report.slots_to_clear == [3]
    assert container.get_item_stack(3) == stack("Rock", 5)


def test_clearing_twice_is_harmless(container, rock_profile):
    container.set_item_stack(3, stack("Rock", 5))
    leaf = SlotTransaction(slot=3, before=stack("Rock", 1), after=stack("Rock", 5))

    first = match_and_collect(container, leaf, rock_profile)
    second = match_and_collect(container, leaf, rock_profile)

    assert first.totals == second.totals == {"Rock": 4}
    assert container.get_item_stack(3) is None


def test_exact_match_is_case_sensitive(container):
    profile = TrashProfile(exact_items=["rock"])
    leaf = SlotTransaction(slot=0, before=stack("Rock", 1), after=stack("Rock", 2))
    assert collect_trash_slots(container, leaf, profile).is_empty()


def test_global_rules_contains_match(container):
    rules = TrashRules(contains_items=("Seed",))
    container.set_item_stack(0, stack("Wheat_Seed", 4))
    leaf = SlotTransaction(slot=0, before=stack("Wheat_Seed", 1), after=stack("Wheat_Seed", 4))

    report = match_and_collect(container, leaf, rules)

    assert report.totals == {"Wheat_Seed": 3}


def test_unknown_nodes_are_skipped(container, rock_profile):
    batch = ListTransaction.model_construct(items=["garbage", SlotTransaction(slot=0, before=stack("Rock", 1), after=stack("Rock", 2))])
    report = collect_trash_slots(container, batch, rock_profile)
    assert report.totals == {"Rock": 1}


def test_missing_inputs_give_empty_report(container, rock_profile):
    assert collect_trash_slots(container, None, rock_profile).is_empty()
    assert collect_trash_slots(None, SlotTransaction(slot=0), rock_profile).is_empty()


def test_entries_follow_first_seen_order():
    report = TrashRemovalReport()
    report.record_removed(stack("Dirt", 3), 2)
    report.record_removed(stack("Rock", 5), 4)
    report.record_removed(stack("Dirt", 6), 3)

    entries = report.entries()

    assert [(entry.item_id, entry.total_quantity) for entry in entries] == [("Dirt", 5), ("Rock", 4)]
    assert entries[0].sample_stack == stack("Dirt", 3)
    assert report.removed_count == 9


def test_scan_container_clears_matches(container, rock_profile):
    container.set_item_stack(0, stack("Rock", 2))
    container.set_item_stack(4, stack("Dirt", 2))
    container.set_item_stack(9, stack("Rock", 64))

    cleared = scan_container(container, rock_profile)

    assert cleared == [0, 9]
    assert [slot for slot, _ in container.iter_stacks()] == [4]


def test_slot_replaced_after_transaction_is_kept(container, rock_profile):
    container.set_item_stack(3, stack("Diamond", 1))
    leaf = SlotTransaction(slot=3, before=stack("Rock", 1), after=stack("Rock", 5))

    report = match_and_collect(container, leaf, rock_profile)

    assert report.slots_to_clear == [3]
    assert report.expected_stacks == {3: stack("Rock", 5)}
    assert container.get_item_stack(3) == stack("Diamond", 1)


def test_slot_cleared_when_it_holds_the_last_matching_stack(container, rock_profile):
    container.set_item_stack(0, stack("Rock", 6))
    container.set_item_stack(1, stack("Rock", 2))
    batch = ListTransaction(items=[
        SlotTransaction(slot=0, before=stack("Rock", 1), after=stack("Rock", 3)),
        SlotTransaction(slot=0, before=stack("Rock", 3), after=stack("Rock", 6)),
        SlotTransaction(slot=1, before=stack("Rock", 1), after=stack("Rock", 4)),
    ])

    match_and_collect(container, batch, rock_profile)

    assert container.get_item_stack(0) is None
    assert container.get_item_stack(1) == stack("Rock", 2)
