from .trash_matcher import (
    TrashRemovalReport,
    RemovedItemEntry,
    collect_trash_slots,
    match_and_collect,
    scan_container
)
from .rules_registry import RulesRegistry
