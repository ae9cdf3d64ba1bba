from .item_stack import ItemStack, normalize_stack, is_empty
from .item_container import ItemContainer, AutoClearingContainer, PlayerInventory
from .transaction import SlotTransaction, ListTransaction, MoveTransaction, Transaction, parse_transaction
from .trash_profile import TrashProfile, TrashRules
from .player_settings import (
    AutoTrashPlayerSettings,
    ProfileActionResult,
    MAX_PROFILES,
    DEFAULT_PROFILE_NAME,
    LATEST_SCHEMA_VERSION
)
from .inventory_event import InventoryChangeEvent
