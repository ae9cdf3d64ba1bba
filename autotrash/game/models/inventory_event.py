# autotrash/game/models/inventory_event.py
from dataclasses import dataclass
from typing import Optional, Union, Dict, Any

from autotrash.game.models.item_container import ItemContainer, PlayerInventory
from autotrash.game.models.transaction import SlotTransaction, ListTransaction, MoveTransaction, parse_transaction


@dataclass
class InventoryChangeEvent:
    """
    Delivered once per inventory mutation on the game server.
    `inventory` is the acting player's own inventory; `container` is the one that changed.
    `transaction` may be given as the raw payload dict; it is decoded on construction and
    an undecodable payload raises InvalidTransactionError.
    """
    guild_id: str
    user_id: str
    inventory: PlayerInventory
    container: Optional[ItemContainer]
    transaction: Optional[Union[SlotTransaction, ListTransaction, MoveTransaction, Dict[str, Any]]]

    def __post_init__(self):
        if self.transaction is not None:
            self.transaction = parse_transaction(self.transaction)

    def belongs_to_player(self) -> bool:
        return self.inventory.contains_container(self.container)
