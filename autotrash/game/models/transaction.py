# autotrash/game/models/transaction.py
"""
Inventory transaction tree.

A transaction describes what changed in one container. It is a closed set of three
variants, told apart by `kind`:

* ``slot``  - one slot went from `before` to `after` (a leaf).
* ``list``  - several sub-transactions applied together (batch add, split across slots).
* ``move``  - a relocation: `remove` takes from one slot, `add` (optional) puts it elsewhere.

Every variant carries its own `succeeded` flag. Consumers dispatch on the concrete class
and end with ``assert_never`` so a new variant has to be handled everywhere it is walked.
"""
from __future__ import annotations
from typing import Optional, List, Any, Union, Literal, Annotated

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from autotrash.game.exceptions import InvalidTransactionError
from autotrash.game.models.item_stack import ItemStack, normalize_stack


class SlotTransaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["slot"] = "slot"
    slot: int
    before: Optional[ItemStack] = None
    after: Optional[ItemStack] = None
    succeeded: bool = True
    is_removal: bool = False

    @field_validator('before', 'after', mode='before')
    @classmethod
    def _normalize_empty(cls, v: Any) -> Optional[ItemStack]:
        return normalize_stack(v)


class ListTransaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["list"] = "list"
    items: List["Transaction"] = Field(default_factory=list)
    succeeded: bool = True


class MoveTransaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["move"] = "move"
    remove: "Transaction"
    add: Optional["Transaction"] = None
    succeeded: bool = True


Transaction = Annotated[
    Union[SlotTransaction, ListTransaction, MoveTransaction],
    Field(discriminator="kind"),
]

ListTransaction.model_rebuild()
MoveTransaction.model_rebuild()

_transaction_adapter: TypeAdapter = TypeAdapter(Transaction)


def parse_transaction(data: Any) -> Union[SlotTransaction, ListTransaction, MoveTransaction]:
    """Decodes a transaction payload (as delivered by the game server) into the tree."""
    if isinstance(data, (SlotTransaction, ListTransaction, MoveTransaction)):
        return data
    try:
        return _transaction_adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidTransactionError(f"Invalid inventory transaction payload: {e}") from e


