# autotrash/game/models/trash_profile.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, List, Iterable, Tuple, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TrashProfile(BaseModel):
    """
    A named, user-editable set of exact item ids (the name is the key it is stored under).
    Order is insertion order, used for display. Duplicates are refused by the profile
    manager at add time; the model itself stores whatever it is given.
    """
    model_config = ConfigDict(populate_by_name=True)

    exact_items: List[str] = Field(default_factory=list, alias="ExactItems")

    @field_validator('exact_items', mode='before')
    @classmethod
    def _none_as_empty(cls, v: Any) -> List[str]:
        if v is None:
            return []
        return v

    def matches(self, item_id: Optional[str]) -> bool:
        if not item_id:
            return False
        return item_id in self.exact_items

    def copy_profile(self) -> "TrashProfile":
        return TrashProfile(exact_items=list(self.exact_items))

    def to_record(self) -> Dict[str, Any]:
        return {"ExactItems": list(self.exact_items)}


def _clean_values(values: Optional[Iterable[Optional[str]]]) -> Tuple[str, ...]:
    if not values:
        return ()
    cleaned: List[str] = []
    for value in values:
        if value is None:
            continue
        value = str(value).strip()
        if value and value not in cleaned:
            cleaned.append(value)
    return tuple(cleaned)


@dataclass(frozen=True)
class TrashRules:
    """
    Server-wide rule snapshot. Immutable: a new snapshot is published instead of editing one.
    `contains_items` are plain case-sensitive substrings of the item id.
    """
    exact_items: Tuple[str, ...] = field(default_factory=tuple)
    contains_items: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_config(cls, data: Optional[Dict[str, Any]]) -> "TrashRules":
        data = data or {}
        return cls(
            exact_items=_clean_values(data.get('exact_items')),
            contains_items=_clean_values(data.get('contains_items')),
        )

    def is_empty(self) -> bool:
        return not self.exact_items and not self.contains_items

    def matches(self, item_id: Optional[str]) -> bool:
        if not item_id:
            return False
        if item_id in self.exact_items:
            return True
        return any(fragment in item_id for fragment in self.contains_items)
