# autotrash/game/services/config_page_service.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from autotrash.game.models.item_container import PlayerInventory
from autotrash.game.models.item_stack import ItemStack
from autotrash.game.models.player_settings import AutoTrashPlayerSettings, ProfileActionResult
from autotrash.game.rules.trash_matcher import scan_container

if TYPE_CHECKING:
    from autotrash.game.managers.profile_manager import ProfileManager

logger = logging.getLogger(__name__)


class PageAction(str, Enum):
    SWITCH_PROFILE = "SwitchProfile"
    ADD_PROFILE = "AddProfile"
    DUPLICATE_PROFILE = "DuplicateProfile"
    RENAME_PROFILE = "RenameProfile"
    DELETE_PROFILE = "DeleteProfile"
    SCAN_INVENTORY = "ScanInventory"
    TOGGLE_ENABLED = "ToggleEnabled"
    TOGGLE_NOTIFY = "ToggleNotify"
    ADD_EXACT = "AddExact"
    REMOVE_EXACT = "RemoveExact"


class PageEventData(BaseModel):
    """Payload emitted by the configuration screen for a single user interaction."""
    model_config = ConfigDict(populate_by_name=True)

    action: Optional[str] = Field(default=None, alias="Action")
    value: Optional[bool] = Field(default=None, alias="@Value")
    item_id: Optional[str] = Field(default=None, alias="Item")
    profile_name: Optional[str] = Field(default=None, alias="Profile")


@dataclass
class PageActionOutcome:
    changed: bool = False
    message_key: Optional[str] = None
    message_params: Dict[str, Any] = field(default_factory=dict)
    # Stack taken out of the player's hand by AddExact; the caller decides whether to notify.
    trashed_stack: Optional[ItemStack] = None


class ConfigPageService:
    """Applies configuration-screen actions to a player's settings record."""

    def __init__(self, profile_manager: "ProfileManager"):
        self._profile_manager = profile_manager

    def handle_action(self, settings: AutoTrashPlayerSettings, data: PageEventData,
                      inventory: Optional[PlayerInventory] = None) -> PageActionOutcome:
        self._profile_manager.normalize(settings)
        if not data.action:
            return PageActionOutcome()
        try:
            action = PageAction(data.action)
        except ValueError:
            logger.debug(f"ConfigPageService: ignoring unknown page action '{data.action}'.")
            return PageActionOutcome()

        pm = self._profile_manager
        if action is PageAction.SWITCH_PROFILE:
            if not data.profile_name or not data.profile_name.strip():
                return PageActionOutcome()
            result = pm.activate(settings, data.profile_name)
            return PageActionOutcome(changed=result is ProfileActionResult.ACTIVATED)

        if action is PageAction.ADD_PROFILE:
            result = pm.create_profile(settings, data.profile_name)
            return self._profile_outcome(result, pm.active_profile_name(settings))

        if action is PageAction.DUPLICATE_PROFILE:
            result = pm.create_profile(settings, data.profile_name, duplicate_from_active=True)
            return self._profile_outcome(result, pm.active_profile_name(settings))

        if action is PageAction.RENAME_PROFILE:
            result = pm.rename_profile(settings, pm.active_profile_name(settings), data.profile_name)
            return self._profile_outcome(result, pm.active_profile_name(settings))

        if action is PageAction.DELETE_PROFILE:
            target = data.profile_name if data.profile_name and data.profile_name.strip() else pm.active_profile_name(settings)
            result = pm.delete_profile(settings, target)
            return self._profile_outcome(result, target.strip())

        if action is PageAction.SCAN_INVENTORY:
            return self._scan_inventory(settings, inventory)

        if action is PageAction.TOGGLE_ENABLED:
            if data.value is None:
                return PageActionOutcome()
            pm.set_enabled(settings, data.value)
            return PageActionOutcome(changed=True)

        if action is PageAction.TOGGLE_NOTIFY:
            if data.value is None:
                return PageActionOutcome()
            pm.set_notify(settings, data.value)
            return PageActionOutcome(changed=True)

        if action is PageAction.ADD_EXACT:
            return self._add_held_item(settings, inventory)

        if action is PageAction.REMOVE_EXACT:
            if not data.item_id or not data.item_id.strip():
                return PageActionOutcome(message_key="page_click_row_to_remove")
            changed = pm.remove_exact_item(settings, data.item_id)
            return PageActionOutcome(changed=changed)

        return PageActionOutcome()

    def _profile_outcome(self, result: ProfileActionResult, profile_name: str) -> PageActionOutcome:
        return PageActionOutcome(
            changed=result.is_success,
            message_key=f"profile_result_{result.value}",
            message_params={"name": profile_name},
        )

    def _scan_inventory(self, settings: AutoTrashPlayerSettings,
                        inventory: Optional[PlayerInventory]) -> PageActionOutcome:
        if inventory is None:
            return PageActionOutcome(message_key="page_scan_no_matches")
        profile = self._profile_manager.get_active_profile(settings)
        removed = 0
        for container in inventory.combined_containers():
            removed += len(scan_container(container, profile))
        if removed == 0:
            return PageActionOutcome(changed=True, message_key="page_scan_no_matches")
        logger.info(f"ConfigPageService: inventory scan removed {removed} stack(s).")
        return PageActionOutcome(changed=True, message_key="page_scan_removed", message_params={"count": removed})

    def _add_held_item(self, settings: AutoTrashPlayerSettings,
                       inventory: Optional[PlayerInventory]) -> PageActionOutcome:
        held = inventory.item_in_hand() if inventory is not None else None
        if held is None:
            return PageActionOutcome(message_key="page_hold_item_to_add")

        changed = self._profile_manager.add_exact_item(settings, held.item_id)
        outcome = PageActionOutcome(changed=changed)
        if settings.enabled and inventory is not None and inventory.hotbar is not None:
            inventory.hotbar.remove_item_stack_from_slot(inventory.active_hotbar_slot)
            outcome.trashed_stack = held
        return outcome
