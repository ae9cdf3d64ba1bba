# autotrash/game/managers/trash_manager.py
from __future__ import annotations
import logging
from typing import Optional, TYPE_CHECKING

from autotrash.game.models.inventory_event import InventoryChangeEvent
from autotrash.game.models.player_settings import AutoTrashPlayerSettings
from autotrash.game.rules.trash_matcher import TrashRemovalReport, MatchRules, match_and_collect

if TYPE_CHECKING:
    from autotrash.game.managers.profile_manager import ProfileManager
    from autotrash.game.rules.rules_registry import RulesRegistry

logger = logging.getLogger(__name__)


class TrashManager:
    """
    Reacts to inventory changes: picks the rules that apply to the player, runs the matcher
    (which clears the trashed slots) and hands back the removal report.
    Runs synchronously inside the mutation that triggered it.
    """

    def __init__(self, profile_manager: "ProfileManager", rules_registry: Optional["RulesRegistry"] = None):
        self._profile_manager = profile_manager
        self._rules_registry = rules_registry
        logger.info("TrashManager initialized.")

    def resolve_rules(self, settings: AutoTrashPlayerSettings) -> MatchRules:
        if self._rules_registry is not None:
            global_rules = self._rules_registry.current()
            if global_rules is not None:
                return global_rules
        return self._profile_manager.get_active_profile(settings)

    def handle_inventory_change(self, event: InventoryChangeEvent,
                                settings: AutoTrashPlayerSettings) -> Optional[TrashRemovalReport]:
        if event.container is None or event.transaction is None:
            return None
        if not event.belongs_to_player():
            logger.debug(f"TrashManager: ignoring container outside the inventory of user {event.user_id}.")
            return None

        self._profile_manager.normalize(settings)
        if not settings.enabled:
            return None

        rules = self.resolve_rules(settings)
        report = match_and_collect(event.container, event.transaction, rules)
        if report.slots_to_clear:
            logger.info(
                f"TrashManager: trashed {len(report.slots_to_clear)} slot(s) for user {event.user_id} "
                f"in guild {event.guild_id}: {report.totals}"
            )
        return report
