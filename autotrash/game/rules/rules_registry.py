# autotrash/game/rules/rules_registry.py
import logging
import threading
from typing import Optional, Dict, Any

from autotrash.game.models.trash_profile import TrashRules

logger = logging.getLogger(__name__)


class RulesRegistry:
    """
    Holds the server-wide rule snapshot. Readers always get a complete snapshot:
    publishing swaps the reference, it never edits the snapshot in place.
    """

    def __init__(self, rules: Optional[TrashRules] = None):
        self._lock = threading.Lock()
        self._rules: Optional[TrashRules] = rules if rules and not rules.is_empty() else None

    def current(self) -> Optional[TrashRules]:
        return self._rules

    def publish(self, rules: Optional[TrashRules]) -> Optional[TrashRules]:
        """Replaces the snapshot (None or an empty snapshot clears it). Returns the previous one."""
        new_rules = rules if rules and not rules.is_empty() else None
        with self._lock:
            previous = self._rules
            self._rules = new_rules
        if new_rules:
            logger.info(f"RulesRegistry: published global rules ({len(new_rules.exact_items)} exact, {len(new_rules.contains_items)} contains).")
        else:
            logger.info("RulesRegistry: global rules cleared; per-player profiles apply.")
        return previous

    def publish_from_config(self, section: Optional[Dict[str, Any]]) -> Optional[TrashRules]:
        return self.publish(TrashRules.from_config(section))
