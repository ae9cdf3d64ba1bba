# autotrash/game/managers/profile_manager.py
from __future__ import annotations
import logging
from typing import Optional, Dict, Any, List, Callable

from autotrash.game.models.player_settings import (
    AutoTrashPlayerSettings,
    ProfileActionResult,
    MAX_PROFILES,
    DEFAULT_PROFILE_NAME,
    LATEST_SCHEMA_VERSION
)
from autotrash.game.models.trash_profile import TrashProfile

logger = logging.getLogger(__name__)


def _migrate_v0_to_v1(settings: AutoTrashPlayerSettings) -> None:
    """Moves the flat v0 exact-item list into a "Default" profile."""
    profile = settings.profiles.get(DEFAULT_PROFILE_NAME)
    if profile is None:
        profile = TrashProfile()
        settings.profiles[DEFAULT_PROFILE_NAME] = profile
    if settings.legacy_exact_items:
        profile.exact_items = list(settings.legacy_exact_items)
    settings.legacy_exact_items = []
    if not settings.active_profile or not settings.active_profile.strip():
        settings.active_profile = DEFAULT_PROFILE_NAME


# Keyed by the version a migration starts from; each step moves the record up by one.
MIGRATIONS: Dict[int, Callable[[AutoTrashPlayerSettings], None]] = {
    0: _migrate_v0_to_v1,
}


class ProfileManager:
    """
    Profile store operations over one player's settings record.

    The record is passed in explicitly and mutated in place; callers must hold exclusive
    access to it for the duration of a call. Every public operation first normalizes the
    record (pending migrations, a non-empty profile map, a valid active profile), so a
    record edited out-of-band is repaired on the next read.
    """

    def __init__(self, max_profiles: int = MAX_PROFILES):
        self.max_profiles = max_profiles

    # --- Loading / exporting ---

    def load(self, record: Optional[Dict[str, Any]]) -> AutoTrashPlayerSettings:
        settings = AutoTrashPlayerSettings.from_record(record)
        return self.normalize(settings)

    def export_record(self, settings: AutoTrashPlayerSettings) -> Dict[str, Any]:
        self.normalize(settings)
        return settings.to_record()

    def run_migrations(self, settings: AutoTrashPlayerSettings) -> None:
        version = settings.schema_version
        if version >= LATEST_SCHEMA_VERSION:
            # Records written by a newer build are left as they are.
            return
        start_version = version
        while version < LATEST_SCHEMA_VERSION:
            migration = MIGRATIONS.get(version)
            if migration is not None:
                migration(settings)
            version += 1
        settings.schema_version = version
        logger.info(f"ProfileManager: migrated settings record from v{start_version} to v{version}.")

    def normalize(self, settings: AutoTrashPlayerSettings) -> AutoTrashPlayerSettings:
        if settings.profiles is None:
            settings.profiles = {}
        self.run_migrations(settings)
        if not settings.profiles:
            settings.profiles[DEFAULT_PROFILE_NAME] = TrashProfile()
        active = settings.active_profile
        if not active or not active.strip() or active not in settings.profiles:
            first_name = next(iter(settings.profiles))
            if active:
                logger.debug(f"ProfileManager: active profile '{active}' is missing, falling back to '{first_name}'.")
            settings.active_profile = first_name
        return settings

    # --- Queries ---

    def get_active_profile(self, settings: AutoTrashPlayerSettings) -> TrashProfile:
        self.normalize(settings)
        return settings.profiles[settings.active_profile]

    def active_profile_name(self, settings: AutoTrashPlayerSettings) -> str:
        self.normalize(settings)
        return settings.active_profile

    def list_profile_names(self, settings: AutoTrashPlayerSettings) -> List[str]:
        self.normalize(settings)
        return list(settings.profiles.keys())

    def profile_count(self, settings: AutoTrashPlayerSettings) -> int:
        self.normalize(settings)
        return len(settings.profiles)

    def is_profile_limit_reached(self, settings: AutoTrashPlayerSettings) -> bool:
        return self.profile_count(settings) >= self.max_profiles

    # --- Profile mutations ---

    def activate(self, settings: AutoTrashPlayerSettings, profile_name: Optional[str]) -> ProfileActionResult:
        self.normalize(settings)
        if profile_name is None or not profile_name.strip():
            return ProfileActionResult.NOT_FOUND
        name = profile_name.strip()
        if name not in settings.profiles:
            return ProfileActionResult.NOT_FOUND
        settings.active_profile = name
        return ProfileActionResult.ACTIVATED

    def create_profile(self, settings: AutoTrashPlayerSettings, profile_name: Optional[str],
                       duplicate_from_active: bool = False) -> ProfileActionResult:
        self.normalize(settings)
        if profile_name is None or not profile_name.strip():
            return ProfileActionResult.NAME_EMPTY
        name = profile_name.strip()
        if name in settings.profiles:
            return ProfileActionResult.NAME_TAKEN
        if len(settings.profiles) >= self.max_profiles:
            return ProfileActionResult.LIMIT_REACHED

        if duplicate_from_active:
            profile = settings.profiles[settings.active_profile].copy_profile()
        else:
            profile = TrashProfile()
        settings.profiles[name] = profile
        settings.active_profile = name
        logger.info(f"ProfileManager: {'duplicated' if duplicate_from_active else 'created'} profile '{name}'.")
        return ProfileActionResult.DUPLICATED if duplicate_from_active else ProfileActionResult.CREATED

    def rename_profile(self, settings: AutoTrashPlayerSettings, current_name: Optional[str],
                       new_name: Optional[str]) -> ProfileActionResult:
        self.normalize(settings)
        if current_name is None or not current_name.strip():
            return ProfileActionResult.NOT_FOUND
        if new_name is None or not new_name.strip():
            return ProfileActionResult.NAME_EMPTY
        old = current_name.strip()
        new = new_name.strip()
        profile = settings.profiles.get(old)
        if profile is None:
            return ProfileActionResult.NOT_FOUND
        if old == new:
            return ProfileActionResult.RENAMED
        if new in settings.profiles:
            return ProfileActionResult.NAME_TAKEN

        del settings.profiles[old]
        settings.profiles[new] = profile
        if settings.active_profile == old:
            settings.active_profile = new
        logger.info(f"ProfileManager: renamed profile '{old}' to '{new}'.")
        return ProfileActionResult.RENAMED

    def delete_profile(self, settings: AutoTrashPlayerSettings, profile_name: Optional[str]) -> ProfileActionResult:
        self.normalize(settings)
        if profile_name is None or not profile_name.strip():
            return ProfileActionResult.NOT_FOUND
        name = profile_name.strip()
        if name not in settings.profiles:
            return ProfileActionResult.NOT_FOUND
        if len(settings.profiles) <= 1:
            return ProfileActionResult.LAST_PROFILE

        del settings.profiles[name]
        if settings.active_profile not in settings.profiles:
            settings.active_profile = next(iter(settings.profiles))
        logger.info(f"ProfileManager: deleted profile '{name}', active is now '{settings.active_profile}'.")
        return ProfileActionResult.DELETED

    # --- Active profile items ---

    def add_exact_item(self, settings: AutoTrashPlayerSettings, item_id: Optional[str]) -> bool:
        if item_id is None or not item_id.strip():
            return False
        profile = self.get_active_profile(settings)
        if item_id in profile.exact_items:
            return False
        profile.exact_items.append(item_id)
        return True

    def remove_exact_item(self, settings: AutoTrashPlayerSettings, item_id: Optional[str]) -> bool:
        if item_id is None:
            return False
        profile = self.get_active_profile(settings)
        if item_id not in profile.exact_items:
            return False
        profile.exact_items = [current for current in profile.exact_items if current != item_id]
        return True

    # --- Toggles ---

    def set_enabled(self, settings: AutoTrashPlayerSettings, enabled: bool) -> None:
        self.normalize(settings)
        settings.enabled = bool(enabled)

    def set_notify(self, settings: AutoTrashPlayerSettings, notify: bool) -> None:
        self.normalize(settings)
        settings.notify = bool(notify)
