# autotrash/services/settings_service.py
import asyncio
import logging
from collections import OrderedDict
from contextlib import asynccontextmanager
from typing import Dict, Tuple, AsyncIterator, Optional, Any, TYPE_CHECKING

from autotrash.database import auto_trash_settings_crud
from autotrash.game.exceptions import InvalidSettingsRecordError
from autotrash.game.models.player_settings import AutoTrashPlayerSettings

if TYPE_CHECKING:
    from autotrash.services.db_service import DBService
    from autotrash.game.managers.profile_manager import ProfileManager

logger = logging.getLogger(__name__)

DEFAULT_MAX_CACHED_PLAYERS = 1000

PlayerKey = Tuple[str, str]


class SettingsService:
    """
    Loads and stores per-player settings records.

    Edits to one player's record are serialized with a lock per (guild, user), so the
    record handed to ProfileManager is never shared between concurrent tasks. A lock
    only lives while some task holds or waits for it.

    Settings of players with a live session are also kept in a bounded in-memory cache,
    which is what the inventory path reads from without awaiting the database.
    """

    def __init__(self, db_service: "DBService", profile_manager: "ProfileManager",
                 max_cached_players: int = DEFAULT_MAX_CACHED_PLAYERS):
        self._db_service = db_service
        self._profile_manager = profile_manager
        self._locks: Dict[PlayerKey, asyncio.Lock] = {}
        self._lock_users: Dict[PlayerKey, int] = {}
        self._cache: "OrderedDict[PlayerKey, AutoTrashPlayerSettings]" = OrderedDict()
        self.max_cached_players = max(1, max_cached_players)

    @staticmethod
    def _key(guild_id: Any, user_id: Any) -> PlayerKey:
        return str(guild_id), str(user_id)

    @asynccontextmanager
    async def _player_lock(self, key: PlayerKey) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if self._lock_users[key] == 0:
                del self._lock_users[key]
                del self._locks[key]

    # --- Cache ---

    def get_cached(self, guild_id: Any, user_id: Any) -> Optional[AutoTrashPlayerSettings]:
        key = self._key(guild_id, user_id)
        settings = self._cache.get(key)
        if settings is not None:
            self._cache.move_to_end(key)
        return settings

    def _remember(self, key: PlayerKey, settings: AutoTrashPlayerSettings) -> None:
        self._cache[key] = settings
        self._cache.move_to_end(key)
        while len(self._cache) > self.max_cached_players:
            evicted, _ = self._cache.popitem(last=False)
            logger.debug(f"SettingsService: cache full, dropped settings for {evicted}.")

    def evict(self, guild_id: Any, user_id: Any) -> None:
        self._cache.pop(self._key(guild_id, user_id), None)

    def cached_count(self) -> int:
        return len(self._cache)

    async def warm(self, guild_id: Any, user_id: Any) -> AutoTrashPlayerSettings:
        """Loads the player's settings into the cache, unless they are already there."""
        key = self._key(guild_id, user_id)
        async with self._player_lock(key):
            settings = self._cache.get(key)
            if settings is None:
                settings = await self._load_and_repair(key)
            self._remember(key, settings)
            return settings

    # --- Storage ---

    async def _read(self, key: PlayerKey) -> Tuple[AutoTrashPlayerSettings, bool]:
        """Returns the normalized settings and whether they differ from what is stored."""
        guild_id, user_id = key
        async with self._db_service.get_session() as session:
            record = await auto_trash_settings_crud.get_settings_record(session, guild_id, user_id)
        try:
            settings = self._profile_manager.load(record)
        except InvalidSettingsRecordError as e:
            logger.warning(f"SettingsService: resetting unreadable settings for user {user_id} in guild {guild_id}: {e}")
            return self._profile_manager.load(None), True
        return settings, record != self._profile_manager.export_record(settings)

    async def _write(self, key: PlayerKey, settings: AutoTrashPlayerSettings) -> None:
        guild_id, user_id = key
        record = self._profile_manager.export_record(settings)
        async with self._db_service.get_session() as session:
            await auto_trash_settings_crud.save_settings_record(session, guild_id, user_id, record)
        logger.debug(f"SettingsService: saved settings for user {user_id} in guild {guild_id}.")

    async def _load_and_repair(self, key: PlayerKey) -> AutoTrashPlayerSettings:
        settings, changed = await self._read(key)
        if changed:
            await self._write(key, settings)
        return settings

    async def load(self, guild_id: Any, user_id: Any) -> AutoTrashPlayerSettings:
        """
        Returns the player's settings. The cached copy wins when there is one.
        A stored record is only rewritten when loading had to create, migrate or repair it.
        """
        key = self._key(guild_id, user_id)
        cached = self.get_cached(*key)
        if cached is not None:
            return cached
        return await self._load_and_repair(key)

    async def save(self, guild_id: Any, user_id: Any, settings: AutoTrashPlayerSettings) -> None:
        key = self._key(guild_id, user_id)
        await self._write(key, settings)
        if key in self._cache:
            self._remember(key, settings)

    @asynccontextmanager
    async def edit(self, guild_id: Any, user_id: Any) -> AsyncIterator[AutoTrashPlayerSettings]:
        """
        Holds the player's lock, yields their settings and saves them on a clean exit.
        Nothing is written if the body raises, and a cached copy the body may have
        half-edited is dropped.
        """
        key = self._key(guild_id, user_id)
        async with self._player_lock(key):
            settings = self._cache.get(key)
            if settings is None:
                settings, _ = await self._read(key)
            try:
                yield settings
            except Exception:
                self._cache.pop(key, None)
                raise
            await self.save(*key, settings)
