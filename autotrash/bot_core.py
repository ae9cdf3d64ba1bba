# autotrash/bot_core.py
import asyncio
import json
import logging
import os
from typing import Optional, Dict, Any, List, Callable, Awaitable, Coroutine, Set, Tuple

import discord
from discord import Intents, Interaction, app_commands
from discord.ext import commands
from dotenv import load_dotenv

from autotrash.game.managers.profile_manager import ProfileManager
from autotrash.game.managers.trash_manager import TrashManager
from autotrash.game.models.inventory_event import InventoryChangeEvent
from autotrash.game.models.item_container import PlayerInventory
from autotrash.game.rules.rules_registry import RulesRegistry
from autotrash.game.rules.trash_matcher import TrashRemovalReport
from autotrash.services.config_service import ConfigService
from autotrash.services.db_service import DBService
from autotrash.services.notification_service import NotificationService
from autotrash.services.settings_service import SettingsService
from autotrash.utils.i18n_utils import load_translations

logger = logging.getLogger(__name__)

COG_LIST = [
    "autotrash.command_modules.trash_cmds",
]


def load_settings_from_file(file_path: str) -> Dict[str, Any]:
    try:
        if os.path.exists(file_path):
            with open(file_path, encoding='utf-8') as f:
                settings_data = json.load(f)
            logger.info(f"Settings loaded successfully from '{file_path}'.")
            return settings_data
        logger.warning(f"Settings file '{file_path}' not found, using empty settings for this file.")
        return {}
    except json.JSONDecodeError:
        logger.error(f"Invalid JSON in settings file '{file_path}'. Using empty settings for this file.")
        return {}


class AutoTrashBot(commands.Bot):
    def __init__(self,
                 config_service: ConfigService,
                 db_service: DBService,
                 command_prefix: str,
                 intents: Intents,
                 debug_guild_ids: Optional[List[int]] = None):
        super().__init__(command_prefix=command_prefix, intents=intents)
        self.debug_guild_ids = debug_guild_ids
        self.config_service = config_service
        self.db_service = db_service

        self.profile_manager = ProfileManager()
        self.rules_registry = RulesRegistry()
        self.rules_registry.publish_from_config(config_service.get_global_rules_section())
        self.trash_manager = TrashManager(self.profile_manager, self.rules_registry)
        self.settings_service = SettingsService(db_service, self.profile_manager)
        self.notification_service = NotificationService(
            send_callback_factory=self._dm_sender,
            show_pickup_notifications=config_service.show_pickup_notifications()
        )
        self._inventories: Dict[Tuple[str, str], PlayerInventory] = {}
        self._autotrash_tasks: Set[asyncio.Task] = set()

    def _dm_sender(self, user_id: int) -> Callable[..., Awaitable[Any]]:
        async def _send(**kwargs: Any) -> None:
            user = self.get_user(user_id) or await self.fetch_user(user_id)
            await user.send(**kwargs)
        return _send

    # --- Game sessions ---

    def _player_key(self, guild_id: Any, user_id: Any) -> Tuple[str, str]:
        return str(guild_id), str(user_id)

    def _schedule(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._autotrash_tasks.add(task)
        task.add_done_callback(self._on_background_task_done)
        return task

    def _on_background_task_done(self, task: asyncio.Task) -> None:
        self._autotrash_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"AutoTrashBot: background task failed: {task.exception()}", exc_info=task.exception())

    async def register_player(self, guild_id: Any, user_id: Any, inventory: PlayerInventory) -> None:
        """Called by the game when a player joins; their settings are cached before the first pickup."""
        self._inventories[self._player_key(guild_id, user_id)] = inventory
        await self.settings_service.warm(guild_id, user_id)
        logger.info(f"AutoTrashBot: registered player {user_id} in guild {guild_id}.")

    def unregister_player(self, guild_id: Any, user_id: Any) -> None:
        self._inventories.pop(self._player_key(guild_id, user_id), None)
        self.settings_service.evict(guild_id, user_id)
        logger.info(f"AutoTrashBot: unregistered player {user_id} in guild {guild_id}.")

    def get_inventory(self, guild_id: Any, user_id: Any) -> Optional[PlayerInventory]:
        return self._inventories.get(self._player_key(guild_id, user_id))

    def process_inventory_change(self, event: InventoryChangeEvent) -> Optional[TrashRemovalReport]:
        """
        Runs the matcher inside the mutation that produced `event`; nothing here awaits.
        The report is delivered afterwards on a background task.
        """
        settings = self.settings_service.get_cached(event.guild_id, event.user_id)
        if settings is None:
            logger.warning(f"AutoTrashBot: no cached settings for user {event.user_id} in guild {event.guild_id}; "
                           f"skipping inventory change and loading them.")
            self._schedule(self.settings_service.warm(event.guild_id, event.user_id))
            return None

        report = self.trash_manager.handle_inventory_change(event, settings)
        if report is not None and report.totals and settings.notify:
            self._schedule(self.notification_service.send_trash_report(
                str(event.user_id), report, self.config_service.default_language()
            ))
        return report

    async def setup_hook(self):
        logger.info("AutoTrashBot: Entering setup_hook.")
        await self.db_service.initialize_database()
        load_translations()
        for cog_name in COG_LIST:
            await self.load_extension(cog_name)
            logger.info(f"AutoTrashBot: Successfully loaded cog '{cog_name}'.")
        self.tree.on_error = self.on_tree_command_error
        logger.info("AutoTrashBot: Exiting setup_hook.")

    async def on_tree_command_error(self, interaction: Interaction, error: app_commands.AppCommandError):
        logger.error(
            f"Unhandled error in command '{interaction.command.name if interaction.command else 'Unknown Command'}' "
            f"invoked by {interaction.user} ({interaction.user.id}) in guild {interaction.guild_id or 'DM'}: {error}",
            exc_info=error
        )
        message = "Something went wrong while running that command."
        if interaction.response.is_done():
            await interaction.followup.send(message, ephemeral=True)
        else:
            await interaction.response.send_message(message, ephemeral=True)

    async def on_ready(self):
        if self.user:
            logger.info(f"AutoTrashBot: Logged in as {self.user.name} ({self.user.id})")
        try:
            if self.debug_guild_ids:
                for guild_id_val in self.debug_guild_ids:
                    guild = discord.Object(id=guild_id_val)
                    self.tree.copy_global_to(guild=guild)
                    await self.tree.sync(guild=guild)
                logger.info(f"AutoTrashBot: Command tree synced to {len(self.debug_guild_ids)} debug guild(s).")
            else:
                await self.tree.sync()
                logger.info("AutoTrashBot: Command tree synced globally.")
        except discord.HTTPException as e_sync:
            logger.error(f"AutoTrashBot: Error during command tree sync: {e_sync}", exc_info=True)
        logger.info("AutoTrashBot: Bot is ready!")


async def start_bot():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        force=True
    )
    logging.getLogger('discord').setLevel(logging.INFO)
    logging.getLogger('discord.http').setLevel(logging.WARNING)

    load_dotenv()

    settings = load_settings_from_file('settings.json')
    data_settings = load_settings_from_file('data/settings.json')
    settings.update(data_settings)

    TOKEN = os.getenv('DISCORD_TOKEN') or settings.get('discord_token')
    COMMAND_PREFIX = os.getenv('COMMAND_PREFIX') or settings.get('discord_command_prefix', '!')

    test_guild_ids_str = os.getenv('TEST_GUILD_IDS')
    if test_guild_ids_str:
        test_guild_ids = [int(gid.strip()) for gid in test_guild_ids_str.split(',') if gid.strip()]
    else:
        test_guild_ids = settings.get('test_guild_ids', [])

    if not TOKEN:
        logger.error("Discord token not provided (env DISCORD_TOKEN or settings.json). Cannot start bot.")
        return

    config_service = ConfigService(settings_path=os.getenv('SETTINGS_PATH', 'data/settings.json'))
    db_service = DBService(database_url=os.getenv('DATABASE_URL') or settings.get('database_url'))

    bot_intents = Intents.default()
    bot_intents.guilds = True

    bot = AutoTrashBot(
        config_service=config_service,
        db_service=db_service,
        command_prefix=COMMAND_PREFIX,
        intents=bot_intents,
        debug_guild_ids=test_guild_ids or None
    )

    try:
        await bot.start(TOKEN)
    except discord.errors.LoginFailure:
        logger.error("Invalid Discord token. Please check your DISCORD_TOKEN.")
    finally:
        if not bot.is_closed():
            await bot.close()
        await db_service.close()
        logger.info("AutoTrashBot: Cleanup finished.")


def run_bot():
    try:
        asyncio.run(start_bot())
    except KeyboardInterrupt:
        logger.info("run_bot: KeyboardInterrupt caught, shutting down.")


if __name__ == "__main__":
    run_bot()
