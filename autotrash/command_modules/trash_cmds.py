import discord
from discord import app_commands
from discord.ext import commands
import logging
from typing import Optional, Any, List, TYPE_CHECKING

from autotrash.game.models.item_container import AutoClearingContainer, PlayerInventory
from autotrash.game.models.item_stack import ItemStack
from autotrash.game.models.player_settings import ProfileActionResult
from autotrash.game.services.config_page_service import ConfigPageService, PageAction, PageEventData
from autotrash.utils.i18n_utils import get_localized_string, normalize_language

if TYPE_CHECKING:
    from autotrash.bot_core import AutoTrashBot

logger = logging.getLogger(__name__)


class TrashCog(commands.Cog, name="AutoTrash Commands"):
    def __init__(self, bot: "AutoTrashBot"):
        self.bot = bot
        self.page_service = ConfigPageService(bot.profile_manager)

    trash_group = app_commands.Group(
        name="trash",
        description="Automatically destroy unwanted items when you pick them up.",
        guild_only=True
    )

    profile_group = app_commands.Group(
        name="profile",
        description="Manage your auto-trash profiles.",
        parent=trash_group
    )

    # --- Helpers ---

    def _lang(self, interaction: discord.Interaction) -> str:
        return normalize_language(getattr(interaction, "locale", None))

    def _text(self, interaction: discord.Interaction, key: str, **kwargs: Any) -> str:
        return get_localized_string(key, self._lang(interaction), **kwargs)

    def _state_text(self, interaction: discord.Interaction, enabled: bool) -> str:
        return self._text(interaction, "state_enabled" if enabled else "state_disabled")

    def _profile_result_text(self, interaction: discord.Interaction, result: ProfileActionResult, name: str) -> str:
        return self._text(
            interaction, f"profile_result_{result.value}",
            name=name, max_profiles=self.bot.profile_manager.max_profiles
        )

    async def _reply(self, interaction: discord.Interaction, content: str) -> None:
        if interaction.response.is_done():
            await interaction.followup.send(content, ephemeral=True)
        else:
            await interaction.response.send_message(content, ephemeral=True)

    async def _reply_error(self, interaction: discord.Interaction, e: Exception) -> None:
        logger.error(
            f"TrashCog: command failed for user {interaction.user.id} in guild {interaction.guild_id}: {e}",
            exc_info=True
        )
        await self._reply(interaction, self._text(interaction, "trash_error_generic"))

    async def _set_enabled(self, interaction: discord.Interaction, enabled: Optional[bool]) -> None:
        try:
            async with self.bot.settings_service.edit(str(interaction.guild_id), str(interaction.user.id)) as settings:
                new_state = (not settings.enabled) if enabled is None else enabled
                self.bot.profile_manager.set_enabled(settings, new_state)
            logger.info(f"User {interaction.user.id} in guild {interaction.guild_id} set AutoTrash enabled={new_state}.")
            await self._reply(interaction, self._text(interaction, "trash_now_state",
                                                      state=self._state_text(interaction, new_state)))
        except Exception as e:
            await self._reply_error(interaction, e)

    # --- /trash ---

    @trash_group.command(name="status", description="Show whether AutoTrash is on and which profile is active.")
    async def trash_status(self, interaction: discord.Interaction):
        try:
            settings = await self.bot.settings_service.load(str(interaction.guild_id), str(interaction.user.id))
            pm = self.bot.profile_manager
            await self._reply(interaction, self._text(
                interaction, "trash_status",
                state=self._state_text(interaction, settings.enabled),
                name=pm.active_profile_name(settings)
            ))
        except Exception as e:
            await self._reply_error(interaction, e)

    @trash_group.command(name="enable", description="Turn AutoTrash on or off. Toggles when no value is given.")
    @app_commands.describe(enabled="True to turn AutoTrash on, False to turn it off.")
    async def trash_enable(self, interaction: discord.Interaction, enabled: Optional[bool] = None):
        await self._set_enabled(interaction, enabled)

    @trash_group.command(name="on", description="Turn AutoTrash on.")
    async def trash_on(self, interaction: discord.Interaction):
        await self._set_enabled(interaction, True)

    @trash_group.command(name="off", description="Turn AutoTrash off.")
    async def trash_off(self, interaction: discord.Interaction):
        await self._set_enabled(interaction, False)

    @trash_group.command(name="notify", description="Turn AutoTrash notifications on or off. Toggles when no value is given.")
    @app_commands.describe(enabled="True to get a message when items are trashed.")
    async def trash_notify(self, interaction: discord.Interaction, enabled: Optional[bool] = None):
        try:
            async with self.bot.settings_service.edit(str(interaction.guild_id), str(interaction.user.id)) as settings:
                new_state = (not settings.notify) if enabled is None else enabled
                self.bot.profile_manager.set_notify(settings, new_state)
            await self._reply(interaction, self._text(interaction, "trash_notify_state",
                                                      state=self._state_text(interaction, new_state)))
        except Exception as e:
            await self._reply_error(interaction, e)

    @trash_group.command(name="add", description="Add an item to the active auto-trash profile.")
    @app_commands.describe(item_id="The id of the item to destroy on pickup.")
    async def trash_add(self, interaction: discord.Interaction, item_id: str):
        if not item_id or not item_id.strip():
            await self._reply(interaction, self._text(interaction, "trash_item_blank"))
            return
        item_id = item_id.strip()
        try:
            async with self.bot.settings_service.edit(str(interaction.guild_id), str(interaction.user.id)) as settings:
                added = self.bot.profile_manager.add_exact_item(settings, item_id)
            key = "trash_item_added" if added else "trash_item_already_listed"
            await self._reply(interaction, self._text(interaction, key, item_id=item_id))
        except Exception as e:
            await self._reply_error(interaction, e)

    @trash_group.command(name="remove", description="Remove an item from the active auto-trash profile.")
    @app_commands.describe(item_id="The id of the item to stop destroying.")
    async def trash_remove(self, interaction: discord.Interaction, item_id: str):
        if not item_id or not item_id.strip():
            await self._reply(interaction, self._text(interaction, "trash_item_blank"))
            return
        item_id = item_id.strip()
        try:
            async with self.bot.settings_service.edit(str(interaction.guild_id), str(interaction.user.id)) as settings:
                removed = self.bot.profile_manager.remove_exact_item(settings, item_id)
            key = "trash_item_removed" if removed else "trash_item_not_listed"
            await self._reply(interaction, self._text(interaction, key, item_id=item_id))
        except Exception as e:
            await self._reply_error(interaction, e)

    @trash_group.command(name="list", description="List the items in your active auto-trash profile.")
    async def trash_list(self, interaction: discord.Interaction):
        try:
            settings = await self.bot.settings_service.load(str(interaction.guild_id), str(interaction.user.id))
            pm = self.bot.profile_manager
            profile = pm.get_active_profile(settings)
            lines = [f"**{self._text(interaction, 'trash_list_title', name=pm.active_profile_name(settings))}**"]
            if profile.exact_items:
                lines.extend(f"- {item_id}" for item_id in profile.exact_items)
            else:
                lines.append(self._text(interaction, "trash_list_empty"))
            await self._reply(interaction, "\n".join(lines))
        except Exception as e:
            await self._reply_error(interaction, e)

    # --- /trash (in game) ---

    def _inventory(self, interaction: discord.Interaction) -> Optional[PlayerInventory]:
        return self.bot.get_inventory(str(interaction.guild_id), str(interaction.user.id))

    async def _notify_trashed_stack(self, interaction: discord.Interaction, stack: ItemStack) -> None:
        language = self.bot.config_service.default_language()
        await self.bot.notification_service.send_trashed_stack(str(interaction.user.id), stack, language)

    @trash_group.command(name="scan", description="Destroy everything in your inventory that matches the active profile.")
    async def trash_scan(self, interaction: discord.Interaction):
        try:
            inventory = self._inventory(interaction)
            if inventory is None:
                await self._reply(interaction, self._text(interaction, "trash_no_session"))
                return
            settings = await self.bot.settings_service.load(str(interaction.guild_id), str(interaction.user.id))
            outcome = self.page_service.handle_action(
                settings, PageEventData(action=PageAction.SCAN_INVENTORY.value), inventory
            )
            await self._reply(interaction, self._text(interaction, outcome.message_key, **outcome.message_params))
        except Exception as e:
            await self._reply_error(interaction, e)

    @trash_group.command(name="addhand", description="Add the item you are holding to the active profile and destroy it.")
    async def trash_addhand(self, interaction: discord.Interaction):
        try:
            inventory = self._inventory(interaction)
            if inventory is None:
                await self._reply(interaction, self._text(interaction, "trash_no_session"))
                return
            async with self.bot.settings_service.edit(str(interaction.guild_id), str(interaction.user.id)) as settings:
                held = inventory.item_in_hand()
                outcome = self.page_service.handle_action(
                    settings, PageEventData(action=PageAction.ADD_EXACT.value), inventory
                )
                notify = settings.notify

            if held is None:
                await self._reply(interaction, self._text(interaction, outcome.message_key))
                return
            key = "trash_item_added" if outcome.changed else "trash_item_already_listed"
            await self._reply(interaction, self._text(interaction, key, item_id=held.item_id))
            if outcome.trashed_stack is not None and notify:
                await self._notify_trashed_stack(interaction, outcome.trashed_stack)
        except Exception as e:
            await self._reply_error(interaction, e)

    @trash_group.command(name="bin", description="Throw the item you are holding into the trash bin.")
    async def trash_bin(self, interaction: discord.Interaction):
        try:
            inventory = self._inventory(interaction)
            if inventory is None:
                await self._reply(interaction, self._text(interaction, "trash_no_session"))
                return
            settings = await self.bot.settings_service.load(str(interaction.guild_id), str(interaction.user.id))

            held = inventory.item_in_hand()
            if held is None or inventory.hotbar is None:
                await self._reply(interaction, self._text(interaction, "trash_bin_empty_hand"))
                return
            destroyed: List[ItemStack] = []
            trash_bin = AutoClearingContainer(on_destroy=destroyed.append)
            inventory.hotbar.remove_item_stack_from_slot(inventory.active_hotbar_slot)
            trash_bin.set_item_stack(0, held)
            logger.info(f"User {interaction.user.id} in guild {interaction.guild_id} binned {held.item_id} x{held.quantity}.")

            await self._reply(interaction, self._text(interaction, "trash_bin_destroyed",
                                                      item_id=held.item_id, quantity=held.quantity))
            if settings.notify:
                for stack in destroyed:
                    await self._notify_trashed_stack(interaction, stack)
        except Exception as e:
            await self._reply_error(interaction, e)

    # --- /trash profile ---

    async def _run_profile_action(self, interaction: discord.Interaction, action, name_for_message=None) -> None:
        try:
            async with self.bot.settings_service.edit(str(interaction.guild_id), str(interaction.user.id)) as settings:
                result: ProfileActionResult = action(settings)
                name = name_for_message if name_for_message is not None else self.bot.profile_manager.active_profile_name(settings)
            logger.info(f"User {interaction.user.id} in guild {interaction.guild_id}: profile action -> {result.value}.")
            await self._reply(interaction, self._profile_result_text(interaction, result, name))
        except Exception as e:
            await self._reply_error(interaction, e)

    @profile_group.command(name="create", description="Create a new empty profile and switch to it.")
    @app_commands.describe(name="Name of the new profile.")
    async def profile_create(self, interaction: discord.Interaction, name: str):
        pm = self.bot.profile_manager
        await self._run_profile_action(interaction, lambda s: pm.create_profile(s, name))

    @profile_group.command(name="duplicate", description="Copy the active profile under a new name and switch to it.")
    @app_commands.describe(name="Name of the copy.")
    async def profile_duplicate(self, interaction: discord.Interaction, name: str):
        pm = self.bot.profile_manager
        await self._run_profile_action(interaction, lambda s: pm.create_profile(s, name, duplicate_from_active=True))

    @profile_group.command(name="rename", description="Rename one of your profiles.")
    @app_commands.describe(current_name="The profile to rename.", new_name="Its new name.")
    async def profile_rename(self, interaction: discord.Interaction, current_name: str, new_name: str):
        pm = self.bot.profile_manager
        await self._run_profile_action(interaction, lambda s: pm.rename_profile(s, current_name, new_name),
                                       name_for_message=(new_name or "").strip())

    @profile_group.command(name="delete", description="Delete one of your profiles.")
    @app_commands.describe(name="The profile to delete.")
    async def profile_delete(self, interaction: discord.Interaction, name: str):
        pm = self.bot.profile_manager
        await self._run_profile_action(interaction, lambda s: pm.delete_profile(s, name),
                                       name_for_message=(name or "").strip())

    @profile_group.command(name="switch", description="Make another profile the active one.")
    @app_commands.describe(name="The profile to activate.")
    async def profile_switch(self, interaction: discord.Interaction, name: str):
        pm = self.bot.profile_manager
        await self._run_profile_action(interaction, lambda s: pm.activate(s, name))

    @profile_group.command(name="list", description="List your profiles.")
    async def profile_list(self, interaction: discord.Interaction):
        try:
            settings = await self.bot.settings_service.load(str(interaction.guild_id), str(interaction.user.id))
            pm = self.bot.profile_manager
            active = pm.active_profile_name(settings)
            marker = self._text(interaction, "trash_profiles_active_marker")
            lines = [f"**{self._text(interaction, 'trash_profiles_title')}**"]
            for profile_name in pm.list_profile_names(settings):
                lines.append(f"- {profile_name} {marker}" if profile_name == active else f"- {profile_name}")
            await self._reply(interaction, "\n".join(lines))
        except Exception as e:
            await self._reply_error(interaction, e)


async def setup(bot: "AutoTrashBot"):
    await bot.add_cog(TrashCog(bot))
    logger.info("TrashCog loaded.")
