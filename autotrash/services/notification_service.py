import logging
from typing import Callable, Awaitable, Any, Optional, List

from autotrash.game.models.item_stack import ItemStack
from autotrash.game.rules.trash_matcher import TrashRemovalReport, RemovedItemEntry
from autotrash.utils.i18n_utils import get_localized_string, DEFAULT_BOT_LANGUAGE

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 1900


class NotificationService:
    """
    Delivers auto-trash reports to players.
    """
    def __init__(self,
                 send_callback_factory: Callable[[int], Callable[..., Awaitable[Any]]],
                 show_pickup_notifications: bool = True
                ):
        """
        Initializes the NotificationService.

        Args:
            send_callback_factory: A factory function that takes a Discord user ID (int) and
                                   returns an awaitable function (e.g., a user's DM send method)
                                   which can be called with `content`.
            show_pickup_notifications: Server-wide switch; when off, no report is ever sent.
        """
        self.send_callback_factory = send_callback_factory
        self.show_pickup_notifications = show_pickup_notifications
        logger.info("NotificationService initialized.")

    def format_report(self, entries: List[RemovedItemEntry], language: str = DEFAULT_BOT_LANGUAGE) -> str:
        title = get_localized_string("trash_notification_title", language)
        lines = [f"**{title}**"]
        for entry in entries:
            lines.append("🗑️ " + get_localized_string(
                "trash_notification_entry", language,
                item_id=entry.item_id, quantity=entry.total_quantity
            ))
        content = "\n".join(lines)
        if len(content) > MAX_MESSAGE_LENGTH:
            content = content[:MAX_MESSAGE_LENGTH] + "\n..."
        return content

    async def send_trash_report(self, user_id: str, report: TrashRemovalReport,
                                language: str = DEFAULT_BOT_LANGUAGE) -> bool:
        """Sends one message listing every trashed item. Returns True if something was sent."""
        if not self.show_pickup_notifications:
            return False
        entries = report.entries()
        if not entries:
            return False
        return await self._send(user_id, self.format_report(entries, language))

    async def send_trashed_stack(self, user_id: str, stack: Optional[ItemStack],
                                 language: str = DEFAULT_BOT_LANGUAGE) -> bool:
        if not self.show_pickup_notifications or stack is None:
            return False
        entry = RemovedItemEntry(item_id=stack.item_id, total_quantity=stack.quantity, sample_stack=stack)
        return await self._send(user_id, self.format_report([entry], language))

    async def _send(self, user_id: str, content: str) -> bool:
        try:
            send_func = self.send_callback_factory(int(user_id))
            await send_func(content=content)
            logger.info(f"NotificationService: sent auto-trash notification to user {user_id}.")
            return True
        except Exception as e:
            logger.error(f"NotificationService: failed to notify user {user_id}: {e}", exc_info=True)
            return False
