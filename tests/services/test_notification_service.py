import unittest
from unittest.mock import AsyncMock, MagicMock

from autotrash.game.models.item_stack import ItemStack
from autotrash.game.rules.trash_matcher import TrashRemovalReport, RemovedItemEntry
from autotrash.services.notification_service import NotificationService, MAX_MESSAGE_LENGTH


class TestNotificationService(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.mock_send = AsyncMock()
        self.mock_factory = MagicMock(return_value=self.mock_send)
        self.service = NotificationService(send_callback_factory=self.mock_factory)

        self.report = TrashRemovalReport()
        self.report.record_slot(3)
        self.report.record_removed(ItemStack(item_id="Rock", quantity=5), 4)
        self.report.record_removed(ItemStack(item_id="Dirt", quantity=2), 1)

    async def test_send_trash_report(self):
        sent = await self.service.send_trash_report("1234", self.report, "en")

        self.assertTrue(sent)
        self.mock_factory.assert_called_once_with(1234)
        content = self.mock_send.call_args.kwargs["content"]
        self.assertTrue(content.startswith("**Auto-trashed items**"))
        self.assertIn("Rock x4", content)
        self.assertIn("Dirt x1", content)
        self.assertLess(content.index("Rock"), content.index("Dirt"))

    async def test_empty_report_is_not_sent(self):
        report = TrashRemovalReport()
        report.record_slot(1)

        self.assertFalse(await self.service.send_trash_report("1234", report))
        self.mock_send.assert_not_awaited()

    async def test_server_switch_disables_reports(self):
        service = NotificationService(send_callback_factory=self.mock_factory, show_pickup_notifications=False)

        self.assertFalse(await service.send_trash_report("1234", self.report))
        self.assertFalse(await service.send_trashed_stack("1234", ItemStack(item_id="Rock")))
        self.mock_factory.assert_not_called()

    async def test_send_trashed_stack(self):
        self.assertTrue(await self.service.send_trashed_stack("99", ItemStack(item_id="Rock", quantity=12)))
        self.assertIn("Rock x12", self.mock_send.call_args.kwargs["content"])
        self.assertFalse(await self.service.send_trashed_stack("99", None))

    async def test_delivery_failure_is_reported_not_raised(self):
        self.mock_send.side_effect = RuntimeError("DMs closed")
        with self.assertLogs("autotrash.services.notification_service", level="ERROR"):
            sent = await self.service.send_trash_report("1234", self.report)
        self.assertFalse(sent)

    def test_format_report_truncates(self):
        entries = [
            RemovedItemEntry(item_id=f"Item{i:04d}", total_quantity=i + 1, sample_stack=ItemStack(item_id=f"Item{i:04d}"))
            for i in range(500)
        ]
        content = self.service.format_report(entries)
        self.assertTrue(content.endswith("\n..."))
        self.assertLessEqual(len(content), MAX_MESSAGE_LENGTH + 4)


if __name__ == '__main__':
    unittest.main()
