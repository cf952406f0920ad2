# tests/test_main.py
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from studio_ledger.core.fixtures import FixtureBackend
from studio_ledger.core.store import LedgerStore
from studio_ledger.main import create_app


class TestWebhookApp(unittest.TestCase):
    def setUp(self):
        self.store = LedgerStore(FixtureBackend(seed=False))
        self.ptb_application = MagicMock()
        self.ptb_application.bot_data = {"store": self.store}
        self.ptb_application.process_update = AsyncMock()
        self.client = create_app(self.ptb_application).test_client()

    def test_health_reports_collection_status(self):
        self.store.fetch_clients()

        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["clients"], "ready")
        self.assertEqual(response.get_json()["expenses"], "idle")

    @patch("studio_ledger.main.Update.de_json")
    def test_webhook_forwards_update(self, mock_de_json):
        response = self.client.post("/webhook", json={"update_id": 1})

        self.assertEqual(response.status_code, 200)
        mock_de_json.assert_called_once_with({"update_id": 1}, self.ptb_application.bot)
        self.ptb_application.process_update.assert_awaited_once_with(mock_de_json.return_value)

    def test_webhook_requires_json(self):
        response = self.client.post("/webhook", data="oi", content_type="text/plain")
        self.assertEqual(response.status_code, 400)

    @patch("studio_ledger.main.Update.de_json", side_effect=ValueError("bad update"))
    def test_webhook_failure(self, _mock_de_json):
        response = self.client.post("/webhook", json={"update_id": 1})
        self.assertEqual(response.status_code, 500)


if __name__ == "__main__":
    unittest.main()
