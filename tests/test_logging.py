import json
import logging
import os
import unittest
from unittest.mock import patch

from ledger.config import Settings
from ledger.core.logging import JsonFormatter, setup_logging


class LoggingSetupTest(unittest.TestCase):
    def setUp(self):
        root = logging.getLogger()
        self._handlers = list(root.handlers)
        self._level = root.level

    def tearDown(self):
        root = logging.getLogger()
        root.handlers[:] = self._handlers
        root.setLevel(self._level)

    def test_json_formatter_payload(self):
        record = logging.LogRecord("ledger.test", logging.WARNING, __file__, 1, "stock at %d", (3,), None)
        payload = json.loads(JsonFormatter().format(record))
        self.assertEqual(payload["level"], "WARNING")
        self.assertEqual(payload["logger"], "ledger.test")
        self.assertEqual(payload["message"], "stock at 3")

    def test_json_formatter_adds_ledger_context(self):
        record = logging.LogRecord("ledger.test", logging.INFO, __file__, 1, "inserted", (), None)
        record.item_id = 7
        formatter = JsonFormatter(app_name="Corner Shop", environment="test")

        payload = json.loads(formatter.format(record))

        self.assertEqual(payload["app"], "Corner Shop")
        self.assertEqual(payload["environment"], "test")
        self.assertEqual(payload["item_id"], 7)
        self.assertNotIn("delta", payload)

    def test_setup_logging_uses_application_settings(self):
        setup_logging(Settings(LOG_JSON=True, APP_NAME="Corner Shop", ENVIRONMENT="staging"))
        formatter = logging.getLogger().handlers[0].formatter
        record = logging.LogRecord("ledger.test", logging.INFO, __file__, 1, "ready", (), None)

        payload = json.loads(formatter.format(record))

        self.assertEqual(payload["app"], "Corner Shop")
        self.assertEqual(payload["environment"], "staging")

    def test_setup_logging_installs_single_handler(self):
        setup_logging(Settings(LOG_LEVEL="debug", LOG_JSON=True))
        root = logging.getLogger()
        self.assertEqual(root.level, logging.DEBUG)
        self.assertEqual(len(root.handlers), 1)
        self.assertIsInstance(root.handlers[0].formatter, JsonFormatter)

    def test_settings_read_environment(self):
        with patch.dict(os.environ, {"STOCK_ATOMIC_UPDATES": "true", "DATABASE_POOL_SIZE": "9"}):
            settings = Settings()
        self.assertTrue(settings.STOCK_ATOMIC_UPDATES)
        self.assertEqual(settings.DATABASE_POOL_SIZE, 9)


if __name__ == "__main__":
    unittest.main()
