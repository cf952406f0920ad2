# tests/test_config.py
import logging
import unittest
from unittest.mock import patch

from studio_ledger import config


class TestBackendConfigured(unittest.TestCase):
    def test_real_credentials(self):
        self.assertTrue(config.is_backend_configured("https://abcd.supabase.co", "anon-key"))

    def test_missing_credentials(self):
        self.assertFalse(config.is_backend_configured("", "anon-key"))
        self.assertFalse(config.is_backend_configured("https://abcd.supabase.co", ""))

    def test_placeholder_credentials(self):
        self.assertFalse(config.is_backend_configured("https://placeholder.supabase.co", "anon-key"))
        self.assertFalse(config.is_backend_configured("https://abcd.supabase.co", "placeholder_key"))

    @patch.object(config, "SUPABASE_KEY", "anon-key")
    @patch.object(config, "SUPABASE_URL", "https://abcd.supabase.co")
    def test_defaults_to_environment_values(self):
        self.assertTrue(config.is_backend_configured())

    @patch.object(config, "SUPABASE_KEY", None)
    @patch.object(config, "SUPABASE_URL", None)
    def test_unset_environment(self):
        self.assertFalse(config.is_backend_configured())


class TestConfigureLogging(unittest.TestCase):
    @patch("studio_ledger.config.logging.basicConfig")
    def test_level_and_httpx(self, mock_basic_config):
        config.configure_logging("debug")

        self.assertEqual(mock_basic_config.call_args.kwargs["level"], "DEBUG")
        self.assertEqual(logging.getLogger("httpx").level, logging.WARNING)


if __name__ == "__main__":
    unittest.main()
