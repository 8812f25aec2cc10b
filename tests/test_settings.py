# tests/test_settings.py

"""Tests for the Settings configuration class."""

import os
import unittest
from pathlib import Path
from unittest.mock import patch

from src.config.settings import Settings, _env_int, _env_list, _feed_source


class TestSettings(unittest.TestCase):
    """Verify Settings constants and source registry."""

    def test_request_delay_is_positive_float(self) -> None:
        """REQUEST_DELAY must be a positive number."""
        self.assertIsInstance(Settings.REQUEST_DELAY, float)
        self.assertGreater(Settings.REQUEST_DELAY, 0)

    def test_request_timeout_is_positive_int(self) -> None:
        """REQUEST_TIMEOUT must be a positive integer."""
        self.assertIsInstance(Settings.REQUEST_TIMEOUT, int)
        self.assertGreater(Settings.REQUEST_TIMEOUT, 0)

    def test_max_retries_is_positive(self) -> None:
        """MAX_RETRIES must be >= 1."""
        self.assertGreaterEqual(Settings.MAX_RETRIES, 1)

    def test_adapters_run_sequentially_by_default(self) -> None:
        """One adapter at a time unless configured otherwise."""
        self.assertEqual(Settings.MAX_CONCURRENT_ADAPTERS, 1)
        self.assertGreater(Settings.ADAPTER_TIMEOUT, 0)

    def test_available_sources_has_six(self) -> None:
        """Registry must contain exactly 6 sources."""
        self.assertEqual(len(Settings.AVAILABLE_SOURCES), 6)

    def test_each_source_has_required_keys(self) -> None:
        """Every source must have id, label, adapter and location keys."""
        for src in Settings.AVAILABLE_SOURCES:
            with self.subTest(src=src.get("id", "?")):
                for key in ("id", "label", "adapter", "location"):
                    self.assertIn(key, src)

    def test_source_ids_are_unique(self) -> None:
        """No duplicate source ids."""
        ids = [s["id"] for s in Settings.AVAILABLE_SOURCES]
        self.assertEqual(len(ids), len(set(ids)))

    def test_adapter_paths_are_dotted(self) -> None:
        """Adapter entries are importable dotted class paths."""
        for src in Settings.AVAILABLE_SOURCES:
            with self.subTest(src=src["id"]):
                self.assertTrue(src["adapter"].startswith("src.adapters."))

    def test_path_constants_are_paths(self) -> None:
        """Path-typed settings are Path instances."""
        self.assertIsInstance(Settings.BASE_DIR, Path)
        self.assertIsInstance(Settings.DATA_DIR, Path)
        self.assertIsInstance(Settings.FEEDS_DIR, Path)
        self.assertIsInstance(Settings.LOGS_DIR, Path)

    def test_default_headers_request_json(self) -> None:
        """DEFAULT_HEADERS ask for JSON in Italian locale."""
        self.assertEqual(
            Settings.DEFAULT_HEADERS["Accept"], "application/json"
        )
        self.assertIn("Accept-Language", Settings.DEFAULT_HEADERS)

    def test_every_registered_site_has_sample_feed(self) -> None:
        """feeds/ ships a JSON file for each registered site."""
        feeds_dir = Settings.BASE_DIR / "feeds"
        for src in Settings.AVAILABLE_SOURCES:
            with self.subTest(src=src["id"]):
                self.assertTrue((feeds_dir / f"{src['id']}.json").exists())


class TestFeedSource(unittest.TestCase):
    """Registry entries for file and HTTP feeds."""

    def test_file_entry_by_default(self) -> None:
        """Without a base URL the feed is read from FEEDS_DIR."""
        entry = _feed_source("leasys", "Leasys")
        self.assertEqual(
            entry["adapter"],
            "src.adapters.feed_file_adapter.FeedFileAdapter",
        )
        self.assertEqual(entry["location"], "leasys.json")

    def test_http_entry_with_base_url(self) -> None:
        """A base URL switches the entry to the HTTP adapter."""
        entry = _feed_source(
            "leasys", "Leasys", "https://feeds.example.com/lease/",
        )
        self.assertEqual(
            entry["adapter"],
            "src.adapters.http_feed_adapter.HttpFeedAdapter",
        )
        self.assertEqual(
            entry["location"],
            "https://feeds.example.com/lease/leasys.json",
        )


class TestEnvHelpers(unittest.TestCase):
    """Environment parsing helpers."""

    def test_env_int_reads_value(self) -> None:
        """A numeric variable is parsed."""
        with patch.dict(os.environ, {"LD_TEST_INT": " 275 "}):
            self.assertEqual(_env_int("LD_TEST_INT", 1), 275)

    def test_env_int_falls_back(self) -> None:
        """Missing or non-numeric values use the default."""
        with patch.dict(os.environ, {"LD_TEST_INT": "cheap"}):
            self.assertEqual(_env_int("LD_TEST_INT", 100), 100)
        os.environ.pop("LD_TEST_INT", None)
        self.assertEqual(_env_int("LD_TEST_INT", 100), 100)

    def test_env_list_upper_cases_and_trims(self) -> None:
        """Comma lists are trimmed, upper-cased and blank-free."""
        with patch.dict(os.environ, {"LD_TEST_LIST": " bmw, ,Audi ,"}):
            self.assertEqual(_env_list("LD_TEST_LIST"), ["BMW", "AUDI"])

    def test_env_list_missing_is_empty(self) -> None:
        """An unset variable yields an empty list."""
        os.environ.pop("LD_TEST_LIST", None)
        self.assertEqual(_env_list("LD_TEST_LIST"), [])


if __name__ == "__main__":
    unittest.main()
