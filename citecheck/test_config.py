import os
import unittest
from unittest.mock import patch

from citecheck.config import KNOWN_SOURCES, Settings


class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            s = Settings.from_env()
        self.assertEqual(s.log_level, "INFO")
        self.assertEqual(s.max_verify, 25)
        self.assertEqual(s.verify_workers, 4)
        self.assertEqual(s.verify_timeout_seconds, 15.0)
        self.assertEqual(s.verify_sources, KNOWN_SOURCES)

    def test_overrides(self) -> None:
        env = {
            "CITECHECK_MAX_VERIFY": "50",
            "CITECHECK_VERIFY_TIMEOUT": "3.5",
            "CITECHECK_MAILTO": "  me@example.org ",
            "CITECHECK_VERIFY_SOURCES": "OpenAlex, crossref, openalex",
        }
        with patch.dict(os.environ, env, clear=True):
            s = Settings.from_env()
        self.assertEqual(s.max_verify, 50)
        self.assertEqual(s.verify_timeout_seconds, 3.5)
        self.assertEqual(s.mailto, "me@example.org")
        self.assertEqual(s.verify_sources, ("openalex", "crossref"))

    def test_invalid_values(self) -> None:
        for env in (
            {"CITECHECK_MAX_VERIFY": "lots"},
            {"CITECHECK_MAX_VERIFY": "500"},
            {"CITECHECK_VERIFY_WORKERS": "0"},
            {"CITECHECK_VERIFY_TIMEOUT": "0.1"},
            {"CITECHECK_VERIFY_SOURCES": "crossref,scopus"},
        ):
            with patch.dict(os.environ, env, clear=True):
                with self.assertRaises(ValueError):
                    Settings.from_env()


if __name__ == "__main__":
    unittest.main()
