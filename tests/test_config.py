#!/usr/bin/env python3

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from expecttest import TestCase

from commitmcp import config


class TestConfig(TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        patcher = mock.patch.dict(
            os.environ, {"COMMITMCP_CONFIG_DIR": self.temp_dir.name}
        )
        patcher.start()
        self.addCleanup(patcher.stop)
        self.rc_path = Path(self.temp_dir.name) / "commitmcprc"

    def test_config_dir_is_used(self):
        self.rc_path.write_text("")
        self.assertEqual(config.get_config_path(), self.rc_path)

    def test_defaults_without_file(self):
        with mock.patch.object(config, "get_config_path", return_value=self.rc_path):
            loaded = config.load_config()
        self.assertEqual(loaded["logger"]["verbosity"], "INFO")
        self.assertIsNone(loaded["prompt"]["template"])

    def test_user_values_are_merged(self):
        self.rc_path.write_text(
            '[logger]\nverbosity = "DEBUG"\n\n[prompt]\ntemplate = "Write {diff}"\n'
        )
        self.assertEqual(config.get_logger_verbosity(), "DEBUG")
        self.assertEqual(config.get_prompt_template(), "Write {diff}")
        # Untouched defaults survive the merge
        self.assertTrue(config.get_logger_path())
        self.assertIsNone(config.get_conventional_prompt_template())

    def test_defaults_are_not_mutated(self):
        self.rc_path.write_text('[logger]\nverbosity = "ERROR"\n')
        config.load_config()
        self.assertEqual(config.DEFAULT_CONFIG["logger"]["verbosity"], "INFO")

    def test_invalid_toml_falls_back_to_defaults(self):
        self.rc_path.write_text("[logger\nverbosity = ")
        with self.assertLogs(level="WARNING"):
            loaded = config.load_config()
        self.assertEqual(loaded["logger"]["verbosity"], "INFO")


if __name__ == "__main__":
    unittest.main()
