from __future__ import annotations

import os
from pathlib import Path
import tempfile
import unittest
from unittest import mock

from drawkit.config import CONFIG_ENV_VAR, DEFAULT_CONFIG, DrawkitConfig, load_config, validate_config


class ConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        self.assertEqual(DEFAULT_CONFIG.cache_wipe_interval_s, 3 * 24 * 60 * 60.0)
        self.assertEqual(DEFAULT_CONFIG.placeholder_ttl_s, 300.0)
        self.assertEqual(validate_config(), DEFAULT_CONFIG)

    def test_overrides_are_validated(self) -> None:
        config = validate_config({"supersample": 2, "placeholder_ttl_s": 60})
        self.assertEqual(config.supersample, 2)
        self.assertEqual(config.placeholder_ttl_s, 60.0)
        with self.assertRaisesRegex(ValueError, "Unknown config key"):
            validate_config({"supersampling": 2})
        with self.assertRaisesRegex(ValueError, "positive number"):
            validate_config({"fetch_timeout_s": 0})
        with self.assertRaisesRegex(ValueError, "supersample"):
            validate_config({"supersample": 16})
        with self.assertRaisesRegex(ValueError, "encode_quality"):
            validate_config({"encode_quality": True})

    def test_load_config_reads_drawkit_table(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "drawkit.toml"
            path.write_text('[drawkit]\nsupersample = 3\ndefault_font = "bold 18px serif"\n')
            config = load_config(path)
        self.assertEqual(config, DrawkitConfig(supersample=3, default_font="bold 18px serif"))

    def test_load_config_accepts_root_table(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "drawkit.toml"
            path.write_text("encode_quality = 75\n")
            self.assertEqual(load_config(path).encode_quality, 75)

    def test_env_var_names_the_config_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "env.toml"
            path.write_text("[drawkit]\nfetch_timeout_s = 2.5\n")
            with mock.patch.dict(os.environ, {CONFIG_ENV_VAR: str(path)}):
                self.assertEqual(load_config().fetch_timeout_s, 2.5)
        with mock.patch.dict(os.environ, {CONFIG_ENV_VAR: ""}):
            self.assertEqual(load_config(), DEFAULT_CONFIG)

    def test_missing_file_raises(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_config("/definitely/not/drawkit.toml")


if __name__ == "__main__":
    unittest.main()
