import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from disk_info.services.config_service import (
    MAX_REFRESH_INTERVAL_S,
    ConfigPaths,
    ConfigService,
    VolumeSettings,
)


class TestConfigService(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "cfg" / "config.json"
        self.service = ConfigService(ConfigPaths(path=self.path))

    def tearDown(self):
        self._tmp.cleanup()

    def test_default_path_uses_xdg_config_home(self):
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": "/tmp/xdg"}):
            self.assertEqual(ConfigService.default_path(), Path("/tmp/xdg/disk_info/config.json"))

    def test_missing_or_invalid_file_loads_empty(self):
        self.assertEqual(self.service.load(), {})
        self.path.parent.mkdir(parents=True)
        self.path.write_text("[1, 2]", encoding="utf-8")
        self.assertEqual(self.service.load(), {})
        self.path.write_text("{not json", encoding="utf-8")
        self.assertEqual(self.service.load(), {})

    def test_save_and_load_round_trip(self):
        self.service.save({"volumes": {"refresh_interval_s": 5}})
        self.assertEqual(self.service.load(), {"volumes": {"refresh_interval_s": 5}})
        self.assertFalse(self.path.with_name("config.json.tmp").exists())

    def test_volume_settings_defaults(self):
        settings = self.service.load_volume_settings()
        self.assertEqual(settings, VolumeSettings())
        self.assertEqual(settings.refresh_interval_s, 30)
        self.assertEqual(settings.usage_warn_percent, 90)
        self.assertEqual(settings.ignored_fstypes, [])

    def test_volume_settings_tolerate_bad_values(self):
        self.service.save(
            {"volumes": {"refresh_interval_s": "soon", "usage_warn_percent": "75", "ignored_fstypes": "squashfs"}}
        )
        settings = self.service.load_volume_settings()
        self.assertEqual(settings.refresh_interval_s, 30)
        self.assertEqual(settings.usage_warn_percent, 75)
        self.assertEqual(settings.ignored_fstypes, [])

    def test_volume_settings_ignore_infinite_values(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text(
            '{"volumes": {"refresh_interval_s": Infinity, "usage_warn_percent": -Infinity}}', encoding="utf-8"
        )
        settings = self.service.load_volume_settings()
        self.assertEqual(settings.refresh_interval_s, 30)
        self.assertEqual(settings.usage_warn_percent, 90)

    def test_refresh_interval_fits_timer_range(self):
        self.service.save({"volumes": {"refresh_interval_s": 5000000}})
        settings = self.service.load_volume_settings()
        self.assertEqual(settings.refresh_interval_s, MAX_REFRESH_INTERVAL_S)
        self.assertLessEqual(settings.refresh_interval_s * 1000, 2**31 - 1)

        self.service.save({"volumes": {"refresh_interval_s": 0}})
        self.assertEqual(self.service.load_volume_settings().refresh_interval_s, 1)

    def test_save_volume_settings_keeps_unknown_keys(self):
        self.service.save({"volumes": {"custom": True}, "other": 1})
        self.service.save_volume_settings(VolumeSettings(refresh_interval_s=10, ignored_fstypes=["squashfs"]))

        raw = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual(raw["other"], 1)
        self.assertTrue(raw["volumes"]["custom"])
        self.assertEqual(self.service.load_volume_settings().ignored_fstypes, ["squashfs"])
        self.assertEqual(self.service.load_volume_settings().refresh_interval_s, 10)


if __name__ == "__main__":
    unittest.main()
