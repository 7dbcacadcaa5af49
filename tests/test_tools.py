"""Tests for tool configuration loading, validation and serialization."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from toolpost.tools import (
    TOOLS_PATH, ToolConfig, ToolConfigError, ToolSettings, ToolType,
    load_tools, save_tools, tools_from_dict, tools_to_dict,
)


class TestToolConfig(unittest.TestCase):

    def setUp(self):
        self.config = ToolConfig(tools=[
            ToolSettings(type=ToolType.NOZZLE, preheat_time=20),
            ToolSettings(type=ToolType.SPINDLE),
        ])

    def test_one_based_lookup(self):
        self.assertEqual(len(self.config), 2)
        self.assertTrue(self.config.get(1).preheats)
        self.assertIs(self.config.get(2).type, ToolType.SPINDLE)
        self.assertEqual(list(self.config.numbers()), [1, 2])

    def test_range_and_nozzle_checks(self):
        self.assertFalse(self.config.in_range(0))
        self.assertFalse(self.config.in_range(3))
        self.assertFalse(self.config.in_range(None))
        self.assertTrue(self.config.is_nozzle(1))
        self.assertFalse(self.config.is_nozzle(2))
        self.assertFalse(self.config.is_nozzle(-1))
        with self.assertRaises(KeyError):
            self.config.get(3)


class TestLoader(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, data) -> Path:
        path = self.tmp / "tools.json"
        path.write_text(json.dumps(data) if not isinstance(data, str) else data,
                        encoding="utf-8")
        return path

    def test_bundled_config_loads(self):
        config = load_tools(TOOLS_PATH)
        self.assertGreater(len(config), 0)
        self.assertTrue(any(t.is_nozzle for t in config.tools))

    def test_load_and_defaults(self):
        path = self._write({"tools": [
            {"type": "nozzle", "standby_temperature": 160, "preheat_time": 25},
            {"type": "laser"},
        ]})
        config = load_tools(path)
        self.assertEqual(config.get(1).standby_temperature, 160)
        self.assertEqual(config.get(1).active_temperature, 0)
        self.assertFalse(config.get(1).auto_clean)
        self.assertIs(config.get(2).type, ToolType.LASER)

    def test_bare_list_accepted(self):
        config = tools_from_dict([{"type": "nozzle"}])
        self.assertEqual(len(config), 1)

    def test_unknown_type_rejected(self):
        path = self._write({"tools": [{"type": "airbrush"}]})
        with self.assertRaises(ToolConfigError) as ctx:
            load_tools(path)
        self.assertTrue(any("tools.0.type" in p for p in ctx.exception.problems))

    def test_negative_preheat_rejected(self):
        with self.assertRaises(ToolConfigError):
            tools_from_dict({"tools": [{"type": "nozzle", "preheat_time": -5}]})

    def test_empty_tool_list_rejected(self):
        with self.assertRaises(ToolConfigError):
            tools_from_dict({"tools": []})

    def test_malformed_json(self):
        path = self._write("{not json")
        with self.assertRaises(ToolConfigError) as ctx:
            load_tools(path)
        self.assertIn("Parse error", str(ctx.exception))

    def test_missing_file(self):
        with self.assertRaises(ToolConfigError):
            load_tools(self.tmp / "missing.json")

    def test_save_keeps_discovered_temperatures(self):
        config = tools_from_dict({"tools": [{"type": "nozzle", "standby_temperature": 150}]})
        config.get(1).active_temperature = 215
        path = save_tools(config, self.tmp / "saved" / "tools.json")
        reloaded = load_tools(path)
        self.assertEqual(reloaded.get(1).active_temperature, 215)
        self.assertEqual(tools_to_dict(reloaded)["tools"][0]["type"], "nozzle")


if __name__ == "__main__":
    unittest.main()
