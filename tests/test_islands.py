"""Tests for the island combiner and tool change sequences.

Validates:
  - layer 0 is left untouched
  - lines are regrouped into contiguous runs, ascending by tool number
  - exactly one change sequence per tool transition, carried across layers
  - change sequence content for preheat / auto-clean combinations
"""

from __future__ import annotations

import unittest

from toolpost.gcode import (
    NO_TOOL, GCodeLayer, GCodeLine, combine_islands, ingest, tool_change_sequence,
)
from toolpost.tools import ToolSettings, ToolType
from tests.gcode_fixture import (
    make_stream, make_tools, make_two_tool_config, make_two_tool_gcode, nozzle,
)


def _contents(layer):
    return [line.content for line in layer.lines]


def _runs(layer):
    """Tool numbers of consecutive runs in *layer* (marker excluded)."""
    runs: list[int] = []
    for line in layer.lines[1:]:
        if not runs or runs[-1] != line.tool:
            runs.append(line.tool)
    return runs


class TestToolChangeSequence(unittest.TestCase):

    def _texts(self, tools, prev, nxt):
        return [line.content for line in tool_change_sequence(tools, prev, nxt)]

    def test_first_tool_plain(self):
        tools = make_tools(nozzle(), nozzle())
        self.assertEqual(self._texts(tools, NO_TOOL, 2), ["T2", "M116 P2"])

    def test_plain_change_without_preheat(self):
        tools = make_tools(nozzle(), nozzle())
        self.assertEqual(self._texts(tools, 1, 2), ["T2", "M116 P2"])

    def test_preheated_tools_skip_wait_and_park_previous(self):
        tools = make_tools(nozzle(preheat_time=20), nozzle(preheat_time=20))
        self.assertEqual(self._texts(tools, 1, 2), ["G10 P1 R150", "T2"])

    def test_auto_clean_first_tool(self):
        tools = make_tools(nozzle(), nozzle(preheat_time=20, auto_clean=True))
        self.assertEqual(
            self._texts(tools, NO_TOOL, 2),
            ["T2 P0", "M116 P2", 'M98 P"tprime2.g"'],
        )

    def test_auto_clean_preheated(self):
        tools = make_tools(
            nozzle(preheat_time=20, standby_temperature=140),
            nozzle(preheat_time=20, auto_clean=True),
        )
        self.assertEqual(self._texts(tools, 1, 2), ["G10 P1 R140", 'M98 P"tprime2.g"'])

    def test_auto_clean_without_preheat_waits(self):
        tools = make_tools(nozzle(), nozzle(auto_clean=True))
        self.assertEqual(
            self._texts(tools, 1, 2),
            ["T2 P0", "M116 P2", 'M98 P"tprime2.g"'],
        )

    def test_sequence_tagged_with_next_tool(self):
        tools = make_tools(nozzle(preheat_time=5), nozzle())
        seq = tool_change_sequence(tools, 1, 2, feedrate=25.0)
        self.assertTrue(all(line.tool == 2 for line in seq))
        self.assertTrue(all(line.feedrate == 25.0 for line in seq))


class TestCombineTwoTools(unittest.TestCase):

    def setUp(self):
        self.tools = make_two_tool_config()
        ingested = ingest(make_stream(make_two_tool_gcode()), self.tools)
        self.header = _contents(ingested.layers[0])
        self.layers = combine_islands(ingested.layers, self.tools)

    def test_header_untouched(self):
        self.assertEqual(_contents(self.layers[0]), self.header)

    def test_layer_one_regrouped(self):
        self.assertEqual(_contents(self.layers[1]), [
            "; layer 1, Z = 0.200",
            "T1",
            "M116 P1",
            "G1 Z0.200 F1200",
            "G1 X10 Y10 F3000",
            "G1 X20 Y10 E1.0 F1200",
            "G1 X50 Y50 E1.0",
            "T2",
            "M116 P2",
            "G1 X30 Y30 F3000",
            "G1 X40 Y30 E1.0 F1200",
        ])

    def test_layer_two_changes_back_to_first_tool(self):
        self.assertEqual(_contents(self.layers[2]), [
            "; layer 2, Z = 0.400",
            "T1",
            "M116 P1",
            "G1 Z0.400 F1200",
            "G1 X60 Y60 E1.0",
            "T2",
            "M116 P2",
            "G1 X70 Y70 E1.0",
        ])

    def test_runs_contiguous_and_ascending(self):
        for layer in self.layers[1:]:
            with self.subTest(layer=layer.number):
                runs = _runs(layer)
                self.assertEqual(runs, sorted(set(runs)))

    def test_marker_tagged_with_tool_active_at_layer_start(self):
        self.assertEqual(self.layers[1].marker.tool, NO_TOOL)
        self.assertEqual(self.layers[2].marker.tool, 2)


class TestCombineEdgeCases(unittest.TestCase):

    def _layer(self, number, entries):
        layer = GCodeLayer(number)
        layer.add_line(f"; layer {number}, Z = {number * 0.2:.3f}")
        for text, tool in entries:
            layer.add_line(text, tool=tool, feedrate=20.0)
        return layer

    def test_active_tool_carries_across_layers(self):
        tools = make_tools(nozzle(), nozzle())
        layers = [
            GCodeLayer(0, [GCodeLine("; header")]),
            self._layer(1, [("G1 X1 E1", 2)]),
            self._layer(2, [("G1 X2 E1", 2)]),
        ]
        combined = combine_islands(layers, tools)
        self.assertEqual(_contents(combined[1])[1:], ["T2", "M116 P2", "G1 X1 E1"])
        self.assertEqual(_contents(combined[2])[1:], ["G1 X2 E1"])

    def test_change_inserted_before_first_motion_only(self):
        tools = make_tools(nozzle(), nozzle())
        layers = [
            GCodeLayer(0),
            self._layer(1, [("G10 P2 S210", 2), ("G1 X1 E1", 2), ("G1 X2 E1", 2)]),
        ]
        combined = combine_islands(layers, tools)
        self.assertEqual(_contents(combined[1])[1:], [
            "G10 P2 S210", "T2", "M116 P2", "G1 X1 E1", "G1 X2 E1",
        ])

    def test_untagged_and_non_nozzle_lines_dropped(self):
        tools = make_tools(nozzle(), ToolSettings(type=ToolType.LASER))
        layers = [
            GCodeLayer(0),
            self._layer(1, [("G1 X1", NO_TOOL), ("G1 X2 E1", 1), ("G1 X3", 2)]),
        ]
        combined = combine_islands(layers, tools)
        self.assertEqual(_contents(combined[1])[1:], ["T1", "M116 P1", "G1 X2 E1"])


if __name__ == "__main__":
    unittest.main()
