"""Tests for cssbench.export: Markdown and CSV export."""

from __future__ import annotations

import csv
import io
import unittest

from cssbench.export import export_csv, export_markdown

DOC = {
    "small": {"zcss": 1.0, "sass": None},
    "large": {"zcss": 12.5, "sass": 40.0},
}


class TestExportMarkdown(unittest.TestCase):
    def test_table_layout(self) -> None:
        md = export_markdown(DOC)
        lines = md.splitlines()
        self.assertEqual(lines[0], "| Tool | Small | Large |")
        self.assertEqual(lines[1], "|---|---:|---:|")
        self.assertEqual(lines[2], "| zcss | 1.0ms | 12.5ms |")
        self.assertEqual(lines[3], "| sass | N/A | 40.0ms |")
        self.assertTrue(md.endswith("\n"))

    def test_title_and_labels(self) -> None:
        md = export_markdown(DOC, labels={"sass": "Sass"}, title="CSS")
        self.assertTrue(md.startswith("## CSS\n\n"))
        self.assertIn("| Sass |", md)

    def test_tool_missing_from_a_size(self) -> None:
        md = export_markdown({"small": {"a": 1.0}, "large": {"a": 2.0, "b": 3.0}})
        self.assertIn("| b | N/A | 3.0ms |", md)


class TestExportCsv(unittest.TestCase):
    def test_long_format(self) -> None:
        rows = list(csv.reader(io.StringIO(export_csv(DOC))))
        self.assertEqual(rows[0], ["size", "tool", "mean_ms"])
        self.assertEqual(rows[1], ["small", "zcss", "1.000000"])
        self.assertEqual(rows[2], ["small", "sass", ""])
        self.assertEqual(len(rows), 5)

    def test_empty_document(self) -> None:
        self.assertEqual(export_csv({}).strip(), "size,tool,mean_ms")


if __name__ == "__main__":
    unittest.main()
