"""Tests for cssbench.display: terminal formatting."""

from __future__ import annotations

import unittest

from cssbench.display import (
    NOT_APPLICABLE,
    format_bytes,
    format_duration,
    format_header,
    format_report,
)


class TestFormatDuration(unittest.TestCase):
    def test_none_is_not_applicable(self) -> None:
        self.assertEqual(format_duration(None), NOT_APPLICABLE)
        self.assertEqual(NOT_APPLICABLE, "N/A")

    def test_one_decimal(self) -> None:
        self.assertEqual(format_duration(12.345), "12.3ms")
        self.assertEqual(format_duration(1500.0), "1500.0ms")

    def test_sub_millisecond(self) -> None:
        self.assertEqual(format_duration(0.1234), "0.123ms")

    def test_zero(self) -> None:
        self.assertEqual(format_duration(0.0), "0.000ms")


class TestFormatBytes(unittest.TestCase):
    def test_bytes(self) -> None:
        self.assertEqual(format_bytes(45), "45 bytes")

    def test_kilobytes(self) -> None:
        self.assertEqual(format_bytes(2048), "~2.0KB")

    def test_megabytes(self) -> None:
        self.assertEqual(format_bytes(3 * 1024 * 1024), "~3.0MB")


class TestFormatReport(unittest.TestCase):
    """Tests for format_report()."""

    DOC = {
        "small": {"zcss": 1.24, "lightningcss": 4.0},
        "large": {"zcss": 10.0, "lightningcss": None},
    }

    def test_header(self) -> None:
        self.assertEqual(format_header("CSS Benchmark Results"), "=== CSS Benchmark Results ===")

    def test_blocks_in_document_order(self) -> None:
        text = format_report(self.DOC, title="CSS")
        blocks = text.split("\n\n")
        self.assertEqual(len(blocks), 2)
        self.assertTrue(blocks[0].startswith("Small CSS:"))
        self.assertTrue(blocks[1].startswith("Large CSS:"))

    def test_failed_tool_shows_not_applicable(self) -> None:
        text = format_report(self.DOC)
        self.assertIn("lightningcss: N/A", text)

    def test_labels_and_alignment(self) -> None:
        text = format_report(self.DOC, labels={"zcss": "zcss", "lightningcss": "LightningCSS"})
        lines = text.splitlines()
        self.assertEqual(lines[1], "  zcss:         1.2ms")
        self.assertEqual(lines[2], "  LightningCSS: 4.0ms")

    def test_byte_sizes_in_heading(self) -> None:
        text = format_report(self.DOC, title="CSS", byte_sizes={"small": 100})
        self.assertIn("Small CSS (100 bytes):", text)
        self.assertIn("Large CSS:", text)

    def test_no_title(self) -> None:
        self.assertTrue(format_report(self.DOC).startswith("Small:"))

    def test_empty_document(self) -> None:
        self.assertEqual(format_report({}), "")


if __name__ == "__main__":
    unittest.main()
