"""Tests for byte-count and percentage formatting.

Run with:  python -m pytest tests/  or  python -m unittest discover tests/
"""

import unittest

from diskinfo.utils.format import format_percent, human_readable_size


class TestHumanReadableSize(unittest.TestCase):
    def test_below_one_kib_is_plain_bytes(self):
        for b in (0, 1, 512, 1000, 1023):
            self.assertEqual(human_readable_size(b), f"{b} B")

    def test_exactly_one_kib(self):
        self.assertEqual(human_readable_size(1024), "1.0 KB")

    def test_one_and_a_half_kib(self):
        self.assertEqual(human_readable_size(1536), "1.5 KB")

    def test_one_gib(self):
        self.assertEqual(human_readable_size(1073741824), "1.0 GB")

    def test_each_unit(self):
        for exp, letter in enumerate("KMGTPE", start=1):
            self.assertEqual(human_readable_size(1024 ** exp), f"1.0 {letter}B")

    def test_binary_not_decimal_scale(self):
        # 1 000 000 bytes is 976.6 KiB, not 1.0 MB
        self.assertEqual(human_readable_size(1_000_000), "976.6 KB")

    def test_unit_chosen_from_integer_quotient(self):
        # 1048575 // 1024 == 1023, so it stays in KB and rounds up on display
        self.assertEqual(human_readable_size(1048575), "1024.0 KB")

    def test_one_decimal_digit(self):
        self.assertEqual(human_readable_size(3 * 1024 ** 3 + 1024 ** 3 // 3), "3.3 GB")

    def test_largest_unit_is_exbibytes(self):
        self.assertEqual(human_readable_size(2 ** 70), "1024.0 EB")

    def test_uint64_max(self):
        self.assertEqual(human_readable_size(2 ** 64 - 1), "16.0 EB")


class TestFormatPercent(unittest.TestCase):
    def test_one_decimal(self):
        self.assertEqual(format_percent(12.34), "12.3%")

    def test_whole_number(self):
        self.assertEqual(format_percent(100), "100.0%")


if __name__ == "__main__":
    unittest.main()
