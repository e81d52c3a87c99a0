"""
Unit tests for message timestamp extraction.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from core.date_extractor import (
    AllPatternsUnion,
    DateExtractor,
    DatePattern,
    DateRange,
    FirstMatchingPattern,
    PatternConfigurationError,
    parse_datetime_attribute,
    parse_with_formats,
)

pytestmark = pytest.mark.unit


def local(*args):
    return datetime(*args).astimezone()


TXT_EXPORT = """Nov 28, 2024 11:46:34 AM
+14155551234
Hey, are we still on for tomorrow?

Nov 28, 2024  1:02:10 PM
Me
Yes! See you at noon.

Nov 29, 2024  2:19:59 PM
+14155551234
Running 10 minutes late
"""


class TestFirstMatchingPattern:

    def test_plain_text_range(self):
        date_range = DateExtractor().extract_range(TXT_EXPORT, "txt")

        assert date_range.first == local(2024, 11, 28, 11, 46, 34)
        assert date_range.last == local(2024, 11, 29, 14, 19, 59)
        assert date_range.first <= date_range.last

    def test_first_pattern_with_results_is_used_exclusively(self):
        """ISO timestamps are ignored once a higher priority pattern matched."""
        content = "Nov 28, 2024 11:46:34 AM\nhello\nlog: 2030-01-01 00:00:00\n"

        dates = FirstMatchingPattern().extract(content)

        assert dates == [local(2024, 11, 28, 11, 46, 34)]

    def test_falls_through_to_later_patterns(self):
        content = "[2023-05-01 08:00:00] hi\n[2023-05-02 09:30:00] bye\n"

        dates = FirstMatchingPattern().extract(content)

        assert dates == [local(2023, 5, 1, 8, 0, 0), local(2023, 5, 2, 9, 30, 0)]

    def test_inline_timestamp(self):
        content = "Sent Jan 5, 2024 9:15:00 PM from phone"

        assert FirstMatchingPattern().extract(content) == [local(2024, 1, 5, 21, 15, 0)]

    def test_unparsable_matches_do_not_stop_the_search(self):
        """A pattern whose matches all fail to parse counts as not matching."""
        content = "Xyz 28, 2024 11:46:34 AM\n2024-02-03 04:05:06\n"

        assert FirstMatchingPattern().extract(content) == [local(2024, 2, 3, 4, 5, 6)]

    def test_no_dates(self):
        assert FirstMatchingPattern().extract("no timestamps here") == []


class TestAllPatternsUnion:

    def test_union_of_every_pattern(self):
        content = """<html><body>
<div class="message">
  <span class="timestamp"><a title="Reply">Nov 28, 2024  11:46:34 AM</a></span>
  <time datetime="2024-11-30T10:00:00+00:00">Nov 30</time>
  <p>Posted 2024-12-01 09:00:00</p>
  <p>Read Dec 2, 2024 at 8:00:00 PM</p>
</div>
</body></html>"""

        dates = AllPatternsUnion().extract(content)

        assert local(2024, 11, 28, 11, 46, 34) in dates
        assert datetime(2024, 11, 30, 10, 0, 0, tzinfo=timezone.utc) in dates
        assert local(2024, 12, 1, 9, 0, 0) in dates
        assert local(2024, 12, 2, 20, 0, 0) in dates

    def test_html_range(self):
        content = '<span class="timestamp">Jan 1, 2024 at 1:00:00 AM</span>' \
                  '<span class="timestamp">Jan 3, 2024  5:00:00 PM</span>'

        date_range = DateExtractor().extract_range(content, "html")

        assert date_range == DateRange(local(2024, 1, 1, 1, 0, 0), local(2024, 1, 3, 17, 0, 0))

    def test_iso_with_t_separator(self):
        dates = AllPatternsUnion().extract("<p>2024-06-01T12:30:00</p>")

        assert local(2024, 6, 1, 12, 30, 0) in dates


class TestParsing:

    def test_padded_hour(self):
        assert parse_with_formats("Nov 29, 2024  2:19:59 PM", ["%b %d, %Y %I:%M:%S %p"]) == \
            local(2024, 11, 29, 14, 19, 59)

    def test_unparsable(self):
        assert parse_with_formats("garbage", ["%Y-%m-%d"]) is None

    def test_datetime_attribute_with_offset(self):
        parsed = parse_datetime_attribute("2024-11-30T10:00:00-05:00")
        assert parsed.utcoffset() == timedelta(hours=-5)

    def test_datetime_attribute_naive_is_local(self):
        assert parse_datetime_attribute("2024-11-30T10:00:00") == local(2024, 11, 30, 10, 0, 0)

    def test_datetime_attribute_invalid(self):
        assert parse_datetime_attribute("yesterday") is None


class TestDateExtractor:

    def test_unknown_extension(self):
        assert DateExtractor().extract_samples(TXT_EXPORT, "md") == []

    def test_extract_from_file(self):
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "Alice.txt"
            path.write_text(TXT_EXPORT, encoding="utf-8")

            date_range = DateExtractor().extract_from_file(path)

        assert date_range.first == local(2024, 11, 28, 11, 46, 34)

    def test_extract_from_file_without_dates(self):
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "empty.txt"
            path.write_text("")

            assert DateExtractor().extract_from_file(path) is None

    def test_unreadable_file(self):
        with TemporaryDirectory() as tmpdir:
            assert DateExtractor().extract_from_file(Path(tmpdir) / "missing.txt") is None

    def test_invalid_pattern_fails_at_construction(self):
        broken = DatePattern("broken", r"(\d{4}", ("%Y",))

        with pytest.raises(PatternConfigurationError) as exc_info:
            FirstMatchingPattern([broken])

        assert exc_info.value.name == "broken"

    def test_custom_strategies(self):
        extractor = DateExtractor(strategies={"log": FirstMatchingPattern()})

        assert extractor.extract_range("2024-01-01 00:00:00", "log") is not None
        assert extractor.extract_range(TXT_EXPORT, "txt") is None


def test_date_range_from_samples():
    samples = [local(2024, 1, 2), local(2024, 1, 1), local(2024, 1, 3)]

    assert DateRange.from_samples(samples) == DateRange(local(2024, 1, 1), local(2024, 1, 3))
    assert DateRange.from_samples([]) is None
