"""
Message timestamp extraction from exported conversation files.

Two strategies are used, keyed by file extension:

* plain text exports go through ``FirstMatchingPattern``: patterns are tried
  in priority order and the first one that yields any timestamp is used
  exclusively;
* HTML exports go through ``AllPatternsUnion``: every pattern is applied and
  all timestamps found are combined.

The same content can therefore yield different ranges under the two strategies.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import dateutil.parser
from bs4 import BeautifulSoup

import config

logger = logging.getLogger(__name__)

# "Nov 28, 2024 11:46:34 AM" / "Nov 29, 2024  2:19:59 PM"
MESSAGE_TIME_FORMAT = "%b %d, %Y %I:%M:%S %p"
MESSAGE_TIME_AT_FORMAT = "%b %d, %Y at %I:%M:%S %p"
ISO_SPACE_FORMAT = "%Y-%m-%d %H:%M:%S"
ISO_T_FORMAT = "%Y-%m-%dT%H:%M:%S"

_WHITESPACE_RE = re.compile(r"\s+")


class PatternConfigurationError(Exception):
    """Raised when a date pattern cannot be compiled."""

    def __init__(self, name: str, pattern: str, error: re.error):
        self.name = name
        self.pattern = pattern
        super().__init__(f"Invalid date pattern '{name}' ({pattern!r}): {error}")


@dataclass(frozen=True)
class DatePattern:
    """A regular expression and the way its matches become date strings."""
    name: str
    regex: str
    formats: Tuple[str, ...]
    flags: int = 0


@dataclass(frozen=True)
class DateRange:
    """First and last message time of a file."""
    first: datetime
    last: datetime

    @classmethod
    def from_samples(cls, samples: Sequence[datetime]) -> Optional["DateRange"]:
        """Build the range of a sample sequence; None if it is empty."""
        if not samples:
            return None
        ordered = sorted(samples)
        return cls(ordered[0], ordered[-1])


def to_local_aware(value: datetime) -> datetime:
    """Attach the local clock offset to naive datetimes."""
    if value.tzinfo is None:
        return value.astimezone()
    return value


def parse_with_formats(text: str, formats: Sequence[str]) -> Optional[datetime]:
    """
    Parse a date string with the first matching strptime format.

    Runs of whitespace are collapsed before parsing, so the exporter's padded
    hours ("Nov 29, 2024  2:19:59 PM") parse like any other.

    Args:
        text: Date string
        formats: strptime formats, tried in order

    Returns:
        datetime in the local zone, or None if no format fits
    """
    normalized = _WHITESPACE_RE.sub(" ", text.strip())
    for date_format in formats:
        try:
            return to_local_aware(datetime.strptime(normalized, date_format))
        except ValueError:
            continue
    logger.debug(f"Unparsable timestamp: {text!r}")
    return None


def parse_datetime_attribute(value: str) -> Optional[datetime]:
    """
    Parse the value of an HTML datetime="..." attribute.

    Strict ISO 8601 with an explicit offset is tried first; a naive
    ``YYYY-MM-DDTHH:MM:SS`` value is then read in the local zone.

    Args:
        value: Attribute value

    Returns:
        datetime or None
    """
    value = value.strip()
    try:
        parsed = dateutil.parser.isoparse(value)
        if parsed.tzinfo is not None:
            return parsed
    except (ValueError, OverflowError):
        pass
    return parse_with_formats(value, (ISO_T_FORMAT,))


def compile_patterns(patterns: Sequence[DatePattern]) -> List[Tuple[DatePattern, "re.Pattern[str]"]]:
    """
    Compile every pattern up front.

    Raises:
        PatternConfigurationError: On the first pattern that fails to compile
    """
    compiled = []
    for pattern in patterns:
        try:
            compiled.append((pattern, re.compile(pattern.regex, pattern.flags)))
        except re.error as e:
            raise PatternConfigurationError(pattern.name, pattern.regex, e) from e
    return compiled


def _join_groups(match: "re.Match[str]") -> str:
    """Date and time captured in separate groups are joined with a space."""
    return " ".join(group for group in match.groups() if group)


class ExtractionStrategy(ABC):
    """Base class for the timestamp extraction strategies."""

    name = "strategy"

    @abstractmethod
    def extract(self, content: str) -> List[datetime]:
        """Return every timestamp found in `content`, in discovery order."""


TEXT_PATTERNS: Tuple[DatePattern, ...] = (
    DatePattern(
        "line_start_timestamp",
        r"^(\w{3} \d{1,2}, \d{4})\s+(\d{1,2}:\d{2}:\d{2} [AP]M)",
        (MESSAGE_TIME_FORMAT,),
        re.MULTILINE,
    ),
    DatePattern(
        "inline_timestamp",
        r"(\w{3} \d{1,2}, \d{4})\s+(\d{1,2}:\d{2}:\d{2} [AP]M)",
        (MESSAGE_TIME_FORMAT,),
        re.MULTILINE,
    ),
    DatePattern(
        "bracketed_iso",
        r"\[(\d{4}-\d{2}-\d{2})[, ]+(\d{2}:\d{2}:\d{2})\]",
        (ISO_SPACE_FORMAT,),
        re.MULTILINE,
    ),
    DatePattern(
        "bare_iso",
        r"(\d{4}-\d{2}-\d{2}) (\d{2}:\d{2}:\d{2})",
        (ISO_SPACE_FORMAT,),
        re.MULTILINE,
    ),
)


class FirstMatchingPattern(ExtractionStrategy):
    """
    Try patterns in priority order; the first one that yields at least one
    parsed timestamp is used exclusively.
    """

    name = "first_matching_pattern"

    def __init__(self, patterns: Sequence[DatePattern] = TEXT_PATTERNS):
        self.patterns = compile_patterns(patterns)

    def extract(self, content: str) -> List[datetime]:
        for pattern, regex in self.patterns:
            dates = []
            for match in regex.finditer(content):
                parsed = parse_with_formats(_join_groups(match), pattern.formats)
                if parsed is not None:
                    dates.append(parsed)
            if dates:
                logger.debug(f"    Pattern '{pattern.name}' matched {len(dates)} timestamps")
                return dates
        return []


HTML_PATTERNS: Tuple[DatePattern, ...] = (
    DatePattern(
        "datetime_attribute",
        r'datetime="([^"]+)"',
        (),
        re.IGNORECASE,
    ),
    DatePattern(
        "iso_text",
        r"(\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2})",
        (ISO_SPACE_FORMAT, ISO_T_FORMAT),
        re.IGNORECASE,
    ),
    DatePattern(
        "at_timestamp",
        r"(\w{3} \d{1,2}, \d{4}) at (\d{1,2}:\d{2}:\d{2} [AP]M)",
        (MESSAGE_TIME_FORMAT,),
        re.IGNORECASE,
    ),
)

TIMESTAMP_CLASS_FORMATS = (MESSAGE_TIME_AT_FORMAT, MESSAGE_TIME_FORMAT)


class AllPatternsUnion(ExtractionStrategy):
    """
    Apply every pattern and combine all timestamps found.

    Besides the regular expressions, elements carrying the ``timestamp``
    class are located with BeautifulSoup and their leading text parsed.
    """

    name = "all_patterns_union"

    def __init__(self, patterns: Sequence[DatePattern] = HTML_PATTERNS,
                 timestamp_class: str = config.TIMESTAMP_CSS_CLASS):
        self.patterns = compile_patterns(patterns)
        self.timestamp_class = timestamp_class

    def _parse_match(self, pattern: DatePattern, match: "re.Match[str]") -> Optional[datetime]:
        if pattern.name == "datetime_attribute":
            return parse_datetime_attribute(match.group(1))
        return parse_with_formats(_join_groups(match), pattern.formats)

    def _timestamp_elements(self, content: str) -> List[datetime]:
        soup = BeautifulSoup(content, config.BEAUTIFUL_SOUP_PARSER)
        dates = []
        for element in soup.find_all(class_=self.timestamp_class):
            text = next(element.stripped_strings, None)
            if not text:
                continue
            parsed = parse_with_formats(text, TIMESTAMP_CLASS_FORMATS)
            if parsed is not None:
                dates.append(parsed)
        return dates

    def extract(self, content: str) -> List[datetime]:
        dates: List[datetime] = []
        for pattern, regex in self.patterns:
            found = [self._parse_match(pattern, match) for match in regex.finditer(content)]
            found = [value for value in found if value is not None]
            logger.debug(f"    Pattern '{pattern.name}' matched {len(found)} timestamps")
            dates.extend(found)

        class_dates = self._timestamp_elements(content)
        logger.debug(f"    Class '{self.timestamp_class}' matched {len(class_dates)} timestamps")
        dates.extend(class_dates)
        return dates


class DateExtractor:
    """
    Extract the first and last message time of export files.

    Strategies are built (and their patterns compiled) once, when the
    extractor is created.
    """

    def __init__(self, strategies: Optional[Dict[str, ExtractionStrategy]] = None,
                 encoding: str = config.DEFAULT_ENCODING):
        self.strategies = strategies if strategies is not None else {
            "txt": FirstMatchingPattern(),
            "html": AllPatternsUnion(),
        }
        self.encoding = encoding

    def extract_samples(self, content: str, extension: str) -> List[datetime]:
        """
        Extract every timestamp from file content.

        Args:
            content: File text
            extension: 'txt' or 'html'

        Returns:
            List[datetime]: Samples in discovery order (empty for unknown extensions)
        """
        strategy = self.strategies.get(extension.lower().lstrip("."))
        if strategy is None:
            logger.debug(f"No date extraction strategy for '.{extension}' files")
            return []
        return strategy.extract(content)

    def extract_range(self, content: str, extension: str) -> Optional[DateRange]:
        """Date range of file content, None when no timestamp was found."""
        return DateRange.from_samples(self.extract_samples(content, extension))

    def extract_from_file(self, path: Path) -> Optional[DateRange]:
        """
        Read a file and extract its date range.

        Args:
            path: Export file

        Returns:
            DateRange or None if the file has no parsable timestamp or cannot be read
        """
        path = Path(path)
        try:
            content = path.read_text(encoding=self.encoding, errors="replace")
        except OSError as e:
            logger.warning(f"    ❌ Error reading file {path.name}: {e}")
            return None

        extension = path.suffix.lower().lstrip(".")
        logger.debug(f"    File extension: {extension}")
        logger.debug(f"    Content preview: {content[:config.CONTENT_PREVIEW_CHARS]!r}")

        samples = self.extract_samples(content, extension)
        logger.debug(f"    Found {len(samples)} timestamps")
        date_range = DateRange.from_samples(samples)
        if date_range is None:
            logger.info(f"    ⚠️  No dates found in {path.name}")
        return date_range
