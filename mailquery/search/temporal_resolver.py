"""
Temporal expression resolution for mailbox search queries.

Turns phrases such as "last week", "3 days ago", "between January 1 and
January 31" or "before 03/15/2024" into an inclusive start/end range.
Resolution runs in three stages and the first stage with a result wins:

1. named ranges, a registry of (pattern, generator) pairs
2. compound "between X and Y" / "from X to Y" ranges
3. literal dates, month names and single relative anchors
"""

import calendar
import re
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from .models import DateRange, DateReference
from .vocabulary import (
    FULL_MONTH_NAMES,
    MONTH_PATTERN,
    MONTHS,
    NUMBER_WORD_PATTERN,
    WEEKDAY_PATTERN,
    WEEKDAYS,
    parse_number,
)
from ..utils.config import SearchSettings
from ..utils.logging import logger

RangeGenerator = Callable[[re.Match, datetime], DateRange]

UNIT = r"(day|week|month|year)s?"
COUNT = rf"(\d+|{NUMBER_WORD_PATTERN})"

# "may" is only a month when it follows one of these
MAY_PREPOSITIONS = {
    "in", "during", "since", "before", "after", "from", "until", "of",
    "between", "and", "to", "through",
}

END_DIRECTION = re.compile(
    r"\b(?:before|until|till|up\s+to|earlier\s+than|prior\s+to|older\s+than)\s+(?:the\s+)?$"
)
START_DIRECTION = re.compile(
    r"\b(?:after|since|from|later\s+than|newer\s+than)\s+(?:the\s+)?$"
)

ISO_DATE = re.compile(r"\b(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})\b")
US_DATE = re.compile(r"\b(\d{1,2})[-/.](\d{1,2})[-/.](\d{4}|\d{2})\b")
DAY_FIRST_MONTH = re.compile(
    rf"\b(\d{{1,2}})(?:st|nd|rd|th)?\s+(?:of\s+)?({MONTH_PATTERN})\b\.?(?:,?\s+(\d{{4}})\b)?"
)
MONTH_FIRST = re.compile(
    rf"\b({MONTH_PATTERN})\b\.?(?:\s+(?:the\s+)?(\d{{1,2}})(?:st|nd|rd|th)?(?!\d)\b)?(?:,?\s+(\d{{4}})\b)?"
)

COMPOUND_OPENERS = re.compile(r"\b(between|from)\s+")
COMPOUND_JOINERS = {
    "between": re.compile(r"\s+(?:and|to)\s+"),
    "from": re.compile(r"\s+(?:to|until|till|through|thru)\s+"),
}


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=23, minute=59, second=59, microsecond=999000)


def start_of_week(moment: datetime) -> datetime:
    """Sunday 00:00 of the week containing moment"""
    return start_of_day(moment - timedelta(days=(moment.weekday() + 1) % 7))


def start_of_month(moment: datetime) -> datetime:
    return start_of_day(moment.replace(day=1))


def end_of_month(moment: datetime) -> datetime:
    last_day = calendar.monthrange(moment.year, moment.month)[1]
    return end_of_day(moment.replace(day=last_day))


def start_of_year(moment: datetime) -> datetime:
    return start_of_day(moment.replace(month=1, day=1))


def end_of_year(moment: datetime) -> datetime:
    return end_of_day(moment.replace(month=12, day=31))


def shift_back(moment: datetime, unit: str, amount: int) -> datetime:
    return moment - relativedelta(**{f"{unit}s": amount})


def calendar_unit(moment: datetime, unit: str) -> DateRange:
    """The whole day, Sunday-Saturday week, month or year containing moment"""
    if unit == "week":
        start = start_of_week(moment)
        return DateRange(start=start, end=end_of_day(start + timedelta(days=6)))
    if unit == "month":
        return DateRange(start=start_of_month(moment), end=end_of_month(moment))
    if unit == "year":
        return DateRange(start=start_of_year(moment), end=end_of_year(moment))
    return DateRange(start=start_of_day(moment), end=end_of_day(moment))


def _rolling_days(days: int) -> RangeGenerator:
    def generate(match: re.Match, now: datetime) -> DateRange:
        return DateRange(start=start_of_day(now - timedelta(days=days)), end=end_of_day(now))
    return generate


def _last_n_units(match: re.Match, now: datetime) -> DateRange:
    amount, unit = parse_number(match.group(1)), match.group(2)
    return DateRange(start=start_of_day(shift_back(now, unit, amount)), end=end_of_day(now))


def _past_unit(match: re.Match, now: datetime) -> DateRange:
    return DateRange(start=start_of_day(shift_back(now, match.group(1), 1)), end=end_of_day(now))


def _units_ago(match: re.Match, now: datetime) -> DateRange:
    amount, unit = parse_number(match.group(1)), match.group(2)
    return calendar_unit(shift_back(now, unit, amount), unit)


def _last_week(match: re.Match, now: datetime) -> DateRange:
    return calendar_unit(start_of_week(now) - timedelta(days=7), "week")


def _this_week(match: re.Match, now: datetime) -> DateRange:
    return DateRange(start=start_of_week(now), end=end_of_day(now))


def _last_month(match: re.Match, now: datetime) -> DateRange:
    return calendar_unit(now - relativedelta(months=1), "month")


def _this_month(match: re.Match, now: datetime) -> DateRange:
    return DateRange(start=start_of_month(now), end=end_of_day(now))


def _last_year(match: re.Match, now: datetime) -> DateRange:
    return calendar_unit(now - relativedelta(years=1), "year")


def _this_year(match: re.Match, now: datetime) -> DateRange:
    return DateRange(start=start_of_year(now), end=end_of_day(now))


def _last_quarter(match: re.Match, now: datetime) -> DateRange:
    quarter_start = start_of_day(now.replace(day=1, month=3 * ((now.month - 1) // 3) + 1))
    start = quarter_start - relativedelta(months=3)
    return DateRange(start=start, end=end_of_month(start + relativedelta(months=2)))


def _today(match: re.Match, now: datetime) -> DateRange:
    return calendar_unit(now, "day")


def _yesterday(match: re.Match, now: datetime) -> DateRange:
    return calendar_unit(now - timedelta(days=1), "day")


def _weekday(match: re.Match, now: datetime) -> DateRange:
    days_back = (now.weekday() - WEEKDAYS[match.group(1)]) % 7 or 7
    return calendar_unit(now - timedelta(days=days_back), "day")


def build_named_ranges(settings: SearchSettings) -> List[Tuple[re.Pattern, RangeGenerator]]:
    """Ordered registry of named ranges, first match wins"""
    return [
        (re.compile(r"\blast\s+few\s+weeks\b"), _rolling_days(settings.few_weeks_days)),
        (re.compile(r"\blast\s+few\s+months\b"), _rolling_days(settings.few_months_days)),
        (re.compile(rf"\b(?:last|past|previous)\s+{COUNT}\s+{UNIT}\b"), _last_n_units),
        (re.compile(rf"\b{COUNT}\s+{UNIT}\s+ago\b"), _units_ago),
        (re.compile(r"\bpast\s+(day|week|month|year)\b"), _past_unit),
        (re.compile(r"\b(?:last|previous)\s+week\b"), _last_week),
        (re.compile(r"\bthis\s+week\b"), _this_week),
        (re.compile(r"\b(?:last|previous)\s+month\b"), _last_month),
        (re.compile(r"\bthis\s+month\b"), _this_month),
        (re.compile(r"\b(?:last|previous)\s+year\b"), _last_year),
        (re.compile(r"\bthis\s+year\b"), _this_year),
        (re.compile(r"\b(?:last|previous)\s+quarter\b"), _last_quarter),
        (re.compile(rf"\brecent(?:ly)?\b(?!\s+(?:\d|(?:{NUMBER_WORD_PATTERN})\b))"), _rolling_days(settings.recent_days)),
        (re.compile(r"\btoday\b"), _today),
        (re.compile(r"\byesterday\b"), _yesterday),
        (re.compile(rf"\b(?:(?:last|on|this|previous)\s+)?({WEEKDAY_PATTERN})\b"), _weekday),
    ]


# Single relative anchors for the literal scan, each returns the anchor instant
RELATIVE_ANCHORS: List[Tuple[re.Pattern, Callable[[re.Match, datetime], datetime]]] = [
    (re.compile(r"\btoday\b"), lambda match, now: start_of_day(now)),
    (re.compile(r"\byesterday\b"), lambda match, now: start_of_day(now - timedelta(days=1))),
    (re.compile(r"\blast\s+week\b"), lambda match, now: start_of_week(now) - timedelta(days=7)),
    (re.compile(r"\blast\s+month\b"), lambda match, now: start_of_month(now - relativedelta(months=1))),
    (re.compile(r"\blast\s+year\b"), lambda match, now: start_of_year(now - relativedelta(years=1))),
    (re.compile(r"\bthis\s+week\b"), lambda match, now: start_of_week(now)),
    (re.compile(r"\bthis\s+month\b"), lambda match, now: start_of_month(now)),
    (re.compile(r"\bthis\s+year\b"), lambda match, now: start_of_year(now)),
    (
        re.compile(rf"\b(\d+|an?|{NUMBER_WORD_PATTERN})\s+{UNIT}\s+ago\b"),
        lambda match, now: start_of_day(shift_back(now, match.group(2), parse_number(match.group(1)))),
    ),
]


class TemporalResolver:
    def __init__(self, settings: Optional[SearchSettings] = None):
        self.settings = settings or SearchSettings()
        self.named_ranges = build_named_ranges(self.settings)

    def resolve(self, text: str, now: datetime) -> Optional[DateRange]:
        """
        Resolve the date range mentioned in a normalized query

        Args:
            text: Lowercased, trimmed query text
            now: Reference time, all relative expressions are computed from it

        Returns:
            DateRange (unbounded when a date phrase is out of range), or None when no date is mentioned
        """
        if not text:
            return None

        for stage in (self._match_named_range, self._match_compound_range, self._match_literal_dates):
            date_range = stage(text, now)
            if date_range is not None:
                logger.debug(f"{stage.__name__} resolved {date_range.start} -> {date_range.end}")
                return date_range

        return None

    def _match_named_range(self, text: str, now: datetime) -> Optional[DateRange]:
        for pattern, generate in self.named_ranges:
            if match := pattern.search(text):
                try:
                    return generate(match, now)
                except (ValueError, OverflowError) as e:
                    # Consumed as a date phrase, but unbounded
                    logger.debug(f"Named range '{match.group(0)}' out of bounds: {e}")
                    return DateRange()
        return None

    def _match_compound_range(self, text: str, now: datetime) -> Optional[DateRange]:
        for opener in COMPOUND_OPENERS.finditer(text):
            joiner = COMPOUND_JOINERS[opener.group(1)].search(text, opener.end())
            if not joiner:
                continue

            first = self._first_reference(text, now, opener.end(), joiner.start())
            second = self._first_reference(text, now, joiner.end(), len(text))
            if not first or not second:
                logger.debug(f"Compound range at '{opener.group(0).strip()}' abandoned")
                continue

            start, end = self._range_start(first), self._range_end(second)
            if start > end:
                start, end = self._range_start(second), self._range_end(first)
            return DateRange(start=start, end=end)

        return None

    def _match_literal_dates(self, text: str, now: datetime) -> Optional[DateRange]:
        references = self._scan_references(text, now, 0, len(text))
        if relative := self._match_relative_anchor(text, now):
            references.append(relative)

        if not references:
            return None

        if len(references) >= 2:
            ordered = sorted(references, key=lambda ref: ref.instant)
            return DateRange(start=self._range_start(ordered[0]), end=self._range_end(ordered[-1]))

        reference = references[0]
        preceding = text[:reference.position]
        if END_DIRECTION.search(preceding):
            return DateRange(end=self._range_end(reference))
        if START_DIRECTION.search(preceding):
            return DateRange(start=self._range_start(reference))
        if reference.kind == "relative":
            return DateRange(start=reference.instant)
        return DateRange(start=self._range_start(reference), end=self._range_end(reference))

    def _first_reference(self, text: str, now: datetime, start: int, end: int) -> Optional[DateReference]:
        references = self._scan_references(text, now, start, end)
        return min(references, key=lambda ref: ref.position) if references else None

    def _scan_references(self, text: str, now: datetime, start: int, end: int) -> List[DateReference]:
        """Absolute numeric dates and month-name mentions inside text[start:end]"""
        references: List[DateReference] = []
        taken: List[Tuple[int, int]] = []

        def claim(match: re.Match) -> bool:
            if any(match.start() < right and left < match.end() for left, right in taken):
                return False
            taken.append(match.span())
            return True

        for match in ISO_DATE.finditer(text, start, end):
            if claim(match):
                self._add_specific(references, match, now, *match.group(1, 2, 3))

        for match in US_DATE.finditer(text, start, end):
            if claim(match):
                month, day, year = match.group(1, 2, 3)
                if len(year) == 2:
                    year = f"20{year}"
                self._add_specific(references, match, now, year, month, day)

        for match in DAY_FIRST_MONTH.finditer(text, start, end):
            if claim(match):
                day, month_name, year = match.group(1, 2, 3)
                self._add_month_name(references, match, now, month_name, day, year)

        for match in MONTH_FIRST.finditer(text, start, end):
            month_name, day, year = match.group(1, 2, 3)
            if not self._is_month_mention(text, match, month_name, day, year):
                continue
            if claim(match):
                self._add_month_name(references, match, now, month_name, day, year)

        return references

    def _is_month_mention(self, text: str, match: re.Match, month_name: str, day, year) -> bool:
        if day or year:
            return True
        if month_name not in FULL_MONTH_NAMES:
            return False
        if month_name == "may":
            previous = text[:match.start()].split()
            return bool(previous) and previous[-1] in MAY_PREPOSITIONS
        return True

    def _add_specific(self, references: List[DateReference], match: re.Match, now: datetime,
                      year: str, month: str, day: str) -> None:
        try:
            instant = datetime(int(year), int(month), int(day), tzinfo=now.tzinfo)
        except (ValueError, OverflowError) as e:
            logger.debug(f"Ignoring unparseable date '{match.group(0)}': {e}")
            return
        references.append(DateReference(
            instant=instant,
            matched_text=match.group(0),
            kind="specific",
            position=match.start(),
        ))

    def _add_month_name(self, references: List[DateReference], match: re.Match, now: datetime,
                        month_name: str, day: Optional[str], year: Optional[str]) -> None:
        month = MONTHS[month_name]
        resolved_year = int(year) if year else now.year
        try:
            instant = datetime(resolved_year, month, int(day) if day else 1, tzinfo=now.tzinfo)
        except (ValueError, OverflowError) as e:
            logger.debug(f"Ignoring unparseable date '{match.group(0)}': {e}")
            return
        references.append(DateReference(
            instant=instant,
            matched_text=match.group(0),
            kind="specific" if day else "month",
            is_month_only=not day,
            position=match.start(),
        ))

    def _match_relative_anchor(self, text: str, now: datetime) -> Optional[DateReference]:
        for pattern, anchor in RELATIVE_ANCHORS:
            if match := pattern.search(text):
                try:
                    instant = anchor(match, now)
                except (ValueError, OverflowError) as e:
                    logger.debug(f"Ignoring relative anchor '{match.group(0)}': {e}")
                    return None
                return DateReference(
                    instant=instant,
                    matched_text=match.group(0),
                    kind="relative",
                    position=match.start(),
                )
        return None

    @staticmethod
    def _range_start(reference: DateReference) -> datetime:
        if reference.is_month_only:
            return start_of_month(reference.instant)
        return start_of_day(reference.instant)

    @staticmethod
    def _range_end(reference: DateReference) -> datetime:
        if reference.is_month_only:
            return end_of_month(reference.instant)
        return end_of_day(reference.instant)
