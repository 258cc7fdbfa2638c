"""Word lists shared by the query extractors."""

from typing import Optional

NUMBER_WORDS = {
    "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11,
    "twelve": 12, "thirteen": 13, "fourteen": 14, "fifteen": 15, "sixteen": 16,
    "seventeen": 17, "eighteen": 18, "nineteen": 19, "twenty": 20,
}

# Spelled-out counts, longest first so "seventeen" wins over "seven"
NUMBER_WORD_PATTERN = "|".join(
    sorted((word for word in NUMBER_WORDS if word not in ("a", "an")), key=len, reverse=True)
)

MONTHS = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sept": 9, "sep": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

MONTH_PATTERN = "|".join(sorted(MONTHS, key=len, reverse=True))

FULL_MONTH_NAMES = {name for name in MONTHS if len(name) > 4} | {"may", "june", "july"}

# datetime.weekday() numbering
WEEKDAYS = {
    "monday": 0, "tuesday": 1, "wednesday": 2, "thursday": 3,
    "friday": 4, "saturday": 5, "sunday": 6,
}

WEEKDAY_PATTERN = "|".join(WEEKDAYS)

TEMPORAL_WORDS = (
    FULL_MONTH_NAMES | set(WEEKDAYS) | {
        "today", "yesterday", "tomorrow", "tonight", "last", "this", "past",
        "previous", "recent", "recently", "next", "between", "week", "month", "year",
    }
)

STOPWORDS = {"and", "the", "with", "for", "in", "on", "at", "by", "to", "a", "an"}

# Mailbox vocabulary, never the start of a sender name
FOLDER_WORDS = {
    "spam", "junk", "trash", "bin", "drafts", "draft", "inbox", "outbox", "starred",
    "archive", "archived", "folder", "folders",
}


def parse_number(token: Optional[str]) -> Optional[int]:
    """Turn "12" or "twelve" into 12, None for anything else"""
    if not token:
        return None
    token = token.strip().lower()
    if token.isdigit():
        return int(token)
    return NUMBER_WORDS.get(token)
