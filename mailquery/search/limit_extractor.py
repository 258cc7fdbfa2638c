import re
from typing import Optional

from .models import MAX_LIMIT
from .vocabulary import NUMBER_WORD_PATTERN, parse_number
from ..utils.logging import logger

COUNT = rf"(\d+|{NUMBER_WORD_PATTERN})"

LIMIT_PATTERNS = [
    # "top 5", "latest ten" but not "last 3 days"
    re.compile(rf"\b(?:top|first|latest|recent|last|newest)\s+{COUNT}\b(?!\s+(?:days?|weeks?|months?|years?|hours?)\b)"),
    re.compile(rf"\b{COUNT}\s+(?:emails?|messages?|results?|items?|mails?)\b"),
    re.compile(rf"\blimit(?:ed)?\s+(?:it\s+)?(?:to\s+)?{COUNT}\b"),
    re.compile(rf"\bonly\s+{COUNT}\b"),
]


class LimitExtractor:
    def __init__(self, max_limit: int = MAX_LIMIT):
        self.max_limit = max_limit

    def extract(self, text: str) -> Optional[int]:
        """Result cap requested in the text, None when absent or out of range"""
        if not text:
            return None

        for pattern in LIMIT_PATTERNS:
            for match in pattern.finditer(text):
                value = parse_number(match.group(1))
                if value is not None and 0 < value <= self.max_limit:
                    return value
                logger.debug(f"Ignoring out of range limit '{match.group(0)}'")
        return None
