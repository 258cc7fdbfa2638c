"""
Sender and keyword extraction for natural language mailbox queries.

Handles phrasings like:
- "emails from sarah" / "sent by john@example.com" / "people from acme.com"
- "subject containing project and body containing budget"
- "about quarterly report" / "search for invoices" / "\"exact phrase\""
"""
import re
from typing import List, Optional, Tuple

from .models import EntityResult
from .vocabulary import FOLDER_WORDS, MONTH_PATTERN, STOPWORDS, TEMPORAL_WORDS, WEEKDAY_PATTERN
from ..utils.logging import logger

# Words that end a sender name or a keyword phrase
CONNECTIVES = (
    r"about|regarding|concerning|related|with|without|containing|contains|that|which|who|"
    r"received|sent|dated|from|by|in|on|at|before|after|since|until|till|between|during|"
    r"within|last|this|past|previous|today|yesterday|top|first|latest|limit|only|"
    r"older|newer|earlier|later|and|or|but|to|for|mentioning|having|where"
)

# Keyword phrases may contain "to"/"for"/"with"; field terms stop at "and"/"or"
KEYWORD_CONNECTIVES = (
    r"received|sent|dated|from|by|in|on|before|after|since|until|till|between|during|"
    r"within|last|this|past|previous|today|yesterday|top|first|latest|limit|only|"
    r"older|newer|earlier|later"
)
FIELD_CONNECTIVES = KEYWORD_CONNECTIVES + r"|and|or|but|with|containing|in"

NAME_WORD = r"[a-z0-9][\w.'&+-]*"
EMAIL = r"[a-z0-9._%+-]+@[a-z0-9-]+(?:\.[a-z0-9-]+)*\.[a-z]{2,}"
DOMAIN = r"@?[a-z0-9-]+(?:\.[a-z0-9-]+)*\.(?:com|org|net|edu|gov|io|co|ai|dev|app|biz|info|uk|de|fr|ca|au)\b"
SENDER_PREFIX = r"\b(?:sent\s+by|from|by)\s+"

# Later name words stop at connectives, dates and numbers
NAME_CONTINUATION = rf"(?!(?:{CONNECTIVES}|{MONTH_PATTERN}|{WEEKDAY_PATTERN})\b|\d)"
BARE_NAME = rf"({NAME_WORD}(?:\s+{NAME_CONTINUATION}{NAME_WORD}){{0,3}})"


def _term(connectives: str) -> str:
    """Lazy phrase capture ending at a connective, punctuation or end of text"""
    return rf"[\"']?(.+?)[\"']?(?=\s+(?:{connectives})\b|\s*[,;!?]|\s*\.(?:\s|$)|$)"


SENDER_PATTERNS = [
    # Exact e-mail address
    rf"{SENDER_PREFIX}({EMAIL})",
    # Quoted name
    rf"{SENDER_PREFIX}[\"']([^\"']+)[\"']",
    # Bare name
    rf"{SENDER_PREFIX}{BARE_NAME}",
    # Bare domain
    rf"(?:^|\s)({DOMAIN})",
    # Authorship phrasing
    rf"\b(?:authored|written|composed)\s+by\s+{BARE_NAME}",
    # Organisation members
    rf"\b(?:people|someone|somebody|anyone|anybody|folks|colleagues)\s+(?:from|at)\s+({DOMAIN}|{NAME_WORD})",
]

FIELD_VERBS = (
    r"containing|contains|that\s+contains|which\s+contains|has|having|includes|including|"
    r"with|like|is|equals|equal\s+to|of|matching|mentioning|saying"
)
INVERSE_VERBS = r"containing|with|has|having|includes|including|mentioning|saying"


def _field_patterns(anchors: str) -> List[str]:
    return [
        rf"\b(?:{anchors})(?:\s+line)?\s*:\s*{_term(FIELD_CONNECTIVES)}",
        rf"\b(?:{anchors})(?:\s+line)?\s+(?:{FIELD_VERBS})\s+(?:the\s+)?(?:words?\s+|phrase\s+|term\s+)?{_term(FIELD_CONNECTIVES)}",
        rf"\b(?:{INVERSE_VERBS})\s+[\"']?(.+?)[\"']?\s+in\s+(?:the\s+)?(?:{anchors})\b",
    ]


SUBJECT_PATTERNS = _field_patterns(r"subject|title|headline")
# A bare "message" only scopes to the body in the colon form
BODY_PATTERNS = _field_patterns(r"body|content|text|message\s+(?:body|text)|message(?=\s*:)")

KEYWORD_PATTERNS = [
    rf"\b(?:about|regarding|concerning|related\s+to|on\s+the\s+topic\s+of)\s+{_term(KEYWORD_CONNECTIVES)}",
    rf"\b(?:containing|contains|that\s+contain|which\s+contain|mentioning|that\s+mention)\s+{_term(KEYWORD_CONNECTIVES)}",
    rf"\bwith\s+(?:the\s+)?(?:words?\s+|phrase\s+|term\s+|keywords?\s+)?{_term(KEYWORD_CONNECTIVES)}",
    rf"\b(?:search|look|looking)\s+for\s+{_term(KEYWORD_CONNECTIVES)}",
    rf"\bfind\s+{_term(KEYWORD_CONNECTIVES)}",
    r"(?<!from\s)(?<!by\s)\"([^\"]{2,})\"",
    r"(?:^|\s)(?<!from\s)(?<!by\s)'([^']{2,})'(?=\s|$)",
]

# Leading words that say nothing about the topic
FILLER_PREFIX = re.compile(
    r"^(?:(?:me|all|any|my|the|some|of|emails?|messages?|mails?|e-mails?|anything|everything|"
    r"stuff|things|results?)\s+)+"
)
FILLER_ONLY = re.compile(
    r"^(?:me|all|any|my|the|some|emails?|messages?|mails?|e-mails?|anything|everything|stuff|things|results?)$"
)

# Vocabulary removed by the cleaned-text fallback
FALLBACK_STOPWORDS = {
    "search", "find", "show", "get", "give", "list", "display", "look", "looking", "fetch",
    "retrieve", "open", "check", "see", "me", "my", "i", "all", "any", "the", "a", "an",
    "email", "emails", "mail", "mails", "message", "messages", "inbox", "folder", "folders",
    "mailbox", "from", "to", "before", "after", "since", "in", "on", "at", "for", "of",
    "with", "and", "or", "please", "can", "you", "could", "would", "want", "need",
    "some", "that", "which", "are", "is", "was", "were", "there", "have", "has", "received",
    "sent", "new", "latest", "recent", "by", "about", "top", "first", "last", "only",
    "limit", "limited", "result", "results", "item", "items", "newest",
}

LEADING_ARTICLES = {"the", "a", "an"}

# Placeholders that name nobody in particular
GENERIC_SENDERS = {
    "people", "someone", "somebody", "anyone", "anybody", "everyone", "everybody",
    "folks", "colleagues", "me", "us", "them",
}

FALLBACK_PUNCTUATION = re.compile(r"[^\w\s@.'-]|(?<!\w)[.'-]|[.'-](?!\w)")


class EntityExtractor:
    """
    Extracts sender and keyword information from a normalized query.

    Sender and keywords are extracted independently, each from an ordered
    pattern list where the first surviving candidate wins.
    """

    def __init__(self):
        self._sender_patterns = [re.compile(p) for p in SENDER_PATTERNS]
        self._subject_patterns = [re.compile(p) for p in SUBJECT_PATTERNS]
        self._body_patterns = [re.compile(p) for p in BODY_PATTERNS]
        self._keyword_patterns = [re.compile(p) for p in KEYWORD_PATTERNS]

    def extract(self, text: str) -> EntityResult:
        if not text:
            return EntityResult()

        sender = self.extract_sender(text)
        subject_term, body_term = self.extract_field_terms(text)

        if subject_term or body_term:
            return EntityResult(
                sender=sender,
                keyword=self.build_field_query(subject_term, body_term),
                is_complex_query=True,
            )

        return EntityResult(sender=sender, keyword=self.extract_keyword(text))

    def extract_sender(self, text: str) -> Optional[str]:
        """
        Extract a sender address, name or domain

        Args:
            text: Lowercased query like "emails from john about the offsite"

        Returns:
            Sender fragment or None if not found
        """
        for pattern in self._sender_patterns:
            for match in pattern.finditer(text):
                candidate = self._clean_sender(match.group(1))
                if candidate:
                    logger.debug(f"Sender '{candidate}' matched by {pattern.pattern[:40]}...")
                    return candidate
        return None

    def extract_field_terms(self, text: str) -> Tuple[Optional[str], Optional[str]]:
        """Subject-scoped and body-scoped terms, either may be None"""
        return (
            self._first_term(self._subject_patterns, text),
            self._first_term(self._body_patterns, text),
        )

    def extract_keyword(self, text: str) -> Optional[str]:
        for pattern in self._keyword_patterns:
            for match in pattern.finditer(text):
                candidate = self._clean_keyword(match.group(1))
                if candidate:
                    logger.debug(f"Keyword '{candidate}' matched by {pattern.pattern[:40]}...")
                    return candidate
        return None

    def fallback_keyword(self, text: str) -> Optional[str]:
        """Strip filler vocabulary and punctuation, keep what is left as a keyword"""
        if not text:
            return None
        stripped = FALLBACK_PUNCTUATION.sub(" ", text)
        words = [
            word for word in stripped.split()
            if word not in FALLBACK_STOPWORDS and not word.isdigit()
        ]
        remainder = " ".join(words)
        return remainder if len(remainder) > 2 else None

    @staticmethod
    def build_field_query(subject_term: Optional[str], body_term: Optional[str]) -> str:
        parts = []
        if subject_term:
            parts.append(f'subject:"{subject_term}"')
        if body_term:
            parts.append(f'body:"{body_term}"')
        return " AND ".join(parts)

    def _first_term(self, patterns: List[re.Pattern], text: str) -> Optional[str]:
        for pattern in patterns:
            for match in pattern.finditer(text):
                candidate = self._clean_keyword(match.group(1))
                if candidate:
                    return candidate
        return None

    @staticmethod
    def _clean_sender(candidate: Optional[str]) -> Optional[str]:
        if not candidate:
            return None
        candidate = candidate.strip(" \t\"'.,;:!?")
        words = candidate.split()
        while words and words[0] in LEADING_ARTICLES:
            words.pop(0)
        while words and words[-1] in STOPWORDS:
            words.pop()
        candidate = " ".join(words)

        if len(candidate) <= 2 or candidate in STOPWORDS or words[0] in GENERIC_SENDERS:
            return None
        if candidate[0].isdigit() or words[0] in TEMPORAL_WORDS or words[0] in FOLDER_WORDS:
            return None
        return candidate

    @staticmethod
    def _clean_keyword(candidate: Optional[str]) -> Optional[str]:
        if not candidate:
            return None
        candidate = candidate.strip(" \t\"'.,;:!?")
        candidate = FILLER_PREFIX.sub("", candidate).strip()
        if not candidate or candidate in STOPWORDS or FILLER_ONLY.match(candidate):
            return None
        if candidate.split()[0] in TEMPORAL_WORDS:
            return None
        return candidate
