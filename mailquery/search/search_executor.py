from typing import Callable, Dict, Iterable, List, Optional
from datetime import datetime
from pathlib import Path
import json
import re
from pydantic import ValidationError
from .models import SearchQuery, EmailMessage
from .folder_registry import FolderRegistry
from ..utils.logging import logger

MessageFilter = Callable[[EmailMessage], bool]

FIELD_TERM = re.compile(r'(subject|body):"([^"]*)"', re.IGNORECASE)

# Gmail keeps these out of All Mail
EXCLUDED_FROM_ALL_MAIL = {"[Gmail]/Spam", "[Gmail]/Trash"}

def load_mailbox(path: str) -> List[EmailMessage]:
    """Load messages from a JSON array of message objects"""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = data.get("messages", [])
        return [EmailMessage.model_validate(item) for item in data]
    except (OSError, json.JSONDecodeError, ValidationError, TypeError) as e:
        raise ValueError(f"Failed to load mailbox {path}: {str(e)}")

class SearchExecutor:
    """Applies a SearchQuery to an in-memory list of messages"""

    def __init__(self, messages: Optional[Iterable[EmailMessage]] = None, verbose: bool = False):
        self.messages = list(messages or [])
        self.verbose = verbose

    def _build_keyword_filter(self, query: SearchQuery) -> Optional[MessageFilter]:
        """Subject/body terms for complex queries, plain substring otherwise"""
        if not query.keyword:
            return None

        if query.is_complex_query:
            terms = [(field.lower(), term.lower()) for field, term in FIELD_TERM.findall(query.keyword)]
            if terms:
                def matches_fields(message: EmailMessage) -> bool:
                    return all(
                        term in (message.subject if field == "subject" else message.body).lower()
                        for field, term in terms
                    )
                return matches_fields

        keyword = query.keyword.lower()

        def matches_keyword(message: EmailMessage) -> bool:
            return any(
                keyword in value.lower()
                for value in (message.subject, message.body, message.sender)
            )
        return matches_keyword

    def _build_sender_filter(self, sender: Optional[str]) -> Optional[MessageFilter]:
        if not sender:
            return None
        sender = sender.lower()

        def matches_sender(message: EmailMessage) -> bool:
            return sender in message.sender.lower() or sender in (message.sender_name or "").lower()
        return matches_sender

    def _build_date_filter(self, start: Optional[datetime], end: Optional[datetime]) -> Optional[MessageFilter]:
        """Inclusive bounds on the message date"""
        if not start and not end:
            return None

        def within(message: EmailMessage) -> bool:
            if start and message.date < _align(start, message.date):
                return False
            if end and message.date > _align(end, message.date):
                return False
            return True
        return within

    def _build_folder_filter(self, folder: str) -> Optional[MessageFilter]:
        mailbox = FolderRegistry.resolve_mailbox(folder)
        if mailbox == "[Gmail]/All Mail":
            return lambda message: FolderRegistry.resolve_mailbox(message.folder) not in EXCLUDED_FROM_ALL_MAIL
        return lambda message: FolderRegistry.resolve_mailbox(message.folder).lower() == mailbox.lower()

    def _combine_filters(self, filters: List[Optional[MessageFilter]]) -> MessageFilter:
        """Combine multiple filters with AND logic"""
        valid_filters = [f for f in filters if f is not None]
        return lambda message: all(f(message) for f in valid_filters)

    def execute_search(self, query: SearchQuery) -> Dict:
        """Run the query against the loaded messages, newest first"""
        where_filter = self._combine_filters([
            self._build_folder_filter(query.folder),
            self._build_keyword_filter(query),
            self._build_sender_filter(query.sender),
            self._build_date_filter(query.start_date, query.end_date),
        ])

        matches = sorted(
            (message for message in self.messages if where_filter(message)),
            key=lambda message: message.date,
            reverse=True,
        )

        if self.verbose:
            logger.log(f"Matched {len(matches)} of {len(self.messages)} messages")

        if not matches:
            return {
                "type": "empty",
                "message": "No results found matching the criteria",
                "total_results": 0,
                "query_info": query.model_dump(mode="json")
            }

        results = [message.model_dump(mode="json") for message in matches[:query.limit]]
        return {
            "type": "list",
            "total_results": len(matches),
            "returned_results": len(results),
            "results": results,
            "query_info": query.model_dump(mode="json")
        }

def _align(bound: datetime, moment: datetime) -> datetime:
    """Give a naive bound the timezone of an aware message date"""
    if bound.tzinfo is None and moment.tzinfo is not None:
        return bound.replace(tzinfo=moment.tzinfo)
    if bound.tzinfo is not None and moment.tzinfo is None:
        return bound.replace(tzinfo=None)
    return bound
