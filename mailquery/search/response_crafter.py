import re
from typing import Dict
from datetime import datetime
from .models import SearchQuery, ParsedSearch, DEFAULT_FOLDER, DEFAULT_LIMIT
from .folder_registry import FolderRegistry
from ..utils.logging import logger

SUBJECT_TERM = re.compile(r'subject:"([^"]+)"', re.IGNORECASE)
BODY_TERM = re.compile(r'body:"([^"]+)"', re.IGNORECASE)

def format_date(value: datetime) -> str:
    return f"{value.month}/{value.day}/{value.year}"

def build_search_description(query: SearchQuery, default_limit: int = DEFAULT_LIMIT) -> str:
    """Human readable summary of the filters a query applies"""
    parts = []

    if query.keyword:
        if query.is_complex_query:
            subject_match = SUBJECT_TERM.search(query.keyword)
            body_match = BODY_TERM.search(query.keyword)
            if subject_match and body_match:
                parts.append(
                    f'emails with subject containing "{subject_match.group(1)}" '
                    f'AND body containing "{body_match.group(1)}"'
                )
            elif subject_match:
                parts.append(f'emails with subject containing "{subject_match.group(1)}"')
            elif body_match:
                parts.append(f'emails with body containing "{body_match.group(1)}"')
            else:
                parts.append(f'emails matching "{query.keyword}"')
        else:
            parts.append(f'emails containing "{query.keyword}"')
    else:
        parts.append("emails")

    if query.sender:
        parts.append(f"from {query.sender}")

    if query.start_date and query.end_date:
        parts.append(f"between {format_date(query.start_date)} and {format_date(query.end_date)}")
    elif query.start_date:
        parts.append(f"after {format_date(query.start_date)}")
    elif query.end_date:
        parts.append(f"before {format_date(query.end_date)}")

    if query.folder and query.folder != DEFAULT_FOLDER:
        parts.append(f"in the {FolderRegistry.display_name(query.folder)} folder")

    description = f"Showing {' '.join(parts)}"

    if query.limit != default_limit:
        description += f" (limited to {query.limit} results)"

    return description

class ResponseCrafter:
    def __init__(self, default_limit: int = DEFAULT_LIMIT, verbose: bool = False):
        self.default_limit = default_limit
        self.verbose = verbose

    def describe(self, query: SearchQuery) -> str:
        return build_search_description(query, self.default_limit)

    def craft_response(self, parsed: ParsedSearch, search_results: Dict) -> str:
        if self.verbose:
            logger.log(f"Crafting response for {search_results.get('total_results', 0)} results of type {search_results.get('type')}")

        if search_results.get('type') == 'error':
            return f"Error: {search_results.get('message')}"

        if search_results.get('type') == 'empty' or search_results.get('total_results', 0) == 0:
            return f"{parsed.search_description}: no emails found matching your query."

        total = search_results['total_results']
        returned = search_results.get('returned_results', total)
        noun = "email" if total == 1 else "emails"
        if returned < total:
            return f"{parsed.search_description}: {returned} of {total} matching {noun}."
        return f"{parsed.search_description}: {total} matching {noun}."
