from functools import lru_cache
from typing import Any, Callable, Optional, TypeVar
from datetime import datetime
from .models import SearchQuery, ParsedSearch, DateRange, EntityResult
from .folder_registry import FolderRegistry
from .temporal_resolver import TemporalResolver
from .entity_extractor import EntityExtractor
from .limit_extractor import LimitExtractor
from .response_crafter import build_search_description
from ..utils.config import SearchSettings, get_settings
from ..utils.logging import logger

T = TypeVar("T")

class QueryAssembler:
    """
    Builds a SearchQuery from a free-form search utterance.

    Extractors run in a fixed order (folder, dates, sender/keyword, limit)
    on the same normalized text. A failing extractor is logged and
    contributes no constraint.
    """

    def __init__(self, settings: Optional[SearchSettings] = None, verbose: bool = False):
        self.settings = settings or SearchSettings()
        self.temporal_resolver = TemporalResolver(self.settings)
        self.entity_extractor = EntityExtractor()
        self.limit_extractor = LimitExtractor()
        self.verbose = verbose

    def default_query(self) -> SearchQuery:
        return SearchQuery(folder=self.settings.default_folder, limit=self.settings.default_limit)

    def assemble(self, text: Any, now: datetime) -> SearchQuery:
        """Parse a natural language query into a structured SearchQuery"""
        if not isinstance(text, str) or not text.strip():
            return self.default_query()

        normalized = text.strip().lower()

        folder = self._run_stage(
            "folder", lambda: FolderRegistry.classify(normalized, self.settings.default_folder),
            self.settings.default_folder,
        )
        date_range = self._run_stage("temporal", lambda: self.temporal_resolver.resolve(normalized, now), None)
        entities = self._run_stage("entity", lambda: self.entity_extractor.extract(normalized), EntityResult())
        limit = self._run_stage("limit", lambda: self.limit_extractor.extract(normalized), None)

        mentions_date = date_range is not None
        if date_range is None:
            date_range = DateRange()
        keyword = entities.keyword
        if (
            not keyword
            and not entities.sender
            and not mentions_date
            and folder == self.settings.default_folder
        ):
            keyword = self._run_stage("fallback", lambda: self.entity_extractor.fallback_keyword(normalized), None)

        query = SearchQuery(
            keyword=keyword,
            is_complex_query=entities.is_complex_query,
            start_date=date_range.start,
            end_date=date_range.end,
            sender=entities.sender,
            folder=folder,
            limit=limit or self.settings.default_limit,
        )

        if self.verbose:
            logger.log(f"Parsed query: {query.model_dump_json(indent=2)}")

        return query

    def parse(self, text: Any, now: datetime) -> ParsedSearch:
        """Parse and describe a query for user feedback"""
        query = self.assemble(text, now)
        return ParsedSearch(
            query=query,
            search_description=build_search_description(query, self.settings.default_limit),
            original_query=text if isinstance(text, str) else "",
        )

    def _run_stage(self, name: str, stage: Callable[[], T], default: T) -> T:
        try:
            return stage()
        except Exception as e:
            logger.warning(f"{name} extraction failed, ignoring it: {e}")
            return default

@lru_cache
def get_assembler() -> QueryAssembler:
    return QueryAssembler(get_settings())

def parse_query(text: Any, now: datetime) -> SearchQuery:
    """Library entry point: free-form text and a reference time to a SearchQuery"""
    return get_assembler().assemble(text, now)
