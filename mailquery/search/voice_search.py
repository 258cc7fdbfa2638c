from typing import Callable, Dict, Optional
from datetime import datetime
from .query_assembler import QueryAssembler
from .search_executor import SearchExecutor
from .response_crafter import ResponseCrafter
from ..utils.config import SearchSettings
from ..utils.logging import logger

Translator = Callable[[str], str]

class VoiceSearchService:
    """Runs a spoken search end to end: translate, parse, execute, describe"""

    def __init__(self,
                 executor: SearchExecutor,
                 translator: Optional[Translator] = None,
                 settings: Optional[SearchSettings] = None,
                 verbose: bool = False):
        self.settings = settings or SearchSettings()
        self.executor = executor
        self.translator = translator
        self.assembler = QueryAssembler(self.settings, verbose=verbose)
        self.response_crafter = ResponseCrafter(self.settings.default_limit, verbose=verbose)
        self.verbose = verbose

    def _translate(self, voice_text: str) -> Optional[str]:
        """English text from the translation pre-pass, None when unchanged or unavailable"""
        if not self.translator:
            return None
        try:
            translated = self.translator(voice_text)
        except Exception as e:
            logger.warning(f"Translation failed, proceeding with original instructions: {e}")
            return None
        if translated and translated.strip() != voice_text.strip():
            logger.debug(f'Translated to English: "{translated}"')
            return translated
        return None

    def search(self, voice_text: str, now: Optional[datetime] = None) -> Dict:
        """Parse a spoken instruction and run it against the executor's messages"""
        now = now or datetime.now()
        logger.debug(f'Processing voice search: "{voice_text}"')

        translated = self._translate(voice_text)
        parsed = self.assembler.parse(translated or voice_text, now)

        if parsed.query.start_date or parsed.query.end_date:
            logger.debug(f"Date range: {parsed.query.start_date} -> {parsed.query.end_date}")

        results = self.executor.execute_search(parsed.query)
        logger.debug(f"Search returned {results.get('total_results', 0)} results")

        return {
            "results": results.get("results", []),
            "count": results.get("returned_results", 0),
            "original_query": voice_text,
            "translated_query": translated,
            "parsed_parameters": parsed.query.model_dump(mode="json"),
            "search_description": parsed.search_description,
            "response": self.response_crafter.craft_response(parsed, results),
        }
