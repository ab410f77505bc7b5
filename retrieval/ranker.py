"""
VerseKit - Search Ranker

Merges exact-phrase and all-words matches from the storage index into one
ranked, paginated result:

1. phrase matches, ascending by address
2. word matches not already returned as phrase matches, in relevance order

Pagination applies to the merged sequence. Both sub-queries run
concurrently and a failure in one cancels the other. Each asks for the
first ``offset + limit`` candidates, which is always enough to fill the
requested page.
"""
from __future__ import annotations

from typing import List, Optional, Set

from core.async_utils import gather_or_cancel, timeout_with_cleanup
from core.types import MAX_LIMIT, NO_OFFSET, normalize_offset
from db.interfaces import VerseRepository
from domain.address import Address
from domain.scope import ENTIRE_CORPUS, SearchScope, to_scope
from domain.verse import Verse
from observability.logging import LogContext, get_logger
from observability.tracing import create_span

logger = get_logger(__name__)


def merge_matches(phrase: List[Verse], words: List[Verse]) -> List[Verse]:
    """Phrase matches first, then word matches not seen yet."""
    seen: Set[Address] = set()
    merged: List[Verse] = []
    for verse in (*phrase, *words):
        if verse.address in seen:
            continue
        seen.add(verse.address)
        merged.append(verse)
    return merged


class SearchRanker:
    """
    Ranked full-text search over a ``VerseRepository``.

    Args:
        repository: Storage backend that owns the text index
        timeout_seconds: Upper bound for both sub-queries together, or None
    """

    def __init__(self, repository: VerseRepository, timeout_seconds: Optional[float] = None):
        self.repository = repository
        self.timeout_seconds = timeout_seconds

    async def search(
        self,
        query: str,
        scope: Optional[SearchScope] = None,
        limit: int = MAX_LIMIT,
        offset: int = NO_OFFSET,
    ) -> List[Verse]:
        """
        Search ``query`` within ``scope``.

        An empty or whitespace-only query, or a non-positive limit, returns
        an empty list without touching storage.
        """
        if not query or not query.strip() or limit <= 0:
            return []

        resolved = to_scope(scope) if scope is not None else ENTIRE_CORPUS
        skip = normalize_offset(offset)
        window = min(skip + limit, MAX_LIMIT)

        with LogContext(query=query, scope=resolved.describe()):
            with create_span(
                "search",
                attributes={"search.query": query, "search.scope": resolved.describe()},
            ) as span:
                async with timeout_with_cleanup(self.timeout_seconds, operation="search"):
                    phrase, words = await gather_or_cancel(
                        self.repository.phrase_search(query, resolved, window, 0),
                        self.repository.word_search(query, resolved, window, 0),
                    )

                merged = merge_matches(phrase, words)
                page = merged[skip:skip + limit]
                span.set_attribute("search.results", len(page))
                logger.debug(
                    "Search merged",
                    phrase=len(phrase),
                    word=len(merged) - len(phrase),
                    returned=len(page),
                )
                return page
