"""Search engine that filters a record collection with a query expression."""

import asyncio
import logging
import time
from collections.abc import Iterable, Iterator, Mapping
from datetime import datetime, timezone
from typing import Any

import msgspec

from .core.exceptions import QueryError
from .core.matcher import QueryMatcher
from .core.options import MatchOptions, coerce_options

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 500


class MatchResult(msgspec.Struct, frozen=True, kw_only=True, rename="camel"):
    """Outcome of one search call.

    Serializes with camelCase keys: ``results``, ``query``, ``timestamp``,
    ``executionTimeMs``, ``totalResults``, ``totalScanned``.
    """

    results: list[Any]
    query: Any
    timestamp: datetime
    execution_time_ms: float
    total_results: int
    total_scanned: int

    @property
    def is_empty(self) -> bool:
        """Check if no records matched."""
        return self.total_results == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-compatible builtins."""
        return msgspec.to_builtins(self)

    def to_json(self) -> bytes:
        """Encode as JSON."""
        return msgspec.json.encode(self)


class SearchEngine:
    """Full-scan search over a caller-owned record collection.

    The engine keeps only a reference to the collection and snapshots it
    at the start of each search, so searches never observe a collection
    changing underneath them and never modify it.
    """

    def __init__(self, records: Iterable[Any], matcher: QueryMatcher | None = None):
        """Initialize search engine.

        Args:
            records: Record collection to search
            matcher: Query matcher to use (default: built-in operators)
        """
        self.records = records
        self.matcher = matcher or QueryMatcher()

    def search(
        self,
        query: Mapping[str, Any],
        options: MatchOptions | Mapping[str, Any] | None = None,
    ) -> MatchResult:
        """Return every record matching the query, in collection order.

        Args:
            query: Query expression
            options: Match options (struct or wire-form mapping)

        Returns:
            MatchResult with matches and scan metadata

        Raises:
            InvalidQueryError: If the query is malformed
            UnsupportedOperatorError: If the query uses an unknown operator
            InvalidOptionsError: If the options are invalid
        """
        match_options = self._prepare(query, options)
        records = list(self.records)

        start_time = time.perf_counter()
        results = [
            record
            for record in records
            if self.matcher.matches(record, query, match_options, validate=False)
        ]
        elapsed_ms = (time.perf_counter() - start_time) * 1000

        return self._build_result(query, results, len(records), elapsed_ms)

    async def search_async(
        self,
        query: Mapping[str, Any],
        options: MatchOptions | Mapping[str, Any] | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> MatchResult:
        """Same as ``search`` but yields to the event loop between chunks.

        Args:
            query: Query expression
            options: Match options (struct or wire-form mapping)
            chunk_size: Records scanned between yields
        """
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")

        match_options = self._prepare(query, options)
        records = list(self.records)

        start_time = time.perf_counter()
        results = []
        for scanned, record in enumerate(records, start=1):
            if self.matcher.matches(record, query, match_options, validate=False):
                results.append(record)
            if scanned % chunk_size == 0:
                await asyncio.sleep(0)
        elapsed_ms = (time.perf_counter() - start_time) * 1000

        return self._build_result(query, results, len(records), elapsed_ms)

    def iter_matches(
        self,
        query: Mapping[str, Any],
        options: MatchOptions | Mapping[str, Any] | None = None,
    ) -> Iterator[Any]:
        """Lazily yield matching records in collection order.

        The query is validated immediately, before the first record is read.
        """
        match_options = self._prepare(query, options)

        def _scan() -> Iterator[Any]:
            for record in list(self.records):
                if self.matcher.matches(record, query, match_options, validate=False):
                    yield record

        return _scan()

    def matches(
        self,
        record: Any,
        query: Mapping[str, Any],
        options: MatchOptions | Mapping[str, Any] | None = None,
    ) -> bool:
        """Decide a single record against a query."""
        return self.matcher.matches(record, query, options)

    def _prepare(
        self,
        query: Any,
        options: MatchOptions | Mapping[str, Any] | None,
    ) -> MatchOptions:
        try:
            self.matcher.validate(query)
            return coerce_options(options)
        except QueryError as e:
            logger.warning(f"Rejected search: {e}")
            raise

    def _build_result(
        self,
        query: Mapping[str, Any],
        results: list[Any],
        scanned: int,
        elapsed_ms: float,
    ) -> MatchResult:
        logger.debug(
            f"Matched {len(results)} of {scanned} records in {elapsed_ms:.2f} ms"
        )
        return MatchResult(
            results=results,
            query=query,
            timestamp=datetime.now(timezone.utc),
            execution_time_ms=elapsed_ms,
            total_results=len(results),
            total_scanned=scanned,
        )
