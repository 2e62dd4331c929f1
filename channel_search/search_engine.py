from __future__ import annotations

import logging
import math
import threading
import unicodedata
from bisect import bisect_left
from collections import Counter
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from itertools import islice
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from rapidfuzz import process
from rapidfuzz.distance import Levenshtein

from channel_search.db.models import (
    CatalogStats,
    Channel,
    FacetCount,
    SearchOptions,
    SearchPage,
    SearchResult,
    TermCount,
)
from channel_search.tokenizer import split_query, split_terms

logger = logging.getLogger(__name__)

EXACT_MATCH_SCORE = 10
FUZZY_MATCH_SCORE = 5
UNKNOWN = "Unknown"
UNKNOWN_SOURCE = "unknown"
SORT_RELEVANCE = "relevance"
SORT_NAME = "name"
SORT_RECENT = "recent"


def levenshtein_distance(a: str, b: str) -> int:
    """Unit-cost edit distance (insert, delete, substitute)."""
    return Levenshtein.distance(a, b)


def max_edit_distance(term: str) -> int:
    """Largest distance at which an indexed term still counts as a fuzzy hit for `term`."""
    return math.ceil(len(term) / 3)


@dataclass(frozen=True, slots=True)
class _Snapshot:
    channels: tuple[Channel, ...]
    by_id: dict[str, Channel]
    positions: dict[str, int]
    index: dict[str, frozenset[str]]
    terms: tuple[str, ...]


def _coerce_channels(records: Iterable[Channel | Mapping[str, Any]]) -> list[Channel]:
    channels: list[Channel] = []
    for record in records or ():
        if isinstance(record, Channel):
            channels.append(record)
            continue
        try:
            channels.append(Channel.from_dict(record))
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping channel record: %s", exc)
    return channels


def _build_snapshot(channels: list[Channel]) -> _Snapshot:
    by_id: dict[str, Channel] = {}
    positions: dict[str, int] = {}
    postings: dict[str, set[str]] = {}
    for position, channel in enumerate(channels):
        if channel.id not in by_id:
            by_id[channel.id] = channel
            positions[channel.id] = position
        for value in channel.indexed_values():
            for term in split_terms(value):
                postings.setdefault(term, set()).add(channel.id)
    index = {term: frozenset(ids) for term, ids in postings.items()}
    return _Snapshot(
        channels=tuple(channels),
        by_id=by_id,
        positions=positions,
        index=index,
        terms=tuple(sorted(index)),
    )


def _enriched_timestamp(channel: Channel) -> float:
    value = channel.metadata.enriched_at if channel.metadata else None
    if value is None or value == "":
        return 0.0
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, (int, float)):
        # numeric timestamps are milliseconds since the epoch
        return float(value) / 1000
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            return 0.0
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()


def _name_key(name: str) -> tuple[str, str]:
    # accents fold onto their base letter: "Ärte" sorts with "Arte", not after "Z"
    decomposed = unicodedata.normalize("NFKD", name or "")
    folded = "".join(char for char in decomposed if not unicodedata.combining(char)).casefold()
    return folded, name or ""


def _facet_matches(value: str | None, expected: str | None) -> bool:
    if not expected:
        return True
    return bool(value) and value.lower() == expected.lower()


class ChannelSearch:
    """
    Inverted index over a channel snapshot with exact and fuzzy term lookup.

    The snapshot and the index derived from it live in one immutable object that
    `update_channels` replaces wholesale. Queries read that reference once, so a
    rebuild never exposes a half-built index to a running query.
    """

    def __init__(self, channels: Iterable[Channel | Mapping[str, Any]] = ()) -> None:
        self._lock = threading.Lock()
        self._snapshot = _build_snapshot([])
        self.update_channels(channels)

    @property
    def channels(self) -> tuple[Channel, ...]:
        return self._snapshot.channels

    @property
    def index(self) -> Mapping[str, frozenset[str]]:
        return MappingProxyType(self._snapshot.index)

    def __len__(self) -> int:
        return len(self._snapshot.channels)

    def get_channel(self, channel_id: str | int) -> Channel | None:
        return self._snapshot.by_id.get(str(channel_id))

    def update_channels(self, channels: Iterable[Channel | Mapping[str, Any]]) -> None:
        with self._lock:
            snapshot = _build_snapshot(_coerce_channels(channels))
            self._snapshot = snapshot
        logger.info("Indexed %s channels into %s terms", len(snapshot.channels), len(snapshot.index))

    # region search ------------------------------------------------------
    def search(self, query: str | None = None, options: SearchOptions | None = None, **overrides) -> SearchPage:
        options = options or SearchOptions()
        if overrides:
            options = replace(options, **overrides)
        snapshot = self._snapshot

        if not query or not query.strip():
            candidates = [SearchResult(channel) for channel in snapshot.channels]
        else:
            scores = self._score(snapshot, query, options.fuzzy)
            matched = sorted(
                (channel_id for channel_id in scores if channel_id in snapshot.by_id),
                key=snapshot.positions.__getitem__,
            )
            candidates = [SearchResult(snapshot.by_id[channel_id], scores[channel_id]) for channel_id in matched]

        filtered = [result for result in candidates if self._passes_filters(result.channel, options)]
        ordered = self._sort(filtered, options.sort_by)
        limit = max(0, int(options.limit))
        offset = max(0, int(options.offset))
        return SearchPage(
            total=len(ordered),
            limit=limit,
            offset=offset,
            results=ordered[offset:offset + limit],
        )

    @staticmethod
    def _score(snapshot: _Snapshot, query: str, fuzzy: bool) -> dict[str, int]:
        scores: dict[str, int] = {}
        for token in split_query(query):
            for channel_id in snapshot.index.get(token, ()):
                scores[channel_id] = scores.get(channel_id, 0) + EXACT_MATCH_SCORE
            if not fuzzy:
                continue
            # An exact key is at distance 0, so it earns the fuzzy bonus as well.
            close_terms = process.extract(
                token,
                snapshot.terms,
                scorer=Levenshtein.distance,
                score_cutoff=max_edit_distance(token),
                limit=None,
            )
            for term, _, _ in close_terms:
                for channel_id in snapshot.index[term]:
                    scores[channel_id] = scores.get(channel_id, 0) + FUZZY_MATCH_SCORE
        return scores

    @staticmethod
    def _passes_filters(channel: Channel, options: SearchOptions) -> bool:
        return (
            _facet_matches(channel.category, options.category)
            and _facet_matches(channel.country, options.country)
            and _facet_matches(channel.language, options.language)
            and _facet_matches(channel.source, options.source)
        )

    @staticmethod
    def _sort(results: list[SearchResult], sort_by: str) -> list[SearchResult]:
        if sort_by == SORT_RELEVANCE:
            return sorted(results, key=lambda result: -result.score)
        if sort_by == SORT_NAME:
            return sorted(results, key=lambda result: _name_key(result.channel.name))
        if sort_by == SORT_RECENT:
            return sorted(results, key=lambda result: -_enriched_timestamp(result.channel))
        return list(results)

    # region catalog helpers ---------------------------------------------
    def get_suggestions(self, prefix: str | None, limit: int = 10) -> list[TermCount]:
        if not prefix or limit <= 0:
            return []
        snapshot = self._snapshot
        lowered = prefix.lower()
        start = bisect_left(snapshot.terms, lowered)
        suggestions = []
        for term in islice(snapshot.terms, start, None):
            if not term.startswith(lowered) or len(suggestions) >= limit:
                break
            suggestions.append(TermCount(text=term, count=len(snapshot.index[term])))
        return suggestions

    def _facet(self, attr: str) -> list[FacetCount]:
        counter = Counter(getattr(channel, attr) or UNKNOWN for channel in self._snapshot.channels)
        return [FacetCount(name=name, count=count) for name, count in counter.most_common()]

    def get_categories(self) -> list[FacetCount]:
        return self._facet("category")

    def get_countries(self) -> list[FacetCount]:
        return self._facet("country")

    def get_languages(self) -> list[FacetCount]:
        return self._facet("language")

    def get_stats(self) -> CatalogStats:
        """
        Distinct counts are taken over raw field values: a missing value is one
        bucket of its own, separate from a literal "Unknown".
        """
        snapshot = self._snapshot
        channels = snapshot.channels
        sources = Counter(channel.source or UNKNOWN_SOURCE for channel in channels)
        return CatalogStats(
            total_channels=len(channels),
            unique_categories=len({channel.category for channel in channels}),
            unique_countries=len({channel.country for channel in channels}),
            unique_languages=len({channel.language for channel in channels}),
            indexed_terms=len(snapshot.index),
            sources=dict(sources),
        )

    def get_trending_searches(self, limit: int = 10) -> list[TermCount]:
        """Most common "category - country" pairs of the current snapshot."""
        if limit <= 0:
            return []
        trending = Counter(
            f"{channel.category or UNKNOWN} - {channel.country or UNKNOWN}"
            for channel in self._snapshot.channels
        )
        return [TermCount(text=text, count=count) for text, count in trending.most_common(limit)]

    def find_similar(self, channel_id: str | int, limit: int = 5) -> list[Channel]:
        snapshot = self._snapshot
        channel = snapshot.by_id.get(str(channel_id))
        if channel is None or limit <= 0:
            return []
        similar = (
            candidate
            for candidate in snapshot.channels
            if candidate.id != channel.id
            and candidate.category == channel.category
            and candidate.country == channel.country
        )
        return list(islice(similar, limit))
