from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

_METADATA_KEYS = {
    "platform": "platform",
    "tvgName": "tvg_name",
    "handle": "handle",
    "enrichedAt": "enriched_at",
}


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None


@dataclass(frozen=True, slots=True)
class ChannelMetadata:
    platform: str | None = None
    tvg_name: str | None = None
    handle: str | None = None
    enriched_at: Any = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ChannelMetadata | None:
        if not isinstance(data, Mapping):
            return None
        known = {}
        extra = {}
        for key, value in data.items():
            attr = _METADATA_KEYS.get(key)
            if attr is None and key in _METADATA_KEYS.values():
                attr = key
            if attr is None:
                extra[key] = value
            elif attr == "enriched_at":
                known[attr] = value
            else:
                known[attr] = _optional_text(value)
        return cls(extra=extra, **known)

    def keywords(self) -> tuple[str, ...]:
        """Metadata values that take part in full-text indexing."""
        return tuple(value for value in (self.platform, self.tvg_name, self.handle) if value)

    def to_dict(self) -> dict[str, Any]:
        payload = dict(self.extra)
        for key, attr in _METADATA_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                payload[key] = value
        return payload


@dataclass(frozen=True, slots=True)
class Channel:
    id: str
    name: str = ""
    category: str | None = None
    country: str | None = None
    language: str | None = None
    description: str | None = None
    source: str | None = None
    metadata: ChannelMetadata | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Channel:
        """
        Build a channel from its JSON form.
        Only a missing id is an error; any other field degrades to None or "".
        """
        raw_id = data.get("id") if isinstance(data, Mapping) else None
        if raw_id is None or str(raw_id).strip() == "":
            raise ValueError(f"Channel record without id: {data!r}")
        return cls(
            id=str(raw_id),
            name=_optional_text(data.get("name")) or "",
            category=_optional_text(data.get("category")),
            country=_optional_text(data.get("country")),
            language=_optional_text(data.get("language")),
            description=_optional_text(data.get("description")),
            source=_optional_text(data.get("source")),
            metadata=ChannelMetadata.from_dict(data.get("metadata")),
        )

    def indexed_values(self) -> tuple[str, ...]:
        values = [self.name, self.category, self.country, self.language, self.description]
        if self.metadata:
            values.extend(self.metadata.keywords())
        return tuple(value for value in values if value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "country": self.country,
            "language": self.language,
            "description": self.description,
            "source": self.source,
            "metadata": self.metadata.to_dict() if self.metadata else None,
        }


@dataclass(slots=True)
class SearchOptions:
    limit: int = 50
    offset: int = 0
    category: str | None = None
    country: str | None = None
    language: str | None = None
    source: str | None = None
    fuzzy: bool = True
    sort_by: str = "relevance"


@dataclass(frozen=True, slots=True)
class SearchResult:
    channel: Channel
    score: int = 0

    def to_dict(self) -> dict[str, Any]:
        payload = self.channel.to_dict()
        payload["score"] = self.score
        return payload


@dataclass(frozen=True, slots=True)
class SearchPage:
    total: int
    limit: int
    offset: int
    results: list[SearchResult]

    @property
    def channels(self) -> list[Channel]:
        return [result.channel for result in self.results]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
            "results": [result.to_dict() for result in self.results],
        }


@dataclass(frozen=True, slots=True)
class FacetCount:
    name: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "count": self.count}


@dataclass(frozen=True, slots=True)
class TermCount:
    text: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "count": self.count}


@dataclass(frozen=True, slots=True)
class CatalogStats:
    total_channels: int
    unique_categories: int
    unique_countries: int
    unique_languages: int
    indexed_terms: int
    sources: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalChannels": self.total_channels,
            "uniqueCategories": self.unique_categories,
            "uniqueCountries": self.unique_countries,
            "uniqueLanguages": self.unique_languages,
            "indexedTerms": self.indexed_terms,
            "sources": dict(self.sources),
        }
