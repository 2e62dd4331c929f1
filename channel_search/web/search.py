from __future__ import annotations

import json
import logging

from aiohttp import web

from channel_search.config import SEARCH_MAX_LIMIT, SUGGESTIONS_MAX_LIMIT
from channel_search.db.models import SearchOptions
from . import DATABASE_KEY, SEARCH_KEY, _int_param, _json_error

_FALSE_VALUES = {"0", "false", "no", "off"}


def _search_engine(request: web.Request):
    engine = request.app[SEARCH_KEY]
    if engine is None:
        raise web.HTTPServiceUnavailable(
            text=json.dumps({"error": "Search service not ready"}),
            content_type="application/json",
        )
    return engine


def _facet_param(request: web.Request, name: str) -> str | None:
    value = request.rel_url.query.get(name, "").strip()
    return value or None


async def search_channels(request: web.Request) -> web.Response:
    engine = _search_engine(request)
    query = request.rel_url.query
    options = SearchOptions(
        limit=min(_int_param(request, "limit", 50), SEARCH_MAX_LIMIT),
        offset=max(0, _int_param(request, "offset", 0)),
        category=_facet_param(request, "category"),
        country=_facet_param(request, "country"),
        language=_facet_param(request, "language"),
        source=_facet_param(request, "source"),
        fuzzy=query.get("fuzzy", "true").strip().lower() not in _FALSE_VALUES,
        sort_by=query.get("sortBy", "relevance"),
    )
    try:
        page = engine.search(query.get("q", ""), options)
    except Exception as exc:  # pragma: no cover
        logging.exception("Channel search failed")
        return _json_error(500, str(exc))
    return web.json_response({"success": True, **page.to_dict()})


async def search_suggestions(request: web.Request) -> web.Response:
    engine = _search_engine(request)
    limit = min(_int_param(request, "limit", 10), SUGGESTIONS_MAX_LIMIT)
    try:
        suggestions = engine.get_suggestions(request.rel_url.query.get("q", ""), limit)
    except Exception as exc:  # pragma: no cover
        logging.exception("Suggestions failed")
        return _json_error(500, str(exc))
    return web.json_response({"success": True, "suggestions": [item.to_dict() for item in suggestions]})


async def search_filters(request: web.Request) -> web.Response:
    engine = _search_engine(request)
    try:
        payload = {
            "categories": [item.to_dict() for item in engine.get_categories()],
            "countries": [item.to_dict() for item in engine.get_countries()],
            "languages": [item.to_dict() for item in engine.get_languages()],
            "stats": engine.get_stats().to_dict(),
        }
    except Exception as exc:  # pragma: no cover
        logging.exception("Filters failed")
        return _json_error(500, str(exc))
    return web.json_response(payload)


async def trending_searches(request: web.Request) -> web.Response:
    engine = _search_engine(request)
    limit = _int_param(request, "limit", 10)
    try:
        trending = engine.get_trending_searches(limit)
    except Exception as exc:
        logging.exception("Trending searches failed")
        return _json_error(500, str(exc))
    return web.json_response({"success": True, "trending": [item.to_dict() for item in trending]})


async def similar_channels(request: web.Request) -> web.Response:
    engine = _search_engine(request)
    channel_id = request.match_info["channel_id"]
    limit = _int_param(request, "limit", 5)
    try:
        if engine.get_channel(channel_id) is None:
            return _json_error(404, "Channel not found")
        similar = engine.find_similar(channel_id, limit)
    except Exception as exc:
        logging.exception("Similar channels lookup failed for %s", channel_id)
        return _json_error(500, str(exc))
    return web.json_response({"success": True, "similar": [channel.to_dict() for channel in similar]})


async def reindex_channels(request: web.Request) -> web.Response:
    engine = _search_engine(request)
    database = request.app[DATABASE_KEY]
    if database is None:
        return _json_error(503, "Channel store not configured")
    try:
        engine.update_channels(database.list_channels())
    except Exception as exc:  # pragma: no cover
        logging.exception("Failed to rebuild channel index")
        return _json_error(500, str(exc))
    return web.json_response({"success": True, "stats": engine.get_stats().to_dict()})


routes = [
    web.get("/api/channels/search", search_channels),
    web.get("/api/channels/search/suggestions", search_suggestions),
    web.get("/api/channels/search/filters", search_filters),
    web.get("/api/channels/search/trending", trending_searches),
    web.get("/api/channels/{channel_id}/similar", similar_channels),
    web.post("/api/channels/reindex", reindex_channels),
]
