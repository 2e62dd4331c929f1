from __future__ import annotations

from aiohttp import web

from . import SEARCH_KEY, _int_param, render_template

PAGE_SIZE = 25


async def channels_page(request: web.Request) -> web.Response:
    engine = request.app[SEARCH_KEY]
    if engine is None:
        raise web.HTTPServiceUnavailable(text="Search service not ready")
    query = request.rel_url.query
    q = query.get("q", "").strip()
    filters = {
        "category": query.get("category", "").strip() or None,
        "country": query.get("country", "").strip() or None,
    }
    sort_by = query.get("sortBy", "relevance")
    offset = max(0, _int_param(request, "offset", 0))
    page = engine.search(q, limit=PAGE_SIZE, offset=offset, sort_by=sort_by, **filters)
    return render_template(
        "channels.jinja2",
        title=f"Search: {q}" if q else "Channels",
        q=q,
        filters=filters,
        sort_by=sort_by,
        page=page,
        prev_offset=max(0, offset - PAGE_SIZE) if offset else None,
        next_offset=offset + PAGE_SIZE if offset + PAGE_SIZE < page.total else None,
        categories=engine.get_categories(),
        countries=engine.get_countries(),
        trending=engine.get_trending_searches(5),
    )


routes = [
    web.get("/channels", channels_page),
]
