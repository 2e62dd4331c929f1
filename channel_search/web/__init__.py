from __future__ import annotations

import json
import logging
from pathlib import Path

from aiohttp import web
from jinja2 import Environment, FileSystemLoader, select_autoescape

BASE_DIR = Path(__file__).resolve().parent
TEMPLATE_DIR = BASE_DIR / "templates"

SEARCH_KEY = "channel_search"
DATABASE_KEY = "channel_db"

_JINJA_ENV = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(("jinja2", "html", "xml")),
)


def render_template(template_name: str, **context) -> web.Response:
    context.setdefault("message", None)
    context.setdefault("title", "Channel search")
    template = _JINJA_ENV.get_template(template_name)
    html = template.render(**context)
    return web.Response(text=html, content_type="text/html")


def _json_error(status: int, message: str) -> web.Response:
    return web.json_response({"error": message}, status=status)


def _int_param(request: web.Request, name: str, default: int) -> int:
    raw = request.rel_url.query.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise web.HTTPBadRequest(
            text=json.dumps({"error": f"Parameter {name} must be an integer"}),
            content_type="application/json",
        )


from . import channels, search  # noqa: E402  # isort:skip


def create_app(channel_search, database=None) -> web.Application:
    app = web.Application()
    app[SEARCH_KEY] = channel_search
    app[DATABASE_KEY] = database
    app.add_routes(search.routes)
    app.add_routes(channels.routes)
    return app


async def start_web_server(channel_search, database=None, host: str = "127.0.0.1", port: int = 8080):
    app = create_app(channel_search, database)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host=host, port=port)
    await site.start()
    logging.info("Web UI listening on http://%s:%s", host, port)
    return runner
