import json
import unittest
from pathlib import Path

from aiohttp.test_utils import AioHTTPTestCase

from channel_search.config import SEARCH_MAX_LIMIT
from channel_search.db import Channel, Database
from channel_search.search_engine import ChannelSearch
from channel_search.web import create_app

DATA_FILE = Path(__file__).parent / "data" / "channels.json"


class SearchApiTests(AioHTTPTestCase):
    async def get_application(self):
        self.db = Database(":memory:")
        self.db.upsert_channels([Channel(id="only", name="Only Channel", category="News")])
        self.engine = ChannelSearch(json.loads(DATA_FILE.read_text(encoding="utf-8")))
        return create_app(self.engine, self.db)

    async def test_search(self):
        resp = await self.client.request("GET", "/api/channels/search", params={"q": "bbc news"})
        self.assertEqual(resp.status, 200)
        payload = await resp.json()
        self.assertTrue(payload["success"])
        self.assertEqual(payload["total"], 3)
        self.assertEqual(payload["results"][0]["id"], "bbc-news")
        self.assertEqual(payload["results"][0]["score"], 30)

    async def test_search_filters_and_sort(self):
        resp = await self.client.request(
            "GET",
            "/api/channels/search",
            params={"category": "news", "sortBy": "recent", "limit": "2"},
        )
        payload = await resp.json()
        self.assertEqual(payload["total"], 3)
        self.assertEqual([item["id"] for item in payload["results"]], ["sky-news", "bbc-news"])

    async def test_search_without_fuzzy(self):
        resp = await self.client.request("GET", "/api/channels/search", params={"q": "nws", "fuzzy": "false"})
        payload = await resp.json()
        self.assertEqual(payload["total"], 0)

    async def test_search_limits_are_clamped(self):
        resp = await self.client.request("GET", "/api/channels/search", params={"limit": "100000", "offset": "-4"})
        payload = await resp.json()
        self.assertEqual(payload["limit"], SEARCH_MAX_LIMIT)
        self.assertEqual(payload["offset"], 0)

    async def test_invalid_limit(self):
        resp = await self.client.request("GET", "/api/channels/search", params={"limit": "many"})
        self.assertEqual(resp.status, 400)
        payload = await resp.json()
        self.assertIn("limit", payload["error"])

    async def test_suggestions(self):
        resp = await self.client.request("GET", "/api/channels/search/suggestions", params={"q": "ne"})
        payload = await resp.json()
        self.assertEqual(payload["suggestions"], [{"text": "news", "count": 3}])

    async def test_filters(self):
        resp = await self.client.request("GET", "/api/channels/search/filters")
        payload = await resp.json()
        self.assertEqual(payload["categories"][0], {"name": "News", "count": 3})
        self.assertEqual(payload["stats"]["totalChannels"], 7)
        self.assertEqual(payload["stats"]["sources"]["iptv-org"], 3)

    async def test_trending(self):
        resp = await self.client.request("GET", "/api/channels/search/trending", params={"limit": "1"})
        payload = await resp.json()
        self.assertEqual(payload["trending"], [{"text": "News - UK", "count": 2}])

    async def test_similar(self):
        resp = await self.client.request("GET", "/api/channels/bbc-news/similar")
        payload = await resp.json()
        self.assertEqual([item["id"] for item in payload["similar"]], ["sky-news"])

        resp = await self.client.request("GET", "/api/channels/missing/similar")
        self.assertEqual(resp.status, 404)

    async def test_reindex_from_store(self):
        resp = await self.client.request("POST", "/api/channels/reindex")
        self.assertEqual(resp.status, 200)
        payload = await resp.json()
        self.assertEqual(payload["stats"]["totalChannels"], 1)
        self.assertEqual(self.engine.search("only").total, 1)

    async def test_channels_page(self):
        resp = await self.client.request("GET", "/channels", params={"q": "bbc"})
        self.assertEqual(resp.status, 200)
        text = await resp.text()
        self.assertIn("BBC News", text)
        self.assertIn("Found 1 channels", text)


class BrokenChannelSearch(ChannelSearch):
    def get_trending_searches(self, limit=10):
        raise RuntimeError("trending exploded")

    def find_similar(self, channel_id, limit=5):
        raise RuntimeError("similar exploded")


class FailingApiTests(AioHTTPTestCase):
    async def get_application(self):
        return create_app(BrokenChannelSearch([{"id": "bbc-news", "name": "BBC News"}]))

    async def test_trending_failure_is_json(self):
        resp = await self.client.request("GET", "/api/channels/search/trending")
        self.assertEqual(resp.status, 500)
        payload = await resp.json()
        self.assertEqual(payload["error"], "trending exploded")

    async def test_similar_failure_is_json(self):
        resp = await self.client.request("GET", "/api/channels/bbc-news/similar")
        self.assertEqual(resp.status, 500)
        payload = await resp.json()
        self.assertEqual(payload["error"], "similar exploded")


class NotReadyApiTests(AioHTTPTestCase):
    async def get_application(self):
        return create_app(None)

    async def test_search_not_ready(self):
        resp = await self.client.request("GET", "/api/channels/search", params={"q": "bbc"})
        self.assertEqual(resp.status, 503)
        payload = await resp.json()
        self.assertEqual(payload["error"], "Search service not ready")


if __name__ == "__main__":
    unittest.main()
