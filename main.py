import asyncio
import logging

from channel_search.bootstrap import bootstrap_from_json
from channel_search.config import CHANNELS_FILE, WEB_HOST, WEB_PORT
from channel_search.db import db
from channel_search.search_engine import ChannelSearch
from channel_search.web import start_web_server


if __name__ == "__main__":

    async def app_main():
        bootstrap_from_json(db, CHANNELS_FILE)
        channel_search = ChannelSearch(db.list_channels())
        runner = await start_web_server(channel_search, db, host=WEB_HOST, port=WEB_PORT)
        logging.info("Channel search started with %s channels", len(channel_search))
        try:
            await asyncio.Event().wait()
        finally:
            await runner.cleanup()


    try:
        asyncio.run(app_main())
    except KeyboardInterrupt:
        logging.info("Stopped")
