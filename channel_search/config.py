import logging
import os

from dotenv import load_dotenv

logging.basicConfig(
    level=logging.INFO,
    # format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    format="%(levelname)s:%(name)s - %(message)s",
)

data_directory = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data")

load_dotenv()

WEB_HOST = os.getenv("WEB_HOST", "0.0.0.0")
WEB_PORT = int(os.getenv("WEB_PORT", "8080"))
CHANNELS_FILE = os.getenv("CHANNELS_FILE", os.path.join(data_directory, "channels.json"))
SEARCH_MAX_LIMIT = int(os.getenv("SEARCH_MAX_LIMIT", "250"))
SUGGESTIONS_MAX_LIMIT = int(os.getenv("SUGGESTIONS_MAX_LIMIT", "50"))
