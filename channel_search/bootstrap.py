from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

from channel_search.db import Channel, Database


def load_channels_file(channels_file: str | Path) -> List[Channel]:
    """Read a JSON array of channel records (or {"channels": [...]}) skipping unusable entries."""
    payload = json.loads(Path(channels_file).read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("channels") or []
    channels: List[Channel] = []
    for record in payload:
        try:
            channels.append(Channel.from_dict(record))
        except (TypeError, ValueError) as exc:
            logging.warning("Skipping channel record due to error: %s", exc)
            continue
    return channels


def bootstrap_from_json(database: Database, channels_file: str | Path) -> int:
    """Fill an empty store from the channels file; returns the number of imported channels."""
    channels_file = Path(channels_file)
    if database.count_channels() or not channels_file.exists():
        return 0
    channels = load_channels_file(channels_file)
    imported = database.upsert_channels(channels)
    logging.info("Imported %s channels from %s", imported, channels_file)
    return imported
