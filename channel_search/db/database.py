from __future__ import annotations

import json
import logging
import sqlite3
import threading
from importlib import resources
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from channel_search.config import data_directory
from .models import Channel, ChannelMetadata
from .sql import *

logger = logging.getLogger(__name__)


class Database:
    """SQLite copy of the channel catalog the search index is built from."""

    def __init__(self, path: str | Path | None = None) -> None:
        if path is None:
            db_dir = Path(data_directory)
            db_dir.mkdir(parents=True, exist_ok=True)
            path = db_dir / "channels.db"
        self._db_path = str(path)
        self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        with self._lock:
            self._conn.execute("PRAGMA journal_mode=WAL;")
        self._ensure_schema()

    # region helpers -----------------------------------------------------
    def _fetchall(self, sql: str, params: Sequence | Tuple = ()) -> List[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(sql, params).fetchall()

    def _fetchone(self, sql: str, params: Sequence | Tuple = ()) -> sqlite3.Row | None:
        with self._lock:
            return self._conn.execute(sql, params).fetchone()

    def _ensure_schema(self) -> None:
        schema_sql = resources.files("channel_search.db").joinpath("schema.sql").read_text(encoding="utf-8")
        with self._lock:
            self._conn.executescript(schema_sql)
            self._conn.commit()

    @staticmethod
    def _row_to_channel(row: sqlite3.Row) -> Channel:
        metadata = None
        if row["metadata"]:
            try:
                metadata = ChannelMetadata.from_dict(json.loads(row["metadata"]))
            except ValueError:
                logger.warning("Broken metadata for channel %s", row["id"])
        return Channel(
            id=row["id"],
            name=row["name"] or "",
            category=row["category"],
            country=row["country"],
            language=row["language"],
            description=row["description"],
            source=row["source"],
            metadata=metadata,
        )

    @staticmethod
    def _channel_to_row(channel: Channel) -> dict:
        if not channel.id:
            raise ValueError("Channel id can not be empty")
        return {
            "id": channel.id,
            "name": channel.name or "",
            "category": channel.category,
            "country": channel.country,
            "language": channel.language,
            "description": channel.description,
            "source": channel.source,
            "metadata": json.dumps(channel.metadata.to_dict(), default=str) if channel.metadata else None,
        }

    # region channel operations -----------------------------------------
    def list_channels(self) -> List[Channel]:
        return [self._row_to_channel(row) for row in self._fetchall(SQL_LIST_CHANNELS)]

    def get_channel(self, channel_id: str | int) -> Channel | None:
        row = self._fetchone(SQL_GET_CHANNEL, (str(channel_id),))
        return self._row_to_channel(row) if row else None

    def count_channels(self) -> int:
        return int(self._fetchone(SQL_COUNT_CHANNELS)[0])

    def upsert_channels(self, channels: Iterable[Channel]) -> int:
        rows = [self._channel_to_row(channel) for channel in channels]
        if not rows:
            return 0
        with self._lock:
            self._conn.executemany(SQL_UPSERT_CHANNELS, rows)
            self._conn.commit()
        return len(rows)

    def delete_channels(self, channel_ids: Iterable[str | int]) -> int:
        ids = sorted({str(channel_id) for channel_id in channel_ids if str(channel_id).strip()})
        if not ids:
            return 0
        with self._lock:
            cur = self._conn.executemany(SQL_DELETE_CHANNEL, ((channel_id,) for channel_id in ids))
            self._conn.commit()
            return cur.rowcount

    def replace_channels(self, channels: Iterable[Channel]) -> Tuple[int, int]:
        """Make the stored catalog equal to `channels`; returns (updated, removed)."""
        records = list(channels)
        fetched_ids = {channel.id for channel in records}
        removed_ids = [channel.id for channel in self.list_channels() if channel.id not in fetched_ids]
        removed = self.delete_channels(removed_ids)
        updated = self.upsert_channels(records)
        logger.info("Stored %s channels, removed %s", updated, removed)
        return updated, removed

    def close(self) -> None:
        with self._lock:
            self._conn.close()
